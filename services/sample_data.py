"""Synthetic demo readings scattered around the configured sites."""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Sequence

from models.records import HazardType, SiteConfig

SPREAD_DEGREES = 0.1


class SampleDataGenerator:

    def __init__(
        self,
        sites: Sequence[SiteConfig],
        size: int = 50,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not sites:
            raise ValueError("At least one site is required to generate sample data.")
        if size < 1:
            raise ValueError("Sample size must be positive.")
        self.sites = tuple(sites)
        self.size = size
        self._rng = rng or random.Random()

    def generate(self) -> List[Dict[str, Any]]:
        """Return ``size`` raw records shaped like an uploaded batch."""
        hazard_types = list(HazardType)
        records: List[Dict[str, Any]] = []
        for index in range(self.size):
            site = self.sites[index % len(self.sites)]
            records.append(
                {
                    "latitude": site.latitude + (self._rng.random() - 0.5) * SPREAD_DEGREES,
                    "longitude": site.longitude + (self._rng.random() - 0.5) * SPREAD_DEGREES,
                    "value": self._rng.random() * 100,
                    "type": hazard_types[index % len(hazard_types)].value,
                    "siteName": site.name,
                }
            )
        return records
