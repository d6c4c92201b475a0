"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class HazardType(str, Enum):
    """Kinds of hazard a sensor can report."""

    gas = "gas"
    radiation = "radiation"
    vibration = "vibration"


class SeverityBand(str, Enum):
    """Coarse severity classification of a single reading."""

    safe = "safe"
    moderate = "moderate"
    severe = "severe"


@dataclass(frozen=True, slots=True)
class HazardReading:
    """A single validated sensor observation."""

    latitude: float
    longitude: float
    value: float
    hazard_type: HazardType
    site_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """A named physical site readings may be attributed to."""

    name: str
    latitude: float
    longitude: float
