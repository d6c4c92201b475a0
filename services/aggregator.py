"""Aggregation logic for hazard readings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Sequence

from models.records import HazardReading, SeverityBand
from services.classifier import MODERATE_THRESHOLD, classify_value, habitation_distance_km


class DangerRule(str, Enum):
    """Which readings count towards ``danger_zone_count``.

    ``inclusive_40`` is what ingestion reports (moderate plus severe);
    ``strict_above_40`` is what the dashboard summaries report.
    """

    inclusive_40 = "inclusive_40"
    strict_above_40 = "strict_above_40"


def _empty_band_counts() -> Dict[SeverityBand, int]:
    return {band: 0 for band in SeverityBand}


@dataclass(frozen=True)
class StatisticsSummary:
    """Computed statistics for a collection of hazard readings."""

    max: float = 0.0
    min: float = 0.0
    average: float = 0.0
    danger_zone_count: int = 0
    habitation_distance_km: float = 0.0
    band_counts: Dict[SeverityBand, int] = field(default_factory=_empty_band_counts)


@dataclass(frozen=True)
class SiteStatistics(StatisticsSummary):
    """Statistics restricted to the readings of one configured site."""

    site_name: str = ""
    point_count: int = 0


def danger_count_inclusive_40(values: Iterable[float]) -> int:
    """Count values at or above 40 (moderate and severe bands)."""
    return sum(1 for value in values if value >= MODERATE_THRESHOLD)


def danger_count_strict_above_40(values: Iterable[float]) -> int:
    """Count values strictly above 40."""
    return sum(1 for value in values if value > MODERATE_THRESHOLD)


_DANGER_COUNTERS = {
    DangerRule.inclusive_40: danger_count_inclusive_40,
    DangerRule.strict_above_40: danger_count_strict_above_40,
}


def band_counts(values: Iterable[float]) -> Dict[SeverityBand, int]:
    counts = _empty_band_counts()
    for value in values:
        counts[classify_value(value)] += 1
    return counts


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def summarize(
        self,
        readings: Iterable[HazardReading],
        danger_rule: DangerRule = DangerRule.strict_above_40,
    ) -> StatisticsSummary:
        values = [reading.value for reading in readings]
        if not values:
            return StatisticsSummary()

        maximum = max(values)
        return StatisticsSummary(
            max=maximum,
            min=min(values),
            average=sum(values) / len(values),
            danger_zone_count=_DANGER_COUNTERS[danger_rule](values),
            habitation_distance_km=habitation_distance_km(maximum),
            band_counts=band_counts(values),
        )

    def summarize_site(
        self,
        site_name: str,
        readings: Sequence[HazardReading],
        danger_rule: DangerRule = DangerRule.strict_above_40,
    ) -> SiteStatistics:
        summary = self.summarize(readings, danger_rule=danger_rule)
        return SiteStatistics(
            max=summary.max,
            min=summary.min,
            average=summary.average,
            danger_zone_count=summary.danger_zone_count,
            habitation_distance_km=summary.habitation_distance_km,
            band_counts=summary.band_counts,
            site_name=site_name,
            point_count=len(readings),
        )
