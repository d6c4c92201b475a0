"""Pydantic schemas for the HTTP API layer and the readings table."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models.records import HazardReading, HazardType, SeverityBand
from services.aggregator import SiteStatistics, StatisticsSummary


def _zero_bands() -> Dict[SeverityBand, int]:
    return {band: 0 for band in SeverityBand}


class ReadingPayload(BaseModel):
    """Serialized form of a validated hazard reading."""

    latitude: float
    longitude: float
    value: float = Field(..., ge=0)
    type: HazardType
    site_name: Optional[str] = None

    @classmethod
    def from_reading(cls, reading: HazardReading) -> "ReadingPayload":
        return cls(
            latitude=reading.latitude,
            longitude=reading.longitude,
            value=reading.value,
            type=reading.hazard_type,
            site_name=reading.site_name,
        )

    def to_reading(self) -> HazardReading:
        return HazardReading(
            latitude=self.latitude,
            longitude=self.longitude,
            value=self.value,
            hazard_type=self.type,
            site_name=self.site_name,
        )


class StatisticsPayload(BaseModel):
    """Summary statistics as presented to callers (average rounded to 2 places)."""

    max: float = 0.0
    min: float = 0.0
    average: float = 0.0
    danger_zone_count: int = Field(default=0, ge=0)
    habitation_distance_km: float = 0.0
    band_counts: Dict[SeverityBand, int] = Field(default_factory=_zero_bands)

    @classmethod
    def from_summary(cls, summary: StatisticsSummary) -> "StatisticsPayload":
        return cls(
            max=summary.max,
            min=summary.min,
            average=round(summary.average, 2),
            danger_zone_count=summary.danger_zone_count,
            habitation_distance_km=summary.habitation_distance_km,
            band_counts=dict(summary.band_counts),
        )


class SiteStatisticsPayload(StatisticsPayload):
    site_name: str
    point_count: int = Field(default=0, ge=0)

    @classmethod
    def from_site(cls, site: SiteStatistics) -> "SiteStatisticsPayload":
        base = StatisticsPayload.from_summary(site)
        return cls(site_name=site.site_name, point_count=site.point_count, **base.model_dump())


class RowRejectionPayload(BaseModel):
    """Details about a record that failed validation."""

    index: int = Field(..., ge=0)
    reason: str


class IngestRequest(BaseModel):
    """Raw records plus an optional batch-level hazard type."""

    data: List[Any] = Field(..., description="Raw records or GeoJSON features.")
    type: Optional[HazardType] = None


class IngestionResponse(BaseModel):
    success: bool = True
    hazard_type: HazardType
    readings: List[ReadingPayload] = Field(default_factory=list)
    statistics: StatisticsPayload
    dropped_count: int = Field(default=0, ge=0)
    rejected: List[RowRejectionPayload] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    """Stored readings of one hazard type with global and per-site statistics."""

    hazard_type: HazardType
    readings: List[ReadingPayload] = Field(default_factory=list)
    statistics: StatisticsPayload
    sites: List[SiteStatisticsPayload] = Field(default_factory=list)


class ClearResponse(BaseModel):
    success: bool = True
    hazard_type: HazardType
    deleted: int = Field(..., ge=0)


class ReportRequest(BaseModel):
    type: HazardType
    statistics: StatisticsPayload


class ReportResponse(BaseModel):
    success: bool = True
    html_content: str
