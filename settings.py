from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from models.records import HazardType, SiteConfig


_TABLE_NAME_ENV = "HAZARD_TABLE_NAME"
_TABLE_PATH_ENV = "HAZARD_TABLE_PERSISTENCE_PATH"
_SAMPLE_SIZE_ENV = "SAMPLE_SIZE"
_SITES_ENV = "HAZARD_SITES"
_MISSING_VALUE_POLICY_ENV = "GEOJSON_MISSING_VALUE_POLICY"
_DEFAULT_TYPE_ENV = "DEFAULT_HAZARD_TYPE"
_LOG_LEVEL_ENV = "LOG_LEVEL"

MISSING_VALUE_POLICIES = ("reject", "random")

DEFAULT_SITES: Tuple[SiteConfig, ...] = (
    SiteConfig(name="Jadugora Uranium Mines", latitude=22.6503, longitude=86.3523),
    SiteConfig(name="Dhanbad Coal Mines", latitude=23.7957, longitude=86.4304),
    SiteConfig(name="HCL Mines East Singhbhum", latitude=22.5150, longitude=86.4530),
)


@dataclass(frozen=True)
class Settings:
    table_name: str
    table_persistence_path: Optional[str]
    sample_size: int
    sites: Tuple[SiteConfig, ...]
    missing_value_policy: str
    default_hazard_type: HazardType
    log_level: str

    @property
    def site_names(self) -> Tuple[str, ...]:
        return tuple(site.name for site in self.sites)


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_sites(default: Tuple[SiteConfig, ...]) -> Tuple[SiteConfig, ...]:
    """Parse ``HAZARD_SITES`` as a JSON list of ``{name, latitude, longitude}``."""
    value = os.getenv(_SITES_ENV)
    if value is None or not value.strip():
        return default
    try:
        payload = json.loads(value)
    except json.JSONDecodeError:
        return default
    if not isinstance(payload, list):
        return default

    sites = []
    for entry in payload:
        if not isinstance(entry, dict):
            return default
        name = entry.get("name")
        try:
            latitude = float(entry.get("latitude"))
            longitude = float(entry.get("longitude"))
        except (TypeError, ValueError):
            return default
        if not isinstance(name, str) or not name.strip():
            return default
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            return default
        sites.append(SiteConfig(name=name.strip(), latitude=latitude, longitude=longitude))
    return tuple(sites) or default


def _read_missing_value_policy(default: str) -> str:
    candidate = _read_str_env(_MISSING_VALUE_POLICY_ENV, default).lower()
    return candidate if candidate in MISSING_VALUE_POLICIES else default


def _read_hazard_type(default: HazardType) -> HazardType:
    candidate = _read_str_env(_DEFAULT_TYPE_ENV, default.value).lower()
    try:
        return HazardType(candidate)
    except ValueError:
        return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        table_name=_read_str_env(_TABLE_NAME_ENV, "mining_data"),
        table_persistence_path=_read_optional_env(_TABLE_PATH_ENV, "./tmp/hazard_readings.json"),
        sample_size=_read_positive_int(_SAMPLE_SIZE_ENV, 50),
        sites=_read_sites(DEFAULT_SITES),
        missing_value_policy=_read_missing_value_policy("reject"),
        default_hazard_type=_read_hazard_type(HazardType.gas),
        log_level=_read_log_level("INFO"),
    )
