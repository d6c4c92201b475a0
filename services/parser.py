"""Parsing and validation of raw hazard records."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from models.records import HazardReading, HazardType
from services.errors import MalformedBatchError

logger = logging.getLogger(__name__)

MissingValuePolicy = Callable[[], Optional[float]]

_SITE_NAME_KEYS = ("siteName", "site_name", "mine_name")


class RowRejectedError(ValueError):
    """A single record could not be coerced into a reading."""


@dataclass(frozen=True, slots=True)
class RowRejection:
    """Position and reason of a record dropped during parsing."""

    index: int
    reason: str


@dataclass
class ParseOutcome:
    readings: Tuple[HazardReading, ...] = ()
    rejected: List[RowRejection] = field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.rejected)


def reject_missing_value() -> Optional[float]:
    """Drop GeoJSON features that carry no ``properties.value``."""
    return None


def random_placeholder(rng: Optional[random.Random] = None) -> MissingValuePolicy:
    """Fill a missing GeoJSON value with a uniform 0-100 placeholder."""
    generator = rng or random.Random()

    def _placeholder() -> Optional[float]:
        return generator.uniform(0.0, 100.0)

    return _placeholder


def resolve_hazard_type(raw: Any) -> Optional[HazardType]:
    if isinstance(raw, HazardType):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return HazardType(raw.strip().lower())
    except ValueError:
        return None


def _coerce_float(raw: Any, name: str) -> float:
    if raw is None:
        raise RowRejectedError(f"missing {name}")
    if isinstance(raw, bool):
        raise RowRejectedError(f"invalid {name}")
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError as exc:
            raise RowRejectedError(f"invalid {name}") from exc
    elif isinstance(raw, str):
        candidate = raw.strip()
        if not candidate:
            raise RowRejectedError(f"missing {name}")
        try:
            value = float(candidate)
        except ValueError as exc:
            raise RowRejectedError(f"invalid {name}") from exc
    else:
        raise RowRejectedError(f"invalid {name}")

    if not math.isfinite(value):
        raise RowRejectedError(f"non-finite {name}")
    return value


def _coerce_intensity(raw: Any) -> float:
    value = _coerce_float(raw, "value")
    if value < 0:
        raise RowRejectedError("negative value")
    return value


def _site_name(source: Mapping[str, Any]) -> Optional[str]:
    """First non-empty string under a site key, unchanged; empty or non-string names count as absent."""
    for key in _SITE_NAME_KEYS:
        candidate = source.get(key)
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


class RecordParser:
    """Turns raw uploaded rows into validated hazard readings."""

    def __init__(self, missing_value_policy: MissingValuePolicy = reject_missing_value) -> None:
        self.missing_value_policy = missing_value_policy

    def parse(
        self,
        records: Iterable[Any],
        default_type: Optional[HazardType] = None,
    ) -> ParseOutcome:
        """Parse a batch, dropping malformed rows.

        Raises :class:`MalformedBatchError` only when ``records`` is not a
        batch at all; individual bad rows are recorded on the outcome.
        """
        if records is None or isinstance(records, (str, bytes, bytearray, Mapping)):
            raise MalformedBatchError("Expected a sequence of records.")
        try:
            iterator = iter(records)
        except TypeError as exc:
            raise MalformedBatchError("Expected a sequence of records.") from exc

        fallback = default_type or HazardType.gas
        readings: List[HazardReading] = []
        rejected: List[RowRejection] = []
        for index, record in enumerate(iterator):
            try:
                readings.append(self.parse_record(record, fallback))
            except RowRejectedError as exc:
                reason = str(exc)
                rejected.append(RowRejection(index=index, reason=reason))
                logger.warning(
                    "Skipping row: %s",
                    reason,
                    extra={"row_index": index, "reason": reason},
                )

        return ParseOutcome(readings=tuple(readings), rejected=rejected)

    def parse_record(self, record: Any, default_type: HazardType) -> HazardReading:
        if not isinstance(record, Mapping):
            raise RowRejectedError("record is not a mapping")

        geometry = record.get("geometry")
        if isinstance(geometry, Mapping):
            return self._parse_feature(geometry, record.get("properties"), default_type)

        return HazardReading(
            latitude=_coerce_float(record.get("latitude"), "latitude"),
            longitude=_coerce_float(record.get("longitude"), "longitude"),
            value=_coerce_intensity(record.get("value")),
            hazard_type=resolve_hazard_type(record.get("type")) or default_type,
            site_name=_site_name(record),
        )

    def _parse_feature(
        self,
        geometry: Mapping[str, Any],
        properties: Any,
        default_type: HazardType,
    ) -> HazardReading:
        coordinates = geometry.get("coordinates")
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
            raise RowRejectedError("invalid coordinates")
        props: Mapping[str, Any] = properties if isinstance(properties, Mapping) else {}

        raw_value = props.get("value")
        if raw_value is None:
            raw_value = self.missing_value_policy()
            if raw_value is None:
                raise RowRejectedError("missing value")

        return HazardReading(
            latitude=_coerce_float(coordinates[1], "latitude"),
            longitude=_coerce_float(coordinates[0], "longitude"),
            value=_coerce_intensity(raw_value),
            hazard_type=resolve_hazard_type(props.get("type")) or default_type,
            site_name=_site_name(props),
        )
