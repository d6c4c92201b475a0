"""Severity classification and habitation distance."""

from __future__ import annotations

from models.records import SeverityBand

MODERATE_THRESHOLD = 40.0
SEVERE_THRESHOLD = 80.0


def classify_value(value: float) -> SeverityBand:
    """Return the severity band for a single reading value.

    Both thresholds are inclusive on the moderate side, so 40 and 80 are
    ``moderate``.
    """
    if value < MODERATE_THRESHOLD:
        return SeverityBand.safe
    if value > SEVERE_THRESHOLD:
        return SeverityBand.severe
    return SeverityBand.moderate


def habitation_distance_km(max_value: float) -> float:
    """Recommended buffer from habitation, in km.

    A linear proxy (one km per ten intensity units of the worst reading),
    not a dispersion model.
    """
    return round(max_value / 10, 2)
