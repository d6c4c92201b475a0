from __future__ import annotations

import pytest

from models.records import SeverityBand
from services.classifier import classify_value, habitation_distance_km


@pytest.mark.parametrize(
    ("value", "band"),
    [
        (0.0, SeverityBand.safe),
        (39.999, SeverityBand.safe),
        (40.0, SeverityBand.moderate),
        (60.0, SeverityBand.moderate),
        (80.0, SeverityBand.moderate),
        (80.001, SeverityBand.severe),
        (250.0, SeverityBand.severe),
    ],
)
def test_classify_value(value: float, band: SeverityBand) -> None:
    assert classify_value(value) is band


@pytest.mark.parametrize(
    ("max_value", "expected"),
    [(0.0, 0.0), (90.0, 9.0), (97.3456, 9.73), (123.0, 12.3)],
)
def test_habitation_distance_is_linear_in_max(max_value: float, expected: float) -> None:
    assert habitation_distance_km(max_value) == expected
