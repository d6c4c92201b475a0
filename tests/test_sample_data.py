from __future__ import annotations

import random

import pytest

from models.records import SiteConfig
from services.sample_data import SPREAD_DEGREES, SampleDataGenerator

SITES = (
    SiteConfig(name="Jadugora Uranium Mines", latitude=22.6503, longitude=86.3523),
    SiteConfig(name="Dhanbad Coal Mines", latitude=23.7957, longitude=86.4304),
)


def test_generate_places_records_around_sites() -> None:
    generator = SampleDataGenerator(SITES, size=10, rng=random.Random(1))

    records = generator.generate()

    assert len(records) == 10
    for index, record in enumerate(records):
        site = SITES[index % len(SITES)]
        assert record["siteName"] == site.name
        assert abs(record["latitude"] - site.latitude) <= SPREAD_DEGREES / 2
        assert abs(record["longitude"] - site.longitude) <= SPREAD_DEGREES / 2
        assert 0.0 <= record["value"] < 100.0
    assert [record["type"] for record in records[:4]] == ["gas", "radiation", "vibration", "gas"]


def test_generate_is_reproducible_with_seed() -> None:
    first = SampleDataGenerator(SITES, size=5, rng=random.Random(42)).generate()
    second = SampleDataGenerator(SITES, size=5, rng=random.Random(42)).generate()

    assert first == second


@pytest.mark.parametrize(("sites", "size"), [((), 5), (SITES, 0)])
def test_invalid_configuration_is_rejected(sites, size) -> None:
    with pytest.raises(ValueError):
        SampleDataGenerator(sites, size=size)
