import json
import random
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.readings_table import ReadingsTable, build_default_table
from models.records import SiteConfig
from services.aggregator import Aggregator
from services.errors import StoreError
from services.processor import ProcessorService, build_default_processor
from services.sample_data import SampleDataGenerator
from settings import get_settings

SITES = (
    SiteConfig(name="A", latitude=22.65, longitude=86.35),
    SiteConfig(name="B", latitude=23.79, longitude=86.43),
    SiteConfig(name="C", latitude=22.51, longitude=86.45),
)


class BrokenTable(ReadingsTable):
    def insert_many(self, readings):
        raise StoreError("insert rejected")


def _install_processor(monkeypatch, processor: ProcessorService) -> None:
    def build_test_processor() -> ProcessorService:
        return processor

    build_test_processor.cache_clear = lambda: None  # type: ignore[attr-defined]
    monkeypatch.setattr("app.main.build_default_processor", build_test_processor)
    monkeypatch.setattr("app.api.build_default_processor", build_test_processor)


@pytest.fixture
def api_client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    processor = ProcessorService(
        table=ReadingsTable(name="test", persistence_path=tmp_path / "readings.json"),
        aggregator=Aggregator(),
        site_names=[site.name for site in SITES],
        sample_generator=SampleDataGenerator(SITES, size=12, rng=random.Random(5)),
    )
    _install_processor(monkeypatch, processor)

    app = create_app()
    with TestClient(app) as client:
        yield client


def _records() -> List[dict]:
    return [
        {"latitude": 10, "longitude": 20, "value": 90, "siteName": "A"},
        {"latitude": 10, "longitude": 20, "value": "bad"},
        {"latitude": 11, "longitude": 21, "value": "30", "siteName": "B"},
    ]


def test_lifespan_clears_processor_cache(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("HAZARD_TABLE_PERSISTENCE_PATH", str(tmp_path / "db.json"))
    for cache in (get_settings, build_default_table, build_default_processor):
        cache.cache_clear()

    try:
        with TestClient(create_app()):
            processor_during = build_default_processor()
            assert processor_during is build_default_processor()

        processor_after = build_default_processor()
        assert processor_after is not processor_during
    finally:
        for cache in (build_default_processor, build_default_table, get_settings):
            cache.cache_clear()


def test_ingest_readings(api_client: TestClient) -> None:
    response = api_client.post("/readings", json={"data": _records(), "type": "gas"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["hazard_type"] == "gas"
    assert payload["dropped_count"] == 1
    assert payload["rejected"] == [{"index": 1, "reason": "invalid value"}]
    assert len(payload["readings"]) == 2
    assert payload["statistics"] == {
        "max": 90.0,
        "min": 30.0,
        "average": 60.0,
        "danger_zone_count": 1,
        "habitation_distance_km": 9.0,
        "band_counts": {"safe": 1, "moderate": 0, "severe": 1},
    }


def test_ingest_rounds_average_for_presentation(api_client: TestClient) -> None:
    records = [{"latitude": 1, "longitude": 1, "value": v} for v in (10, 10, 11)]

    response = api_client.post("/readings", json={"data": records})

    assert response.json()["statistics"]["average"] == 10.33


def test_ingest_empty_batch(api_client: TestClient) -> None:
    response = api_client.post("/readings", json={"data": [], "type": "radiation"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["readings"] == []
    assert payload["statistics"]["max"] == 0
    assert payload["statistics"]["habitation_distance_km"] == 0


def test_ingest_rejects_non_list_payload(api_client: TestClient) -> None:
    response = api_client.post("/readings", json={"data": "not-a-batch"})

    assert response.status_code == 422


def test_ingest_persistence_failure_returns_bad_gateway(monkeypatch) -> None:
    processor = ProcessorService(table=BrokenTable(name="broken"), aggregator=Aggregator())
    _install_processor(monkeypatch, processor)

    with TestClient(create_app()) as client:
        response = client.post("/readings", json={"data": _records()})

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert "insert rejected" in detail["message"]
    assert detail["statistics"]["max"] == 90.0


def test_upload_csv_file(api_client: TestClient) -> None:
    csv_content = "latitude,longitude,value,siteName\n10,20,85,A\n11,21,40,C\n"

    response = api_client.post(
        "/readings/upload",
        params={"type": "vibration"},
        files={"file": ("readings.csv", csv_content, "text/csv")},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["hazard_type"] == "vibration"
    assert [reading["type"] for reading in payload["readings"]] == ["vibration", "vibration"]
    assert payload["statistics"]["danger_zone_count"] == 2


def test_upload_geojson_file(api_client: TestClient) -> None:
    collection = {
        "type": "FeatureCollection",
        "features": [
            {"geometry": {"coordinates": [86.35, 22.65]}, "properties": {"value": 12}},
            {"geometry": {"coordinates": [86.35, 22.65]}, "properties": {}},
        ],
    }

    response = api_client.post(
        "/readings/upload",
        files={"file": ("zones.geojson", json.dumps(collection), "application/geo+json")},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["readings"][0]["latitude"] == 22.65
    assert payload["dropped_count"] == 1


def test_upload_unsupported_file_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post(
        "/readings/upload",
        files={"file": ("readings.xlsx", b"binary", "application/octet-stream")},
    )

    assert response.status_code == 400
    assert "Unsupported file format" in response.json()["detail"]


def test_upload_empty_file_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post(
        "/readings/upload",
        files={"file": ("empty.csv", b"", "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Uploaded file is empty."


def test_dashboard_includes_every_configured_site(api_client: TestClient) -> None:
    api_client.post("/readings", json={"data": _records(), "type": "gas"})

    response = api_client.get("/readings/gas")

    assert response.status_code == 200
    payload = response.json()
    assert len(payload["readings"]) == 2
    assert payload["statistics"]["max"] == 90.0
    sites = {site["site_name"]: site for site in payload["sites"]}
    assert list(sites) == ["A", "B", "C"]
    assert sites["A"]["point_count"] == 1
    assert sites["C"]["point_count"] == 0
    assert sites["C"]["habitation_distance_km"] == 0


def test_dashboard_rejects_unknown_type(api_client: TestClient) -> None:
    response = api_client.get("/readings/plasma")

    assert response.status_code == 422


def test_clear_readings(api_client: TestClient) -> None:
    api_client.post("/readings", json={"data": _records(), "type": "gas"})

    response = api_client.delete("/readings/gas")

    assert response.status_code == 200
    assert response.json() == {"success": True, "hazard_type": "gas", "deleted": 2}
    assert api_client.get("/readings/gas").json()["readings"] == []


def test_load_sample(api_client: TestClient) -> None:
    response = api_client.post("/readings/sample", params={"type": "gas"})

    assert response.status_code == 200
    payload = response.json()
    assert len(payload["readings"]) == 12
    assert {reading["site_name"] for reading in payload["readings"]} == {"A", "B", "C"}


def test_generate_report(api_client: TestClient) -> None:
    statistics = {
        "max": 90,
        "average": 60,
        "danger_zone_count": 1,
        "habitation_distance_km": 9,
    }

    response = api_client.post("/reports", json={"type": "gas", "statistics": statistics})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert "Parameter: GAS" in payload["html_content"]
    assert "9.00 km" in payload["html_content"]


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
