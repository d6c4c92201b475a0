"""Decoding of uploaded CSV / JSON / GeoJSON files into raw records."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Dict, List

from services.errors import UploadFormatError

SUPPORTED_SUFFIXES = (".csv", ".json", ".geojson")


def decode_upload(filename: str, contents: bytes) -> List[Any]:
    """Return the raw records contained in an uploaded file.

    CSV rows are keyed by the header row. JSON files may hold either a
    GeoJSON ``FeatureCollection`` or a bare list of records.
    """
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UploadFormatError(
            "Unsupported file format. Please upload CSV, JSON or GeoJSON."
        )
    if not contents:
        raise UploadFormatError("Uploaded file is empty.")

    try:
        text = contents.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UploadFormatError("Uploaded file is not valid UTF-8.") from exc

    if suffix == ".csv":
        return _decode_csv(text)
    return _decode_json(text)


def _decode_csv(text: str) -> List[Dict[str, Any]]:
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise UploadFormatError("CSV file is missing a header row.")

    rows: List[Dict[str, Any]] = []
    for row in reader:
        cleaned = {
            key.strip(): value for key, value in row.items() if key is not None
        }
        # Trailing blank lines come through as rows of empty strings.
        if not any((value or "").strip() for value in cleaned.values()):
            continue
        rows.append(cleaned)
    return rows


def _decode_json(text: str) -> List[Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UploadFormatError(f"Invalid JSON: {exc.msg}") from exc

    if isinstance(payload, dict):
        features = payload.get("features")
        if isinstance(features, list):
            return features
        raise UploadFormatError("JSON object has no 'features' list.")
    if isinstance(payload, list):
        return payload
    raise UploadFormatError("JSON upload must be a list of records or a FeatureCollection.")
