from __future__ import annotations
import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional

from app.schemas import ReadingPayload
from models.records import HazardReading, HazardType
from services.errors import StoreError
from settings import get_settings

logger = logging.getLogger(__name__)


class ReadingsTable:
    """Append-only store of hazard readings, queried by hazard type."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: List[HazardReading] = []
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def insert_many(self, readings: Iterable[HazardReading]) -> int:
        batch = list(readings)
        if not batch:
            return 0
        with self._lock:
            previous = list(self._items)
            self._items.extend(batch)
            try:
                self._persist()
            except OSError as exc:
                self._items = previous
                raise StoreError(
                    f"Could not write {len(batch)} readings to table {self.name!r}: {exc}"
                ) from exc
        return len(batch)

    def select_by_type(self, hazard_type: HazardType) -> list[HazardReading]:
        with self._lock:
            return [item for item in self._items if item.hazard_type is hazard_type]

    def delete_by_type(self, hazard_type: HazardType) -> int:
        with self._lock:
            previous = list(self._items)
            self._items = [item for item in previous if item.hazard_type is not hazard_type]
            removed = len(previous) - len(self._items)
            if not removed:
                return 0
            try:
                self._persist()
            except OSError as exc:
                self._items = previous
                raise StoreError(
                    f"Could not delete {hazard_type.value} readings from table {self.name!r}: {exc}"
                ) from exc
            return removed

    def scan(self) -> list[HazardReading]:
        """Return every stored reading in insertion order."""

        with self._lock:
            return list(self._items)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [
            ReadingPayload.from_reading(item).model_dump(mode="json") for item in self._items
        ]
        # Replace the file in one step so an interrupted write never truncates it.
        staging = self.persistence_path.with_name(f"{self.persistence_path.name}.tmp")
        try:
            staging.write_text(json.dumps(payload, indent=2))
            os.replace(staging, self.persistence_path)
        finally:
            staging.unlink(missing_ok=True)

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "Could not read table file, starting empty: %s",
                exc,
                extra={"source_file": str(self.persistence_path)},
            )
            data = []
        if not isinstance(data, list):
            logger.warning(
                "Table file does not hold a list of readings, starting empty",
                extra={"source_file": str(self.persistence_path)},
            )
            data = []

        for payload in data:
            self._items.append(ReadingPayload.model_validate(payload).to_reading())


@lru_cache
def build_default_table(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> ReadingsTable:
    settings = get_settings()
    table_name = settings.table_name if name is None else name
    table_path = settings.table_persistence_path if path is None else path
    persistence = Path(table_path) if table_path else None
    return ReadingsTable(name=table_name, persistence_path=persistence)
