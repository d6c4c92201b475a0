"""Ingestion orchestration: parse, summarize, persist."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from datastore.readings_table import ReadingsTable, build_default_table
from models.records import HazardReading, HazardType
from services.aggregator import Aggregator, DangerRule, SiteStatistics, StatisticsSummary
from services.errors import PersistenceError, StoreError
from services.parser import (
    RecordParser,
    RowRejection,
    random_placeholder,
    reject_missing_value,
)
from services.partitioner import SitePartitioner
from services.sample_data import SampleDataGenerator
from services.uploads import decode_upload
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Validated readings of one batch and their statistics.

    ``hazard_type`` is the batch default. Rows carrying their own ``type``
    keep it, so a batch may hold several types and ``statistics`` cover
    all of them.
    """

    hazard_type: HazardType
    readings: Tuple[HazardReading, ...] = ()
    statistics: StatisticsSummary = field(default_factory=StatisticsSummary)
    rejected: List[RowRejection] = field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.rejected)


@dataclass
class DashboardSummary:
    """Stored readings of one type, summarized globally and per site."""

    hazard_type: HazardType
    readings: List[HazardReading] = field(default_factory=list)
    statistics: StatisticsSummary = field(default_factory=StatisticsSummary)
    sites: List[SiteStatistics] = field(default_factory=list)


class ProcessorService:
    """Coordinates parsing, aggregation, and the readings table."""

    def __init__(
        self,
        table: ReadingsTable,
        aggregator: Aggregator,
        parser: Optional[RecordParser] = None,
        site_names: Sequence[str] = (),
        sample_generator: Optional[SampleDataGenerator] = None,
        default_type: HazardType = HazardType.gas,
    ) -> None:
        self.table = table
        self.default_type = default_type
        self.aggregator = aggregator
        self.parser = parser or RecordParser()
        self.partitioner = SitePartitioner(aggregator)
        self.site_names = tuple(site_names)
        self.sample_generator = sample_generator

    def process(
        self,
        raw_records: Iterable[Any],
        hazard_type: Optional[HazardType] = None,
    ) -> IngestionResult:
        """Validate a batch, persist the readings, and return their statistics.

        Per-row problems never fail the call. A table failure is raised as
        :class:`PersistenceError` carrying the in-memory result.
        """
        start_time = time.perf_counter()
        batch_type = hazard_type or self.default_type
        outcome = self.parser.parse(raw_records, default_type=batch_type)

        if not outcome.readings:
            logger.info(
                "No valid readings in batch",
                extra={"hazard_type": batch_type.value, "dropped_count": outcome.dropped_count},
            )
            return IngestionResult(hazard_type=batch_type, rejected=outcome.rejected)

        result = IngestionResult(
            hazard_type=batch_type,
            readings=outcome.readings,
            statistics=self.aggregator.summarize(
                outcome.readings, danger_rule=DangerRule.inclusive_40
            ),
            rejected=outcome.rejected,
        )

        try:
            self.table.insert_many(result.readings)
        except StoreError as exc:
            logger.error(
                "Failed to persist readings: %s",
                exc,
                extra={"hazard_type": batch_type.value, "row_count": len(result.readings)},
            )
            raise PersistenceError(str(exc), partial_result=result) from exc

        logger.info(
            "Processed batch",
            extra={
                "hazard_type": batch_type.value,
                "row_count": len(result.readings),
                "dropped_count": result.dropped_count,
                "processing_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return result

    def ingest_upload(
        self,
        filename: str,
        contents: bytes,
        hazard_type: Optional[HazardType] = None,
    ) -> IngestionResult:
        records = decode_upload(filename, contents)
        logger.info(
            "Decoded upload",
            extra={"source_file": filename, "row_count": len(records)},
        )
        return self.process(records, hazard_type)

    def load_sample(self, hazard_type: Optional[HazardType] = None) -> IngestionResult:
        if self.sample_generator is None:
            raise RuntimeError("No sample data generator configured.")
        return self.process(self.sample_generator.generate(), hazard_type)

    def summarize(self, hazard_type: HazardType) -> DashboardSummary:
        """Recompute dashboard statistics from everything stored for a type."""
        readings = self.table.select_by_type(hazard_type)
        sites = self.partitioner.partition(
            readings, self.site_names, danger_rule=DangerRule.strict_above_40
        )
        logger.debug(
            "Summarized stored readings",
            extra={
                "hazard_type": hazard_type.value,
                "row_count": len(readings),
                "site_count": len(sites),
            },
        )
        return DashboardSummary(
            hazard_type=hazard_type,
            readings=readings,
            statistics=self.aggregator.summarize(
                readings, danger_rule=DangerRule.strict_above_40
            ),
            sites=sites,
        )

    def clear(self, hazard_type: HazardType) -> int:
        try:
            removed = self.table.delete_by_type(hazard_type)
        except StoreError as exc:
            raise PersistenceError(str(exc)) from exc
        logger.info(
            "Cleared readings",
            extra={"hazard_type": hazard_type.value, "row_count": removed},
        )
        return removed


@lru_cache
def build_default_processor() -> ProcessorService:
    """Factory that wires the processor from settings."""
    settings = get_settings()
    if settings.missing_value_policy == "random":
        parser = RecordParser(missing_value_policy=random_placeholder())
    else:
        parser = RecordParser(missing_value_policy=reject_missing_value)
    return ProcessorService(
        table=build_default_table(),
        aggregator=Aggregator(),
        parser=parser,
        site_names=settings.site_names,
        sample_generator=SampleDataGenerator(settings.sites, size=settings.sample_size),
        default_type=settings.default_hazard_type,
    )
