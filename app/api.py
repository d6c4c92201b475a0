"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.schemas import (
    ClearResponse,
    DashboardResponse,
    IngestionResponse,
    IngestRequest,
    ReadingPayload,
    ReportRequest,
    ReportResponse,
    RowRejectionPayload,
    SiteStatisticsPayload,
    StatisticsPayload,
)
from models.records import HazardType
from services.errors import PersistenceError
from services.processor import IngestionResult, ProcessorService, build_default_processor
from services.report import render_report

router = APIRouter()


def get_processor() -> ProcessorService:
    return build_default_processor()


def _ingestion_response(result: IngestionResult) -> IngestionResponse:
    return IngestionResponse(
        hazard_type=result.hazard_type,
        readings=[ReadingPayload.from_reading(reading) for reading in result.readings],
        statistics=StatisticsPayload.from_summary(result.statistics),
        dropped_count=result.dropped_count,
        rejected=[
            RowRejectionPayload(index=rejection.index, reason=rejection.reason)
            for rejection in result.rejected
        ],
    )


def _persistence_failure(exc: PersistenceError) -> HTTPException:
    detail: dict = {"message": str(exc)}
    if exc.partial_result is not None:
        detail["statistics"] = StatisticsPayload.from_summary(
            exc.partial_result.statistics
        ).model_dump(mode="json")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


@router.post(
    "/readings",
    response_model=IngestionResponse,
    summary="Validate, store and summarize a batch of raw readings.",
)
async def ingest_readings(
    request: IngestRequest,
    processor: ProcessorService = Depends(get_processor),
) -> IngestionResponse:
    try:
        result = processor.process(request.data, request.type)
    except PersistenceError as exc:
        raise _persistence_failure(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _ingestion_response(result)


@router.post(
    "/readings/upload",
    response_model=IngestionResponse,
    summary="Upload a CSV, JSON or GeoJSON file of readings.",
)
async def upload_readings(
    file: UploadFile = File(..., description="CSV, JSON or GeoJSON file of readings."),
    hazard_type: Optional[HazardType] = Query(None, alias="type"),
    processor: ProcessorService = Depends(get_processor),
) -> IngestionResponse:
    contents = await file.read()
    try:
        result = processor.ingest_upload(file.filename or "upload.csv", contents, hazard_type)
    except PersistenceError as exc:
        raise _persistence_failure(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        await file.close()
    return _ingestion_response(result)


@router.post(
    "/readings/sample",
    response_model=IngestionResponse,
    summary="Generate and ingest a synthetic batch around the configured sites.",
)
async def load_sample(
    hazard_type: Optional[HazardType] = Query(None, alias="type"),
    processor: ProcessorService = Depends(get_processor),
) -> IngestionResponse:
    try:
        result = processor.load_sample(hazard_type)
    except PersistenceError as exc:
        raise _persistence_failure(exc) from exc
    return _ingestion_response(result)


@router.get(
    "/readings/{hazard_type}",
    response_model=DashboardResponse,
    summary="Stored readings of one type with overall and per-site statistics.",
)
async def get_dashboard(
    hazard_type: HazardType,
    processor: ProcessorService = Depends(get_processor),
) -> DashboardResponse:
    summary = processor.summarize(hazard_type)
    return DashboardResponse(
        hazard_type=summary.hazard_type,
        readings=[ReadingPayload.from_reading(reading) for reading in summary.readings],
        statistics=StatisticsPayload.from_summary(summary.statistics),
        sites=[SiteStatisticsPayload.from_site(site) for site in summary.sites],
    )


@router.delete(
    "/readings/{hazard_type}",
    response_model=ClearResponse,
    summary="Delete every stored reading of one type.",
)
async def clear_readings(
    hazard_type: HazardType,
    processor: ProcessorService = Depends(get_processor),
) -> ClearResponse:
    try:
        deleted = processor.clear(hazard_type)
    except PersistenceError as exc:
        raise _persistence_failure(exc) from exc
    return ClearResponse(hazard_type=hazard_type, deleted=deleted)


@router.post(
    "/reports",
    response_model=ReportResponse,
    summary="Render an HTML report for a set of statistics.",
)
async def generate_report(request: ReportRequest) -> ReportResponse:
    return ReportResponse(html_content=render_report(request.type, request.statistics))


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
