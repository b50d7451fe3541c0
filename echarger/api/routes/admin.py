"""
Admin / observability endpoints
===============================

GET  /api/v1/admin/health -- simple health check
POST /api/v1/admin/ingest -- run one OpenChargeMap ingestion (dry run by default)
"""

from fastapi import APIRouter, HTTPException, Request

from echarger.api.middleware import limiter
from echarger.api.schemas import (
    CandidateResponse,
    HealthResponse,
    IngestReportResponse,
    IngestRequest,
)
from echarger.domain.enums import RouteSegment
from echarger.workers import ingestor

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()


@router.post(
    "/ingest",
    response_model=IngestReportResponse,
    summary="Fetch new chargers from OpenChargeMap",
    responses={409: {"description": "Another ingestion is running."}},
)
@limiter.limit("5/minute")
async def ingest(request: Request, body: IngestRequest):
    if body.segment == RouteSegment.UNKNOWN:
        raise HTTPException(status_code=422, detail="Unknown corridor segment")

    try:
        report = await ingestor.run_ingestion_cycle(
            segment=body.segment, dry_run=body.dry_run
        )
    except ingestor.IngestionInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    return IngestReportResponse(
        dry_run=report.dry_run,
        segments=report.segments,
        failed_segments=report.failed_segments,
        fetched=report.fetched,
        inserted=report.inserted,
        new=[CandidateResponse.from_candidate(c) for c in report.new],
    )
