"""
Catalog endpoints
=================

GET /api/v1/chargers            -- every usable charger (``?segment=`` to narrow)
GET /api/v1/chargers/{id}       -- one charger
GET /api/v1/segments            -- the nine corridor segments
GET /api/v1/locations           -- quick-pick cities along the corridor
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from echarger.api.dependencies import get_charger_cache, get_db
from echarger.api.middleware import limiter
from echarger.api.schemas import (
    ChargerListResponse,
    ChargerResponse,
    LocationResponse,
    SegmentResponse,
)
from echarger.domain.corridor import PRESET_LOCATIONS, SEGMENTS
from echarger.domain.enums import RouteSegment
from echarger.infrastructure.cache import ChargerCache
from echarger.infrastructure.catalog import CatalogUnavailable, ChargerCatalog
from echarger.infrastructure.repositories import ChargerRepository

router = APIRouter(tags=["chargers"])


@router.get(
    "/chargers",
    response_model=ChargerListResponse,
    summary="List chargers, optionally for one segment",
    responses={503: {"description": "Store down and no cached copy."}},
)
@limiter.limit("100/minute")
async def list_chargers(
    request: Request,
    segment: Optional[RouteSegment] = None,
    db: AsyncSession = Depends(get_db),
    cache: ChargerCache = Depends(get_charger_cache),
):
    try:
        snapshot = await ChargerCatalog(ChargerRepository(db), cache).load()
    except CatalogUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    chargers = snapshot.chargers
    if segment is not None:
        chargers = tuple(c for c in chargers if c.route_segment == segment)
    return ChargerListResponse(
        chargers=[ChargerResponse.from_record(c) for c in chargers],
        count=len(chargers),
        stale=snapshot.stale,
    )


@router.get(
    "/chargers/{charger_id}",
    response_model=ChargerResponse,
    summary="Get one charger",
)
@limiter.limit("100/minute")
async def get_charger(
    request: Request,
    charger_id: int,
    db: AsyncSession = Depends(get_db),
):
    record = await ChargerRepository(db).get_by_id(charger_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Charger not found")
    return ChargerResponse.from_record(record)


@router.get(
    "/segments",
    response_model=list[SegmentResponse],
    summary="Corridor segments, north to south",
)
async def list_segments():
    return [SegmentResponse.from_segment(s) for s in SEGMENTS]


@router.get(
    "/locations",
    response_model=list[LocationResponse],
    summary="Preset corridor cities",
)
async def list_locations():
    return [
        LocationResponse(latitude=loc.latitude, longitude=loc.longitude, label=loc.label)
        for loc in PRESET_LOCATIONS
    ]
