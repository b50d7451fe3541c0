"""
Search endpoint
===============

POST /api/v1/search -- closest reachable chargers for a position and range

Ranking is pure and in-memory over the cached catalog; see
``echarger.domain.ranking``.  An empty ``results`` list is a normal
answer, not an error.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from echarger.api.dependencies import get_charger_cache, get_db
from echarger.api.middleware import limiter
from echarger.api.schemas import (
    LocationResponse,
    RankedChargerResponse,
    SearchRequest,
    SearchResponse,
)
from echarger.config import settings
from echarger.domain.ranking import rank_reachable
from echarger.infrastructure.cache import ChargerCache
from echarger.infrastructure.catalog import CatalogUnavailable, ChargerCatalog
from echarger.infrastructure.repositories import ChargerRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Find reachable chargers",
    responses={503: {"description": "Store down and no cached copy."}},
)
@limiter.limit("100/minute")
async def search(
    request: Request,
    body: SearchRequest,
    db: AsyncSession = Depends(get_db),
    cache: ChargerCache = Depends(get_charger_cache),
):
    try:
        snapshot = await ChargerCatalog(ChargerRepository(db), cache).load()
    except CatalogUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    location = body.location()
    ranked = rank_reachable(
        snapshot.chargers,
        location,
        body.range_km,
        body.limit,
        on_route_only=body.on_route_only,
        safety_margin_km=settings.safety_margin_km,
    )
    if not ranked:
        logger.info(
            "No reachable charger from (%.4f, %.4f) with %.0f km",
            location.latitude, location.longitude, body.range_km,
        )

    return SearchResponse(
        location=LocationResponse(
            latitude=location.latitude,
            longitude=location.longitude,
            label=location.label,
        ),
        range_km=body.range_km,
        safety_margin_km=settings.safety_margin_km,
        candidates=len(snapshot.chargers),
        stale=snapshot.stale,
        results=[RankedChargerResponse.from_ranked(r) for r in ranked],
    )
