"""
Background Ingestion Worker
===========================

Refreshes the charger table from OpenChargeMap every
``INGESTION_INTERVAL_SECONDS`` (default 24 h) when ``INGESTION_ENABLED``
is set.  The same cycle backs the ``ingest.py`` CLI and the admin
endpoint.

Concurrency safety
------------------
* **Redis distributed lock** ensures only one ingestion runs at a time
  across API replicas and CLI runs.  Its TTL is extended before each
  segment request so a slow provider cannot let it lapse mid-run.

Algorithm per cycle
-------------------
1. Load footprints (name + position) of every stored charger.
2. For each segment, north to south, with a short pause between requests:
   fetch POIs, map them, keep >=150 kW non-duplicates, tag on-route.
   A failing segment is logged and reported; the run moves on.
3. Unless dry-running, insert the new chargers in batches and invalidate
   the catalog cache.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Optional

import httpx
from redis.exceptions import RedisError

from echarger.config import settings
from echarger.domain.corridor import SEGMENTS, SEGMENTS_BY_ID, classify_on_route
from echarger.domain.entities import ChargerCandidate
from echarger.domain.enums import RouteSegment
from echarger.domain.ingestion import select_new_chargers
from echarger.infrastructure.cache import ChargerCache
from echarger.infrastructure.database import async_session_factory
from echarger.infrastructure.locks import DistributedLock
from echarger.infrastructure.openchargemap import OpenChargeMapClient, OpenChargeMapError
from echarger.infrastructure.redis_client import get_redis
from echarger.infrastructure.repositories import ChargerRepository

logger = logging.getLogger(__name__)

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


class IngestionInProgress(RuntimeError):
    """Another process holds the ingestion lock."""


@dataclass
class IngestionReport:
    dry_run: bool = False
    segments: list[str] = field(default_factory=list)
    failed_segments: list[str] = field(default_factory=list)
    fetched: int = 0
    new: list[ChargerCandidate] = field(default_factory=list)
    inserted: int = 0


# ── Public API ────────────────────────────────────────────────────────


async def start_ingestion_loop() -> None:
    global _task, _stop_event
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop())
    logger.info(
        "Ingestion worker started (interval=%ds)", settings.ingestion_interval_seconds
    )


async def stop_ingestion_loop() -> None:
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    logger.info("Ingestion worker stopped")


async def run_ingestion_cycle(
    segment: Optional[RouteSegment] = None,
    dry_run: bool = False,
    ocm: Optional[OpenChargeMapClient] = None,
) -> IngestionReport:
    """Execute one ingestion run, optionally limited to one segment."""
    if segment is not None and segment not in SEGMENTS_BY_ID:
        raise ValueError(f"Unknown corridor segment: {segment.value}")

    redis = await get_redis()
    lock = DistributedLock(redis, "ingestion", ttl_seconds=120)
    if not await lock.acquire():
        raise IngestionInProgress("Ingestion already running elsewhere")

    client = ocm or OpenChargeMapClient()
    try:
        async with async_session_factory() as session:
            repo = ChargerRepository(session)
            report = await _collect(repo, client, lock, segment, dry_run)

            if not dry_run and report.new:
                report.inserted = await repo.add_candidates(
                    report.new, batch_size=settings.ingestion_batch_size
                )
                await session.commit()
                logger.info("Ingestion stored %d new chargers", report.inserted)
                await _invalidate_catalog(redis)
    finally:
        await lock.release()
        if ocm is None:
            await client.aclose()

    return report


# ── Internals ─────────────────────────────────────────────────────────


async def _loop() -> None:
    """Periodic loop: sleep for the interval, then run a cycle."""
    assert _stop_event is not None
    while not _stop_event.is_set():
        try:
            await asyncio.wait_for(
                _stop_event.wait(), timeout=settings.ingestion_interval_seconds
            )
            break
        except asyncio.TimeoutError:
            pass
        try:
            await run_ingestion_cycle()
        except IngestionInProgress:
            logger.debug("Lock held by another worker – skipping cycle")
        except Exception:
            logger.exception("Unhandled error in ingestion cycle")


async def _collect(
    repo: ChargerRepository,
    client: OpenChargeMapClient,
    lock: DistributedLock,
    segment: Optional[RouteSegment],
    dry_run: bool,
) -> IngestionReport:
    report = IngestionReport(dry_run=dry_run)
    known = await repo.fetch_footprints()
    logger.info("Ingestion starting against %d stored chargers", len(known))

    classify = partial(
        classify_on_route,
        resolution=settings.h3_resolution,
        on_route_rings=settings.on_route_rings,
        nearby_rings=settings.nearby_rings,
    )
    targets = [SEGMENTS_BY_ID[segment]] if segment is not None else list(SEGMENTS)

    for i, seg in enumerate(targets):
        if i:
            await asyncio.sleep(settings.ingestion_segment_delay_seconds)
        await lock.extend()
        report.segments.append(seg.id.value)

        try:
            pois = await client.fetch_segment(seg)
        except (httpx.HTTPError, OpenChargeMapError):
            logger.exception("OpenChargeMap request failed for %s", seg.id.value)
            report.failed_segments.append(seg.id.value)
            continue

        new = select_new_chargers(
            pois,
            seg,
            known,
            min_power_kw=settings.fast_charge_threshold_kw,
            classify=classify,
            tolerance_deg=settings.dedup_coordinate_tolerance_deg,
            prefix_length=settings.dedup_name_prefix_length,
        )
        logger.info(
            "%s: %d POIs, %d new chargers >= %d kW",
            seg.id.value, len(pois), len(new), settings.fast_charge_threshold_kw,
        )
        report.fetched += len(pois)
        report.new.extend(new)
        known = known + [c.footprint() for c in new]

    return report


async def _invalidate_catalog(redis) -> None:
    try:
        await ChargerCache(redis, settings.catalog_cache_ttl_seconds).invalidate()
    except RedisError:
        logger.warning("Could not invalidate catalog cache", exc_info=True)
