"""
Redis cache of the charger catalog.

Two copies are kept:

* **fresh** -- expires after ``catalog_cache_ttl_seconds``; served as-is.
* **stale** -- no expiry; only served when the store itself is down, so
  drivers still get answers from the last good snapshot.

Ingestion invalidates the fresh copy after it writes.  A copy that no
longer decodes (written by an older schema) reads as a miss.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import redis.asyncio as aioredis

from echarger.domain.entities import ChargerRecord
from echarger.domain.enums import (
    Amenity,
    ConnectorType,
    HighwayProximity,
    OnRoute,
    RouteSegment,
)

logger = logging.getLogger(__name__)

FRESH_KEY = "echarger:catalog:fresh"
STALE_KEY = "echarger:catalog:stale"


def encode_record(record: ChargerRecord) -> dict:
    return {
        "id": record.id,
        "name": record.name,
        "latitude": record.latitude,
        "longitude": record.longitude,
        "network": record.network,
        "power_kw": record.power_kw,
        "connector_types": sorted(c.value for c in record.connector_types),
        "num_chargers": record.num_chargers,
        "highway_proximity": record.highway_proximity.value,
        "route_segment": record.route_segment.value,
        "on_route": record.on_route.value,
        "amenities": sorted(a.value for a in record.amenities),
        "country": record.country,
        "ocm_id": record.ocm_id,
        "notes": record.notes,
        "reliability": record.reliability,
        "status": record.status,
    }


def decode_record(data: dict) -> ChargerRecord:
    return ChargerRecord(
        **{
            **data,
            "connector_types": frozenset(
                ConnectorType(c) for c in data["connector_types"]
            ),
            "highway_proximity": HighwayProximity(data["highway_proximity"]),
            "route_segment": RouteSegment(data["route_segment"]),
            "on_route": OnRoute(data["on_route"]),
            "amenities": frozenset(Amenity(a) for a in data["amenities"]),
        }
    )


class ChargerCache:
    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 300):
        self.redis = client
        self.ttl = ttl_seconds

    async def _get(self, key: str) -> Optional[list[ChargerRecord]]:
        raw = await self.redis.get(key)
        if raw is None:
            return None
        try:
            return [decode_record(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding undecodable catalog copy %s", key, exc_info=True)
            return None

    async def get_fresh(self) -> Optional[list[ChargerRecord]]:
        return await self._get(FRESH_KEY)

    async def get_stale(self) -> Optional[list[ChargerRecord]]:
        return await self._get(STALE_KEY)

    async def store(self, records: list[ChargerRecord]) -> None:
        payload = json.dumps([encode_record(r) for r in records])
        await self.redis.set(FRESH_KEY, payload, ex=self.ttl)
        await self.redis.set(STALE_KEY, payload)

    async def invalidate(self) -> None:
        await self.redis.delete(FRESH_KEY)
