"""
Charger catalog: the materialised list of usable chargers handed to the
ranking engine.

Read path
---------
1. Fresh Redis copy, if any.
2. Otherwise the store (paged fetch), then re-cache.
3. If the store fails, the stale Redis copy, flagged ``stale=True``.
4. Otherwise ``CatalogUnavailable``.

Redis is an optimisation: a Redis error is logged and treated as a miss.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from .cache import ChargerCache
from .repositories import ChargerRepository
from echarger.domain.entities import ChargerRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CatalogUnavailable(Exception):
    """Raised when neither the store nor any cached copy can serve chargers."""


@dataclass(frozen=True)
class CatalogSnapshot:
    chargers: tuple[ChargerRecord, ...]
    stale: bool = False


class ChargerCatalog:
    def __init__(self, repository: ChargerRepository, cache: ChargerCache):
        self.repository = repository
        self.cache = cache

    async def _cached(
        self, op: Callable[..., Awaitable[T]], *args
    ) -> Optional[T]:
        try:
            return await op(*args)
        except RedisError:
            logger.warning("Catalog cache unavailable", exc_info=True)
            return None

    async def load(self) -> CatalogSnapshot:
        cached = await self._cached(self.cache.get_fresh)
        if cached is not None:
            return CatalogSnapshot(tuple(cached))

        try:
            chargers = await self.repository.fetch_all()
        except SQLAlchemyError:
            logger.exception("Charger store unavailable")
            stale = await self._cached(self.cache.get_stale)
            if stale is None:
                raise CatalogUnavailable("Failed to fetch chargers")
            logger.warning("Serving %d chargers from stale cache", len(stale))
            return CatalogSnapshot(tuple(stale), stale=True)

        await self._cached(self.cache.store, chargers)
        return CatalogSnapshot(tuple(chargers))
