"""FastAPI dependency injection helpers."""

from sqlalchemy.ext.asyncio import AsyncSession

from echarger.config import settings
from echarger.infrastructure.cache import ChargerCache
from echarger.infrastructure.database import async_session_factory
from echarger.infrastructure.redis_client import get_redis


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_charger_cache() -> ChargerCache:
    return ChargerCache(await get_redis(), settings.catalog_cache_ttl_seconds)
