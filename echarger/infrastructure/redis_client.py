"""Redis async connection pool shared by the catalog cache and the ingestion lock."""

import redis.asyncio as aioredis

from echarger.config import settings

_pool = aioredis.ConnectionPool.from_url(
    settings.redis_url, decode_responses=True
)


async def get_redis() -> aioredis.Redis:
    """Return a Redis client backed by the shared connection pool."""
    return aioredis.Redis(connection_pool=_pool)


async def close_redis() -> None:
    """Drop pooled connections; called on application shutdown."""
    await _pool.disconnect()
