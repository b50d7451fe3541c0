"""
Redis-based distributed lock.

Guards ingestion so that only one process (API replica, background
worker or CLI run) talks to OpenChargeMap and writes new chargers at a
time; two concurrent runs would each miss the other's inserts in their
duplicate check.

SET NX EX to acquire; Lua compare-and-delete to release and
compare-and-expire to extend, so a holder whose TTL lapsed can never
touch a lock that now belongs to someone else.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

_RELEASE = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""

_EXTEND = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("expire", KEYS[1], ARGV[2])
end
return 0
"""


class LockNotAcquired(RuntimeError):
    """Raised by the context manager when the lock is held elsewhere."""


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, name: str, ttl_seconds: int = 120
    ):
        self.redis = client
        self.key = f"echarger:lock:{name}"
        self.ttl = ttl_seconds
        self.token = uuid.uuid4().hex

    async def acquire(self) -> bool:
        """Try once; True if this instance now owns the lock."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def extend(self) -> bool:
        """Reset the TTL if still owned.  Call between long-running steps."""
        return bool(await self.redis.eval(_EXTEND, 1, self.key, self.token, self.ttl))

    async def release(self) -> None:
        await self.redis.eval(_RELEASE, 1, self.key, self.token)

    async def __aenter__(self) -> "DistributedLock":
        if not await self.acquire():
            raise LockNotAcquired(f"Lock held elsewhere: {self.key}")
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.release()
