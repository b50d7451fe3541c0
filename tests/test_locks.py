"""
Distributed lock tests.

The mocked-Redis cases check the commands issued; the in-memory double
checks ownership semantics across two lock instances.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from echarger.infrastructure.locks import DistributedLock, LockNotAcquired
from tests.conftest import InMemoryRedis


class TestDistributedLock:
    """Tests the Redis distributed lock logic (mocked Redis)."""

    @pytest.mark.asyncio
    async def test_acquire_succeeds(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, "ingestion", ttl_seconds=10)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "echarger:lock:ingestion", lock.token, nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_acquire_fails_if_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "ingestion", ttl_seconds=10)
        assert await lock.acquire() is False

    @pytest.mark.asyncio
    async def test_release_calls_eval(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        lock = DistributedLock(mock_redis, "ingestion", ttl_seconds=10)
        await lock.acquire()
        await lock.release()

        mock_redis.eval.assert_called_once()

    @pytest.mark.asyncio
    async def test_context_manager_acquire_fail_raises(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        lock = DistributedLock(mock_redis, "ingestion", ttl_seconds=10)
        with pytest.raises(LockNotAcquired, match="Lock held elsewhere"):
            async with lock:
                pass


class TestLockOwnership:
    @pytest.mark.asyncio
    async def test_second_holder_is_refused(self):
        redis = InMemoryRedis()
        first = DistributedLock(redis, "ingestion")
        second = DistributedLock(redis, "ingestion")

        assert await first.acquire()
        assert not await second.acquire()

        await first.release()
        assert await second.acquire()

    @pytest.mark.asyncio
    async def test_foreign_release_is_ignored(self):
        redis = InMemoryRedis()
        owner = DistributedLock(redis, "ingestion")
        intruder = DistributedLock(redis, "ingestion")

        await owner.acquire()
        await intruder.release()
        assert redis.data[owner.key] == owner.token

    @pytest.mark.asyncio
    async def test_extend_only_when_owned(self):
        redis = InMemoryRedis()
        owner = DistributedLock(redis, "ingestion", ttl_seconds=30)
        intruder = DistributedLock(redis, "ingestion", ttl_seconds=999)

        await owner.acquire()
        assert await owner.extend()
        assert not await intruder.extend()
        assert redis.ttls[owner.key] == 30

    @pytest.mark.asyncio
    async def test_context_manager_releases(self):
        redis = InMemoryRedis()
        async with DistributedLock(redis, "ingestion") as lock:
            assert redis.data[lock.key] == lock.token
        assert lock.key not in redis.data
