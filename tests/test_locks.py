"""Tests for the keyed scheduling locks."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import LockNotOwnedError

from clinic_scheduling.config import Settings
from clinic_scheduling.core.exceptions import LockTimeoutException
from clinic_scheduling.core.locks import (
    InProcessKeyedLock,
    RedisKeyedLock,
    build_keyed_lock,
    schedule_key,
)


def test_schedule_key():
    assert schedule_key(7, date(2025, 6, 10)) == "7:2025-06-10"


@pytest.mark.asyncio
async def test_same_key_is_serialized():
    locks = InProcessKeyedLock()
    events: list[str] = []

    async def worker(name: str) -> None:
        async with locks.acquire("1:2025-06-10"):
            events.append(f"{name}-in")
            await asyncio.sleep(0.01)
            events.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert events == ["a-in", "a-out", "b-in", "b-out"]


@pytest.mark.asyncio
async def test_different_keys_run_concurrently():
    locks = InProcessKeyedLock()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def holder() -> None:
        async with locks.acquire("1:2025-06-10"):
            inside.set()
            await release.wait()

    task = asyncio.create_task(holder())
    await inside.wait()

    async with locks.acquire("2:2025-06-10"):
        pass

    release.set()
    await task


@pytest.mark.asyncio
async def test_idle_locks_are_dropped():
    locks = InProcessKeyedLock()

    async with locks.acquire("1:2025-06-10"):
        assert len(locks) == 1

    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_released_on_error():
    locks = InProcessKeyedLock()

    with pytest.raises(RuntimeError):
        async with locks.acquire("k"):
            raise RuntimeError("boom")

    async with locks.acquire("k"):
        pass
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_in_process_timeout():
    locks = InProcessKeyedLock(blocking_timeout=0.01)
    release = asyncio.Event()
    inside = asyncio.Event()

    async def holder() -> None:
        async with locks.acquire("k"):
            inside.set()
            await release.wait()

    task = asyncio.create_task(holder())
    await inside.wait()

    with pytest.raises(LockTimeoutException) as exc_info:
        async with locks.acquire("k"):
            pass

    assert exc_info.value.status_code == 503
    release.set()
    await task
    assert len(locks) == 0


def make_redis_lock(acquired: bool = True) -> tuple[MagicMock, MagicMock]:
    redis_lock = MagicMock()
    redis_lock.acquire = AsyncMock(return_value=acquired)
    redis_lock.release = AsyncMock()
    client = MagicMock()
    client.lock.return_value = redis_lock
    return client, redis_lock


@pytest.mark.asyncio
async def test_redis_lock_acquire_and_release():
    client, redis_lock = make_redis_lock()
    locks = RedisKeyedLock(client, timeout=8, blocking_timeout=2)

    async with locks.acquire("1:2025-06-10"):
        redis_lock.release.assert_not_awaited()

    client.lock.assert_called_once_with(
        "schedule-lock:1:2025-06-10", timeout=8, blocking_timeout=2
    )
    redis_lock.release.assert_awaited_once()


@pytest.mark.asyncio
async def test_redis_lock_timeout():
    client, redis_lock = make_redis_lock(acquired=False)
    locks = RedisKeyedLock(client)

    with pytest.raises(LockTimeoutException):
        async with locks.acquire("1:2025-06-10"):
            pass

    redis_lock.release.assert_not_awaited()


@pytest.mark.asyncio
async def test_redis_lock_expired_before_release():
    client, redis_lock = make_redis_lock()
    redis_lock.release.side_effect = LockNotOwnedError("expired")
    locks = RedisKeyedLock(client)

    async with locks.acquire("k"):
        pass

    redis_lock.release.assert_awaited_once()


def test_build_keyed_lock():
    assert isinstance(build_keyed_lock(Settings(LOCK_BACKEND="memory")), InProcessKeyedLock)

    redis_settings = Settings(LOCK_BACKEND="redis", REDIS_URL="redis://localhost:6379/0")
    assert isinstance(build_keyed_lock(redis_settings, MagicMock()), RedisKeyedLock)

    with pytest.raises(RuntimeError):
        build_keyed_lock(redis_settings, None)


def test_redis_backend_requires_url():
    with pytest.raises(ValueError):
        Settings(LOCK_BACKEND="redis", REDIS_URL=None)
