"""Keyed critical sections around conflict-check-plus-commit.

Scheduling and rescheduling serialize per ``(provider_id, appointment_date)`` so
that two requests for the same provider and day cannot both observe a free
interval before either one commits.
"""

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import date
from typing import Protocol

import redis.asyncio as redis
import structlog
from redis.exceptions import LockError

from clinic_scheduling.config import Settings
from clinic_scheduling.core.exceptions import LockTimeoutException

logger = structlog.get_logger()


def schedule_key(provider_id: int, appointment_date: date) -> str:
    """Lock key for a provider's day."""
    return f"{provider_id}:{appointment_date.isoformat()}"


class KeyedLock(Protocol):
    """Mutual exclusion over string keys."""

    def acquire(self, key: str) -> AbstractAsyncContextManager[None]: ...


class InProcessKeyedLock:
    """One ``asyncio.Lock`` per key, discarded once nobody holds or awaits it.

    Only serializes callers inside a single event loop. Multi-process
    deployments should use :class:`RedisKeyedLock`.
    """

    def __init__(self, blocking_timeout: float | None = None):
        self.blocking_timeout = blocking_timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = defaultdict(int)

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] += 1
        try:
            try:
                if self.blocking_timeout is None:
                    await lock.acquire()
                else:
                    await asyncio.wait_for(lock.acquire(), self.blocking_timeout)
            except TimeoutError:
                logger.warning("schedule_lock_timeout", key=key)
                raise LockTimeoutException(key) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                self._locks.pop(key, None)


class RedisKeyedLock:
    """Distributed lock per key backed by ``redis.asyncio`` locks."""

    def __init__(
        self,
        redis_client: redis.Redis,
        timeout: float = 10.0,
        blocking_timeout: float = 5.0,
        prefix: str = "schedule-lock",
    ):
        self.redis = redis_client
        self.timeout = timeout
        self.blocking_timeout = blocking_timeout
        self.prefix = prefix

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        lock = self.redis.lock(
            f"{self.prefix}:{key}",
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout,
        )
        if not await lock.acquire():
            logger.warning("schedule_lock_timeout", key=key)
            raise LockTimeoutException(key)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Expired before release; the next holder may already own it.
                logger.warning("schedule_lock_expired", key=key, timeout=self.timeout)


def build_keyed_lock(
    settings: Settings,
    redis_client: redis.Redis | None = None,
) -> InProcessKeyedLock | RedisKeyedLock:
    """Create the lock backend selected by ``LOCK_BACKEND``."""
    if settings.lock_backend == "redis":
        if redis_client is None:
            raise RuntimeError("LOCK_BACKEND=redis requires a Redis client")
        return RedisKeyedLock(
            redis_client,
            timeout=settings.lock_timeout_seconds,
            blocking_timeout=settings.lock_blocking_timeout_seconds,
        )
    return InProcessKeyedLock(blocking_timeout=settings.lock_blocking_timeout_seconds)
