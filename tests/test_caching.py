"""Tests for Redis caching of provider records."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from support import PROVIDER_ID

from clinic_scheduling.core.redis_client import CacheManager
from clinic_scheduling.repositories.directories import SqlProviderDirectory


def make_redis() -> MagicMock:
    mock_redis = MagicMock()
    mock_redis.get = AsyncMock(return_value=None)
    mock_redis.set = AsyncMock()
    mock_redis.setex = AsyncMock()
    mock_redis.delete = AsyncMock()
    return mock_redis


@pytest.mark.asyncio
async def test_cache_manager_get_json():
    """Test CacheManager get_json method."""
    mock_redis = make_redis()
    cache_manager = CacheManager(redis_client=mock_redis)

    # Cache miss
    assert await cache_manager.get_json("test_key") is None
    mock_redis.get.assert_awaited_once_with("test_key")

    # Cache hit
    mock_redis.get.reset_mock()
    mock_redis.get.return_value = '{"id": 3, "full_name": "Dr. Test"}'
    assert await cache_manager.get_json("test_key") == {"id": 3, "full_name": "Dr. Test"}


@pytest.mark.asyncio
async def test_cache_manager_set_json():
    """Test CacheManager set_json method."""
    mock_redis = make_redis()
    cache_manager = CacheManager(redis_client=mock_redis)

    assert await cache_manager.set_json("test_key", {"id": 3}) is True
    mock_redis.set.assert_awaited_once_with("test_key", '{"id": 3}')

    assert await cache_manager.set_json("test_key", {"id": 3}, ttl=300) is True
    mock_redis.setex.assert_awaited_once_with("test_key", 300, '{"id": 3}')


@pytest.mark.asyncio
async def test_cache_failures_do_not_propagate():
    mock_redis = make_redis()
    mock_redis.get.side_effect = ConnectionError("redis down")
    mock_redis.setex.side_effect = ConnectionError("redis down")
    mock_redis.delete.side_effect = ConnectionError("redis down")
    cache_manager = CacheManager(redis_client=mock_redis)

    assert await cache_manager.get_json("k") is None
    assert await cache_manager.set_json("k", {}, ttl=5) is False
    assert await cache_manager.delete("k") is False


@pytest.mark.asyncio
async def test_provider_directory_caches_lookups(db_session):
    mock_redis = make_redis()
    directory = SqlProviderDirectory(db_session, CacheManager(mock_redis), ttl=60)

    provider = await directory.get(PROVIDER_ID)

    assert provider["full_name"] == "Dr. Mara Quint"
    mock_redis.setex.assert_awaited_once()
    key, ttl, _ = mock_redis.setex.await_args.args
    assert key == f"provider:{PROVIDER_ID}"
    assert ttl == 60


@pytest.mark.asyncio
async def test_provider_directory_serves_cached_record(db_session):
    mock_redis = make_redis()
    mock_redis.get.return_value = '{"id": 99, "full_name": "Dr. Cached"}'
    directory = SqlProviderDirectory(db_session, CacheManager(mock_redis))

    assert await directory.get(99) == {"id": 99, "full_name": "Dr. Cached"}


@pytest.mark.asyncio
async def test_unknown_provider_is_not_cached(db_session):
    mock_redis = make_redis()
    directory = SqlProviderDirectory(db_session, CacheManager(mock_redis))

    assert await directory.get(404) is None
    mock_redis.setex.assert_not_awaited()
