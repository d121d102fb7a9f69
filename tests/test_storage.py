"""Tests for cart snapshot storage"""
from unittest.mock import AsyncMock, patch

import pytest

from cartstore import db
from cartstore.cart import MemoryCartStorage, RedisCartStorage


@pytest.fixture
def mock_redis():
    """Mock async Upstash Redis client"""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value="OK")
    redis.delete = AsyncMock(return_value=1)
    return redis


def test_cart_key():
    """Cart keys are namespaced by session"""
    assert db.RedisKeys.cart_key("abc") == "cart:abc"


@pytest.mark.asyncio
async def test_redis_load_missing(mock_redis):
    """Missing key loads as None"""
    storage = RedisCartStorage("session-1", redis=mock_redis)

    assert await storage.load() is None
    mock_redis.get.assert_awaited_once_with("cart:session-1")


@pytest.mark.asyncio
async def test_redis_load_existing(mock_redis):
    """Stored snapshot is returned as-is"""
    mock_redis.get.return_value = '[{"id": 1}]'
    storage = RedisCartStorage("session-1", redis=mock_redis)

    assert await storage.load() == '[{"id": 1}]'


@pytest.mark.asyncio
async def test_redis_save_without_ttl(mock_redis):
    """TTL 0 stores the snapshot without expiry"""
    storage = RedisCartStorage("session-1", redis=mock_redis, ttl=0)

    await storage.save("[]")

    mock_redis.set.assert_awaited_once_with("cart:session-1", "[]")


@pytest.mark.asyncio
async def test_redis_save_with_ttl(mock_redis):
    """Positive TTL is passed as ex"""
    storage = RedisCartStorage("session-1", redis=mock_redis, ttl=86400)

    await storage.save("[]")

    mock_redis.set.assert_awaited_once_with("cart:session-1", "[]", ex=86400)


@pytest.mark.asyncio
async def test_redis_clear(mock_redis):
    """Clearing deletes the session key"""
    storage = RedisCartStorage("session-1", redis=mock_redis)

    await storage.clear()

    mock_redis.delete.assert_awaited_once_with("cart:session-1")


def test_redis_requires_credentials():
    """Without Upstash credentials the client cannot be created"""
    with patch.object(db, "_redis_client", None), \
            patch.object(db, "UPSTASH_REDIS_REST_URL", ""), \
            patch.object(db, "UPSTASH_REDIS_REST_TOKEN", ""):
        storage = RedisCartStorage("session-1")

        with pytest.raises(ValueError, match="Redis not available"):
            _ = storage.redis


def test_get_redis_builds_singleton():
    """get_redis creates the client once"""
    with patch.object(db, "_redis_client", None), \
            patch.object(db, "UPSTASH_REDIS_REST_URL", "https://redis.test"), \
            patch.object(db, "UPSTASH_REDIS_REST_TOKEN", "token"), \
            patch.object(db, "AsyncRedis") as redis_cls:
        first = db.get_redis()
        second = db.get_redis()

        assert first is second
        redis_cls.assert_called_once_with(url="https://redis.test", token="token")


@pytest.mark.asyncio
async def test_memory_storage():
    """In-memory storage keeps the last write"""
    storage = MemoryCartStorage()

    assert await storage.load() is None
    await storage.save("[1]")
    await storage.save("[2]")
    assert await storage.load() == "[2]"
    assert storage.writes == 2

    await storage.clear()
    assert await storage.load() is None
