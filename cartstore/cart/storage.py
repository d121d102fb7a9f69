"""Snapshot storage for the cart: Redis-backed and in-memory."""
from typing import Optional, Protocol

from cartstore.db import TTL, RedisKeys, get_redis


class CartStorage(Protocol):
    """Durable string-keyed slot holding one serialized cart."""

    async def load(self) -> Optional[str]: ...

    async def save(self, serialized: str) -> None: ...

    async def clear(self) -> None: ...


class RedisCartStorage:
    """Stores the cart snapshot under cart:{session_id} in Upstash Redis."""

    def __init__(self, session_id: str, redis=None, ttl: int = TTL.CART):
        self.key = RedisKeys.cart_key(session_id)
        self.ttl = ttl
        self._redis = redis  # Lazy initialization

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise ValueError(
                    f"Redis not available: {e}. Check UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN environment variables."
                ) from e
        return self._redis

    async def load(self) -> Optional[str]:
        data = await self.redis.get(self.key)
        return data or None

    async def save(self, serialized: str) -> None:
        if self.ttl > 0:
            await self.redis.set(self.key, serialized, ex=self.ttl)
        else:
            await self.redis.set(self.key, serialized)

    async def clear(self) -> None:
        await self.redis.delete(self.key)


class MemoryCartStorage:
    """In-process storage, used in tests and local runs."""

    def __init__(self, initial: Optional[str] = None):
        self.value = initial
        self.writes = 0

    async def load(self) -> Optional[str]:
        return self.value

    async def save(self, serialized: str) -> None:
        self.value = serialized
        self.writes += 1

    async def clear(self) -> None:
        self.value = None
