"""
Session Storage
Async key/value storage the Supabase client persists its session through

Uses async Redis (redis.asyncio) to avoid blocking the event loop.
"""

import logging
from typing import Dict, Optional
import redis.asyncio as aioredis

from earthlord.config import SessionStorageConfig

logger = logging.getLogger(__name__)


class MemorySessionStorage:
    """Process-lifetime storage, the session is lost on restart"""

    def __init__(self):
        self._items: Dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def close(self):
        self._items.clear()


class RedisSessionStorage:
    """Stores the session in Redis with automatic expiration (async)"""

    def __init__(self, redis_client: aioredis.Redis, key_prefix: str, ttl_seconds: int):
        self._redis = redis_client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, redis_url: str, key_prefix: str, ttl_seconds: int) -> "RedisSessionStorage":
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_keepalive=True,
            health_check_interval=30
        )
        return cls(client, key_prefix, ttl_seconds)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def get_item(self, key: str) -> Optional[str]:
        value = await self._redis.get(self._key(key))
        if value is None:
            logger.debug(f"No stored session under {self._key(key)}")
        return value

    async def set_item(self, key: str, value: str) -> None:
        # Refreshing the session rewrites the key, which also renews the TTL
        await self._redis.setex(self._key(key), self.ttl_seconds, value)
        logger.debug(f"Session stored under {self._key(key)} with TTL {self.ttl_seconds}s")

    async def remove_item(self, key: str) -> None:
        deleted = await self._redis.delete(self._key(key))
        if deleted:
            logger.debug(f"Session removed: {self._key(key)}")

    async def close(self):
        await self._redis.aclose()
        logger.info("Redis session storage closed")


def create_session_storage(config: SessionStorageConfig):
    """Build the storage backend selected by SESSION_STORAGE_BACKEND"""
    if config.session_storage_backend == "redis":
        logger.info(f"Persisting auth session in Redis ({config.session_key_prefix})")
        return RedisSessionStorage.from_url(
            config.redis_url,
            key_prefix=config.session_key_prefix,
            ttl_seconds=config.session_ttl_seconds
        )
    return MemorySessionStorage()
