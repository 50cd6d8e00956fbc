"""
Redis caching layer for the catalog service.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.errors import CacheUnavailableError, StartupError


class RedisCache:
    """Owner of the process-wide Redis connection.

    ``get``/``set``/``delete`` are single-key commands and rely on Redis for
    atomicity; no locking happens here. Connectivity failures surface as
    ``CacheUnavailableError`` and are never retried.
    """

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("catalog.cache.redis")
        self.redis: Optional[redis.Redis] = client

    @property
    def is_connected(self) -> bool:
        return self.redis is not None

    async def start(self):
        """Open the connection and verify it with a PING."""
        try:
            if self.redis is None:
                self.redis = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=5,
                    health_check_interval=30
                )

            await self.redis.ping()

            self.logger.info("Redis cache started", redis_url=self.redis_url)

        except RedisError as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            await self._close_client()
            raise StartupError("redis", str(e), {"redis_url": self.redis_url}) from e

    async def stop(self):
        """Close the connection."""
        if self.redis is not None:
            await self._close_client()
            self.logger.info("Redis client disconnected")

    async def _close_client(self):
        client, self.redis = self.redis, None
        if client is not None:
            await client.aclose()

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise CacheUnavailableError("Redis connection is not open")
        return self.redis

    async def get(self, key: str) -> Optional[str]:
        """Get the payload stored under key, or None."""
        try:
            return await self._client().get(key)
        except RedisError as e:
            self.logger.error("Redis GET failed", key=key, error=str(e))
            raise CacheUnavailableError(str(e), {"operation": "get", "key": key}) from e

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """Store value under key, replacing any existing payload."""
        try:
            await self._client().set(key, value, ex=ttl_seconds)
        except RedisError as e:
            self.logger.error("Redis SET failed", key=key, error=str(e))
            raise CacheUnavailableError(str(e), {"operation": "set", "key": key}) from e

    async def delete(self, key: str) -> int:
        """Delete key. Returns the number of keys removed (0 when absent)."""
        try:
            return await self._client().delete(key)
        except RedisError as e:
            self.logger.error("Redis DEL failed", key=key, error=str(e))
            raise CacheUnavailableError(str(e), {"operation": "delete", "key": key}) from e

    async def health_check(self) -> bool:
        """Check Redis health."""
        if self.redis is None:
            return False
        try:
            await self.redis.ping()
            return True
        except RedisError:
            return False
