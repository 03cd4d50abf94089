"""Redis read-through cache for resolved links."""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError


class RedisCache:
    """Redis cache for key to URI lookups.

    Links never change once created, so a cached URI stays correct for
    as long as it lives. Cache failures are logged and treated as misses.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: TTL for cached URIs
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if self.enabled:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis, disabling the cache if it cannot be reached."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except (RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    async def get(self, key: str) -> Optional[str]:
        """Get the cached URI for a link key."""
        if not self.enabled or not self.client:
            return None

        try:
            return await self.client.get(self.get_cache_key(key))
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache get error: {e}")
            return None

    async def set(self, key: str, uri: str) -> bool:
        """Cache the URI for a link key."""
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(self.get_cache_key(key), self.ttl_seconds, uri)
            return True
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def ping(self) -> bool:
        """Check if Redis answers."""
        if not self.enabled or not self.client:
            return False

        try:
            return bool(await self.client.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Redis connection closed")

    @staticmethod
    def get_cache_key(key: str) -> str:
        """Redis key under which a link's URI is cached."""
        return f"shortlink:link:{key}"
