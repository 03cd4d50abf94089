"""Link service: key generation, persistence and lookup wired together."""

import asyncio
import logging
import random
from typing import Optional, Dict

from .keygen import KeyGenerator
from .errors import KeyConflict
from .database.base import LinkStoreBase
from .database.cache import RedisCache
from .database.models import Link


class LinkService:
    """Create and resolve short links."""

    # Keys have millisecond resolution; wait at least this long before regenerating.
    COLLISION_BACKOFF_SECONDS = 0.001
    COLLISION_BACKOFF_MAX_SECONDS = 0.1

    def __init__(
        self,
        store: LinkStoreBase,
        key_generator: Optional[KeyGenerator] = None,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
    ):
        """Initialize link service.

        Args:
            store: Link store instance
            key_generator: Optional key generator (radix 36 wall clock by default)
            cache: Optional read-through cache
            logger: Optional logger
            max_collision_retries: Extra attempts with a fresh key after a
                KeyConflict; 0 surfaces the first conflict to the caller
        """
        self.store = store
        self.generator = key_generator or KeyGenerator()
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max(0, max_collision_retries)

    async def create(self, uri: str) -> str:
        """Create a link for ``uri`` and return its key.

        Raises:
            KeyConflict: If every generated key was already taken
            StoreUnavailable: If the store cannot be written
        """
        link = await self.create_link(uri)
        return link.key

    async def create_link(self, uri: str) -> Link:
        """Create a link for ``uri``.

        The store rejects a key generated twice in the same millisecond.
        On such a conflict a new key is generated after a randomized wait,
        up to ``max_collision_retries`` times.
        """
        attempt = 0
        while True:
            key = self.generator.generate()
            try:
                await self.store.create(key, uri)
                break
            except KeyConflict:
                if attempt >= self.max_collision_retries:
                    raise
                attempt += 1
                self.logger.debug(f"Key collision on {key}, retry {attempt}/{self.max_collision_retries}")
                await asyncio.sleep(self.collision_backoff(attempt))

        self.logger.info(f"Created link: {key} -> {uri}")
        return Link(key=key, uri=uri)

    def collision_backoff(self, attempt: int) -> float:
        """Random wait before retry ``attempt`` (1-based).

        Contenders that lost the same millisecond spread over a window that
        grows fourfold per attempt, up to COLLISION_BACKOFF_MAX_SECONDS, so
        they wake in different milliseconds and draw different keys.
        """
        ceiling = min(
            self.COLLISION_BACKOFF_MAX_SECONDS,
            self.COLLISION_BACKOFF_SECONDS * 4 ** attempt,
        )
        return random.uniform(self.COLLISION_BACKOFF_SECONDS, ceiling)

    async def resolve(self, key: str) -> Optional[str]:
        """Return the URI for ``key``, or None if no such link exists.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        if self.cache:
            cached_uri = await self.cache.get(key)
            if cached_uri:
                self.logger.debug(f"Cache hit for {key}")
                return cached_uri

        uri = await self.store.resolve(key)

        if uri is None:
            self.logger.debug(f"Key not found: {key}")
            return None

        if self.cache:
            await self.cache.set(key, uri)

        return uri

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with database, cache and overall status
        """
        db_healthy = await self.store.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close store and cache connections."""
        await self.store.close()
        if self.cache:
            await self.cache.close()
