"""
Cache Test Factory

Cache doubles for exercising the orchestrator's "cache failure is a miss"
behaviour.
"""

from typing import Any
from unittest.mock import AsyncMock

from llm_nexus.core.exceptions import CacheError
from llm_nexus.core.interfaces import InMemoryCache


class CacheTestFactory:
    @staticmethod
    async def connected() -> InMemoryCache:
        cache = InMemoryCache()
        await cache.connect()
        return cache

    @staticmethod
    def failing() -> AsyncMock:
        """Every operation raises CacheError."""
        cache = AsyncMock()
        cache.get = AsyncMock(side_effect=CacheError("cache unreachable"))
        cache.set = AsyncMock(side_effect=CacheError("cache unreachable"))
        cache.health_check = AsyncMock(return_value={"status": "unhealthy"})
        return cache

    @staticmethod
    def recording() -> AsyncMock:
        """Always misses and records calls."""
        cache = AsyncMock()
        cache.get = AsyncMock(return_value=None)
        cache.set = AsyncMock(return_value=True)
        cache.health_check = AsyncMock(return_value={"status": "healthy"})
        return cache


def cache_contents(cache: InMemoryCache) -> dict[str, Any]:
    return dict(cache._store)
