"""
Cache Backend Protocol

This module defines the protocol every response cache implements, the
in-memory implementation used in tests and local development, and the
cache key derivation shared by all of them.

Architectural Decision: Protocol-based abstraction
- The orchestrator depends on the protocol, never on Redis directly
- Tests run against InMemoryCache without any server
- Type-safe interface with runtime checking

Author: System Architect
Date: 2026-09-14
"""

import asyncio
import hashlib
import time
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol defining the interface for response cache implementations.

    Implementations:
    - RedisClient: Production Redis-backed cache
    - InMemoryCache: Testing/development in-memory cache

    Values are opaque strings; the orchestrator stores generated content only.
    """

    async def connect(self) -> None:
        """
        Establish connection to the cache backend.

        Raises:
            CacheConnectionError: If connection fails
        """
        ...

    async def disconnect(self) -> None:
        """Close connection to the cache backend."""
        ...

    async def ping(self) -> bool:
        """Return True if the backend answers."""
        ...

    async def get(self, key: str) -> str | None:
        """
        Get value from cache.

        Returns:
            The stored value, or None if absent or expired

        Raises:
            CacheError: If the lookup itself fails
        """
        ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        Store a value, expiring after ``ttl`` seconds when given.

        Returns:
            bool: True if set successfully
        """
        ...

    async def health_check(self) -> dict[str, Any]:
        """Return a status dict (``status`` is "healthy" or "unhealthy")."""
        ...


def build_cache_key(
    provider: str | None,
    user_id: str | None,
    prompt: str,
    prefix: str = "nexus:response",
) -> str:
    """
    Derive the response cache key for a (backend, requester, prompt) triple.

    Format: ``{prefix}:{provider}:{user_id}:{sha256(prompt)}``. Absent
    provider or requester become empty segments. The requester segment keeps
    two requesters from ever sharing an entry; hashing keeps keys short for
    arbitrarily long prompts.

    Example:
        >>> build_cache_key("openai", "u1", "hi")[:24]
        'nexus:response:openai:u1'
    """
    digest = hashlib.sha256(prompt.encode("utf-8")).hexdigest()
    return ":".join([prefix, provider or "", user_id or "", digest])


class InMemoryCache:
    """
    Simple in-memory cache implementation for testing.

    Implements the CacheBackend protocol without external dependencies.
    Expiry uses the monotonic clock; expired entries are evicted on read.

    Note: NOT distributed. Use only for tests and local development.
    """

    def __init__(self):
        self._store: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}
        self._lock = asyncio.Lock()
        self._connected = False

    async def connect(self) -> None:
        """Simulate connection."""
        self._connected = True

    async def disconnect(self) -> None:
        """Simulate disconnection."""
        self._connected = False
        async with self._lock:
            self._store.clear()
            self._expires_at.clear()

    async def ping(self) -> bool:
        """Check if connected."""
        return self._connected

    async def get(self, key: str) -> str | None:
        """Get value from in-memory store."""
        async with self._lock:
            expires_at = self._expires_at.get(key)
            if expires_at is not None and time.monotonic() >= expires_at:
                self._store.pop(key, None)
                self._expires_at.pop(key, None)
                return None
            return self._store.get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Set value in in-memory store."""
        async with self._lock:
            self._store[key] = value
            if ttl:
                self._expires_at[key] = time.monotonic() + ttl
            else:
                self._expires_at.pop(key, None)
        return True

    def __len__(self) -> int:
        return len(self._store)

    async def health_check(self) -> dict[str, Any]:
        """Health check."""
        return {
            "status": "healthy" if self._connected else "unhealthy",
            "connected": self._connected,
            "keys_count": len(self._store),
        }
