"""
Redis Response Cache with Connection Pooling

Architecture:
    RedisClient (CacheBackend implementation)
        ├── ConnectionPool (redis.asyncio, shared by all request tasks)
        └── health_check (ping latency + pool utilization)

Every Redis failure is raised as a CacheError subclass; the orchestrator
decides what a failure means (a miss for reads, a dropped write for writes).

Author: System Architect
Date: 2026-09-14
"""

import time
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from llm_nexus.core.config.settings import Settings, get_settings
from llm_nexus.core.exceptions import CacheConnectionError, CacheError
from llm_nexus.core.logging.logger import get_logger

logger = get_logger(__name__)


class RedisClient:
    """
    Async Redis client implementing the CacheBackend protocol.

    Usage:
        client = RedisClient()
        await client.connect()
        await client.set("key", "value", ttl=3600)
        value = await client.get("key")
        await client.disconnect()
    """

    def __init__(self, settings: Settings | None = None, client: redis.Redis | None = None):
        """
        Args:
            settings: Settings to read (global settings if None)
            client: Pre-built client, used as-is by connect() (tests inject a mock)
        """
        self._settings = settings or get_settings()
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = client
        self._is_connected = False

        logger.info(
            "Redis client initialized",
            stage="REDIS.1",
            host=self._settings.redis.REDIS_HOST,
            port=self._settings.redis.REDIS_PORT,
        )

    async def connect(self) -> None:
        """
        Create the connection pool and verify it with PING.

        Raises:
            CacheConnectionError: If connection fails
        """
        if self._is_connected and self._client:
            return

        cfg = self._settings.redis
        try:
            if self._client is None:
                self._pool = ConnectionPool(
                    host=cfg.REDIS_HOST,
                    port=cfg.REDIS_PORT,
                    db=cfg.REDIS_DB,
                    password=cfg.REDIS_PASSWORD,
                    max_connections=cfg.REDIS_MAX_CONNECTIONS,
                    socket_connect_timeout=cfg.REDIS_SOCKET_CONNECT_TIMEOUT,
                    socket_timeout=cfg.REDIS_SOCKET_TIMEOUT,
                    decode_responses=True,
                )
                self._client = redis.Redis(connection_pool=self._pool)

            await self._client.ping()
            self._is_connected = True

            logger.info(
                "Redis connected successfully",
                stage="REDIS.2",
                host=cfg.REDIS_HOST,
                port=cfg.REDIS_PORT,
                max_connections=cfg.REDIS_MAX_CONNECTIONS,
            )

        except (ConnectionError, TimeoutError) as e:
            logger.error("Failed to connect to Redis", stage="REDIS.2", error=str(e))
            raise CacheConnectionError(
                f"Failed to connect to Redis: {e}",
                details={"host": cfg.REDIS_HOST, "port": cfg.REDIS_PORT},
            ) from e

    async def disconnect(self) -> None:
        """Close the client and its pool."""
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        logger.info("Redis disconnected", stage="REDIS.3")

    async def ping(self) -> bool:
        try:
            if self._client and self._is_connected:
                await self._client.ping()
                return True
        except (ConnectionError, TimeoutError):
            return False
        return False

    def is_connected(self) -> bool:
        return self._is_connected

    def _require_client(self) -> redis.Redis:
        if self._client is None or not self._is_connected:
            raise CacheConnectionError("Redis client is not connected")
        return self._client

    async def get(self, key: str) -> str | None:
        """
        Get value from Redis.

        Raises:
            CacheConnectionError: Not connected
            CacheError: The GET command failed
        """
        client = self._require_client()
        try:
            return await client.get(key)
        except RedisError as e:
            logger.warning("Redis GET failed", stage="REDIS.GET", error=str(e))
            raise CacheError(f"Redis GET failed: {e}", details={"key": key}) from e

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        Set value in Redis, with expiry when ``ttl`` is given.

        Raises:
            CacheConnectionError: Not connected
            CacheError: The SET command failed
        """
        client = self._require_client()
        try:
            result = await client.set(key, value, ex=ttl)
            return bool(result)
        except RedisError as e:
            logger.warning("Redis SET failed", stage="REDIS.SET", error=str(e))
            raise CacheError(f"Redis SET failed: {e}", details={"key": key}) from e

    async def health_check(self) -> dict[str, Any]:
        """
        Ping latency and pool utilization.

        Returns:
            Dict with health status and metrics
        """
        health: dict[str, Any] = {
            "status": "healthy",
            "connected": self._is_connected,
            "host": self._settings.redis.REDIS_HOST,
            "port": self._settings.redis.REDIS_PORT,
            "ping_latency_ms": None,
        }

        if not self._client:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            await self._client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)

            if self._pool:
                health["pool_size"] = self._pool.max_connections
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)

        return health


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_redis_client: RedisClient | None = None


def get_redis_client() -> RedisClient:
    """Get the global Redis client instance (singleton)."""
    global _redis_client

    if _redis_client is None:
        _redis_client = RedisClient()

    return _redis_client


async def init_redis() -> RedisClient:
    """
    Initialize and connect the global Redis client.

    Raises:
        CacheConnectionError: If Redis is unreachable
    """
    client = get_redis_client()
    await client.connect()
    return client


async def close_redis() -> None:
    """Close the global Redis client."""
    global _redis_client

    if _redis_client:
        await _redis_client.disconnect()
        _redis_client = None
