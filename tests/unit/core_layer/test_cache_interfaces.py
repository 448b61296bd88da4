"""
Unit Tests for the cache protocol helpers

Tests cache key derivation and the in-memory cache used in tests and
local development.
"""

import hashlib
from types import SimpleNamespace

import pytest

from llm_nexus.core.interfaces import CacheBackend, InMemoryCache, build_cache_key
from llm_nexus.core.interfaces import cache as cache_module


@pytest.mark.unit
class TestBuildCacheKey:
    def test_key_format(self):
        digest = hashlib.sha256(b"hello").hexdigest()
        assert build_cache_key("openai", "u1", "hello") == f"nexus:response:openai:u1:{digest}"

    def test_custom_prefix(self):
        assert build_cache_key("openai", "u1", "hello", prefix="app").startswith("app:openai:u1:")

    def test_absent_provider_and_user_are_empty_segments(self):
        digest = hashlib.sha256(b"hello").hexdigest()
        assert build_cache_key(None, None, "hello") == f"nexus:response:::{digest}"

    def test_requesters_never_share_keys(self):
        assert build_cache_key("openai", "u1", "same prompt") != build_cache_key("openai", "u2", "same prompt")

    def test_backends_never_share_keys(self):
        assert build_cache_key("openai", "u1", "same prompt") != build_cache_key("gemini", "u1", "same prompt")

    def test_deterministic(self):
        assert build_cache_key("gemini", "u1", "p") == build_cache_key("gemini", "u1", "p")

    def test_long_prompt_keeps_key_short(self):
        key = build_cache_key("openai", "u1", "x" * 100_000)
        assert len(key) < 120


@pytest.mark.unit
class TestInMemoryCache:
    async def test_get_set(self, cache):
        assert await cache.get("k") is None

        assert await cache.set("k", "v") is True
        assert await cache.get("k") == "v"
        assert len(cache) == 1

    async def test_overwrite(self, cache):
        await cache.set("k", "v1")
        await cache.set("k", "v2")
        assert await cache.get("k") == "v2"

    async def test_ttl_expiry(self, cache, monkeypatch):
        clock = SimpleNamespace(now=1000.0)
        monkeypatch.setattr(cache_module, "time", SimpleNamespace(monotonic=lambda: clock.now))

        await cache.set("k", "v", ttl=60)
        clock.now += 59
        assert await cache.get("k") == "v"

        clock.now += 1
        assert await cache.get("k") is None
        assert len(cache) == 0

    async def test_set_without_ttl_clears_expiry(self, cache, monkeypatch):
        clock = SimpleNamespace(now=0.0)
        monkeypatch.setattr(cache_module, "time", SimpleNamespace(monotonic=lambda: clock.now))

        await cache.set("k", "v", ttl=10)
        await cache.set("k", "v")
        clock.now += 100

        assert await cache.get("k") == "v"

    async def test_health_and_disconnect(self, cache):
        await cache.set("k", "v")
        assert (await cache.health_check())["status"] == "healthy"
        assert await cache.ping() is True

        await cache.disconnect()

        assert await cache.ping() is False
        assert (await cache.health_check())["status"] == "unhealthy"
        assert len(cache) == 0

    def test_implements_protocol(self):
        assert isinstance(InMemoryCache(), CacheBackend)
