"""
Core interfaces: protocols the orchestrator depends on, plus their
in-memory implementations.
"""

from llm_nexus.core.interfaces.cache import CacheBackend, InMemoryCache, build_cache_key
from llm_nexus.core.interfaces.usage_store import InMemoryUsageStore, UsageLogStore

__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "build_cache_key",
    "UsageLogStore",
    "InMemoryUsageStore",
]
