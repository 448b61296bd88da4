"""
Cache-Related Exceptions

Raised by cache adapters. The orchestrator absorbs them (a failed lookup
counts as a miss, a failed write is dropped), so they never reach callers
of the generation endpoint.

Author: System Architect
Date: 2026-09-14
"""

from llm_nexus.core.exceptions.base import NexusBaseError


class CacheError(NexusBaseError):
    """Base exception for cache-related errors."""

    error_code = "cache_error"


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the cache (Redis).

    Common causes:
    - Redis server is down
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass
