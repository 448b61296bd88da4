"""
LLM Provider Exceptions

All exceptions related to backend selection and backend calls.

Author: System Architect
Date: 2026-09-14
"""

from typing import Any

from llm_nexus.core.exceptions.base import NexusBaseError


class BackendNotConfiguredError(NexusBaseError):
    """Raised when the caller names a backend that is not in the registry."""

    error_code = "backend_not_configured"
    status_code = 400


class NoBackendsConfiguredError(NexusBaseError):
    """
    Raised when the caller names no backend and none can be chosen.

    This happens when the registry is empty, which means no backend had
    credentials configured at startup.
    """

    error_code = "no_backends_configured"
    status_code = 503


class BackendFailureError(NexusBaseError):
    """
    Raised when the chosen backend fails to produce a result.

    The failing backend's name is kept in ``backend`` (and in details) so
    that callers can attribute the failure. Not retried, no fallback.

    Common causes:
    - Provider API returned an error
    - Invalid or expired API key
    - Provider rate limit hit
    - Network connectivity issues
    """

    error_code = "backend_failure"
    status_code = 502

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        merged = dict(details or {})
        if backend is not None:
            merged.setdefault("backend", backend)
        super().__init__(message, request_id=request_id, details=merged)
        self.backend = merged.get("backend")


class BackendTimeoutError(BackendFailureError):
    """Raised when a backend call exceeds the configured timeout."""

    error_code = "backend_timeout"
    status_code = 504
