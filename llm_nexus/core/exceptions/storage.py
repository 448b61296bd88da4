"""
Usage Log Store Exceptions

Author: System Architect
Date: 2026-09-14
"""

from llm_nexus.core.exceptions.base import NexusBaseError


class StorageUnavailableError(NexusBaseError):
    """
    Raised when an operation needs the usage log store and none is configured.

    Examples: registering a requester, or enforcing requester identity,
    on a deployment started without DATABASE_URL.
    """

    error_code = "storage_unavailable"
    status_code = 503


class StorageError(NexusBaseError):
    """Raised when the usage log store fails (connection, constraint, ...)."""

    error_code = "storage_error"


class UserNotFoundError(StorageError):
    """Raised by user lookups for an unknown requester id."""

    error_code = "user_not_found"
    status_code = 404
