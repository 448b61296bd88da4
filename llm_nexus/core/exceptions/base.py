"""
Base Exception Class

This module contains the base exception class that every gateway error
inherits from. Specialized exceptions live in their themed modules.

Author: System Architect
Date: 2026-09-14
"""

from typing import Any


class NexusBaseError(Exception):
    """
    Base exception for all gateway errors.

    Every subclass declares a terse ``error_code`` (the classification callers
    see) and the HTTP ``status_code`` the transport layer maps it to.

    Attributes:
        message: Error message
        request_id: Request ID for correlation (if available)
        details: Additional error details (dict)

    Example:
        raise BackendFailureError(
            "OpenAI returned 500",
            request_id="abc-123",
            details={"backend": "openai"}
        )
    """

    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error, error_type, message, request_id and details
        """
        return {
            "error": self.error_code,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "NexusBaseError":
        """Add additional context to the error details (chainable)."""
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        request_id_str = f", request_id='{self.request_id}'" if self.request_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{request_id_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        request_id: str | None = None,
        **details
    ) -> "NexusBaseError":
        """
        Create an error from another exception, keeping its type and message.

        Example:
            >>> try:
            ...     await redis.ping()
            ... except redis.ConnectionError as e:
            ...     raise CacheConnectionError.from_exception(e, host="localhost")
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, request_id=request_id, details=error_details)


class ConfigurationError(NexusBaseError):
    """Raised when configuration is invalid or missing."""

    error_code = "configuration_error"
