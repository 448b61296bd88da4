"""
Request Validation Exceptions

Author: System Architect
Date: 2026-09-14
"""

from llm_nexus.core.exceptions.base import NexusBaseError


class InvalidArgumentError(NexusBaseError):
    """
    Raised when a request argument is missing or out of bounds.

    Common causes:
    - Empty prompt
    - Empty display name on registration
    - Temperature or max_tokens outside the accepted range
    """

    error_code = "invalid_argument"
    status_code = 400
