"""
Requester Identity Exceptions

Author: System Architect
Date: 2026-09-14
"""

from llm_nexus.core.exceptions.base import NexusBaseError


class IdentityError(NexusBaseError):
    """
    Raised when the requester of a generation call cannot be established.

    ``details["reason"]`` is one of:
    - "missing": identity is required but the request declares none
    - "not_found": the declared identity is not a registered requester
    - "lookup_failed": the user store failed while resolving it
    """

    error_code = "identity_error"
    status_code = 403
