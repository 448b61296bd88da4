"""
Exception Module

Structured exception hierarchy for the gateway, organized by theme.

Module Structure:
-----------------
- **base.py**: NexusBaseError base class + ConfigurationError
- **validation.py**: InvalidArgumentError
- **identity.py**: IdentityError
- **provider.py**: backend selection and backend call errors
- **cache.py**: cache adapter errors
- **storage.py**: usage log store errors

Usage:
------
```python
from llm_nexus.core.exceptions import BackendNotConfiguredError, IdentityError
```
"""

from llm_nexus.core.exceptions.base import ConfigurationError, NexusBaseError
from llm_nexus.core.exceptions.cache import CacheConnectionError, CacheError
from llm_nexus.core.exceptions.identity import IdentityError
from llm_nexus.core.exceptions.provider import (
    BackendFailureError,
    BackendNotConfiguredError,
    BackendTimeoutError,
    NoBackendsConfiguredError,
)
from llm_nexus.core.exceptions.storage import (
    StorageError,
    StorageUnavailableError,
    UserNotFoundError,
)
from llm_nexus.core.exceptions.validation import InvalidArgumentError

__all__ = [
    # Base
    "NexusBaseError",
    "ConfigurationError",
    # Validation / identity
    "InvalidArgumentError",
    "IdentityError",
    # Provider
    "BackendNotConfiguredError",
    "NoBackendsConfiguredError",
    "BackendFailureError",
    "BackendTimeoutError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    # Storage
    "StorageUnavailableError",
    "StorageError",
    "UserNotFoundError",
]
