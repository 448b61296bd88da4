"""
Usage Log Store Protocol

Defines the persistence capability used by the orchestrator: registering
requesters, resolving them, and appending usage log records.

Architectural Decision: Protocol-based abstraction, like CacheBackend
- SqlUsageStore (SQLAlchemy) in production
- InMemoryUsageStore for tests and development

Author: System Architect
Date: 2026-09-14
"""

import asyncio
import uuid
from typing import Any, Protocol, runtime_checkable

from llm_nexus.core.exceptions.storage import UserNotFoundError
from llm_nexus.llm_gateway.models import Requester, UsageLogRecord


@runtime_checkable
class UsageLogStore(Protocol):
    """
    Protocol for the usage log / requester store.

    Implementations must be safe for concurrent use by many request tasks
    and by the background task pool.
    """

    async def append(self, record: UsageLogRecord) -> None:
        """Persist one usage log record."""
        ...

    async def create_user(self, name: str) -> Requester:
        """Register a requester and return it with its generated id."""
        ...

    async def get_user(self, user_id: str) -> Requester:
        """
        Resolve a requester by id.

        Raises:
            UserNotFoundError: If no requester has this id
            StorageError: If the lookup fails
        """
        ...

    async def health_check(self) -> dict[str, Any]:
        """Return a status dict (``status`` is "healthy" or "unhealthy")."""
        ...


class InMemoryUsageStore:
    """
    Dict-backed store for tests and local development.

    Records are kept in insertion order in ``records``.
    """

    def __init__(self):
        self._users: dict[str, Requester] = {}
        self.records: list[UsageLogRecord] = []
        self._lock = asyncio.Lock()

    async def append(self, record: UsageLogRecord) -> None:
        async with self._lock:
            self.records.append(record)

    async def create_user(self, name: str) -> Requester:
        requester = Requester(id=str(uuid.uuid4()), name=name)
        async with self._lock:
            self._users[requester.id] = requester
        return requester

    async def get_user(self, user_id: str) -> Requester:
        async with self._lock:
            requester = self._users.get(user_id)
        if requester is None:
            raise UserNotFoundError(f"User not found: {user_id}", details={"user_id": user_id})
        return requester

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "backend": "memory",
            "users": len(self._users),
            "records": len(self.records),
        }
