"""
SQL Usage Log Store

UsageLogStore implementation over SQLAlchemy's async ORM. Works with any
async driver SQLAlchemy supports: asyncpg for PostgreSQL in production,
aiosqlite in tests.

Architectural Decision: one short-lived AsyncSession per operation
- Sessions are never shared between request tasks or background workers
- Commit/rollback boundaries match the protocol's operations exactly
- Driver errors are raised as StorageError; unknown ids as UserNotFoundError

Author: System Architect
Date: 2026-09-14
"""

import time
from decimal import Decimal
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from llm_nexus.core.exceptions import StorageError, UserNotFoundError
from llm_nexus.core.logging.logger import get_logger
from llm_nexus.infrastructure.storage.models import Base, RequestLogRow, UserRow
from llm_nexus.llm_gateway.models import Requester, UsageLogRecord

logger = get_logger(__name__)


class SqlUsageStore:
    """
    SQLAlchemy-backed requester and usage log store.

    Usage:
        store = SqlUsageStore.from_url("postgresql+asyncpg://user:pw@host/db")
        await store.create_schema()
        user = await store.create_user("alice")
        ...
        await store.close()
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "SqlUsageStore":
        """
        Build a store from a SQLAlchemy async URL.

        In-memory SQLite URLs get a StaticPool so every session sees the
        same database.
        """
        kwargs: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite") and ":memory:" in url:
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        elif not url.startswith("sqlite"):
            kwargs["pool_pre_ping"] = True

        engine = create_async_engine(url, **kwargs)
        logger.info("Usage store engine created", stage="DB.1", dialect=engine.dialect.name)
        return cls(engine)

    async def create_schema(self) -> None:
        """Create the tables if they do not exist."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError.from_exception(e, message="Could not create usage store schema") from e
        logger.info("Usage store schema ready", stage="DB.2")

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("Usage store closed", stage="DB.3")

    async def append(self, record: UsageLogRecord) -> None:
        row = RequestLogRow(
            user_id=record.user_id,
            prompt=record.prompt,
            provider=record.provider,
            response=record.response,
            duration_ms=record.duration_ms,
            prompt_tokens=record.prompt_tokens,
            completion_tokens=record.completion_tokens,
            total_tokens=record.total_tokens,
            cost_usd=Decimal(str(record.cost_usd)),
            created_at=record.created_at,
        )
        try:
            async with self._sessions() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError.from_exception(e, message="Could not append usage log", provider=record.provider) from e

    async def create_user(self, name: str) -> Requester:
        row = UserRow(name=name)
        try:
            async with self._sessions() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError.from_exception(e, message="Could not create user") from e
        return Requester(id=row.id, name=row.name, created_at=row.created_at)

    async def get_user(self, user_id: str) -> Requester:
        try:
            async with self._sessions() as session:
                result = await session.execute(select(UserRow).where(UserRow.id == user_id))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError.from_exception(e, message="Could not look up user", user_id=user_id) from e

        if row is None:
            raise UserNotFoundError(f"User not found: {user_id}", details={"user_id": user_id})
        return Requester(id=row.id, name=row.name, created_at=row.created_at)

    async def list_records(self, user_id: str | None = None, limit: int = 100) -> list[UsageLogRecord]:
        """Most recent usage records first, optionally for one requester."""
        stmt = select(RequestLogRow).order_by(RequestLogRow.created_at.desc()).limit(limit)
        if user_id is not None:
            stmt = stmt.where(RequestLogRow.user_id == user_id)

        try:
            async with self._sessions() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError.from_exception(e, message="Could not read usage logs") from e

        return [
            UsageLogRecord(
                user_id=row.user_id,
                prompt=row.prompt,
                provider=row.provider,
                response=row.response,
                duration_ms=row.duration_ms,
                prompt_tokens=row.prompt_tokens,
                completion_tokens=row.completion_tokens,
                total_tokens=row.total_tokens,
                cost_usd=float(row.cost_usd),
                created_at=row.created_at,
            )
            for row in rows
        ]

    async def health_check(self) -> dict[str, Any]:
        try:
            start = time.perf_counter()
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {
                "status": "healthy",
                "backend": self._engine.dialect.name,
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            }
        except SQLAlchemyError as e:
            return {
                "status": "unhealthy",
                "backend": self._engine.dialect.name,
                "error": str(e),
            }
