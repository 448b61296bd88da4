"""
Usage log ORM models.

Two tables: ``users`` (registered requesters) and ``request_logs`` (one row
per successful backend call). Ids are UUID strings so the schema works on
both PostgreSQL and SQLite.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    """A registered requester."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<UserRow(id={self.id}, name={self.name})>"


class RequestLogRow(Base):
    """Usage and billing metadata for one backend call."""

    __tablename__ = "request_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    prompt = Column(Text, nullable=False)
    provider = Column(String(64), nullable=False)
    response = Column(Text, nullable=False)
    duration_ms = Column(Integer, nullable=False, default=0)
    prompt_tokens = Column(Integer, nullable=False, default=0)
    completion_tokens = Column(Integer, nullable=False, default=0)
    total_tokens = Column(Integer, nullable=False, default=0)
    cost_usd = Column(Numeric(18, 6), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_request_logs_user_created", "user_id", "created_at"),
        Index("idx_request_logs_provider", "provider"),
    )

    def __repr__(self):
        return f"<RequestLogRow(id={self.id}, provider={self.provider}, total_tokens={self.total_tokens})>"
