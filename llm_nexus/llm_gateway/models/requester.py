"""
Requester model.

A registered caller of the gateway. Generation requests and usage log
records refer to it by id.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Requester(BaseModel):
    """A registered caller; generation requests reference it by ``id``."""
    model_config = {"frozen": True}

    id: str
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
