"""
HTTP request/response models for the generation and user endpoints.

These are the wire shapes only; they are translated to the domain models
in llm_nexus.llm_gateway.models by the route handlers.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class GenerateRequestModel(BaseModel):
    """
    Body of POST /generate.

    The prompt is not length-checked here so that an empty prompt reaches
    the orchestrator and is reported as ``invalid_argument``.
    """

    user_id: str | None = Field(default=None, description="Registered requester id")
    prompt: str = Field(..., description="Input text")
    provider: str | None = Field(default=None, description="Backend name; default order applies when absent")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "6f1c2f2e-7a55-4a8e-9a43-2d1f0e0c9b11",
                    "prompt": "Explain response caching in one sentence.",
                    "provider": "openai",
                    "temperature": 0.7,
                    "max_tokens": 256,
                }
            ]
        }
    }

    @field_validator("provider")
    @classmethod
    def blank_provider_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class UsageModel(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    cost_usd: float


class GenerateResponseModel(BaseModel):
    """``usage`` is omitted for cached responses."""

    content: str
    provider_used: str
    processing_time_ms: float
    usage: UsageModel | None = None


class CreateUserRequestModel(BaseModel):
    name: str = Field(..., description="Display name of the requester")


class UserResponseModel(BaseModel):
    id: str
    name: str
    created_at: datetime


class ErrorResponseModel(BaseModel):
    """Uniform error body returned for every failed request."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
