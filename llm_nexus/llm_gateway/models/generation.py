"""
Generation Domain Models

Immutable value objects exchanged between the transport layer, the
orchestrator and the backends.

Architectural Decision: frozen pydantic models
- A request cannot be altered once the orchestrator has started on it
- Results can be cached and shared between tasks without copying
- Validation of numeric bounds happens at construction

Author: System Architect
Date: 2026-09-14
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class GenerationRequest(BaseModel):
    """
    A single generation request.

    The prompt is deliberately not length-checked here: an empty prompt is
    rejected by the orchestrator with InvalidArgumentError so that callers
    outside HTTP get the gateway's own error taxonomy.
    """
    model_config = {"frozen": True}

    user_id: str | None = Field(default=None, description="Registered requester id")
    prompt: str = Field(..., description="Input text")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=1024, ge=1, description="Output token limit")


class UsageInfo(BaseModel):
    """Token usage and derived cost reported for one backend call."""
    model_config = {"frozen": True}

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    cost_usd: float = Field(default=0.0, ge=0.0)

    @classmethod
    def from_counts(
        cls,
        prompt_tokens: int,
        completion_tokens: int,
        input_cost_per_1k: float = 0.0,
        output_cost_per_1k: float = 0.0,
    ) -> "UsageInfo":
        """
        Build usage from raw token counts and per-1K pricing.

        Example:
            >>> UsageInfo.from_counts(1000, 500, 0.5, 1.5).cost_usd
            1.25
        """
        cost = (prompt_tokens / 1000) * input_cost_per_1k + (completion_tokens / 1000) * output_cost_per_1k
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            cost_usd=cost,
        )


class GenerationResult(BaseModel):
    """
    What a backend (or the cache) produced.

    ``usage`` is None for cached results. ``provider`` is the provenance
    label: a backend name or "cache".
    """
    model_config = {"frozen": True}

    content: str
    usage: UsageInfo | None = None
    provider: str | None = None

    def with_provider(self, label: str) -> "GenerationResult":
        """Return a copy carrying the given provenance label."""
        return self.model_copy(update={"provider": label})


class GatewayResponse(BaseModel):
    """Outcome of RequestOrchestrator.process_request."""
    model_config = {"frozen": True}

    result: GenerationResult
    provider_used: str = Field(..., min_length=1)
    processing_time_ms: float = Field(default=0.0, ge=0.0)


class UsageLogRecord(BaseModel):
    """One row of the usage log, written once after a successful dispatch."""
    model_config = {"frozen": True}

    user_id: str | None = None
    prompt: str
    provider: str
    response: str
    duration_ms: int = Field(default=0, ge=0)
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cost_usd: float = 0.0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
