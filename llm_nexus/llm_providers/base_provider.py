#!/usr/bin/env python3
"""
Base Provider Abstract Class

This module defines the abstract base class for all LLM backends.
Concrete implementations (OpenAI, DeepSeek, Gemini, Fake) inherit from it.

Architectural Decision: Abstract base class for consistent patterns
- Common interface for all backends: one non-streaming generate() call
- Shared start/finish logging around the provider-specific call
- Provider-specific SDK errors are translated by each subclass
- No retries and no circuit breaking: a failure surfaces to the orchestrator

Author: System Architect
Date: 2026-09-14
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from llm_nexus.core.logging.logger import get_logger
from llm_nexus.llm_gateway.models import GenerationRequest, GenerationResult, UsageInfo

logger = get_logger(__name__)


@dataclass
class ProviderConfig:
    """
    Configuration for an LLM backend.

    Attributes:
        name: Registry key and provenance label (lower-case)
        api_key: API key for authentication
        base_url: Base URL for API (None for SDK default)
        model: Model identifier sent with every call
        timeout: SDK-level request timeout in seconds
        input_cost_per_1k: USD per 1K prompt tokens
        output_cost_per_1k: USD per 1K completion tokens
    """
    name: str
    api_key: str | None = None
    base_url: str | None = None
    model: str = ""
    timeout: int = 30
    input_cost_per_1k: float = 0.0
    output_cost_per_1k: float = 0.0


class BaseProvider(ABC):
    """
    Abstract base class for LLM backends.

    Subclasses must implement:
    - _generate_internal(): the provider-specific call
    - health_check(): provider health check

    Usage:
        class OpenAIProvider(BaseProvider):
            async def _generate_internal(self, request):
                ...
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = config.name

        logger.info(
            "Provider initialized",
            stage="4.0",
            provider=config.name,
            model=config.model,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Produce a completion for the request.

        Raises:
            BackendFailureError: On provider errors (raised by subclasses)
        """
        logger.info(
            "Starting generation",
            stage="4.1",
            provider=self.name,
            model=self.config.model,
            prompt_length=len(request.prompt),
        )
        start = time.perf_counter()

        try:
            result = await self._generate_internal(request)
        except Exception as e:
            logger.error(
                "Generation failed",
                stage="4.1",
                provider=self.name,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        logger.info(
            "Generation completed",
            stage="4.1",
            provider=self.name,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            content_length=len(result.content),
            total_tokens=result.usage.total_tokens if result.usage else None,
        )
        return result

    def build_usage(self, prompt_tokens: int, completion_tokens: int) -> UsageInfo:
        """Usage priced with this backend's configured rates."""
        return UsageInfo.from_counts(
            prompt_tokens,
            completion_tokens,
            self.config.input_cost_per_1k,
            self.config.output_cost_per_1k,
        )

    @abstractmethod
    async def _generate_internal(self, request: GenerationRequest) -> GenerationResult:
        """
        Provider-specific generation.

        Args:
            request: The validated generation request

        Returns:
            GenerationResult with content and usage (provenance is set by
            the orchestrator)
        """
        pass

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """
        Check provider health.

        Returns:
            Dict with health status
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', model='{self.config.model}')"
