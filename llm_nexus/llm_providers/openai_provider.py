#!/usr/bin/env python3
"""
OpenAI LLM Provider Implementation

This module implements the OpenAI backend using the official AsyncOpenAI client.
It performs one non-streaming chat completion per request and maps SDK errors
to the gateway's exception hierarchy.

Architectural Decision: Use official SDK
- Best compatibility with OpenAI features
- Type-safe responses, token usage included in every completion
- SDK retries disabled: the gateway never retries a failed backend call

Author: System Architect
Date: 2026-09-14
"""

import time
from typing import Any

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from llm_nexus.core.exceptions import BackendFailureError, BackendTimeoutError
from llm_nexus.core.logging import get_logger
from llm_nexus.llm_gateway.models import GenerationRequest, GenerationResult
from llm_nexus.llm_providers.base_provider import BaseProvider, ProviderConfig

logger = get_logger(__name__)

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIProvider(BaseProvider):
    """
    OpenAI chat-completions backend.

    Also the base for OpenAI-compatible vendors (see DeepSeekProvider):
    those only change ``vendor`` and the base URL.
    """

    vendor = "OpenAI"

    def __init__(self, config: ProviderConfig, client: AsyncOpenAI | None = None):
        """
        Initialize the OpenAI provider.

        Args:
            config: Configuration object containing API key, base URL, model, etc.
            client: Pre-built client (tests inject a mock here)
        """
        super().__init__(config)

        base_url = config.base_url
        if base_url == OPENAI_DEFAULT_BASE_URL:
            base_url = None

        self.client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=base_url,
            timeout=config.timeout,
            max_retries=0,
        )

    async def _generate_internal(self, request: GenerationRequest) -> GenerationResult:
        """
        Run one chat completion.

        Raises:
            BackendTimeoutError: The SDK timed out
            BackendFailureError: Authentication, rate limit, connection or API errors
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": request.prompt}],
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )

        except APITimeoutError as timeout_error:
            raise BackendTimeoutError(
                f"{self.vendor} request timed out",
                backend=self.name,
            ) from timeout_error

        except AuthenticationError as auth_error:
            logger.error("Authentication failed", stage="OPENAI.ERR", provider=self.name, error=str(auth_error))
            raise BackendFailureError(
                f"Invalid {self.vendor} API key",
                backend=self.name,
                details={"reason": "authentication"},
            ) from auth_error

        except RateLimitError as rate_error:
            logger.warning("Rate limit exceeded", stage="OPENAI.ERR", provider=self.name, error=str(rate_error))
            raise BackendFailureError(
                f"{self.vendor} rate limit exceeded",
                backend=self.name,
                details={"reason": "rate_limited"},
            ) from rate_error

        except APIConnectionError as conn_error:
            raise BackendFailureError(
                f"Could not connect to {self.vendor}",
                backend=self.name,
                details={"reason": "connection"},
            ) from conn_error

        except APIError as api_error:
            raise BackendFailureError(
                f"{self.vendor} API returned an error: {api_error.message}",
                backend=self.name,
                details={"reason": "api_error", "code": api_error.code},
            ) from api_error

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        usage = None
        if response.usage is not None:
            usage = self.build_usage(response.usage.prompt_tokens, response.usage.completion_tokens)

        return GenerationResult(content=content, usage=usage)

    async def health_check(self) -> dict[str, Any]:
        """Cheap authenticated call (model listing) to verify key and connectivity."""
        try:
            start_time = time.perf_counter()
            await self.client.models.list()
            duration_ms = (time.perf_counter() - start_time) * 1000

            return {
                "status": "healthy",
                "latency_ms": round(duration_ms, 2),
                "provider": self.name,
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "provider": self.name,
            }
