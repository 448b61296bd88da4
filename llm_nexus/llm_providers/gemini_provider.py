#!/usr/bin/env python3
"""
Google Gemini LLM Provider Implementation

This module implements the Gemini backend using the google-generativeai library.

Architectural Decision: Use google-generativeai SDK
- Native support for Gemini features
- Authentication via API key
- Token counts read from usage_metadata when the SDK reports them

Author: System Architect
Date: 2026-09-14
"""

import asyncio
import time
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from llm_nexus.core.exceptions import BackendFailureError, BackendTimeoutError
from llm_nexus.core.logging import get_logger
from llm_nexus.llm_gateway.models import GenerationRequest, GenerationResult
from llm_nexus.llm_providers.base_provider import BaseProvider, ProviderConfig

logger = get_logger(__name__)


class GeminiProvider(BaseProvider):
    """Google Gemini backend."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config)

        # The SDK is configured globally; one key per process.
        genai.configure(api_key=config.api_key)

    async def _generate_internal(self, request: GenerationRequest) -> GenerationResult:
        try:
            generative_model = genai.GenerativeModel(self.config.model)
            response = await generative_model.generate_content_async(
                request.prompt,
                generation_config=genai.GenerationConfig(
                    temperature=request.temperature,
                    max_output_tokens=request.max_tokens,
                ),
            )
            content = response.text

        except google_exceptions.DeadlineExceeded as timeout_error:
            raise BackendTimeoutError("Gemini request timed out", backend=self.name) from timeout_error

        except (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied) as auth_error:
            logger.error("Gemini authentication failed", stage="GEMINI.ERR", error=str(auth_error))
            raise BackendFailureError(
                "Invalid Gemini API key",
                backend=self.name,
                details={"reason": "authentication"},
            ) from auth_error

        except google_exceptions.ResourceExhausted as rate_error:
            logger.warning("Gemini rate limit exceeded", stage="GEMINI.ERR", error=str(rate_error))
            raise BackendFailureError(
                "Gemini rate limit exceeded",
                backend=self.name,
                details={"reason": "rate_limited"},
            ) from rate_error

        except google_exceptions.ServiceUnavailable as conn_error:
            raise BackendFailureError(
                "Gemini service unavailable",
                backend=self.name,
                details={"reason": "connection"},
            ) from conn_error

        except Exception as e:
            # Blocked prompts surface as ValueError from response.text
            raise BackendFailureError(
                f"Gemini API error: {str(e)}",
                backend=self.name,
                details={"reason": "api_error"},
            ) from e

        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = self.build_usage(
                getattr(metadata, "prompt_token_count", 0) or 0,
                getattr(metadata, "candidates_token_count", 0) or 0,
            )

        return GenerationResult(content=content, usage=usage)

    async def health_check(self) -> dict[str, Any]:
        """Fetch one page of the model listing to verify key and connectivity."""
        try:
            start_time = time.perf_counter()
            await asyncio.to_thread(lambda: next(iter(genai.list_models(page_size=1)), None))
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
