"""
Fake Provider

Deterministic offline backend, registered when USE_FAKE_LLM is set. Needs
no credentials or network access.
"""

import asyncio
from typing import Any

from llm_nexus.core.exceptions import BackendFailureError
from llm_nexus.core.logging import get_logger
from llm_nexus.llm_gateway.models import GenerationRequest, GenerationResult
from llm_nexus.llm_providers.base_provider import BaseProvider, ProviderConfig

logger = get_logger(__name__)


class FakeProvider(BaseProvider):
    """
    Offline backend for local runs and tests.

    Deterministic: the same prompt always yields the same content and token
    counts (one token per whitespace-separated word). ``latency`` adds an
    artificial delay; ``fail_with`` makes every call fail with that message.
    """

    def __init__(
        self,
        config: ProviderConfig,
        response: str | None = None,
        latency: float = 0.0,
        fail_with: str | None = None,
    ):
        super().__init__(config)
        self.response = response
        self.latency = latency
        self.fail_with = fail_with
        self.call_count = 0

    async def _generate_internal(self, request: GenerationRequest) -> GenerationResult:
        self.call_count += 1

        if self.latency:
            await asyncio.sleep(self.latency)

        if self.fail_with is not None:
            raise BackendFailureError(self.fail_with, backend=self.name)

        content = self.response if self.response is not None else self._echo(request.prompt)
        usage = self.build_usage(len(request.prompt.split()), len(content.split()))
        return GenerationResult(content=content, usage=usage)

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "latency_ms": 0,
            "provider": self.name,
        }

    @staticmethod
    def _echo(prompt: str) -> str:
        return f"[fake] {prompt.strip()[:200]}"
