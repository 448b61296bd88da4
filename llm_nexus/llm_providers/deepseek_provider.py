#!/usr/bin/env python3
"""
DeepSeek LLM Provider Implementation

DeepSeek's API is OpenAI-compatible, so the backend is the OpenAI provider
pointed at DeepSeek's endpoint. A separate class keeps its name in logs and
metrics and leaves room for divergence.

Author: System Architect
Date: 2026-09-14
"""

from openai import AsyncOpenAI

from llm_nexus.llm_providers.base_provider import ProviderConfig
from llm_nexus.llm_providers.openai_provider import OpenAIProvider

DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com/v1"


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek chat backend over the OpenAI SDK."""

    vendor = "DeepSeek"

    def __init__(self, config: ProviderConfig, client: AsyncOpenAI | None = None):
        if not config.base_url:
            config.base_url = DEEPSEEK_DEFAULT_BASE_URL
        super().__init__(config, client=client)
