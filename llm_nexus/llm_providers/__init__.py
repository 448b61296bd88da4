"""
LLM backends and the registry that holds them.
"""

from llm_nexus.llm_providers.base_provider import BaseProvider, ProviderConfig
from llm_nexus.llm_providers.deepseek_provider import DeepSeekProvider
from llm_nexus.llm_providers.fake_provider import FakeProvider
from llm_nexus.llm_providers.gemini_provider import GeminiProvider
from llm_nexus.llm_providers.openai_provider import OpenAIProvider
from llm_nexus.llm_providers.registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "ProviderConfig",
    "ProviderRegistry",
    "OpenAIProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "FakeProvider",
]
