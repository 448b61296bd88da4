"""
LLM Provider Registration

Builds the immutable ProviderRegistry from settings during application
startup.

Architectural Decision: Centralized provider registration
- Single location for all provider configurations
- Conditional registration based on API key availability: a backend
  without credentials is absent from the registry, not disabled
- Deterministic: the same settings always produce the same registry

Author: System Architect
Date: 2026-09-14
"""

from llm_nexus.core.config.constants import LLMProvider, Stage
from llm_nexus.core.config.settings import Settings, get_settings
from llm_nexus.core.logging.logger import get_logger, log_stage
from llm_nexus.llm_providers import (
    BaseProvider,
    DeepSeekProvider,
    FakeProvider,
    GeminiProvider,
    OpenAIProvider,
    ProviderConfig,
    ProviderRegistry,
)

logger = get_logger(__name__)


def build_provider_registry(settings: Settings | None = None) -> ProviderRegistry:
    """
    Instantiate every backend that has credentials configured.

    Args:
        settings: Settings to read. If None, uses global settings.
    """
    settings = settings or get_settings()
    llm = settings.llm
    providers: dict[str, BaseProvider] = {}

    if llm.OPENAI_API_KEY:
        providers[LLMProvider.OPENAI.value] = OpenAIProvider(
            ProviderConfig(
                name=LLMProvider.OPENAI.value,
                api_key=llm.OPENAI_API_KEY,
                base_url=llm.OPENAI_BASE_URL,
                model=llm.OPENAI_MODEL,
                timeout=llm.LLM_TIMEOUT,
                input_cost_per_1k=llm.OPENAI_INPUT_COST_PER_1K,
                output_cost_per_1k=llm.OPENAI_OUTPUT_COST_PER_1K,
            )
        )

    if llm.GEMINI_API_KEY:
        providers[LLMProvider.GEMINI.value] = GeminiProvider(
            ProviderConfig(
                name=LLMProvider.GEMINI.value,
                api_key=llm.GEMINI_API_KEY,
                model=llm.GEMINI_MODEL,
                timeout=llm.LLM_TIMEOUT,
                input_cost_per_1k=llm.GEMINI_INPUT_COST_PER_1K,
                output_cost_per_1k=llm.GEMINI_OUTPUT_COST_PER_1K,
            )
        )

    if llm.DEEPSEEK_API_KEY:
        providers[LLMProvider.DEEPSEEK.value] = DeepSeekProvider(
            ProviderConfig(
                name=LLMProvider.DEEPSEEK.value,
                api_key=llm.DEEPSEEK_API_KEY,
                base_url=llm.DEEPSEEK_BASE_URL,
                model=llm.DEEPSEEK_MODEL,
                timeout=llm.LLM_TIMEOUT,
                input_cost_per_1k=llm.DEEPSEEK_INPUT_COST_PER_1K,
                output_cost_per_1k=llm.DEEPSEEK_OUTPUT_COST_PER_1K,
            )
        )

    # Experiment mode
    if llm.USE_FAKE_LLM:
        providers[LLMProvider.FAKE.value] = FakeProvider(
            ProviderConfig(name=LLMProvider.FAKE.value, model="fake-model")
        )

    if not providers:
        log_stage(
            logger,
            Stage.REGISTRY,
            "No LLM backend has credentials; generation requests will fail",
            level="warning",
        )

    return ProviderRegistry(providers)
