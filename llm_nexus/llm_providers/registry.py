#!/usr/bin/env python3
"""
Provider Registry

Immutable name -> backend mapping, built once at startup and shared by every
request task.

Architectural Decision: read-only after construction
- Backed by types.MappingProxyType; there is no insertion or removal API
- Safe to read concurrently without locking
- Keys are validated up front (non-empty, lower-case) so a lookup never
  depends on the caller's capitalization

Author: System Architect
Date: 2026-09-14
"""

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from llm_nexus.core.config.constants import CACHE_PROVENANCE, Stage
from llm_nexus.core.exceptions import BackendNotConfiguredError, ConfigurationError
from llm_nexus.core.logging.logger import get_logger, log_stage
from llm_nexus.llm_providers.base_provider import BaseProvider

logger = get_logger(__name__)


class ProviderRegistry:
    """
    Immutable set of configured backends, keyed by name.

    Usage:
        registry = ProviderRegistry({"openai": openai_provider})
        backend = registry.resolve("openai")
        fallback = registry.first_available(["gemini", "openai"])
    """

    def __init__(self, providers: Mapping[str, BaseProvider] | None = None):
        validated: dict[str, BaseProvider] = {}
        for name, provider in (providers or {}).items():
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError("Provider names must be non-empty strings")
            if name != name.strip().lower():
                raise ConfigurationError(
                    f"Provider name must be lower-case without surrounding spaces: {name!r}",
                    details={"name": name},
                )
            if name == CACHE_PROVENANCE:
                raise ConfigurationError(
                    f"Provider name {name!r} is reserved for cached responses",
                    details={"name": name},
                )
            if not isinstance(provider, BaseProvider):
                raise ConfigurationError(
                    f"Provider {name!r} does not implement BaseProvider",
                    details={"type": type(provider).__name__},
                )
            validated[name] = provider

        self._providers = MappingProxyType(validated)

        log_stage(logger, Stage.REGISTRY, "Provider registry built", providers=self.names())

    def resolve(self, name: str) -> BaseProvider:
        """
        Look up an explicitly requested backend.

        Raises:
            BackendNotConfiguredError: If no backend has this name
        """
        provider = self._providers.get(name)
        if provider is None:
            raise BackendNotConfiguredError(
                f"Provider not configured: {name}",
                details={"provider": name, "available": self.names()},
            )
        return provider

    def get(self, name: str) -> BaseProvider | None:
        return self._providers.get(name)

    def names(self) -> list[str]:
        """Registered names in sorted order."""
        return sorted(self._providers)

    def first_available(self, priority: Iterable[str]) -> BaseProvider | None:
        """
        First backend in ``priority`` that is registered; otherwise the first
        registered backend by sorted name; None when the registry is empty.
        """
        for name in priority:
            provider = self._providers.get(name)
            if provider is not None:
                return provider

        for name in self.names():
            return self._providers[name]
        return None

    @property
    def is_empty(self) -> bool:
        return not self._providers

    def items(self) -> Iterator[tuple[str, BaseProvider]]:
        return iter(sorted(self._providers.items()))

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ProviderRegistry({self.names()})"
