"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures.settings_factory import make_settings  # noqa: E402


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """Identity enforced, default priority order."""
    return make_settings()


@pytest.fixture
def open_settings():
    """Identity optional."""
    return make_settings(REQUIRE_USER_ID=False)


# ============================================================================
# Collaborator Fixtures
# ============================================================================


@pytest.fixture
def mock_metrics():
    """MetricsCollector stand-in so tests can assert on recorded events."""
    from llm_nexus.infrastructure.monitoring.metrics_collector import MetricsCollector

    return MagicMock(spec=MetricsCollector)


@pytest.fixture
async def cache():
    from llm_nexus.core.interfaces import InMemoryCache

    cache = InMemoryCache()
    await cache.connect()
    return cache


@pytest.fixture
def usage_store():
    from llm_nexus.core.interfaces import InMemoryUsageStore

    return InMemoryUsageStore()


@pytest.fixture
async def task_pool(mock_metrics):
    """Running pool, stopped after the test."""
    from llm_nexus.core.background import BackgroundTaskPool

    pool = BackgroundTaskPool(workers=2, queue_size=100, shutdown_timeout=1.0, metrics=mock_metrics)
    pool.start()
    yield pool
    await pool.stop()


@pytest.fixture
def mock_backend():
    """The "mock" backend: content "hi", usage {5, 10, 15, $0.001}."""
    from tests.test_fixtures.provider_factory import ProviderTestFactory

    return ProviderTestFactory.scenario_provider()


@pytest.fixture
def make_orchestrator(settings, cache, usage_store, task_pool, mock_metrics):
    """
    Build a RequestOrchestrator from the shared fixtures.

    Any collaborator can be overridden by keyword, including passing
    ``cache=None`` or ``usage_store=None`` to run without it.
    """
    from llm_nexus.llm_gateway.services import RequestOrchestrator
    from llm_nexus.llm_providers import ProviderRegistry

    defaults = {"settings": settings, "cache": cache, "usage_store": usage_store, "task_pool": task_pool}

    def _build(providers=None, **overrides):
        kwargs = {**defaults, **overrides}
        return RequestOrchestrator(
            registry=ProviderRegistry(providers or {}),
            metrics=mock_metrics,
            **kwargs,
        )

    return _build


# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


@pytest.fixture(scope="session")
def database_url():
    """Database for integration tests; in-memory SQLite unless TEST_DATABASE_URL is set."""
    return os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
