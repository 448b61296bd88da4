"""
Unit Tests for API Routes

Tests FastAPI routes with TestClient. The lifespan is not run; each test
app gets an orchestrator built from in-memory collaborators.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from llm_nexus.application.app import create_app
from llm_nexus.core.background import BackgroundTaskPool
from llm_nexus.core.config.constants import HEADER_REQUEST_ID
from llm_nexus.core.interfaces import InMemoryCache, InMemoryUsageStore, build_cache_key
from llm_nexus.llm_gateway.services import RequestOrchestrator
from llm_nexus.llm_providers import ProviderRegistry
from tests.test_fixtures.provider_factory import ProviderTestFactory
from tests.test_fixtures.request_factory import RequestTestFactory

BASE = "/api"


def _inline_pool():
    """Pool stand-in: detached jobs are accepted but never run."""
    pool = MagicMock(spec=BackgroundTaskPool)
    pool.submit.return_value = True
    pool.stats.return_value = {"workers": 0, "running": False, "pending": 0}
    return pool


@pytest.fixture
def backend():
    return ProviderTestFactory.scenario_provider("mock")


@pytest.fixture
def memory_cache():
    cache = InMemoryCache()
    cache._connected = True
    return cache


@pytest.fixture
def memory_store():
    return InMemoryUsageStore()


@pytest.fixture
def app(settings, backend, memory_cache, memory_store, mock_metrics):
    app = create_app()
    app.state.orchestrator = RequestOrchestrator(
        registry=ProviderRegistry({"mock": backend}),
        settings=settings,
        cache=memory_cache,
        usage_store=memory_store,
        task_pool=_inline_pool(),
        metrics=mock_metrics,
    )
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def user_id(client):
    return client.post(f"{BASE}/users", json={"name": "u1"}).json()["id"]


@pytest.mark.unit
class TestGenerateRoute:
    def test_generate(self, client, user_id):
        response = client.post(f"{BASE}/generate", json=RequestTestFactory.http_body("hello", user_id=user_id))

        assert response.status_code == 200
        body = response.json()
        assert body["content"] == "hi"
        assert body["provider_used"] == "mock"
        assert body["processing_time_ms"] >= 0
        assert body["usage"] == {
            "prompt_tokens": 5,
            "completion_tokens": 10,
            "total_tokens": 15,
            "cost_usd": pytest.approx(0.001),
        }

    def test_cache_hit_omits_usage(self, client, user_id, memory_cache, backend):
        # seeded directly; the stand-in pool never runs detached writes
        key = build_cache_key("mock", user_id, "hello")
        memory_cache._store[key] = "cached hi"

        response = client.post(
            f"{BASE}/generate",
            json=RequestTestFactory.http_body("hello", user_id=user_id, provider="mock"),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["content"] == "cached hi"
        assert body["provider_used"] == "cache"
        assert "usage" not in body
        assert backend.call_count == 0

    def test_request_options_reach_backend(self, client, user_id, backend):
        client.post(
            f"{BASE}/generate",
            json=RequestTestFactory.http_body("hello", user_id=user_id, temperature=0.3, max_tokens=42),
        )

        [request] = backend.requests
        assert request.temperature == 0.3
        assert request.max_tokens == 42

    def test_defaults_apply_when_options_absent(self, client, user_id, backend):
        client.post(f"{BASE}/generate", json=RequestTestFactory.http_body("hello", user_id=user_id))

        [request] = backend.requests
        assert request.temperature == 0.7
        assert request.max_tokens == 1024

    def test_unknown_backend(self, client, user_id, backend):
        response = client.post(
            f"{BASE}/generate",
            json=RequestTestFactory.http_body("hello", user_id=user_id, provider="anthropic"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "backend_not_configured"
        assert response.json()["details"]["available"] == ["mock"]
        assert backend.call_count == 0

    def test_missing_identity(self, client):
        response = client.post(f"{BASE}/generate", json=RequestTestFactory.http_body("hello"))

        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "identity_error"
        assert body["details"]["reason"] == "missing"

    def test_empty_prompt(self, client, user_id):
        response = client.post(f"{BASE}/generate", json=RequestTestFactory.http_body("", user_id=user_id))

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_backend_failure(self, app, client, user_id, settings, mock_metrics):
        app.state.orchestrator = RequestOrchestrator(
            registry=ProviderRegistry({"mock": ProviderTestFactory.failing_provider("mock")}),
            settings=settings,
            usage_store=app.state.orchestrator.usage_store,
            task_pool=_inline_pool(),
            metrics=mock_metrics,
        )

        response = client.post(f"{BASE}/generate", json=RequestTestFactory.http_body("hello", user_id=user_id))

        assert response.status_code == 502
        assert response.json()["error"] == "backend_failure"
        assert response.json()["details"]["backend"] == "mock"


@pytest.mark.unit
class TestMalformedRequests:
    def test_missing_prompt(self, client):
        response = client.post(f"{BASE}/generate", json={"user_id": "u1"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "bad_request"
        assert any("prompt" in err["loc"] for err in body["details"]["errors"])

    def test_invalid_json(self, client):
        response = client.post(
            f"{BASE}/generate", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "bad_request"

    def test_temperature_out_of_range(self, client):
        response = client.post(f"{BASE}/generate", json=RequestTestFactory.http_body("hi", temperature=3.5))
        assert response.status_code == 400

    def test_non_post_is_rejected(self, client):
        assert client.get(f"{BASE}/generate").status_code == 405
        assert client.put(f"{BASE}/generate", json={}).status_code == 405


@pytest.mark.unit
class TestCors:
    def test_preflight(self, client):
        response = client.options(
            f"{BASE}/generate",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:3000")
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_simple_request_gets_cors_headers(self, client):
        response = client.get(f"{BASE}/health", headers={"Origin": "http://localhost:3000"})
        assert "access-control-allow-origin" in response.headers


@pytest.mark.unit
class TestUserRoutes:
    def test_register(self, client):
        response = client.post(f"{BASE}/users", json={"name": "alice"})

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "alice"
        assert set(body) == {"id", "name", "created_at"}

    def test_register_empty_name(self, client):
        response = client.post(f"{BASE}/users", json={"name": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_lookup(self, client, user_id):
        response = client.get(f"{BASE}/users/{user_id}")

        assert response.status_code == 200
        assert response.json()["id"] == user_id

    def test_lookup_unknown(self, client):
        response = client.get(f"{BASE}/users/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "user_not_found"

    def test_registration_without_store(self, app, client, settings, mock_metrics):
        app.state.orchestrator = RequestOrchestrator(
            registry=ProviderRegistry({}),
            settings=settings,
            task_pool=_inline_pool(),
            metrics=mock_metrics,
        )

        response = client.post(f"{BASE}/users", json={"name": "alice"})

        assert response.status_code == 503
        assert response.json()["error"] == "storage_unavailable"


@pytest.mark.unit
class TestHealthRoutes:
    def test_health(self, client):
        response = client.get(f"{BASE}/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert {"service", "version", "timestamp"} <= set(body)

    def test_ready(self, client):
        response = client.get(f"{BASE}/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_not_ready(self, app, client, settings, mock_metrics):
        app.state.orchestrator = RequestOrchestrator(
            registry=ProviderRegistry({}),
            settings=settings,
            task_pool=_inline_pool(),
            metrics=mock_metrics,
        )

        response = client.get(f"{BASE}/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_metrics(self, client):
        response = client.get(f"{BASE}/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "nexus_" in response.text

    def test_stats(self, client):
        response = client.get(f"{BASE}/stats")

        assert response.status_code == 200
        assert response.json()["providers"] == ["mock"]


@pytest.mark.unit
class TestRequestIdAndErrors:
    def test_request_id_is_generated(self, client):
        response = client.get(f"{BASE}/health")
        assert response.headers[HEADER_REQUEST_ID]

    def test_request_id_is_echoed(self, client):
        response = client.get(f"{BASE}/health", headers={HEADER_REQUEST_ID: "req-42"})
        assert response.headers[HEADER_REQUEST_ID] == "req-42"

    def test_missing_orchestrator(self):
        app = create_app()
        client = TestClient(app)

        response = client.get(f"{BASE}/stats")

        assert response.status_code == 500
        assert response.json()["error"] == "configuration_error"

    def test_unhandled_exception(self, app, client):
        broken = MagicMock()
        broken.get_stats.side_effect = RuntimeError("kaboom")
        app.state.orchestrator = broken

        response = client.get(f"{BASE}/stats")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_error"
        assert body["message"] == "kaboom"
