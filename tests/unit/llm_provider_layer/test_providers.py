"""
Unit Tests for LLM Backends

SDK clients are replaced by mocks; no network calls are made.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from google.api_core import exceptions as google_exceptions
from openai import APIConnectionError, APITimeoutError, AuthenticationError, RateLimitError

from llm_nexus.core.exceptions import BackendFailureError, BackendTimeoutError
from llm_nexus.llm_gateway.models import GenerationRequest
from llm_nexus.llm_providers import (
    DeepSeekProvider,
    FakeProvider,
    GeminiProvider,
    OpenAIProvider,
    ProviderConfig,
)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _completion(content="hello", prompt_tokens=5, completion_tokens=10):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


def _openai_client(**create_kwargs):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    client.models.list = AsyncMock(return_value=[])
    return client


def _http_response(status_code):
    return httpx.Response(status_code, request=httpx.Request("POST", OPENAI_URL))


@pytest.fixture
def request_():
    return GenerationRequest(user_id="u1", prompt="Say hello", temperature=0.2, max_tokens=64)


@pytest.mark.unit
class TestOpenAIProvider:
    @pytest.fixture
    def config(self):
        return ProviderConfig(
            name="openai",
            api_key="sk-test",
            model="gpt-4o-mini",
            input_cost_per_1k=0.1,
            output_cost_per_1k=0.05,
        )

    async def test_generate(self, config, request_):
        client = _openai_client(return_value=_completion())
        provider = OpenAIProvider(config, client=client)

        result = await provider.generate(request_)

        assert result.content == "hello"
        assert result.usage.prompt_tokens == 5
        assert result.usage.completion_tokens == 10
        assert result.usage.total_tokens == 15
        assert result.usage.cost_usd == pytest.approx(0.001)
        client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4o-mini",
            messages=[{"role": "user", "content": "Say hello"}],
            temperature=0.2,
            max_tokens=64,
        )

    async def test_missing_usage(self, config, request_):
        response = _completion()
        response.usage = None
        provider = OpenAIProvider(config, client=_openai_client(return_value=response))

        result = await provider.generate(request_)

        assert result.usage is None

    async def test_empty_choices(self, config, request_):
        response = _completion()
        response.choices = []
        provider = OpenAIProvider(config, client=_openai_client(return_value=response))

        assert (await provider.generate(request_)).content == ""

    async def test_timeout(self, config, request_):
        error = APITimeoutError(request=httpx.Request("POST", OPENAI_URL))
        provider = OpenAIProvider(config, client=_openai_client(side_effect=error))

        with pytest.raises(BackendTimeoutError) as exc_info:
            await provider.generate(request_)

        assert exc_info.value.backend == "openai"
        assert exc_info.value.__cause__ is error

    async def test_authentication_error(self, config, request_):
        error = AuthenticationError("bad key", response=_http_response(401), body=None)
        provider = OpenAIProvider(config, client=_openai_client(side_effect=error))

        with pytest.raises(BackendFailureError) as exc_info:
            await provider.generate(request_)

        assert exc_info.value.details["reason"] == "authentication"
        assert not isinstance(exc_info.value, BackendTimeoutError)

    async def test_rate_limit(self, config, request_):
        error = RateLimitError("slow down", response=_http_response(429), body=None)
        provider = OpenAIProvider(config, client=_openai_client(side_effect=error))

        with pytest.raises(BackendFailureError) as exc_info:
            await provider.generate(request_)

        assert exc_info.value.details["reason"] == "rate_limited"

    async def test_connection_error(self, config, request_):
        error = APIConnectionError(request=httpx.Request("POST", OPENAI_URL))
        provider = OpenAIProvider(config, client=_openai_client(side_effect=error))

        with pytest.raises(BackendFailureError) as exc_info:
            await provider.generate(request_)

        assert exc_info.value.details["reason"] == "connection"

    async def test_health_check(self, config):
        provider = OpenAIProvider(config, client=_openai_client())
        assert (await provider.health_check())["status"] == "healthy"

    async def test_health_check_failure(self, config):
        client = _openai_client()
        client.models.list = AsyncMock(side_effect=RuntimeError("down"))
        provider = OpenAIProvider(config, client=client)

        health = await provider.health_check()

        assert health["status"] == "unhealthy"
        assert health["error"] == "down"


@pytest.mark.unit
class TestDeepSeekProvider:
    def test_default_base_url(self):
        provider = DeepSeekProvider(ProviderConfig(name="deepseek", api_key="sk-test"), client=MagicMock())
        assert provider.config.base_url == "https://api.deepseek.com/v1"
        assert provider.vendor == "DeepSeek"

    async def test_errors_name_the_vendor(self, request_):
        error = RateLimitError("slow down", response=_http_response(429), body=None)
        provider = DeepSeekProvider(
            ProviderConfig(name="deepseek", api_key="sk-test"), client=_openai_client(side_effect=error)
        )

        with pytest.raises(BackendFailureError) as exc_info:
            await provider.generate(request_)

        assert "DeepSeek" in exc_info.value.message
        assert exc_info.value.backend == "deepseek"


@pytest.mark.unit
class TestGeminiProvider:
    @pytest.fixture
    def genai(self):
        with patch("llm_nexus.llm_providers.gemini_provider.genai") as genai:
            yield genai

    @pytest.fixture
    def provider(self, genai):
        return GeminiProvider(ProviderConfig(name="gemini", api_key="AIza-test", model="gemini-pro"))

    def _model(self, genai, **generate_kwargs):
        model = MagicMock()
        model.generate_content_async = AsyncMock(**generate_kwargs)
        genai.GenerativeModel.return_value = model
        return model

    async def test_generate(self, genai, provider, request_):
        response = SimpleNamespace(
            text="hi there",
            usage_metadata=SimpleNamespace(prompt_token_count=3, candidates_token_count=4),
        )
        model = self._model(genai, return_value=response)

        result = await provider.generate(request_)

        assert result.content == "hi there"
        assert result.usage.total_tokens == 7
        genai.configure.assert_called_once_with(api_key="AIza-test")
        genai.GenerativeModel.assert_called_once_with("gemini-pro")
        genai.GenerationConfig.assert_called_once_with(temperature=0.2, max_output_tokens=64)
        assert model.generate_content_async.await_args.args == ("Say hello",)

    async def test_deadline_exceeded(self, genai, provider, request_):
        self._model(genai, side_effect=google_exceptions.DeadlineExceeded("slow"))

        with pytest.raises(BackendTimeoutError):
            await provider.generate(request_)

    async def test_permission_denied(self, genai, provider, request_):
        self._model(genai, side_effect=google_exceptions.PermissionDenied("no"))

        with pytest.raises(BackendFailureError) as exc_info:
            await provider.generate(request_)

        assert exc_info.value.details["reason"] == "authentication"

    async def test_unexpected_error_is_wrapped(self, genai, provider, request_):
        self._model(genai, side_effect=ValueError("response blocked"))

        with pytest.raises(BackendFailureError) as exc_info:
            await provider.generate(request_)

        assert exc_info.value.details["reason"] == "api_error"
        assert exc_info.value.backend == "gemini"


@pytest.mark.unit
class TestFakeProvider:
    @pytest.fixture
    def config(self):
        return ProviderConfig(name="fake", model="fake-model")

    async def test_echo_is_deterministic(self, config, request_):
        provider = FakeProvider(config)

        first = await provider.generate(request_)
        second = await provider.generate(request_)

        assert first == second
        assert first.content == "[fake] Say hello"
        assert first.usage.prompt_tokens == 2
        assert provider.call_count == 2

    async def test_fixed_response(self, config, request_):
        result = await FakeProvider(config, response="hi").generate(request_)
        assert result.content == "hi"

    async def test_fail_with(self, config, request_):
        provider = FakeProvider(config, fail_with="simulated outage")

        with pytest.raises(BackendFailureError) as exc_info:
            await provider.generate(request_)

        assert exc_info.value.backend == "fake"
        assert provider.call_count == 1

    async def test_health(self, config):
        assert (await FakeProvider(config).health_check())["status"] == "healthy"
