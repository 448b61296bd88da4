"""
Unit Tests for Structured Logging

Tests processors, request-id correlation and stage tagging.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from llm_nexus.core.config.constants import Stage
from llm_nexus.core.logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    prompt_preview,
    set_request_id,
    setup_logging,
)
from llm_nexus.core.logging.logger import add_request_id, redact_secrets


@pytest.mark.unit
class TestRequestIdContext:
    def test_set_and_clear(self):
        set_request_id("req-123")
        assert get_request_id() == "req-123"

        clear_request_id()
        assert get_request_id() is None

    def test_processor_adds_request_id(self):
        set_request_id("req-abc")
        try:
            event = add_request_id(None, "info", {"event": "hello"})
        finally:
            clear_request_id()

        assert event["request_id"] == "req-abc"

    def test_processor_keeps_explicit_request_id(self):
        set_request_id("from-context")
        try:
            event = add_request_id(None, "info", {"event": "hello", "request_id": "explicit"})
        finally:
            clear_request_id()

        assert event["request_id"] == "explicit"

    def test_processor_without_request_id(self):
        clear_request_id()
        event = add_request_id(None, "info", {"event": "hello"})
        assert "request_id" not in event

    async def test_request_id_is_per_task(self):
        async def handle(request_id):
            set_request_id(request_id)
            await asyncio.sleep(0)
            return get_request_id()

        results = await asyncio.gather(handle("a"), handle("b"), handle("c"))
        assert results == ["a", "b", "c"]


@pytest.mark.unit
class TestSecretRedaction:
    def test_openai_key_redacted(self):
        event = redact_secrets(None, "info", {"event": "using key sk-abc123XYZ for call"})
        assert "sk-abc123XYZ" not in event["event"]
        assert "[REDACTED]" in event["event"]

    def test_google_key_redacted(self):
        event = redact_secrets(None, "info", {"event": "x", "api_key": "AIzaSyTestKey_123"})
        assert event["api_key"] == "[REDACTED]"

    def test_non_string_fields_untouched(self):
        event = redact_secrets(None, "info", {"event": "x", "count": 3, "ids": ["sk-abc"]})
        assert event["count"] == 3
        assert event["ids"] == ["sk-abc"]

    def test_plain_text_untouched(self):
        event = redact_secrets(None, "info", {"event": "cache hit for user u1"})
        assert event["event"] == "cache hit for user u1"


@pytest.mark.unit
class TestLogStage:
    def test_stage_enum_value_is_logged(self):
        logger = MagicMock()
        log_stage(logger, Stage.CACHE_LOOKUP, "Cache hit", cache_key="k")

        logger.info.assert_called_once_with("Cache hit", stage=Stage.CACHE_LOOKUP.value, cache_key="k")

    def test_level_selects_method(self):
        logger = MagicMock()
        log_stage(logger, "REDIS.2", "Redis down", level="warning")

        logger.warning.assert_called_once_with("Redis down", stage="REDIS.2")
        logger.info.assert_not_called()


@pytest.mark.unit
class TestPromptPreview:
    def test_short_prompt_unchanged(self):
        assert prompt_preview("hello") == "hello"

    def test_long_prompt_truncated(self):
        preview = prompt_preview("x" * 500)
        assert preview == "x" * 50 + "..."

    def test_custom_limit(self):
        assert prompt_preview("abcdef", limit=3) == "abc..."


@pytest.mark.unit
class TestSetupLogging:
    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_and_log(self, log_format):
        setup_logging(log_level="DEBUG", log_format=log_format)
        logger = get_logger("tests.logging")

        logger.info("test message", stage="TEST.1", api_key="sk-should-not-appear")
