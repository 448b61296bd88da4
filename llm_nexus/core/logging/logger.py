#!/usr/bin/env python3
"""
Structured Logging Module using structlog

This module provides structured logging for the gateway with:
- Request ID correlation across the orchestration pipeline
- Stage identifiers for execution flow
- JSON formatting for log aggregation
- Automatic redaction of API keys

Architectural Decision: structlog for production logging
- Context-aware logging with automatic field injection
- JSON output for log aggregation (ELK, Loki, etc.)
- Context variables work across asyncio tasks

Author: System Architect
Date: 2026-09-14
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import UTC, datetime

import structlog
from structlog.types import EventDict, WrappedLogger

from llm_nexus.core.config.settings import get_settings

# Context variable for the request ID (copied into every task spawned from a request)
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

_SECRET_PATTERNS = (
    re.compile(r"\bsk-[a-zA-Z0-9_-]+\b"),
    re.compile(r"\bAIza[a-zA-Z0-9_-]+\b"),
)


def add_request_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the request ID from context to every log entry."""
    request_id = request_id_ctx.get()
    if request_id and "request_id" not in event_dict:
        event_dict["request_id"] = request_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log event."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact API keys from log messages and string fields.

    Patterns redacted:
    - OpenAI / DeepSeek style keys (sk-...) → [REDACTED]
    - Google API keys (AIza...) → [REDACTED]
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            for pattern in _SECRET_PATTERNS:
                value = pattern.sub("[REDACTED]", value)
            event_dict[key] = value
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Upper-case the level name."""
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage="2.0")
    """
    return structlog.get_logger(name)


def set_request_id(request_id: str) -> None:
    """Set the request ID for the current context."""
    request_id_ctx.set(request_id)


def get_request_id() -> str | None:
    """Get the request ID of the current context."""
    return request_id_ctx.get()


def clear_request_id() -> None:
    """Clear the request ID at the end of request processing."""
    request_id_ctx.set(None)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Usage:
        log_stage(logger, Stage.CACHE_LOOKUP, "Cache hit", cache_key="abc123")
    """
    log_func = getattr(logger, level.lower())
    log_func(message, stage=str(getattr(stage, "value", stage)), **kwargs)


def prompt_preview(prompt: str, limit: int = 50) -> str:
    """Truncated prompt for log lines; prompts are never logged in full."""
    return prompt if len(prompt) <= limit else prompt[:limit] + "..."
