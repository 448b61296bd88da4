"""
System Constants and Enumerations

Centralized constants used across the gateway: stage identifiers for
structured logging, provider names and HTTP header names.

Author: System Architect
Date: 2026-09-14
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Request processing stages of the orchestrator.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}, so that a log line can be read
    without looking up the code that produced it.
    """

    REQUEST_VALIDATION = "1.0_REQUEST_VALIDATION"
    IDENTITY_VALIDATION = "1.1_IDENTITY_VALIDATION"
    CACHE_LOOKUP = "2.0_CACHE_LOOKUP"
    PROVIDER_SELECTION = "3.0_PROVIDER_SELECTION"
    PROVIDER_DISPATCH = "4.0_PROVIDER_DISPATCH"
    DETACHED_WRITES = "5.0_DETACHED_WRITES"

    USER_REGISTRATION = "U_USER_REGISTRATION"
    BACKGROUND = "B_BACKGROUND_TASKS"
    REGISTRY = "R_PROVIDER_REGISTRY"


# ============================================================================
# LLM Providers
# ============================================================================


class LLMProvider(str, Enum):
    """Logical names of the supported backends (registry keys)."""

    OPENAI = "openai"
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    FAKE = "fake"


# Provenance label attached to results served from the response cache
CACHE_PROVENANCE = "cache"

# Background job kinds (metric labels)
TASK_KIND_CACHE_WRITE = "cache_write"
TASK_KIND_USAGE_LOG = "usage_log"

# ============================================================================
# HTTP
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
