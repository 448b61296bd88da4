#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the whole
gateway. Every component reads its configuration from here so that the
orchestrator, the backends and the transport layer agree on the same values.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Grouped views (settings.redis, settings.llm, ...) for readable call sites
- Easy testing with reload_settings() and explicit Settings(...) construction

Author: System Architect
Date: 2026-09-14
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """
    Redis configuration for the response cache.

    The cache is optional: with REDIS_ENABLED=False (or an unreachable server)
    the gateway runs without caching.
    """

    REDIS_ENABLED: bool = Field(default=True, description="Use Redis as response cache")
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LLMProviderSettings(BaseSettings):
    """
    LLM backend credentials, models and pricing.

    A backend is registered only when its API key is present. Prices are
    expressed in USD per 1K tokens and feed UsageInfo.cost_usd.
    """

    # OpenAI
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1", description="OpenAI base URL")
    OPENAI_MODEL: str = Field(default="gpt-3.5-turbo", description="OpenAI chat model")
    OPENAI_INPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)
    OPENAI_OUTPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)

    # Google Gemini
    GEMINI_API_KEY: str | None = Field(default=None, description="Google Gemini API key")
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash-exp", description="Gemini model")
    GEMINI_INPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)
    GEMINI_OUTPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)

    # DeepSeek (OpenAI compatible)
    DEEPSEEK_API_KEY: str | None = Field(default=None, description="DeepSeek API key")
    DEEPSEEK_BASE_URL: str = Field(default="https://api.deepseek.com/v1", description="DeepSeek base URL")
    DEEPSEEK_MODEL: str = Field(default="deepseek-chat", description="DeepSeek model")
    DEEPSEEK_INPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)
    DEEPSEEK_OUTPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)

    LLM_TIMEOUT: int = Field(default=30, gt=0, description="Backend call timeout in seconds")
    USE_FAKE_LLM: bool = Field(default=False, description="Register the offline fake backend")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class DatabaseSettings(BaseSettings):
    """Usage log / user store configuration. No URL means no store."""

    DATABASE_URL: str | None = Field(
        default=None,
        description="SQLAlchemy async URL, e.g. postgresql+asyncpg://user:pw@host/db",
    )
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """Response cache behaviour."""

    CACHE_ENABLED: bool = Field(default=True, description="Enable response caching")
    CACHE_RESPONSE_TTL: int = Field(default=3600, gt=0, description="Response cache TTL (1 hour)")
    CACHE_KEY_PREFIX: str = Field(default="nexus:response", description="Namespace for cache keys")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class GatewaySettings(BaseSettings):
    """
    Request orchestration policy.

    REQUIRE_USER_ID toggles identity enforcement: when on, every generation
    request must name a pre-registered requester.
    """

    REQUIRE_USER_ID: bool = Field(default=True, description="Require a registered requester")
    PROVIDER_PRIORITY: list[str] = Field(
        default=["openai", "gemini", "deepseek"],
        description="Fallback order when the caller names no backend",
    )
    PROMPT_MAX_LENGTH: int = Field(default=100000, gt=0)
    MAX_TOKENS_LIMIT: int = Field(default=32768, gt=0)

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class BackgroundSettings(BaseSettings):
    """Detached task pool used for cache writes and usage logging."""

    BACKGROUND_WORKERS: int = Field(default=4, gt=0, description="Worker tasks")
    BACKGROUND_QUEUE_SIZE: int = Field(default=1000, gt=0, description="Pending job capacity")
    BACKGROUND_OVERFLOW_POLICY: Literal["drop_oldest", "drop_newest"] = Field(
        default="drop_oldest", description="What to discard when the queue is full"
    )
    BACKGROUND_SHUTDOWN_TIMEOUT: float = Field(
        default=5.0, ge=0.0, description="Seconds to drain pending jobs on shutdown"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    DEBUG: bool = Field(default=False, description="Debug mode")
    APP_NAME: str = Field(default="LLM Nexus Gateway", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")
    API_BASE_PATH: str = Field(default="/api", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from llm_nexus.core.config.settings import get_settings

        settings = get_settings()
        ttl = settings.cache.CACHE_RESPONSE_TTL
        openai_key = settings.llm.OPENAI_API_KEY
    """

    # Redis settings
    REDIS_ENABLED: bool = Field(default=True)
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB: int = Field(default=0)
    REDIS_PASSWORD: str | None = Field(default=None)
    REDIS_MAX_CONNECTIONS: int = Field(default=50)
    REDIS_SOCKET_TIMEOUT: int = Field(default=5)
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5)

    # LLM backend settings
    OPENAI_API_KEY: str | None = Field(default=None)
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1")
    OPENAI_MODEL: str = Field(default="gpt-3.5-turbo")
    OPENAI_INPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)
    OPENAI_OUTPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)

    GEMINI_API_KEY: str | None = Field(default=None)
    GOOGLE_API_KEY: str | None = Field(default=None, description="Alias for GEMINI_API_KEY")
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash-exp")
    GEMINI_INPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)
    GEMINI_OUTPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)

    DEEPSEEK_API_KEY: str | None = Field(default=None)
    DEEPSEEK_BASE_URL: str = Field(default="https://api.deepseek.com/v1")
    DEEPSEEK_MODEL: str = Field(default="deepseek-chat")
    DEEPSEEK_INPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)
    DEEPSEEK_OUTPUT_COST_PER_1K: float = Field(default=0.0, ge=0.0)

    LLM_TIMEOUT: int = Field(default=30, gt=0)
    USE_FAKE_LLM: bool = Field(default=False)

    # Database settings
    DATABASE_URL: str | None = Field(default=None)
    DATABASE_ECHO: bool = Field(default=False)

    # Cache settings
    CACHE_ENABLED: bool = Field(default=True)
    CACHE_RESPONSE_TTL: int = Field(default=3600, gt=0)
    CACHE_KEY_PREFIX: str = Field(default="nexus:response")

    # Gateway policy
    REQUIRE_USER_ID: bool = Field(default=True)
    PROVIDER_PRIORITY: list[str] = Field(default=["openai", "gemini", "deepseek"])
    PROMPT_MAX_LENGTH: int = Field(default=100000, gt=0)
    MAX_TOKENS_LIMIT: int = Field(default=32768, gt=0)

    # Background task pool
    BACKGROUND_WORKERS: int = Field(default=4, gt=0)
    BACKGROUND_QUEUE_SIZE: int = Field(default=1000, gt=0)
    BACKGROUND_OVERFLOW_POLICY: Literal["drop_oldest", "drop_newest"] = Field(default="drop_oldest")
    BACKGROUND_SHUTDOWN_TIMEOUT: float = Field(default=5.0, ge=0.0)

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(default="development")
    DEBUG: bool = Field(default=False)
    APP_NAME: str = Field(default="LLM Nexus Gateway")
    APP_VERSION: str = Field(default="1.0.0")
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8080)
    API_BASE_PATH: str = Field(default="/api")
    CORS_ORIGINS: list[str] = Field(default=["*"])

    @model_validator(mode="after")
    def merge_gemini_keys(self):
        """Accept GOOGLE_API_KEY as an alias for GEMINI_API_KEY."""
        if self.GEMINI_API_KEY is None and self.GOOGLE_API_KEY:
            self.GEMINI_API_KEY = self.GOOGLE_API_KEY
        return self

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("PROVIDER_PRIORITY")
    @classmethod
    def normalize_priority(cls, v):
        """Provider names are stored lower-case, like registry keys."""
        normalized = [name.strip().lower() for name in v]
        if any(not name for name in normalized):
            raise ValueError("PROVIDER_PRIORITY entries must be non-empty")
        return normalized

    # Grouped views
    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_ENABLED=self.REDIS_ENABLED,
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
        )

    @property
    def llm(self) -> LLMProviderSettings:
        """Get LLM backend settings."""
        return LLMProviderSettings(
            OPENAI_API_KEY=self.OPENAI_API_KEY,
            OPENAI_BASE_URL=self.OPENAI_BASE_URL,
            OPENAI_MODEL=self.OPENAI_MODEL,
            OPENAI_INPUT_COST_PER_1K=self.OPENAI_INPUT_COST_PER_1K,
            OPENAI_OUTPUT_COST_PER_1K=self.OPENAI_OUTPUT_COST_PER_1K,
            GEMINI_API_KEY=self.GEMINI_API_KEY,
            GEMINI_MODEL=self.GEMINI_MODEL,
            GEMINI_INPUT_COST_PER_1K=self.GEMINI_INPUT_COST_PER_1K,
            GEMINI_OUTPUT_COST_PER_1K=self.GEMINI_OUTPUT_COST_PER_1K,
            DEEPSEEK_API_KEY=self.DEEPSEEK_API_KEY,
            DEEPSEEK_BASE_URL=self.DEEPSEEK_BASE_URL,
            DEEPSEEK_MODEL=self.DEEPSEEK_MODEL,
            DEEPSEEK_INPUT_COST_PER_1K=self.DEEPSEEK_INPUT_COST_PER_1K,
            DEEPSEEK_OUTPUT_COST_PER_1K=self.DEEPSEEK_OUTPUT_COST_PER_1K,
            LLM_TIMEOUT=self.LLM_TIMEOUT,
            USE_FAKE_LLM=self.USE_FAKE_LLM,
        )

    @property
    def database(self) -> DatabaseSettings:
        """Get usage store settings."""
        return DatabaseSettings(DATABASE_URL=self.DATABASE_URL, DATABASE_ECHO=self.DATABASE_ECHO)

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_ENABLED=self.CACHE_ENABLED,
            CACHE_RESPONSE_TTL=self.CACHE_RESPONSE_TTL,
            CACHE_KEY_PREFIX=self.CACHE_KEY_PREFIX,
        )

    @property
    def gateway(self) -> GatewaySettings:
        """Get orchestration policy settings."""
        return GatewaySettings(
            REQUIRE_USER_ID=self.REQUIRE_USER_ID,
            PROVIDER_PRIORITY=self.PROVIDER_PRIORITY,
            PROMPT_MAX_LENGTH=self.PROMPT_MAX_LENGTH,
            MAX_TOKENS_LIMIT=self.MAX_TOKENS_LIMIT,
        )

    @property
    def background(self) -> BackgroundSettings:
        """Get detached task pool settings."""
        return BackgroundSettings(
            BACKGROUND_WORKERS=self.BACKGROUND_WORKERS,
            BACKGROUND_QUEUE_SIZE=self.BACKGROUND_QUEUE_SIZE,
            BACKGROUND_OVERFLOW_POLICY=self.BACKGROUND_OVERFLOW_POLICY,
            BACKGROUND_SHUTDOWN_TIMEOUT=self.BACKGROUND_SHUTDOWN_TIMEOUT,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            DEBUG=self.DEBUG,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
            CORS_ORIGINS=self.CORS_ORIGINS,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
