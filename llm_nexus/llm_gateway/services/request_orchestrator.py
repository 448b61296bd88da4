"""
Request Orchestrator Service
============================

The RequestOrchestrator is the central coordinator of the gateway. It does
not generate text itself; it decides, for every request, whether a backend
is needed at all, which one, and what gets recorded afterwards.

THE REQUEST LIFECYCLE:
----------------------
Every generation request goes through these stages, each of which can
short-circuit with a typed error (or, for the cache, a response):

┌─────────────────────────────────────────────────────────────────┐
│ STAGE 1.0: VALIDATION                                           │
│ - Empty prompt, oversize prompt or max_tokens -> InvalidArgument│
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 1.1: IDENTITY                                             │
│ - REQUIRE_USER_ID on: a registered requester is mandatory       │
│ - Declared ids are always verified when a store exists          │
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 2.0: CACHE LOOKUP (skipped without a cache)               │
│ - Key = prefix:provider:user:sha256(prompt)                     │
│ - Hit: return with provenance "cache" and no usage              │
│ - Lookup error: counted, logged, treated as a miss              │
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 3.0: PROVIDER SELECTION                                   │
│ - Explicit name must be registered                              │
│ - Otherwise PROVIDER_PRIORITY order, then any registered backend│
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 4.0: DISPATCH                                             │
│ - One call under LLM_TIMEOUT; no retry, no fallback             │
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 5.0: DETACHED WRITES                                      │
│ - Cache write and usage log handed to the background task pool  │
│ - The caller never waits for them                               │
└─────────────────────────────────────────────────────────────────┘

DEPENDENCY INJECTION:
---------------------
Registry, cache, usage store, task pool and metrics are all passed in.
Cache and store are optional: without them the corresponding stages are
skipped (or, for identity enforcement, refused with StorageUnavailableError).
"""

import asyncio
import time
from typing import Any

from llm_nexus.core.background import BackgroundTaskPool
from llm_nexus.core.config.constants import (
    CACHE_PROVENANCE,
    TASK_KIND_CACHE_WRITE,
    TASK_KIND_USAGE_LOG,
    Stage,
)
from llm_nexus.core.config.settings import Settings
from llm_nexus.core.exceptions import (
    BackendFailureError,
    BackendTimeoutError,
    IdentityError,
    InvalidArgumentError,
    NexusBaseError,
    NoBackendsConfiguredError,
    StorageUnavailableError,
    UserNotFoundError,
)
from llm_nexus.core.interfaces.cache import CacheBackend, build_cache_key
from llm_nexus.core.interfaces.usage_store import UsageLogStore
from llm_nexus.core.logging.logger import get_logger, log_stage, prompt_preview
from llm_nexus.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)
from llm_nexus.llm_gateway.models import (
    GatewayResponse,
    GenerationRequest,
    GenerationResult,
    Requester,
    UsageLogRecord,
)
from llm_nexus.llm_providers.base_provider import BaseProvider
from llm_nexus.llm_providers.registry import ProviderRegistry

logger = get_logger(__name__)


class RequestOrchestrator:
    """
    Central coordinator for generation requests.

    Holds no request-scoped state: one instance serves every concurrent
    request task of the process.

    Usage:
        orchestrator = RequestOrchestrator(registry, settings, cache=cache, usage_store=store)
        response = await orchestrator.process_request(
            GenerationRequest(user_id=user.id, prompt="Hello"),
            provider_name="openai",
        )
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        settings: Settings,
        cache: CacheBackend | None = None,
        usage_store: UsageLogStore | None = None,
        task_pool: BackgroundTaskPool | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self._registry = registry
        self.settings = settings
        self._cache = cache
        self._store = usage_store
        self._metrics = metrics or get_metrics_collector()

        self._owns_pool = task_pool is None
        self._pool = task_pool or BackgroundTaskPool(
            workers=settings.BACKGROUND_WORKERS,
            queue_size=settings.BACKGROUND_QUEUE_SIZE,
            overflow_policy=settings.BACKGROUND_OVERFLOW_POLICY,
            shutdown_timeout=settings.BACKGROUND_SHUTDOWN_TIMEOUT,
            metrics=self._metrics,
        )

        logger.info(
            "RequestOrchestrator initialized",
            providers=registry.names(),
            cache_enabled=cache is not None,
            usage_store_enabled=usage_store is not None,
            require_user_id=settings.REQUIRE_USER_ID,
        )

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def cache(self) -> CacheBackend | None:
        return self._cache

    @property
    def usage_store(self) -> UsageLogStore | None:
        return self._store

    @property
    def task_pool(self) -> BackgroundTaskPool:
        return self._pool

    # ========================================================================
    # GENERATION
    # ========================================================================

    async def process_request(
        self, request: GenerationRequest, provider_name: str | None = None
    ) -> GatewayResponse:
        """
        Run one request through the lifecycle described in the module docstring.

        Args:
            request: The generation request
            provider_name: Backend explicitly requested by the caller, if any

        Returns:
            GatewayResponse whose provider_used is a backend name or "cache"

        Raises:
            InvalidArgumentError: Empty or oversize input
            StorageUnavailableError: Identity enforcement without a store
            IdentityError: Missing or unknown requester
            BackendNotConfiguredError: Explicit backend is not registered
            NoBackendsConfiguredError: No backend could be chosen
            BackendFailureError: The chosen backend failed
            BackendTimeoutError: The chosen backend exceeded LLM_TIMEOUT
        """
        try:
            response = await self._process(request, provider_name)
        except NexusBaseError as e:
            self._metrics.record_request(e.error_code, provider=e.details.get("backend", "none"))
            raise

        status = "cache_hit" if response.provider_used == CACHE_PROVENANCE else "success"
        self._metrics.record_request(status, provider=response.provider_used)
        self._metrics.record_request_duration(response.provider_used, response.processing_time_ms / 1000)
        return response

    async def _process(self, request: GenerationRequest, provider_name: str | None) -> GatewayResponse:
        start = time.perf_counter()

        self._validate(request)
        user_id = self._normalize_user_id(request.user_id)
        await self._verify_identity(user_id)

        requested = self._normalize_name(provider_name)

        cache_key = None
        if self._cache is not None:
            cache_key = build_cache_key(
                requested, user_id, request.prompt, self.settings.CACHE_KEY_PREFIX
            )
            cached = await self._lookup_cache(cache_key)
            if cached:
                return GatewayResponse(
                    result=GenerationResult(content=cached, provider=CACHE_PROVENANCE),
                    provider_used=CACHE_PROVENANCE,
                    processing_time_ms=self._elapsed_ms(start),
                )

        backend = self._select_backend(requested)
        result, duration_ms = await self._dispatch(backend, request)

        self._schedule_detached_writes(cache_key, user_id, request, backend, result, duration_ms)

        return GatewayResponse(
            result=result.with_provider(backend.name),
            provider_used=backend.name,
            processing_time_ms=self._elapsed_ms(start),
        )

    def _validate(self, request: GenerationRequest) -> None:
        if not request.prompt or not request.prompt.strip():
            raise InvalidArgumentError("Prompt is required", details={"field": "prompt"})

        if len(request.prompt) > self.settings.PROMPT_MAX_LENGTH:
            raise InvalidArgumentError(
                "Prompt is too long",
                details={"field": "prompt", "max_length": self.settings.PROMPT_MAX_LENGTH},
            )

        if request.max_tokens > self.settings.MAX_TOKENS_LIMIT:
            raise InvalidArgumentError(
                "max_tokens exceeds the configured limit",
                details={"field": "max_tokens", "limit": self.settings.MAX_TOKENS_LIMIT},
            )

        log_stage(
            logger,
            Stage.REQUEST_VALIDATION,
            "Request validated",
            level="debug",
            user_id=request.user_id,
            prompt_length=len(request.prompt),
            prompt_preview=prompt_preview(request.prompt),
        )

    async def _verify_identity(self, user_id: str | None) -> None:
        """
        Resolve the declared requester before any cache or backend work.

        With REQUIRE_USER_ID on, a store and a registered id are mandatory.
        With it off, a declared id is still verified when a store exists.
        """
        required = self.settings.REQUIRE_USER_ID

        if user_id is None:
            if required:
                raise IdentityError("user_id is required", details={"reason": "missing"})
            return

        if required and self._store is None:
            raise StorageUnavailableError(
                "User storage is not configured; cannot verify requester identity"
            )

        if self._store is None:
            return

        try:
            await self._store.get_user(user_id)
        except UserNotFoundError as e:
            raise IdentityError(
                f"Unknown user: {user_id}",
                details={"reason": "not_found", "user_id": user_id},
            ) from e
        except Exception as e:
            raise IdentityError(
                "Could not verify user",
                details={"reason": "lookup_failed", "user_id": user_id, "original_error": type(e).__name__},
            ) from e

        log_stage(logger, Stage.IDENTITY_VALIDATION, "Requester verified", level="debug", user_id=user_id)

    @staticmethod
    def _normalize_user_id(user_id: str | None) -> str | None:
        if user_id is None:
            return None
        return user_id.strip() or None

    @staticmethod
    def _normalize_name(provider_name: str | None) -> str | None:
        if provider_name is None:
            return None
        name = provider_name.strip().lower()
        return name or None

    async def _lookup_cache(self, cache_key: str) -> str | None:
        """Cache lookup where any failure counts as a miss."""
        try:
            cached = await self._cache.get(cache_key)
        except Exception as e:
            self._metrics.record_cache_error("get")
            log_stage(
                logger,
                Stage.CACHE_LOOKUP,
                "Cache lookup failed, treating as miss",
                level="warning",
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        if cached:
            self._metrics.record_cache_hit()
            log_stage(logger, Stage.CACHE_LOOKUP, "Cache hit", cache_key=cache_key)
            return cached

        self._metrics.record_cache_miss()
        log_stage(logger, Stage.CACHE_LOOKUP, "Cache miss", level="debug", cache_key=cache_key)
        return None

    def _select_backend(self, requested: str | None) -> BaseProvider:
        if requested is not None:
            backend = self._registry.resolve(requested)
            log_stage(logger, Stage.PROVIDER_SELECTION, "Using requested provider", provider=backend.name)
            return backend

        backend = self._registry.first_available(self.settings.PROVIDER_PRIORITY)
        if backend is None:
            raise NoBackendsConfiguredError("No LLM providers configured")

        log_stage(logger, Stage.PROVIDER_SELECTION, "Selected default provider", provider=backend.name)
        return backend

    async def _dispatch(
        self, backend: BaseProvider, request: GenerationRequest
    ) -> tuple[GenerationResult, int]:
        """
        Call the backend once under LLM_TIMEOUT.

        Returns:
            (result, duration in whole milliseconds)
        """
        timeout = self.settings.LLM_TIMEOUT
        start = time.perf_counter()

        try:
            async with asyncio.timeout(timeout):
                result = await backend.generate(request)

        except BackendFailureError as e:
            if e.backend is None:
                e.with_context(backend=backend.name)
                e.backend = backend.name
            self._metrics.record_provider_request(backend.name, "failure")
            raise

        except TimeoutError as e:
            self._metrics.record_provider_request(backend.name, "timeout")
            log_stage(
                logger,
                Stage.PROVIDER_DISPATCH,
                "Provider timed out",
                level="warning",
                provider=backend.name,
                timeout_seconds=timeout,
            )
            raise BackendTimeoutError(
                f"Provider {backend.name} timed out after {timeout}s",
                backend=backend.name,
                details={"timeout_seconds": timeout},
            ) from e

        except Exception as e:
            self._metrics.record_provider_request(backend.name, "failure")
            raise BackendFailureError(
                f"Provider {backend.name} failed: {e}",
                backend=backend.name,
                details={"original_error": type(e).__name__},
            ) from e

        elapsed = time.perf_counter() - start
        self._metrics.record_provider_request(backend.name, "success")
        self._metrics.record_provider_latency(backend.name, elapsed)

        log_stage(
            logger,
            Stage.PROVIDER_DISPATCH,
            "Provider call succeeded",
            provider=backend.name,
            duration_ms=round(elapsed * 1000, 2),
        )
        return result, int(elapsed * 1000)

    def _schedule_detached_writes(
        self,
        cache_key: str | None,
        user_id: str | None,
        request: GenerationRequest,
        backend: BaseProvider,
        result: GenerationResult,
        duration_ms: int,
    ) -> None:
        if cache_key is not None and self._cache is not None and result.content:
            content = result.content
            self._pool.submit(TASK_KIND_CACHE_WRITE, lambda: self._write_cache(cache_key, content))

        if self._store is not None:
            usage = result.usage
            record = UsageLogRecord(
                user_id=user_id,
                prompt=request.prompt,
                provider=backend.name,
                response=result.content,
                duration_ms=duration_ms,
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
                cost_usd=usage.cost_usd if usage else 0.0,
            )
            store = self._store
            self._pool.submit(TASK_KIND_USAGE_LOG, lambda: store.append(record))

        log_stage(
            logger,
            Stage.DETACHED_WRITES,
            "Detached writes scheduled",
            level="debug",
            cache_write=cache_key is not None,
            usage_log=self._store is not None,
        )

    async def _write_cache(self, cache_key: str, content: str) -> None:
        try:
            await self._cache.set(cache_key, content, ttl=self.settings.CACHE_RESPONSE_TTL)
        except Exception:
            self._metrics.record_cache_error("set")
            raise

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 3)

    # ========================================================================
    # REQUESTERS
    # ========================================================================

    async def register_user(self, name: str) -> Requester:
        """
        Register a new requester.

        Raises:
            StorageUnavailableError: No usage store configured
            InvalidArgumentError: Empty or whitespace-only name
        """
        if self._store is None:
            raise StorageUnavailableError("User storage is not configured")

        if not name or not name.strip():
            raise InvalidArgumentError("Name is required", details={"field": "name"})

        requester = await self._store.create_user(name.strip())
        log_stage(logger, Stage.USER_REGISTRATION, "User registered", user_id=requester.id)
        return requester

    async def get_user(self, user_id: str) -> Requester:
        """
        Raises:
            StorageUnavailableError: No usage store configured
            UserNotFoundError: Unknown id
        """
        if self._store is None:
            raise StorageUnavailableError("User storage is not configured")
        return await self._store.get_user(user_id)

    # ========================================================================
    # INTROSPECTION
    # ========================================================================

    def get_stats(self) -> dict[str, Any]:
        return {
            "providers": self._registry.names(),
            "provider_priority": list(self.settings.PROVIDER_PRIORITY),
            "cache_enabled": self._cache is not None,
            "usage_store_enabled": self._store is not None,
            "require_user_id": self.settings.REQUIRE_USER_ID,
            "background": self._pool.stats(),
        }

    async def check_readiness(self) -> dict[str, Any]:
        """
        Component readiness for the readiness probe.

        The gateway is ready when at least one backend is registered and
        every configured dependency reports healthy.
        """
        components: dict[str, Any] = {
            "providers": {
                "status": "unhealthy" if self._registry.is_empty else "healthy",
                "registered": self._registry.names(),
            }
        }

        if self._cache is not None:
            components["cache"] = await self._cache.health_check()
        else:
            components["cache"] = {"status": "disabled"}

        if self._store is not None:
            components["usage_store"] = await self._store.health_check()
        else:
            components["usage_store"] = {"status": "disabled"}

        ready = all(c.get("status") in ("healthy", "disabled") for c in components.values())
        return {"status": "ready" if ready else "not_ready", "components": components}

    async def shutdown(self) -> None:
        """Stop the task pool if this orchestrator created it."""
        if self._owns_pool:
            await self._pool.stop()
