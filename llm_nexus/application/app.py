"""
FastAPI Application Entry Point

Configures the LLM Nexus Gateway: lifespan (collaborator wiring), middleware,
exception handlers and routers.

Architectural Decision: optional collaborators degrade, never block startup
- Redis unreachable: the gateway runs without a response cache
- DATABASE_URL unset or unreachable: runs without usage persistence
- No backend credentials: starts, but generation answers no_backends_configured
  and /health/ready reports not_ready

Author: System Architect
Date: 2026-09-14
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from llm_nexus.application.api.middleware.error_handler import add_error_handling_middleware
from llm_nexus.application.api.routes.generation import router as generation_router
from llm_nexus.application.api.routes.health import router as health_router
from llm_nexus.application.api.routes.users import router as users_router
from llm_nexus.core.background import BackgroundTaskPool
from llm_nexus.core.config.constants import HEADER_REQUEST_ID
from llm_nexus.core.config.provider_registry import build_provider_registry
from llm_nexus.core.config.settings import Settings, get_settings
from llm_nexus.core.exceptions import CacheConnectionError, NexusBaseError, StorageError
from llm_nexus.core.logging.logger import (
    clear_request_id,
    get_logger,
    get_request_id,
    set_request_id,
    setup_logging,
)
from llm_nexus.infrastructure.cache.redis_client import close_redis, init_redis
from llm_nexus.infrastructure.monitoring.metrics_collector import get_metrics_collector
from llm_nexus.infrastructure.storage import SqlUsageStore
from llm_nexus.llm_gateway.services import RequestOrchestrator

logger = get_logger(__name__)


async def _open_cache(settings: Settings):
    if not (settings.CACHE_ENABLED and settings.REDIS_ENABLED):
        logger.info("Response cache disabled")
        return None
    try:
        client = await init_redis()
    except CacheConnectionError as e:
        logger.warning("Redis unavailable, continuing without response cache", error=e.message)
        await close_redis()
        return None
    logger.info("Redis connected")
    return client


async def _open_usage_store(settings: Settings) -> SqlUsageStore | None:
    if not settings.DATABASE_URL:
        logger.info("DATABASE_URL not set, usage persistence disabled")
        return None

    store = SqlUsageStore.from_url(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    try:
        await store.create_schema()
    except StorageError as e:
        logger.error("Usage store unavailable, continuing without DB persistence", error=e.message)
        await store.close()
        return None
    logger.info("Usage store ready")
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.

    Startup order: logging, backend registry, cache, usage store, task pool,
    orchestrator. Shutdown drains the task pool first so pending detached
    writes still find their cache and store open.
    """
    settings = get_settings()
    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

    logger.info(
        "Starting LLM Nexus Gateway",
        environment=settings.ENVIRONMENT,
        version=settings.APP_VERSION,
    )

    registry = build_provider_registry(settings)
    cache = await _open_cache(settings)
    store = await _open_usage_store(settings)

    metrics = get_metrics_collector()
    task_pool = BackgroundTaskPool(
        workers=settings.BACKGROUND_WORKERS,
        queue_size=settings.BACKGROUND_QUEUE_SIZE,
        overflow_policy=settings.BACKGROUND_OVERFLOW_POLICY,
        shutdown_timeout=settings.BACKGROUND_SHUTDOWN_TIMEOUT,
        metrics=metrics,
    )
    task_pool.start()

    app.state.orchestrator = RequestOrchestrator(
        registry=registry,
        settings=settings,
        cache=cache,
        usage_store=store,
        task_pool=task_pool,
        metrics=metrics,
    )
    logger.info("Application startup complete", providers=registry.names())

    try:
        yield
    finally:
        logger.info("Shutting down application")
        await task_pool.stop()
        if cache is not None:
            await close_redis()
        if store is not None:
            await store.close()
        app.state.orchestrator = None
        logger.info("Application shutdown complete")


async def nexus_error_handler(request: Request, exc: NexusBaseError):
    """Render gateway errors with the status code their class declares."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Request failed: {exc.message}",
        error=exc.error_code,
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "message": exc.message, "details": exc.details},
        headers={HEADER_REQUEST_ID: exc.request_id or get_request_id() or ""},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are a 400 ``bad_request`` rather than FastAPI's 422."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.warning("Malformed request body", path=request.url.path, errors=len(errors))
    get_metrics_collector().record_error("bad_request", "request_validation")
    return JSONResponse(
        status_code=400,
        content={
            "error": "bad_request",
            "message": "Invalid request body",
            "details": {"errors": errors},
        },
    )


async def request_id_middleware(request: Request, call_next):
    """Bind X-Request-ID (client supplied or generated) to logs and echo it back."""
    request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
    set_request_id(request_id)
    try:
        response = await call_next(request)
        response.headers[HEADER_REQUEST_ID] = request_id
        return response
    finally:
        clear_request_id()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Middleware order (outermost first): request id, CORS, error handling.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Multi-backend LLM gateway with response caching and usage logging",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    add_error_handling_middleware(app, include_traceback=settings.ENVIRONMENT == "development")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[HEADER_REQUEST_ID],
    )

    app.middleware("http")(request_id_middleware)

    app.add_exception_handler(NexusBaseError, nexus_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    base_path = settings.API_BASE_PATH
    app.include_router(generation_router, prefix=base_path)
    app.include_router(users_router, prefix=base_path)
    app.include_router(health_router, prefix=base_path)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{base_path}/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "llm_nexus.application.app:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
