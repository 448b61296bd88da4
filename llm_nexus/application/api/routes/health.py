"""
Health and Monitoring Routes

- GET /health         liveness: the process is up, no dependency checks
- GET /health/ready   readiness: backends registered and stores reachable
- GET /metrics        Prometheus exposition
- GET /stats          gateway configuration and background pool counters

Readiness reports its result in the body and also uses the HTTP status
(200 ready, 503 not ready) so load balancers need not parse JSON.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from llm_nexus.application.api.dependencies import MetricsDep, OrchestratorDep, SettingsDep

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """Cheap liveness check for load balancers."""
    return HealthResponse(
        status="healthy",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/health/ready")
async def readiness_probe(orchestrator: OrchestratorDep):
    report = await orchestrator.check_readiness()
    report["timestamp"] = datetime.now(UTC).isoformat()
    code = status.HTTP_200_OK if report["status"] == "ready" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=report)


@router.get("/metrics")
async def prometheus_metrics(metrics: MetricsDep):
    return Response(content=metrics.get_prometheus_metrics(), media_type=metrics.get_content_type())


@router.get("/stats")
async def gateway_stats(orchestrator: OrchestratorDep):
    """Registered backends, policy flags and background pool counters."""
    return orchestrator.get_stats()
