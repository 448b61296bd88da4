"""
FastAPI dependencies.

The orchestrator is created once by the application lifespan and stored on
``app.state``; routes receive it through ``OrchestratorDep``. Tests build
their own orchestrator and assign it to ``app.state.orchestrator`` directly.
"""

from typing import Annotated

from fastapi import Depends, Request

from llm_nexus.core.config.settings import Settings, get_settings
from llm_nexus.core.exceptions import ConfigurationError
from llm_nexus.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)
from llm_nexus.llm_gateway.services import RequestOrchestrator


def get_orchestrator(request: Request) -> RequestOrchestrator:
    """
    Retrieve the RequestOrchestrator from application state.

    Raises:
        ConfigurationError: If the lifespan did not run (or failed) and no
            orchestrator was assigned
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise ConfigurationError(
            "RequestOrchestrator not initialized in app.state; "
            "the application lifespan startup did not complete"
        )
    return orchestrator


OrchestratorDep = Annotated[RequestOrchestrator, Depends(get_orchestrator)]

SettingsDep = Annotated[Settings, Depends(get_settings)]

MetricsDep = Annotated[MetricsCollector, Depends(get_metrics_collector)]
