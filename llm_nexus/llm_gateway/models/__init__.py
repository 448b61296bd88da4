from llm_nexus.llm_gateway.models.generation import (
    GatewayResponse,
    GenerationRequest,
    GenerationResult,
    UsageInfo,
    UsageLogRecord,
)
from llm_nexus.llm_gateway.models.requester import Requester

__all__ = [
    "GenerationRequest",
    "GenerationResult",
    "GatewayResponse",
    "UsageInfo",
    "UsageLogRecord",
    "Requester",
]
