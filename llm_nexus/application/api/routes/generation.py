"""
Generation Routes

POST /generate is the gateway's single inference endpoint. The route is
thin: it translates the HTTP body into a GenerationRequest, hands it to the
RequestOrchestrator and shapes the result. Validation, identity checks,
caching, backend selection and usage logging all live in the orchestrator.

Errors raised by the orchestrator are NexusBaseError subclasses and are
rendered by the exception handler registered in app.py, so this module has
no try/except of its own.
"""

import time

from fastapi import APIRouter, status

from llm_nexus.application.api.dependencies import OrchestratorDep
from llm_nexus.application.api.models import (
    ErrorResponseModel,
    GenerateRequestModel,
    GenerateResponseModel,
    UsageModel,
)
from llm_nexus.core.logging.logger import get_logger
from llm_nexus.llm_gateway.models import GenerationRequest

router = APIRouter(prefix="/generate", tags=["Generation"])

logger = get_logger(__name__)


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    response_model=GenerateResponseModel,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponseModel, "description": "Malformed body, invalid argument or unknown backend"},
        403: {"model": ErrorResponseModel, "description": "Requester identity missing or unknown"},
        502: {"model": ErrorResponseModel, "description": "Backend call failed"},
        503: {"model": ErrorResponseModel, "description": "No backend configured or store unavailable"},
        504: {"model": ErrorResponseModel, "description": "Backend call timed out"},
    },
)
async def generate(body: GenerateRequestModel, orchestrator: OrchestratorDep):
    """
    Generate a completion.

    ``processing_time_ms`` covers the whole handler, including cache lookup
    and identity verification. ``usage`` is only present when a backend
    actually produced the content; cached responses carry
    ``provider_used == "cache"`` and no usage.
    """
    start = time.perf_counter()

    request_fields = {"user_id": body.user_id, "prompt": body.prompt}
    if body.temperature is not None:
        request_fields["temperature"] = body.temperature
    if body.max_tokens is not None:
        request_fields["max_tokens"] = body.max_tokens

    logger.info(
        "generate_request_received",
        user_id=body.user_id,
        provider=body.provider,
        prompt_length=len(body.prompt),
    )

    response = await orchestrator.process_request(
        GenerationRequest(**request_fields),
        provider_name=body.provider,
    )

    usage = response.result.usage
    return GenerateResponseModel(
        content=response.result.content,
        provider_used=response.provider_used,
        processing_time_ms=round((time.perf_counter() - start) * 1000, 3),
        usage=UsageModel(**usage.model_dump()) if usage is not None else None,
    )
