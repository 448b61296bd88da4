"""
User Routes

Requester registration and lookup. Registered ids are what clients send as
``user_id`` on POST /generate when identity verification is enabled.
"""

from fastapi import APIRouter, status

from llm_nexus.application.api.dependencies import OrchestratorDep
from llm_nexus.application.api.models import (
    CreateUserRequestModel,
    ErrorResponseModel,
    UserResponseModel,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponseModel,
    responses={
        400: {"model": ErrorResponseModel},
        503: {"model": ErrorResponseModel, "description": "No usage store configured"},
    },
)
async def create_user(body: CreateUserRequestModel, orchestrator: OrchestratorDep):
    """Register a requester and return its generated id."""
    requester = await orchestrator.register_user(body.name)
    return UserResponseModel(**requester.model_dump())


@router.get(
    "/{user_id}",
    response_model=UserResponseModel,
    responses={404: {"model": ErrorResponseModel}, 503: {"model": ErrorResponseModel}},
)
async def get_user(user_id: str, orchestrator: OrchestratorDep):
    requester = await orchestrator.get_user(user_id)
    return UserResponseModel(**requester.model_dump())
