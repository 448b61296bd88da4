from llm_nexus.application.api.models.generation import (
    CreateUserRequestModel,
    ErrorResponseModel,
    GenerateRequestModel,
    GenerateResponseModel,
    UsageModel,
    UserResponseModel,
)

__all__ = [
    "GenerateRequestModel",
    "GenerateResponseModel",
    "UsageModel",
    "CreateUserRequestModel",
    "UserResponseModel",
    "ErrorResponseModel",
]
