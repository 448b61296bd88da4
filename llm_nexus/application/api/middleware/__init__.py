from llm_nexus.application.api.middleware.error_handler import (
    ErrorHandlingMiddleware,
    add_error_handling_middleware,
)

__all__ = ["ErrorHandlingMiddleware", "add_error_handling_middleware"]
