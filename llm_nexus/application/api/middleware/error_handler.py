"""
Error Handling Middleware

Last line of defence for exceptions that escape the route handlers and the
registered exception handlers. Gateway errors (NexusBaseError) and body
validation errors are formatted by the exception handlers in app.py; this
middleware only ever sees genuinely unexpected failures.

WHY MIDDLEWARE AND NOT ONLY AN EXCEPTION HANDLER?
-------------------------------------------------
An ``Exception`` handler registered on the app is executed by Starlette's
ServerErrorMiddleware, which re-raises after responding. Catching here keeps
the error body in the same shape as every other error response
(``{"error", "message", "details"}``) and lets us count it in metrics.
"""

import traceback
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from llm_nexus.core.logging.logger import get_logger
from llm_nexus.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Convert unhandled exceptions into a 500 ``internal_error`` response.

    Internal details are logged server-side. Stack traces are only added to
    the response body when ``include_traceback`` is set (development).
    """

    def __init__(self, app, include_traceback: bool = False):
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            method = request.method
            path = request.url.path
            error_type = type(e).__name__

            logger.error(
                f"Unhandled exception in request: {method} {path}",
                method=method,
                path=path,
                error_type=error_type,
                error_message=str(e),
                exc_info=True,
            )

            get_metrics_collector().record_error(error_type, "unhandled_exception")

            details: dict = {"error_type": error_type}
            if self.include_traceback:
                details["traceback"] = traceback.format_exc()

            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": str(e),
                    "details": details,
                },
            )


def add_error_handling_middleware(app, include_traceback: bool = False):
    """
    Register ErrorHandlingMiddleware on the application.

    Add it before CORS so that CORS (registered later, therefore outer)
    still decorates the 500 responses produced here.
    """
    app.add_middleware(ErrorHandlingMiddleware, include_traceback=include_traceback)
    logger.info("Error handling middleware registered", include_traceback=include_traceback)
