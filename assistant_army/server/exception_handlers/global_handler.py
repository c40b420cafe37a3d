"""
Global Exception Handler for FastAPI Application.

This module maps agent core errors to HTTP status codes and provides a global
exception handler that catches all other unhandled exceptions, logging detailed
information including error ID, request context, and full traceback.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from assistant_army.agent_core.errors import (
    AgentCoreError,
    CircularDependencyError,
    NotFoundError,
    UnauthorizedError,
    UpstreamFailure,
    ValidationError,
)
from assistant_army.core.logging_config import get_logger

logger = get_logger(__name__)

AGENT_CORE_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    CircularDependencyError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    UpstreamFailure: status.HTTP_502_BAD_GATEWAY,
}


async def agent_core_exception_handler(request: Request, exc: AgentCoreError) -> JSONResponse:
    """
    Translate an agent core error into its HTTP response.

    Args:
        request: The HTTP request that caused the exception
        exc: The domain error that was raised

    Returns:
        JSONResponse with the error message and type
    """
    status_code = AGENT_CORE_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": str(exc),
            "error_type": type(exc).__name__,
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AgentCoreError, agent_core_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
