"""
Global exception handlers for FastAPI.

Every error leaves the API as {"error": "<message>"}.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

import structlog

from src.core.exceptions import (
    StudySystemError,
    ConfigurationError,
    LLMTimeoutError,
    TaskLockedError,
    TaskNotFoundError,
    ValidationError,
)

log = structlog.get_logger(__name__)


def _status_for(exc: StudySystemError) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, TaskNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, TaskLockedError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, LLMTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_exception_handlers(app: FastAPI):
    """Register custom exception handlers with the FastAPI application.

    Sets up handlers for StudySystemError subclasses with their HTTP status
    codes, request schema errors, configuration errors and generic exceptions.
    """

    @app.exception_handler(StudySystemError)
    async def study_system_error_handler(
        request: Request,
        exc: StudySystemError,
    ) -> JSONResponse:
        """Handle StudySystemError exceptions with appropriate HTTP status codes.

        Maps specific error types to HTTP status codes (400 for validation,
        404 for unknown tasks, 504 for model timeouts, 500 otherwise).
        """
        status_code = _status_for(exc)

        log_ctx = log.bind(
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
        )
        if status_code >= 500:
            log_ctx.error("request_failed", message=exc.message, status_code=status_code)
        else:
            log_ctx.warning("request_error", message=exc.message, status_code=status_code)

        return JSONResponse(status_code=status_code, content={"error": exc.message})

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request,
        exc: ConfigurationError,
    ) -> JSONResponse:
        """Handle configuration errors with HTTP 500 status.

        The message names the missing setting so operators can fix it.
        """
        log.error(
            "configuration_error",
            path=request.url.path,
            message=exc.message,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Malformed request bodies are client errors (400)."""
        errors = exc.errors()
        fields = sorted(
            {str(err["loc"][-1]) for err in errors if err.get("loc")}
        )
        message = "Invalid request body"
        if fields:
            message = f"Invalid request fields: {', '.join(fields)}"

        log.warning(
            "request_schema_invalid",
            path=request.url.path,
            fields=fields,
        )

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": message},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle all unhandled exceptions with HTTP 500 status."""
        log_ctx = log.bind(
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
        )

        log_ctx.error(
            "unhandled_exception",
            message=str(exc),
            exc_info=exc,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
