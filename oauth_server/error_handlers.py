"""Global exception handlers enforcing the OAuth error response contract."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from oauth_server.core.errors import OAuthError, OAuthErrorKind
from oauth_server.db.base import StorageError

SERVER_ERROR = "server_error"
TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"

logger = structlog.get_logger(__name__)


def _error_response(
    status_code: int,
    error: str,
    description: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build standardized OAuth JSON error payload."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "error_description": description},
        headers=headers,
    )


def _extract_description(detail: Any) -> str:
    """Normalize exception detail payload into a description string."""
    if isinstance(detail, dict):
        return str(detail.get("error_description", "Request failed."))
    if isinstance(detail, str):
        return detail
    return "Request failed."


def _sanitize_detail(detail: str, status_code: int, environment: str) -> str:
    """Hide internal failure details outside development."""
    if environment != "development" and status_code >= 500:
        return "Internal server error."
    return detail


def _correlation_id(request: Request) -> str:
    """Resolve correlation ID bound by middleware or supplied by the caller."""
    return str(
        getattr(
            request.state,
            "correlation_id",
            request.headers.get("x-correlation-id", "unknown"),
        )
    )


def register_exception_handlers(app: FastAPI, environment: str, realm: str = "oauth") -> None:
    """Register global exception handlers enforcing error shape contract."""

    @app.exception_handler(OAuthError)
    async def handle_oauth_error(request: Request, exc: OAuthError) -> JSONResponse:
        """Render OAuth errors; 401s advertise the Basic scheme."""
        headers = None
        if exc.status_code == 401:
            headers = {"WWW-Authenticate": f'Basic realm="{realm}"'}
            logger.warning(
                "client_authentication_failed",
                correlation_id=_correlation_id(request),
                path=request.url.path,
                method=request.method,
            )
        return _error_response(exc.status_code, exc.code, exc.detail, headers=headers)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
        """Report store outages as retryable, never as credential failures."""
        logger.error(
            "storage_failure",
            correlation_id=_correlation_id(request),
            path=request.url.path,
            method=request.method,
            error=str(exc),
        )
        return _error_response(
            503,
            TEMPORARILY_UNAVAILABLE,
            "The server is temporarily unable to handle the request.",
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Normalize framework HTTP exceptions to the OAuth payload."""
        code = SERVER_ERROR if exc.status_code >= 500 else OAuthErrorKind.INVALID_REQUEST.value
        return _error_response(
            exc.status_code,
            code,
            _extract_description(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Map request validation errors to invalid_request."""
        description = "Invalid request payload."
        if environment == "development":
            errors = exc.errors()
            if errors:
                description = f"Invalid request payload: {errors[0].get('msg', 'validation error')}."
        return _error_response(400, OAuthErrorKind.INVALID_REQUEST.value, description)

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
        """Mask internal errors and enforce contract payload."""
        logger.error(
            "unhandled_exception",
            correlation_id=_correlation_id(request),
            path=request.url.path,
            method=request.method,
            error=str(exc),
        )
        return _error_response(500, SERVER_ERROR, _sanitize_detail(str(exc), 500, environment))
