# catalog_http_api/errors.py

"""
Error taxonomy for the Catalog HTTP API and the handlers that turn it into
HTTP responses.

Services raise the exceptions below; routers never catch them. Every error
response shares one JSON envelope:

    {"status": 404, "error": "Resource not found",
     "message": "Product with id=7 not found.",
     "path": "/api/products/7", "timestamp": "2024-05-01T12:00:00+00:00"}
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_http_api.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


class ServiceError(Exception):
    """Base class for errors that map onto a well-known HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal server error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """
    Malformed or out-of-range input.

    ``errors`` maps each offending field to its message; every violated
    field is reported, not just the first.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation failed"

    def __init__(self, message: Optional[str] = None, *, errors: Optional[Mapping[str, str]] = None) -> None:
        self.errors: Dict[str, str] = dict(errors or {})
        if message is None:
            message = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items()) or "Invalid input"
        super().__init__(message)


class UnauthenticatedError(ServiceError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class ForbiddenError(ServiceError):
    """Authenticated, but the role does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    error = "Access denied"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Resource not found"


class ConflictError(ServiceError):
    """Duplicate identity (e.g. an email that is already registered)."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Conflict"


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def error_body(status_code: int, error: str, message: str, path: str) -> Dict[str, Any]:
    return {
        "status": status_code,
        "error": error,
        "message": message,
        "path": path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def error_response(
    status_code: int,
    error: str,
    message: str,
    path: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(status_code, error, message, path),
        headers=headers,
    )


def _auth_headers(status_code: int) -> Optional[Dict[str, str]]:
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return {"WWW-Authenticate": "Bearer"}
    return None


def _format_location(loc: Any) -> str:
    # Drop the leading "body"/"query"/"path" marker FastAPI adds.
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in {"body", "query", "path", "header"}:
        parts = parts[1:]
    return ".".join(parts)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("service_error", error=exc.error, detail=exc.message)
        message = INTERNAL_ERROR_MESSAGE
    else:
        logger.warning("request_rejected", status_code=exc.status_code, error=exc.error, detail=exc.message)
        message = exc.message
    return error_response(
        exc.status_code,
        exc.error,
        message,
        request.url.path,
        headers=_auth_headers(exc.status_code),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: Dict[str, str] = {}
    for item in exc.errors():
        field = _format_location(item.get("loc", ()))
        errors.setdefault(field or "request", item.get("msg", "Invalid value"))
    validation = ValidationError(errors=errors)
    logger.warning("request_validation_failed", fields=sorted(errors))
    return error_response(
        validation.status_code,
        validation.error,
        validation.message,
        request.url.path,
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    reasons = {
        status.HTTP_404_NOT_FOUND: "Resource not found",
        status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
    }
    error = reasons.get(exc.status_code, "HTTP error")
    message = exc.detail if isinstance(exc.detail, str) else error
    return error_response(
        exc.status_code,
        error,
        message,
        request.url.path,
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", exc_info=exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        INTERNAL_ERROR_MESSAGE,
        request.url.path,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)


__all__ = [
    "ServiceError",
    "ValidationError",
    "UnauthenticatedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "INTERNAL_ERROR_MESSAGE",
    "error_body",
    "error_response",
    "register_exception_handlers",
]
