"""
Boundary error mapping.

Every AppError renders as ``{"message": ...}`` with the status of its kind.
Internal detail is logged, never returned.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.errors import (
    AppError,
    ErrorKind,
    InvalidRequest,
    NotFound,
    Unauthenticated,
    UpstreamFailure,
    ValidationRejected,
)

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"

_ERROR_BY_KIND: dict[ErrorKind, type[AppError]] = {
    ErrorKind.UNAUTHENTICATED: Unauthenticated,
    ErrorKind.INVALID_REQUEST: InvalidRequest,
    ErrorKind.UPSTREAM_FAILURE: UpstreamFailure,
    ErrorKind.NOT_FOUND: NotFound,
}


def error_for(kind: ErrorKind | None, message: str) -> AppError:
    """Build the AppError for a component failure."""
    if kind == ErrorKind.VALIDATION_REJECTED:
        return ValidationRejected(message, code="rejected")
    return _ERROR_BY_KIND.get(kind or ErrorKind.INVALID_REQUEST, InvalidRequest)(message)


async def app_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, AppError)
    if exc.detail:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.detail)

    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.UNAUTHENTICATED else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": SERVER_ERROR_MESSAGE},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
