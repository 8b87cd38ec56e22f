"""
Application error taxonomy.

Every failure that can reach an HTTP boundary is one of a closed set of
kinds. Each kind maps to exactly one status code; the boundary renders the
public ``message`` and logs ``detail`` server-side only.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VALIDATION_REJECTED = "validation_rejected"
    INVALID_REQUEST = "invalid_request"
    UPSTREAM_FAILURE = "upstream_failure"
    NOT_FOUND = "not_found"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.VALIDATION_REJECTED: 400,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.NOT_FOUND: 404,
}


class AppError(Exception):
    """Base class for errors rendered as ``{"message": ...}`` at the boundary."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class Unauthenticated(AppError):
    """No credential, a malformed credential, or a token that failed verification."""

    kind = ErrorKind.UNAUTHENTICATED


class ValidationRejected(AppError):
    """Upload refused by policy before any I/O was attempted."""

    kind = ErrorKind.VALIDATION_REJECTED

    def __init__(self, message: str, *, code: str, detail: str | None = None) -> None:
        super().__init__(message, detail=detail)
        self.code = code


class InvalidRequest(AppError):
    kind = ErrorKind.INVALID_REQUEST


class UpstreamFailure(AppError):
    """The storage backend or network failed while handling an upload."""

    kind = ErrorKind.UPSTREAM_FAILURE


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND


class InvalidTokenError(Exception):
    """A token failed verification. Carries no reason, so callers cannot probe why."""

    def __init__(self) -> None:
        super().__init__("Invalid token")


class DuplicateEmailError(Exception):
    """The store already holds a user with this email."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email
