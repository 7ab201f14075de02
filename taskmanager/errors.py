"""Typed application errors.

Every failure raised by the services carries a ``kind`` and a human-readable
message. The HTTP layer maps kinds to status codes; nothing below it knows
about HTTP.
"""
from typing import Any, Dict, Optional


class ErrorKind:
    """Failure categories shared by services and the HTTP layer."""
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND = {
    ErrorKind.CONFLICT: 409,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    """Base exception for application errors"""
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class UnauthorizedError(AppError):
    kind = ErrorKind.UNAUTHORIZED


class NotFoundError(AppError):
    """Raised for absent rows and for rows owned by someone else alike."""
    kind = ErrorKind.NOT_FOUND


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


class InternalError(AppError):
    kind = ErrorKind.INTERNAL


class ConfigurationError(InternalError):
    """Missing or invalid runtime configuration (e.g. no signing secret)."""


class CacheError(InternalError):
    """The key-value store could not be reached or answered with an error."""
