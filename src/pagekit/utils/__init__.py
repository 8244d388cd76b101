"""Utility functions and helpers."""

from pagekit.utils.exceptions import (
    ApiError,
    BuilderStateError,
    ConflictError,
    DuplicateFieldError,
    FieldError,
    FieldNotFoundError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    PageKitError,
    ProtectedFieldError,
    RequestTimeoutError,
    UnauthorizedError,
    ValidationError,
    describe_error,
)
from pagekit.utils.logging import configure_logging

__all__ = [
    # Exceptions
    "PageKitError",
    "ApiError",
    "BuilderStateError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "NetworkError",
    "RequestTimeoutError",
    "FieldError",
    "ProtectedFieldError",
    "DuplicateFieldError",
    "FieldNotFoundError",
    "describe_error",
    # Logging
    "configure_logging",
]
