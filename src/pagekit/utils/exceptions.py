"""Exception hierarchy for pagekit.

Errors raised by the HTTP client carry the status code and parsed error body
so callers can tell a missing page from a rejected save from a dead network.
"""

from typing import Any


class PageKitError(Exception):
    """Base exception for all pagekit errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str = "PAGEKIT_ERROR",
        details: dict | None = None,
    ) -> None:
        """Initialize error.

        Args:
            message: Human readable message.
            status_code: HTTP status code, if the error came from the API.
            error_code: Machine-readable error code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class ApiError(PageKitError):
    """Non-2xx response from the backend."""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Any = None,
        error_code: str = "API_ERROR",
    ) -> None:
        """Initialize API error.

        Args:
            message: Error message (usually the body's ``message``).
            status_code: HTTP status code.
            body: Parsed response body, ``{}`` when it was not JSON.
            error_code: Machine-readable error code.
        """
        super().__init__(message, status_code=status_code, error_code=error_code)
        self.body = body if body is not None else {}


class ValidationError(ApiError):
    """Field-keyed validation failure (HTTP 400/422, or a local pre-save check)."""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: dict[str, list[str]] | None = None,
        status_code: int = 422,
        body: Any = None,
    ) -> None:
        super().__init__(message, status_code, body, error_code="VALIDATION_ERROR")
        self.errors = errors or {}

    def messages(self) -> list[str]:
        """Flatten the field-keyed errors into a list of messages."""
        flat: list[str] = []
        for value in self.errors.values():
            if isinstance(value, (list, tuple)):
                flat.extend(str(v) for v in value)
            else:
                flat.append(str(value))
        return flat or [self.message]


class NotFoundError(ApiError):
    """Requested resource does not exist."""

    def __init__(self, message: str = "Not found", body: Any = None) -> None:
        super().__init__(message, 404, body, error_code="NOT_FOUND")


class UnauthorizedError(ApiError):
    """Missing or expired credentials."""

    def __init__(self, message: str = "Authentication required", body: Any = None) -> None:
        super().__init__(message, 401, body, error_code="UNAUTHORIZED")


class ForbiddenError(ApiError):
    """Authenticated but not allowed."""

    def __init__(
        self,
        message: str = "You don't have permission to perform this action",
        body: Any = None,
    ) -> None:
        super().__init__(message, 403, body, error_code="FORBIDDEN")


class ConflictError(ApiError):
    """Resource conflict, e.g. a duplicate slug."""

    def __init__(self, message: str = "Resource conflict", body: Any = None) -> None:
        super().__init__(message, 409, body, error_code="CONFLICT")


class NetworkError(PageKitError):
    """The request never produced a response."""

    def __init__(self, message: str = "Network error") -> None:
        super().__init__(message, error_code="NETWORK_ERROR")


class RequestTimeoutError(NetworkError):
    """The request exceeded the client timeout."""

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message)
        self.error_code = "TIMEOUT"


class FieldError(PageKitError):
    """Local rejection of a form field edit."""


class ProtectedFieldError(FieldError):
    """Attempt to delete, rename or make optional a protected default field."""

    def __init__(self, field_name: str, action: str = "delete") -> None:
        super().__init__(
            f"Cannot {action} required default field '{field_name}'",
            error_code="PROTECTED_FIELD",
            details={"field": field_name, "action": action},
        )
        self.field_name = field_name


class DuplicateFieldError(FieldError):
    """Two fields on one page would share a name."""

    def __init__(self, field_name: str) -> None:
        super().__init__(
            f"A field named '{field_name}' already exists",
            error_code="DUPLICATE_FIELD",
            details={"field": field_name},
        )
        self.field_name = field_name


class FieldNotFoundError(FieldError):
    """No field with the given id."""

    def __init__(self, field_id: str) -> None:
        super().__init__(
            f"Field with ID '{field_id}' not found",
            error_code="FIELD_NOT_FOUND",
            details={"field_id": field_id},
        )


class BuilderStateError(PageKitError):
    """Builder asked to act while another operation is in flight."""

    def __init__(self, state: str, action: str) -> None:
        super().__init__(
            f"Cannot {action} while builder is {state}",
            error_code="BUILDER_BUSY",
            details={"state": state, "action": action},
        )


def error_for_status(status_code: int, body: Any, reason: str = "") -> ApiError:
    """Build the structured error for a non-2xx response.

    Args:
        status_code: HTTP status code.
        body: Parsed JSON body, or ``{}``.
        reason: HTTP reason phrase, used when the body has no message.

    Returns:
        The matching ApiError subclass instance.
    """
    message = reason or f"HTTP {status_code}"
    if isinstance(body, dict) and body.get("message"):
        message = str(body["message"])

    if status_code in (400, 422):
        errors = body.get("errors") if isinstance(body, dict) else None
        if not isinstance(errors, dict):
            errors = {}
        return ValidationError(message, errors=errors, status_code=status_code, body=body)
    if status_code == 401:
        return UnauthorizedError(message, body)
    if status_code == 403:
        return ForbiddenError(message, body)
    if status_code == 404:
        return NotFoundError(message, body)
    if status_code == 409:
        return ConflictError(message, body)
    return ApiError(message, status_code, body)


def describe_error(exc: BaseException) -> str:
    """Render an error as the message shown to the user."""
    if isinstance(exc, ValidationError):
        return "Validation failed:\n" + "\n".join(exc.messages())
    if isinstance(exc, NotFoundError):
        return "Page not found"
    if isinstance(exc, UnauthorizedError):
        return "Session expired, please log in again"
    if isinstance(exc, RequestTimeoutError):
        return "The server took too long to respond. Please try again."
    if isinstance(exc, NetworkError):
        return "Could not reach the server. Please try again."
    if isinstance(exc, PageKitError):
        return exc.message
    return str(exc) or "Something went wrong"
