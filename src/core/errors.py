"""Error taxonomy and classification utilities."""

from enum import Enum

from pydantic import BaseModel


class NotFoundError(KeyError):
    """A task, family or member reference does not resolve within the caller's family."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Not found"


class ConflictError(ValueError):
    """A uniqueness constraint would be violated (e.g. duplicate family code)."""


class AuthenticationError(PermissionError):
    """Credentials or bearer token are missing, invalid or expired."""


class PersistenceError(RuntimeError):
    """The store failed to read or write a record."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_CONFLICT = "ERR_CONFLICT"
    ERR_AUTHENTICATION_FAILED = "ERR_AUTHENTICATION_FAILED"
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_PERSISTENCE = "ERR_PERSISTENCE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    status_code: int


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised while handling a request

    Returns:
        ErrorResponse with code, message, suggestion, severity and HTTP status
    """
    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message=str(exception),
            suggestion="Check the identifier and that it belongs to your family.",
            severity=ErrorSeverity.LOW,
            status_code=404,
        )

    if isinstance(exception, ConflictError):
        return ErrorResponse(
            code=ErrorCode.ERR_CONFLICT,
            message=str(exception),
            suggestion="Pick a different family code.",
            severity=ErrorSeverity.LOW,
            status_code=409,
        )

    if isinstance(exception, AuthenticationError):
        return ErrorResponse(
            code=ErrorCode.ERR_AUTHENTICATION_FAILED,
            message=str(exception),
            suggestion="Log in again to obtain a fresh token.",
            severity=ErrorSeverity.MEDIUM,
            status_code=401,
        )

    if isinstance(exception, PersistenceError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERSISTENCE,
            message="The data store could not complete the request.",
            suggestion="Please try again later. If the problem persists, contact support.",
            severity=ErrorSeverity.HIGH,
            status_code=500,
        )

    if isinstance(exception, ValueError):
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION,
            message=str(exception),
            suggestion="Check the request payload and try again.",
            severity=ErrorSeverity.LOW,
            status_code=400,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
        status_code=500,
    )
