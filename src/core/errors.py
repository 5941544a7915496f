"""
Custom exceptions and error handling for Durdle.

Defines application-specific exceptions with error codes for consistent
error handling across Lambda functions and client communication.

Usage:
    from core.errors import NotFoundError, ErrorCode

    raise NotFoundError("Booking DTC-01022601 missing", code=ErrorCode.NOT_FOUND)
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    AUTH_FAILED = "AUTH_FAILED"
    INVALID_TOKEN = "INVALID_TOKEN"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    FORBIDDEN = "FORBIDDEN"

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Upstream errors
    ROUTE_CALCULATION_FAILED = "ROUTE_CALCULATION_FAILED"

    # System errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_FAILED: "Invalid username or password.",
    ErrorCode.INVALID_TOKEN: "Invalid session token. Please sign in again.",
    ErrorCode.SESSION_EXPIRED: "Your session has expired. Please sign in again.",
    ErrorCode.ACCOUNT_DISABLED: "Account is disabled or not found.",
    ErrorCode.FORBIDDEN: "You do not have access to this resource.",
    ErrorCode.VALIDATION_ERROR: "Invalid request data.",
    ErrorCode.INVALID_REQUEST: "Invalid request format.",
    ErrorCode.NOT_FOUND: "The requested resource was not found.",
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed.",
    ErrorCode.CONFLICT: "The resource already exists or was changed by another request.",
    ErrorCode.INVALID_TRANSITION: "The requested status change is not allowed.",
    ErrorCode.ROUTE_CALCULATION_FAILED: "Unable to calculate route. Please check the addresses and try again.",
    ErrorCode.CONFIGURATION_ERROR: "The service is temporarily unavailable. Please try again later.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.AUTH_FAILED: 401,
    ErrorCode.INVALID_TOKEN: 401,
    ErrorCode.SESSION_EXPIRED: 401,
    ErrorCode.ACCOUNT_DISABLED: 403,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.ROUTE_CALCULATION_FAILED: 502,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


class DurdleError(Exception):
    """Base exception for all Durdle errors."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: list[dict[str, Any]] | None = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 500)


class AuthenticationError(DurdleError):
    """Authentication or authorization failed."""

    default_code = ErrorCode.AUTH_FAILED


class ValidationError(DurdleError):
    """Input validation failed. ``details`` lists the offending fields."""

    default_code = ErrorCode.VALIDATION_ERROR


class NotFoundError(DurdleError):
    default_code = ErrorCode.NOT_FOUND


class ConflictError(DurdleError):
    """Duplicate resource, stale conditional write or illegal status change."""

    default_code = ErrorCode.CONFLICT


class RouteCalculationError(DurdleError):
    """Google Maps could not produce a route."""

    default_code = ErrorCode.ROUTE_CALCULATION_FAILED


class TenantAccessError(DurdleError):
    """Cross-tenant access attempt."""

    default_code = ErrorCode.FORBIDDEN


class ConfigurationError(DurdleError):
    """Missing or unreadable secret or setting."""

    default_code = ErrorCode.CONFIGURATION_ERROR
