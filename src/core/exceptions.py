"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Validation errors (422)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Document store errors (502/503)
    STORE_REJECTED = "STORE_REJECTED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class ProfileNotFoundError(AppException):
    """Profile document not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class StoreError(AppException):
    """Base class for document store failures."""

    retryable: bool = False

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int,
        operation: str,
        key: str | None = None,
    ) -> None:
        self.operation = operation
        self.key = key
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=status_code,
            details={
                "operation": operation,
                "key": key,
                "retryable": self.retryable,
            },
        )


class StoreUnavailableError(StoreError):
    """The document store could not be reached (network, transport or timeout)."""

    retryable = True

    def __init__(self, operation: str, key: str | None = None, reason: str = "") -> None:
        message = "Document store is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            error_code=ErrorCode.STORE_UNAVAILABLE,
            message=message,
            status_code=503,
            operation=operation,
            key=key,
        )


class StoreRejectedError(StoreError):
    """The document store refused the operation (permission or rule violation)."""

    def __init__(self, operation: str, key: str | None = None, reason: str = "") -> None:
        message = "Document store rejected the operation"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            error_code=ErrorCode.STORE_REJECTED,
            message=message,
            status_code=502,
            operation=operation,
            key=key,
        )
