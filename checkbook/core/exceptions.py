"""
Custom exception classes for the Checkbook permissions service.

This module defines a hierarchy of custom exceptions that map to HTTP status codes
and provide consistent error responses across the API.

Exception hierarchy:
    AppException (base)
    ├── AuthenticationError (401)
    │   └── InvalidTokenError
    ├── AuthorizationError (403)
    │   ├── ForbiddenError
    │   └── InsufficientPermissionsError
    ├── ResourceError
    │   ├── NotFoundError (404)
    │   │   └── AccountNotAccessibleError (also a ForbiddenError)
    │   └── ConflictError (409)
    │       ├── InvalidStateError
    │       ├── DuplicateRequestError
    │       └── DuplicateGrantError
    ├── ValidationError (422)
    │   └── InvalidRequestError
    ├── EvaluationUnavailableError (503)
    └── AuditWriteDegradedError (never raised to callers)
"""

from typing import Any


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        status_code: HTTP status code for the error
        error_code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error information
        """
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Authentication Errors (401 Unauthorized)
# =============================================================================


class AuthenticationError(AppException):
    """Base class for authentication errors."""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str = "AUTHENTICATION_FAILED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details,
        )


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is missing, invalid or expired."""

    def __init__(
        self,
        message: str = "Invalid or expired token",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INVALID_TOKEN",
            details=details,
        )


# =============================================================================
# Authorization Errors (403 Forbidden)
# =============================================================================


class AuthorizationError(AppException):
    """Base class for authorization errors."""

    def __init__(
        self,
        message: str = "Access forbidden",
        error_code: str = "AUTHORIZATION_FAILED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code=error_code,
            details=details,
        )


class ForbiddenError(AuthorizationError):
    """Raised when the caller is known to the account but may not perform the action."""

    def __init__(
        self,
        message: str = "This action is forbidden",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            details=details,
        )


class InsufficientPermissionsError(ForbiddenError):
    """Raised when the caller's permission level is below the one required."""

    def __init__(
        self,
        message: str = "Insufficient permissions to perform this action",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.error_code = "INSUFFICIENT_PERMISSIONS"


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceError(AppException):
    """Base class for resource-related errors."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class NotFoundError(ResourceError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None:
            message = f"{resource} not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class AccountNotAccessibleError(NotFoundError, ForbiddenError):
    """
    Raised when an account does not exist OR the caller has no access to it.

    Both cases produce the same status, code and message so that a caller
    without access cannot learn whether the account exists. Handlers that
    catch ForbiddenError also catch this error.
    """

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        AppException.__init__(
            self,
            message="Account not found or you don't have access",
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class ConflictError(ResourceError):
    """Raised when there's a conflict with the current state of the resource."""

    def __init__(
        self,
        message: str = "Resource conflict",
        error_code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code=error_code,
            details=details,
        )


class InvalidStateError(ConflictError):
    """Raised when a permission request is no longer in a state that allows the transition."""

    def __init__(
        self,
        message: str = "Request is not pending",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="INVALID_STATE", details=details)


class DuplicateRequestError(ConflictError):
    """Raised when a requester already has a pending request for the account."""

    def __init__(
        self,
        message: str = "You already have a pending permission request for this account",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="DUPLICATE_REQUEST", details=details)


class DuplicateGrantError(ConflictError):
    """Raised by a plain insert when the (account, user) grant already exists."""

    def __init__(
        self,
        message: str = "Permission already exists for this user",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="DUPLICATE_GRANT", details=details)


# =============================================================================
# Validation Errors (422 Unprocessable Entity)
# =============================================================================


class ValidationError(AppException):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=422,
            error_code=error_code,
            details=details,
        )


class InvalidRequestError(ValidationError):
    """Raised when a command is well-formed but makes no sense for the account."""

    def __init__(
        self,
        message: str = "Invalid request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INVALID_REQUEST",
            details=details,
        )


# =============================================================================
# Infrastructure Errors
# =============================================================================


class EvaluationUnavailableError(AppException):
    """Raised when permissions cannot be evaluated because the store failed."""

    def __init__(
        self,
        message: str = "Permission evaluation is temporarily unavailable",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=503,
            error_code="EVALUATION_UNAVAILABLE",
            details=details,
        )


class AuditWriteDegradedError(AppException):
    """
    Describes an audit append that did not complete normally.

    Never raised to callers. The audit writer returns it inside
    AuditWriteResult so the degradation is observable without
    failing the business operation.
    """

    SERIALIZATION_FAILED = "SERIALIZATION_FAILED"
    WRITE_FAILED = "WRITE_FAILED"

    def __init__(
        self,
        reason: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message or f"Audit write degraded: {reason}",
            status_code=500,
            error_code="AUDIT_WRITE_DEGRADED",
            details=details,
        )
        self.reason = reason
