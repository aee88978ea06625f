"""Custom exceptions for the application."""
from typing import Any, Optional


class AppException(Exception):
    """Base application exception."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ClientInputError(AppException):
    """Malformed request input: body or path parameter."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )


class NotFoundError(AppException):
    """Resource not found errors."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} with id {resource_id} not found",
            error_code="NOT_FOUND",
            details={"resource": resource, "id": str(resource_id)},
        )


class ConflictError(AppException):
    """A record with the same key already exists."""

    status_code = 409

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} with id {resource_id} already exists",
            error_code="CONFLICT",
            details={"resource": resource, "id": str(resource_id)},
        )


class StoreError(AppException):
    """Store failures other than a uniqueness conflict."""

    status_code = 500

    def __init__(self, message: str = "Internal server error", status_code: int = 500):
        super().__init__(message, error_code="STORE_ERROR")
        self.status_code = status_code


class StoreUnavailableError(StoreError):
    """Store unreachable or connection pool exhausted."""

    def __init__(self):
        super().__init__("Service temporarily unavailable", status_code=503)
