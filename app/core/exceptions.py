"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error logging across the application
- Machine-readable error codes
- Detailed error context for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── NotFoundError - Resource not found
    ├── ConflictError - State conflicts (duplicates, invalid transitions)
    └── ExternalServiceError - Third-party service failures

Usage:
    from core.exceptions import NotFoundError

    # Raise with message only
    raise NotFoundError("Invoice not found")

    # Raise with error code and additional details
    raise NotFoundError(
        "Invoice not found",
        error_code="INVOICE_NOT_FOUND",
        details={"reference": "INV-0001"}
    )

    # Convert to dict for logging or API responses
    try:
        ...
    except BaseApplicationError as e:
        logger.error(e.message, extra=e.to_dict())

Note:
    These exceptions are for domain/business logic errors.
    Expected outcomes (rejected notifications, duplicates) are returned
    as result objects instead (see core.services.ServiceResult).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Provides a consistent interface for error handling across the application.
    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (identifiers, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Invoice not found",
                "error_code": "INVOICE_NOT_FOUND",
                "details": {"reference": "INV-0001"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Use for single-resource lookups where existence is expected,
    e.g. the invoice a payment notification refers to.
    """

    default_error_code: str = "NOT_FOUND"


class ConflictError(BaseApplicationError):
    """
    Raised when operation conflicts with current resource state.

    Use for:
    - Duplicate entries (unique constraint violations)
    - Invalid state transitions

    Example:
        if invoice.status == InvoiceStatus.REFUNDED:
            raise ConflictError(
                "Cannot mark a refunded invoice as paid",
                error_code="INVALID_STATE_TRANSITION",
                details={"current_status": invoice.status, "action": "mark_paid"}
            )
    """

    default_error_code: str = "CONFLICT"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Third-party API failures (payment gateway endpoints)
    - Network timeouts
    - External service unavailability

    Note:
        Log the original error for debugging but don't expose
        internal details to callers.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
