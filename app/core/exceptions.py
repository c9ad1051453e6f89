"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- An HTTP status per error family, used by core.exception_handler

Exception Hierarchy:
    BaseApplicationError (base, 500)
    ├── PermissionDeniedError - Authorization failures (403)
    └── ConflictError - State conflicts, lock contention (409)

Domain apps extend these (payments.exceptions adds 400/402/5xx families).

Usage:
    from core.exceptions import ConflictError

    raise ConflictError(
        "Checkout session is being finalized",
        error_code="LOCK_ACQUISITION_FAILED",
        details={"key": "lock:split_payment:cs_123"},
    )

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context
        http_status: Status code used when the error reaches a view
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 500

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
        Convert exception to the API error envelope.

        Returns:
            {"error": {"message": ..., "code": ..., "details": {...}}}
            with "details" omitted when empty.
        """
        error: dict[str, Any] = {
            "message": self.message,
            "code": self.error_code,
        }
        if self.details:
            error["details"] = self.details
        return {"error": error}

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


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller may not act on a resource.

    Example:
        if bound_session_id != session_id:
            raise PermissionDeniedError(
                "Checkout session is not bound to this browser",
                error_code="SESSION_BINDING_MISMATCH",
            )
    """

    default_error_code: str = "PERMISSION_DENIED"
    http_status: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when operation conflicts with current resource state.

    Use for:
    - Concurrent processing of the same resource
    - Invalid state transitions

    Note:
        HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409
