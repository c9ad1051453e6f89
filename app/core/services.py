"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views.
    Views handle HTTP concerns, services handle Stripe orchestration.

Pattern Comparison:
    - ServiceResult: Use for expected failures (declined holds, unknown events)
    - Exceptions: Use for unexpected failures (processor outages, bugs)

Usage:
    from core.services import BaseService, ServiceResult

    class PortalService(BaseService):
        @classmethod
        def open(cls, adapter, session_id: str) -> ServiceResult[str]:
            session = adapter.retrieve_checkout_session(session_id)
            if not session.customer_id:
                return ServiceResult.failure(
                    "Checkout session has no customer",
                    error_code="NO_CUSTOMER",
                )
            ...
            return ServiceResult.ok(portal.url)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Generic, TypeVar

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        result = dispatch_webhook_event(event_type, data)
        if result.success:
            ...
        else:
            logger.warning(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
        data: T | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
            data: Optional partial data (e.g. a compensated run)

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            data=data,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            if result:  # Same as: if result.success
                ...
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides a logger named after the service class for easy filtering.

    Design Notes:
        - Services hold no request state
        - Collaborators (the Stripe adapter) are passed in, never global
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns:
            Logger named "{module}.{ClassName}"
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")
