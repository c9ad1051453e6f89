"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by domain apps:

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - PermissionDeniedError: Authorization failures
    - ConflictError: State conflicts (lock contention, transitions)

Exception handling (core.exception_handler):
    - application_exception_handler: DRF handler rendering the error envelope

Views (core.views):
    - health_check: Liveness/readiness probe
"""
