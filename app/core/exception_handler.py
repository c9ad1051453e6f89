"""
DRF exception handler for application errors.

Renders BaseApplicationError subclasses with their own HTTP status and the
{"error": {"message", "code", "details"}} envelope, and reshapes DRF's own
errors (serializer validation, parse errors) into the same envelope so every
endpoint answers in one format.

Configured via settings:
    REST_FRAMEWORK["EXCEPTION_HANDLER"] = (
        "core.exception_handler.application_exception_handler"
    )
"""

from __future__ import annotations

import logging
from typing import Any

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def application_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """
    Convert exceptions raised in views to JSON responses.

    Args:
        exc: The exception raised by the view
        context: DRF context with the view and request

    Returns:
        Response, or None to let Django treat the error as unhandled
    """
    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{type(exc).__name__} in {type(view).__name__}: {exc.message}",
            extra={"error_code": exc.error_code, "details": exc.details},
        )
        return Response(exc.to_dict(), status=exc.http_status)

    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = response.data
    if isinstance(detail, dict) and "detail" in detail:
        message = str(detail["detail"])
        details = None
    else:
        message = "Invalid request"
        details = detail

    error: dict[str, Any] = {
        "message": message,
        "code": getattr(exc, "default_code", "error").upper(),
    }
    if details:
        error["details"] = details
    response.data = {"error": error}
    return response
