"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks.
"""

from django.conf import settings
from django.core.cache import cache
from django.http import JsonResponse


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    This endpoint is used by:
    - Docker health checks
    - Kubernetes liveness/readiness checks
    - Load balancers (AWS ALB, nginx)

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - cache: "connected" or "disconnected"
        - stripe: "configured" or "missing_key"

    HTTP Status Codes:
        200: All systems operational
        503: Stripe is not configured

    Example Response:
        {
            "status": "healthy",
            "cache": "connected",
            "stripe": "configured"
        }
    """
    health_status = {
        "status": "healthy",
        "cache": "unknown",
        "stripe": "configured" if settings.STRIPE_SECRET_KEY else "missing_key",
    }
    is_healthy = bool(settings.STRIPE_SECRET_KEY)

    # Cache holds split-payment locks; losing it degrades duplicate protection
    try:
        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") == "ok":
            health_status["cache"] = "connected"
        else:
            health_status["cache"] = "disconnected"
    except Exception:
        health_status["cache"] = "disconnected"

    if not is_healthy:
        health_status["status"] = "unhealthy"

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
