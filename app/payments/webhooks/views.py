"""
Webhook endpoint view for Stripe.

This module provides the HTTP endpoint for receiving Stripe webhooks.
The view:
1. Verifies the webhook signature (when a signing secret is configured)
2. Dispatches the event to its registered handler
3. Returns 200

Without STRIPE_WEBHOOK_SECRET the endpoint runs unverified: the event is
read from the JSON body as-is. That mode exists for local development
with the Stripe CLI only and logs a warning on every delivery.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhook", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import json
import logging

from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import StripeAdapter
from payments.exceptions import StripeInvalidRequestError
from payments.webhooks.handlers import StripeEvent, dispatch_webhook

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive Stripe webhook events.

    Security:
    - Signature verification runs over the exact request body bytes;
      the event is parsed from those same bytes
    - Missing or invalid signatures are rejected before any processing
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        HttpResponse with status:
        - 200: Event accepted (handled or ignored)
        - 400: Missing/invalid signature or malformed payload

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    payload = request.body
    adapter = StripeAdapter.from_settings()

    if adapter.webhook_signing_enabled:
        signature = request.headers.get("Stripe-Signature", "")

        if not signature:
            logger.warning("Webhook received without Stripe-Signature header")
            return HttpResponse("Missing signature", status=400)

        try:
            event_data = adapter.verify_webhook_signature(payload, signature)
        except StripeInvalidRequestError as e:
            logger.warning(
                "Webhook signature verification failed",
                extra={"error": str(e)},
            )
            return HttpResponse("Invalid signature", status=400)
    else:
        logger.warning(
            "Processing webhook without signature verification; "
            "set STRIPE_WEBHOOK_SECRET outside local development"
        )
        try:
            event_data = json.loads(payload)
        except ValueError:
            logger.warning("Webhook body is not valid JSON")
            return HttpResponse("Invalid payload", status=400)

    if not isinstance(event_data, dict):
        logger.warning("Webhook body is not a JSON object")
        return HttpResponse("Invalid event", status=400)

    if not event_data.get("type"):
        # Nothing to route on; acknowledge like any unhandled event
        logger.info(
            "Ignoring webhook without event type",
            extra={"stripe_event_id": event_data.get("id")},
        )
        return HttpResponse(status=200)

    event = StripeEvent.from_payload(event_data)

    logger.info(
        f"Received Stripe webhook: {event.event_type}",
        extra={
            "stripe_event_id": event.event_id,
            "event_type": event.event_type,
        },
    )

    result = dispatch_webhook(event)
    if not result.success:
        # Stripe would only redeliver the same payload; record and accept
        logger.error(
            f"Webhook handler failed: {result.error}",
            extra={
                "stripe_event_id": event.event_id,
                "error_code": result.error_code,
            },
        )

    return HttpResponse(status=200)
