"""
Webhook handling for payment events from Stripe.

This module provides the view and handler registry for Stripe webhooks.
Events are verified against STRIPE_WEBHOOK_SECRET when it is set and
dispatched synchronously to the handler registered for their type.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhook", stripe_webhook, name="stripe_webhook"),
    ]
"""

from payments.webhooks.handlers import StripeEvent, dispatch_webhook, register_handler
from payments.webhooks.views import stripe_webhook

__all__ = [
    "StripeEvent",
    "dispatch_webhook",
    "register_handler",
    "stripe_webhook",
]
