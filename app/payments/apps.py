"""
Payments app configuration.

This app provides the Stripe checkout backend:
- Setup-mode checkout sessions and billing portal access
- Split-payment finalization (two holds, capture, payouts)
- Webhook handling
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
