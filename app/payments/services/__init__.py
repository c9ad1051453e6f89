"""
Payment services for checkout and split-payment operations.

This module provides:
- CheckoutService: Creates checkout sessions and billing portal sessions
- SplitPaymentOrchestrator: Finalizes a checkout session into two holds,
  their capture, and payout transfers

Usage:
    from payments.adapters import StripeAdapter
    from payments.services import CheckoutService, SplitPaymentOrchestrator

    adapter = StripeAdapter.from_settings()

    session = CheckoutService(adapter).create_checkout_session()

    outcome = SplitPaymentOrchestrator(adapter).finalize(session.id)
"""

from payments.services.checkout_service import CheckoutService
from payments.services.split_payment import (
    PayoutLeg,
    SplitPaymentOrchestrator,
    SplitPaymentOutcome,
    SplitPaymentPlan,
    SplitPaymentRun,
)

__all__ = [
    "CheckoutService",
    "PayoutLeg",
    "SplitPaymentOrchestrator",
    "SplitPaymentOutcome",
    "SplitPaymentPlan",
    "SplitPaymentRun",
]
