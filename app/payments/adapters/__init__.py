"""
Payment adapters for external services.

This module provides the Stripe adapter. All Stripe API calls should go
through it to ensure consistent error handling, timeouts, idempotency,
and observability.

Usage:
    from payments.adapters import StripeAdapter, CreatePaymentIntentParams

    adapter = StripeAdapter.from_settings()

    # Place an authorization hold on the platform account
    result = adapter.create_payment_intent(
        CreatePaymentIntentParams(
            amount_cents=124800,
            currency="sgd",
            payment_method_id="pm_xxx",
            capture_method="manual",
            confirm=True,
            off_session=True,
            idempotency_key="authorize_primary:cs_xxx:1:9f86d081",
        )
    )
"""

from payments.adapters.stripe_adapter import (
    CheckoutSessionResult,
    CreatePaymentIntentParams,
    CustomerResult,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    PaymentMethodResult,
    PortalSessionResult,
    SetupIntentResult,
    StripeAdapter,
    TransferResult,
)

__all__ = [
    "CheckoutSessionResult",
    "CreatePaymentIntentParams",
    "CustomerResult",
    "IdempotencyKeyGenerator",
    "PaymentIntentResult",
    "PaymentMethodResult",
    "PortalSessionResult",
    "SetupIntentResult",
    "StripeAdapter",
    "TransferResult",
]
