"""
Payments app for Stripe integration.

This app handles:
- Anonymous customer and setup-mode checkout session creation
- Split-payment finalization across the platform and a connected account
- Payout transfers funded from the platform charge
- Webhook event handling
- Billing portal integration

Usage:
    from payments.adapters import StripeAdapter
    from payments.services import SplitPaymentOrchestrator

    outcome = SplitPaymentOrchestrator(StripeAdapter.from_settings()).finalize(session_id)
"""
