"""
Pytest fixtures for payment tests.

The Stripe adapter is replaced by a MagicMock whose methods return the
adapter's own result dataclasses, so services and views run their real
logic without network access.

Usage:
    def test_settles(stripe_adapter, plan):
        outcome = SplitPaymentOrchestrator(stripe_adapter, plan).finalize(SESSION_ID)
        assert outcome.state == "settled"
"""

from unittest.mock import MagicMock

import pytest

from payments.adapters import (
    CheckoutSessionResult,
    CustomerResult,
    PaymentIntentResult,
    PaymentMethodResult,
    PortalSessionResult,
    SetupIntentResult,
    StripeAdapter,
    TransferResult,
)
from payments.services import PayoutLeg, SplitPaymentPlan

SESSION_ID = "cs_test_a1b2c3"
CONNECTED_ACCOUNT = "acct_connected"
PLATFORM_CHARGE = "ch_platform"


# =============================================================================
# Plan Fixtures
# =============================================================================


@pytest.fixture
def plan():
    """The default split: 124800 + 15200 holds, 500/700 payouts."""
    return SplitPaymentPlan(
        currency="sgd",
        primary_amount=124800,
        connected_account_id=CONNECTED_ACCOUNT,
        connected_amount=15200,
        payouts=(
            PayoutLeg(destination="acct_payout_a", amount=500),
            PayoutLeg(destination="acct_payout_b", amount=700),
        ),
    )


# =============================================================================
# Stripe Adapter Fixtures
# =============================================================================


@pytest.fixture
def checkout_session():
    """A completed setup-mode checkout session."""
    return CheckoutSessionResult(
        id=SESSION_ID,
        customer_id="cus_test",
        setup_intent_id="seti_test",
        raw_response={
            "id": SESSION_ID,
            "object": "checkout.session",
            "mode": "setup",
            "customer": "cus_test",
            "setup_intent": "seti_test",
            "status": "complete",
        },
    )


def _intent(id, status, amount, stripe_account=None, latest_charge_id=None):
    return PaymentIntentResult(
        id=id,
        status=status,
        amount_cents=amount,
        currency="sgd",
        latest_charge_id=latest_charge_id,
        stripe_account=stripe_account,
    )


@pytest.fixture
def hold_statuses():
    """Statuses returned when holds are created, keyed by 'primary'/'connected'."""
    return {"primary": "requires_capture", "connected": "requires_capture"}


@pytest.fixture
def capture_statuses():
    """Statuses returned when holds are captured, keyed by 'primary'/'connected'."""
    return {"primary": "succeeded", "connected": "succeeded"}


@pytest.fixture
def stripe_adapter(checkout_session, hold_statuses, capture_statuses):
    """
    Mock StripeAdapter that authorizes, captures and transfers successfully.

    Tests change behavior through hold_statuses / capture_statuses or by
    setting side_effect on individual methods.
    """
    adapter = MagicMock(spec=StripeAdapter)

    adapter.create_customer.return_value = CustomerResult(id="cus_test")
    adapter.create_setup_checkout_session.return_value = checkout_session
    adapter.retrieve_checkout_session.return_value = checkout_session
    adapter.retrieve_setup_intent.return_value = SetupIntentResult(
        id="seti_test",
        status="succeeded",
        payment_method_id="pm_test",
        customer_id="cus_test",
    )
    adapter.clone_payment_method.return_value = PaymentMethodResult(
        id="pm_clone",
        stripe_account=CONNECTED_ACCOUNT,
    )
    adapter.create_billing_portal_session.return_value = PortalSessionResult(
        id="bps_test",
        url="https://billing.stripe.com/p/session/test",
    )

    def create_payment_intent(params):
        if params.stripe_account:
            return _intent(
                "pi_connected", hold_statuses["connected"], params.amount_cents, CONNECTED_ACCOUNT
            )
        return _intent("pi_primary", hold_statuses["primary"], params.amount_cents)

    def capture_payment_intent(payment_intent_id, idempotency_key, stripe_account=None):
        if stripe_account:
            return _intent(
                payment_intent_id, capture_statuses["connected"], 15200, stripe_account
            )
        return _intent(
            payment_intent_id,
            capture_statuses["primary"],
            124800,
            latest_charge_id=PLATFORM_CHARGE,
        )

    def cancel_payment_intent(payment_intent_id, idempotency_key, stripe_account=None):
        return _intent(payment_intent_id, "canceled", 0, stripe_account)

    def create_transfer(
        amount_cents,
        destination_account,
        idempotency_key,
        currency,
        source_transaction=None,
        metadata=None,
    ):
        return TransferResult(
            id=f"tr_{destination_account}",
            amount_cents=amount_cents,
            currency=currency,
            destination_account=destination_account,
            source_transaction=source_transaction,
        )

    adapter.create_payment_intent.side_effect = create_payment_intent
    adapter.capture_payment_intent.side_effect = capture_payment_intent
    adapter.cancel_payment_intent.side_effect = cancel_payment_intent
    adapter.create_transfer.side_effect = create_transfer

    return adapter
