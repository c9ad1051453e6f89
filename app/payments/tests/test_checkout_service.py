"""
Tests for CheckoutService.

Tests cover:
- Customer and setup-mode checkout session creation
- Redirect URLs built from DOMAIN
- Billing portal sessions for an existing checkout session
"""

import pytest
from django.test import override_settings

from payments.adapters import CheckoutSessionResult
from payments.exceptions import PaymentValidationError
from payments.services import CheckoutService
from payments.tests.conftest import SESSION_ID


class TestCreateCheckoutSession:
    """Tests for CheckoutService.create_checkout_session."""

    @pytest.fixture(autouse=True)
    def _domain(self, settings):
        settings.DOMAIN = "https://shop.example.com"

    def test_creates_customer_then_session(self, stripe_adapter, checkout_session):
        """Should create a customer and a session bound to it."""
        session = CheckoutService(stripe_adapter).create_checkout_session()

        assert session == checkout_session
        stripe_adapter.create_customer.assert_called_once()
        kwargs = stripe_adapter.create_setup_checkout_session.call_args.kwargs
        assert kwargs["customer_id"] == "cus_test"

    def test_redirect_urls(self, stripe_adapter):
        """Should redirect to success.html with the session placeholder."""
        CheckoutService(stripe_adapter).create_checkout_session()

        kwargs = stripe_adapter.create_setup_checkout_session.call_args.kwargs
        assert kwargs["success_url"] == (
            "https://shop.example.com/success.html?session_id={CHECKOUT_SESSION_ID}"
        )
        assert kwargs["cancel_url"] == "https://shop.example.com/canceled.html"

    def test_each_call_creates_a_new_customer(self, stripe_adapter):
        """Should use a fresh customer idempotency key per request."""
        service = CheckoutService(stripe_adapter)
        service.create_checkout_session()
        service.create_checkout_session()

        keys = [
            c.kwargs["idempotency_key"]
            for c in stripe_adapter.create_customer.call_args_list
        ]
        assert keys[0] != keys[1]
        assert all(key.startswith("create_customer:") for key in keys)

    def test_session_key_derived_from_customer(self, stripe_adapter):
        """Should key the session creation on the customer id."""
        CheckoutService(stripe_adapter).create_checkout_session()

        key = stripe_adapter.create_setup_checkout_session.call_args.kwargs["idempotency_key"]
        assert key.startswith("create_checkout_session:cus_test:1:")


class TestOpenCustomerPortal:
    """Tests for CheckoutService.open_customer_portal."""

    @override_settings(DOMAIN="https://shop.example.com")
    def test_returns_portal_url(self, stripe_adapter):
        """Should open a portal for the session's customer and return to DOMAIN."""
        url = CheckoutService(stripe_adapter).open_customer_portal(SESSION_ID)

        assert url == "https://billing.stripe.com/p/session/test"
        stripe_adapter.retrieve_checkout_session.assert_called_once_with(SESSION_ID)
        stripe_adapter.create_billing_portal_session.assert_called_once_with(
            customer_id="cus_test",
            return_url="https://shop.example.com",
        )

    def test_session_without_customer(self, stripe_adapter):
        """Should raise PaymentValidationError when there is no customer."""
        stripe_adapter.retrieve_checkout_session.return_value = CheckoutSessionResult(
            id=SESSION_ID
        )

        with pytest.raises(PaymentValidationError) as exc_info:
            CheckoutService(stripe_adapter).open_customer_portal(SESSION_ID)

        assert exc_info.value.error_code == "NO_CUSTOMER"
        stripe_adapter.create_billing_portal_session.assert_not_called()
