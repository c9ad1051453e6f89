"""
Pytest fixtures for Stripe adapter tests.

This module provides fixtures for testing the Stripe adapter, including
a mock Stripe client, mock API responses, and error conditions.

Sections:
    - Mock Stripe Objects
    - Mock Stripe Client Fixtures
    - Mock Stripe Error Fixtures
"""

from dataclasses import dataclass
from typing import Any
from unittest.mock import MagicMock

import pytest
import stripe

from payments.adapters import StripeAdapter


# =============================================================================
# Mock Stripe Objects
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with to_dict support."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)

    def to_dict(self) -> dict[str, Any]:
        return self.data


@pytest.fixture
def mock_payment_intent():
    """Create a mock PaymentIntent response."""

    def _create(
        id: str = "pi_test123456",
        status: str = "requires_capture",
        amount: int = 124800,
        currency: str = "sgd",
        payment_method: str = "pm_test123",
        latest_charge: str | None = "ch_test123",
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "payment_intent",
                "status": status,
                "amount": amount,
                "currency": currency,
                "capture_method": "manual",
                "payment_method": payment_method,
                "latest_charge": latest_charge,
                "metadata": metadata or {},
            }
        )

    return _create


@pytest.fixture
def mock_transfer():
    """Create a mock Transfer response."""

    def _create(
        id: str = "tr_test123456",
        amount: int = 500,
        currency: str = "sgd",
        destination: str = "acct_dest123",
        source_transaction: str | None = "ch_test123",
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "transfer",
                "amount": amount,
                "currency": currency,
                "destination": destination,
                "source_transaction": source_transaction,
                "metadata": metadata or {},
            }
        )

    return _create


@pytest.fixture
def mock_checkout_session():
    """Create a mock Checkout Session response."""

    def _create(
        id: str = "cs_test123456",
        customer: str = "cus_test123",
        setup_intent: str | None = "seti_test123",
        url: str | None = "https://checkout.stripe.com/c/pay/cs_test123456",
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "checkout.session",
                "mode": "setup",
                "customer": customer,
                "setup_intent": setup_intent,
                "url": url,
            }
        )

    return _create


@pytest.fixture
def mock_setup_intent():
    """Create a mock SetupIntent response."""

    def _create(
        id: str = "seti_test123",
        status: str = "succeeded",
        payment_method: str | None = "pm_test123",
        customer: str | None = "cus_test123",
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "setup_intent",
                "status": status,
                "payment_method": payment_method,
                "customer": customer,
            }
        )

    return _create


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture
def stripe_client():
    """A MagicMock standing in for stripe.StripeClient."""
    return MagicMock(name="StripeClient")


@pytest.fixture
def adapter(stripe_client):
    """StripeAdapter wired to the mock client."""
    return StripeAdapter(client=stripe_client, webhook_secret="whsec_test_secret")


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
        payment_intent_id: str | None = None,
    ) -> stripe.CardError:
        json_body = None
        if payment_intent_id:
            json_body = {
                "error": {
                    "type": "card_error",
                    "message": message,
                    "code": code,
                    "payment_intent": {"id": payment_intent_id},
                }
            }
        error = stripe.CardError(
            message=message,
            param=None,
            code=code,
            json_body=json_body,
        )
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such checkout.session: 'cs_missing'",
        param: str | None = "session",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(
            message=message,
            param=param,
            code=code,
        )

    return _create


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError(
        message="Too many requests hit the API too quickly.",
    )


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError."""
    return stripe.APIConnectionError(
        message="Could not connect to Stripe.",
    )


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError(
        message="Something went wrong on Stripe's end.",
    )


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError(
        message="Invalid API Key provided.",
    )


@pytest.fixture
def stripe_object():
    """Build an arbitrary mock Stripe object from keyword fields."""

    def _create(**fields: Any) -> MockStripeObject:
        return MockStripeObject(dict(fields))

    return _create


@pytest.fixture
def real_stripe_object():
    """
    Build a genuine stripe.StripeObject as the SDK returns it.

    Nested dicts (metadata, expanded references) become StripeObjects too,
    which are not mappings.
    """

    def _create(**fields: Any) -> stripe.StripeObject:
        return stripe.StripeObject.construct_from(dict(fields), "sk_test_dummy")

    return _create
