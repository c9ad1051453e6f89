"""
Checkout session and billing portal services.

CheckoutService creates setup-mode checkout sessions for new anonymous
customers and opens billing portal sessions for the customer behind an
existing checkout session.

Usage:
    from payments.services import CheckoutService

    service = CheckoutService(adapter)
    session = service.create_checkout_session()
    portal_url = service.open_customer_portal(session.id)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService
from payments.adapters import IdempotencyKeyGenerator
from payments.exceptions import PaymentValidationError

if TYPE_CHECKING:
    from payments.adapters import CheckoutSessionResult, StripeAdapter


class CheckoutService(BaseService):
    """Checkout and portal operations backed by a StripeAdapter."""

    def __init__(self, adapter: StripeAdapter) -> None:
        self.adapter = adapter

    def create_checkout_session(self) -> CheckoutSessionResult:
        """
        Create a customer and a setup-mode checkout session for it.

        The customer key comes from a fresh request token, so every call
        creates a new customer. The session key is derived from that
        customer id.

        Returns:
            CheckoutSessionResult for the new session

        Raises:
            StripeError: Either Stripe call failed
        """
        request_token = uuid.uuid4()
        customer = self.adapter.create_customer(
            idempotency_key=IdempotencyKeyGenerator.generate("create_customer", request_token),
        )

        domain = settings.DOMAIN.rstrip("/")
        session = self.adapter.create_setup_checkout_session(
            customer_id=customer.id,
            success_url=f"{domain}/success.html?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{domain}/canceled.html",
            idempotency_key=IdempotencyKeyGenerator.generate("create_checkout_session", customer.id),
        )

        self.get_logger().info(
            "Checkout session created",
            extra={"session_id": session.id, "customer_id": customer.id},
        )
        return session

    def open_customer_portal(self, session_id: str) -> str:
        """
        Open a billing portal session for the customer of a checkout session.

        Args:
            session_id: Checkout session id

        Returns:
            Portal URL to redirect the browser to

        Raises:
            PaymentValidationError: Checkout session has no customer
            StripeError: Stripe call failed
        """
        session = self.adapter.retrieve_checkout_session(session_id)
        if not session.customer_id:
            raise PaymentValidationError(
                "Checkout session has no customer",
                error_code="NO_CUSTOMER",
                details={"session_id": session_id},
            )

        portal = self.adapter.create_billing_portal_session(
            customer_id=session.customer_id,
            return_url=settings.DOMAIN,
        )
        return portal.url
