"""
Stripe API adapter for checkout and split-payment operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls go through an adapter
instance to ensure consistent error handling, timeouts, idempotency,
and observability.

The adapter wraps an explicitly constructed stripe.StripeClient. Nothing
is configured on the global `stripe` module, so views and services
receive the adapter as a collaborator and tests hand in a mock client.

Features:
- Per-client HTTP timeout, no automatic network retries
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Idempotency keys on every create/capture/cancel call
- Stripe-Account header support for connected-account calls

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_WEBHOOK_SECRET: Webhook signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)

Usage:
    from payments.adapters import StripeAdapter, CreatePaymentIntentParams

    adapter = StripeAdapter.from_settings()

    # Place an authorization hold on a connected account
    hold = adapter.create_payment_intent(
        CreatePaymentIntentParams(
            amount_cents=15200,
            currency="sgd",
            payment_method_id="pm_xxx",
            capture_method="manual",
            confirm=True,
            off_session=True,
            stripe_account="acct_xxx",
            idempotency_key=IdempotencyKeyGenerator.generate("authorize_connected", session_id),
        )
    )
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import stripe
from django.conf import settings

from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeCardDeclinedError,
    StripeInsufficientFundsError,
    StripeInvalidAccountError,
    StripeInvalidRequestError,
    StripeRateLimitError,
    StripeTimeoutError,
)

if TYPE_CHECKING:
    from collections.abc import Callable


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreatePaymentIntentParams:
    """
    Parameters for creating a Stripe PaymentIntent.

    Attributes:
        amount_cents: Payment amount in smallest currency unit
        currency: ISO 4217 currency code
        idempotency_key: Unique key for idempotent creation
        customer_id: Optional Stripe Customer ID
        payment_method_id: Payment method to charge
        capture_method: 'automatic' or 'manual' (default: 'automatic')
        confirm: Confirm immediately on creation
        off_session: Customer is not present (saved payment method)
        stripe_account: Connected account to create the intent on
        metadata: Key-value pairs to attach to the PaymentIntent
    """

    amount_cents: int
    currency: str
    idempotency_key: str
    customer_id: str | None = None
    payment_method_id: str | None = None
    capture_method: str = "automatic"
    confirm: bool = False
    off_session: bool = False
    stripe_account: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if self.amount_cents <= 0:
            raise ValueError("amount_cents must be positive")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")
        if not self.currency:
            raise ValueError("currency is required")
        if self.confirm and not self.payment_method_id:
            raise ValueError("payment_method_id is required to confirm")


@dataclass
class PaymentIntentResult:
    """
    Result from Stripe PaymentIntent operations.

    Attributes:
        id: PaymentIntent ID (pi_xxx)
        status: Current status (requires_capture, succeeded, canceled, etc.)
        amount_cents: Amount in minor units
        currency: Currency code
        payment_method_id: Payment method attached to the intent
        latest_charge_id: Charge created by confirmation (ch_xxx)
        stripe_account: Connected account the intent lives on, if any
        metadata: Attached metadata
        raw_response: Full Stripe response dict (for debugging)
    """

    id: str
    status: str
    amount_cents: int
    currency: str
    payment_method_id: str | None = None
    latest_charge_id: str | None = None
    stripe_account: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransferResult:
    """
    Result from Stripe Transfer operations.

    Attributes:
        id: Transfer ID (tr_xxx)
        amount_cents: Amount transferred in minor units
        currency: Currency code
        destination_account: Destination Stripe account ID
        source_transaction: Charge the transfer was funded from
        metadata: Attached metadata
        raw_response: Full Stripe response dict
    """

    id: str
    amount_cents: int
    currency: str
    destination_account: str
    source_transaction: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class CustomerResult:
    """Result from Stripe Customer creation."""

    id: str
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckoutSessionResult:
    """
    Result from Stripe Checkout Session operations.

    Attributes:
        id: Checkout Session ID (cs_xxx)
        customer_id: Customer the session was created for
        setup_intent_id: SetupIntent collected in setup mode
        url: Hosted checkout URL (only while the session is open)
        raw_response: Full Stripe response dict, returned verbatim to clients
    """

    id: str
    customer_id: str | None = None
    setup_intent_id: str | None = None
    url: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class SetupIntentResult:
    """Result from Stripe SetupIntent retrieval."""

    id: str
    status: str
    payment_method_id: str | None = None
    customer_id: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class PaymentMethodResult:
    """Result from cloning a PaymentMethod onto a connected account."""

    id: str
    stripe_account: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class PortalSessionResult:
    """Result from Stripe billing portal session creation."""

    id: str
    url: str
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe API calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    The hash is keyed with SECRET_KEY so keys cannot be predicted from
    public session ids, while the structured prefix aids debugging.

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation="authorize_primary",
            entity_id="cs_test_a1b2",
        )
        # Result: "authorize_primary:cs_test_a1b2:1:9f86d081"
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str,
        attempt: int = 1,
    ) -> str:
        """
        Generate a deterministic idempotency key.

        Args:
            operation: The step name (authorize_primary, capture_connected, etc.)
            entity_id: The entity the step acts for (checkout session id, etc.)
            attempt: Attempt number (default: 1)

        Returns:
            Formatted idempotency key string
        """
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


def _request_options(
    idempotency_key: str | None = None,
    stripe_account: str | None = None,
) -> dict[str, str]:
    """Build per-request options for StripeClient service calls."""
    options: dict[str, str] = {}
    if idempotency_key:
        options["idempotency_key"] = idempotency_key
    if stripe_account:
        options["stripe_account"] = stripe_account
    return options


def _to_dict(obj: Any) -> dict[str, Any]:
    """Return a plain dict for a Stripe object."""
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


def _object_id(value: Any) -> str | None:
    """Return the id of a possibly expanded Stripe reference."""
    if value is None or isinstance(value, str):
        return value
    return getattr(value, "id", None)


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    Holds a stripe.StripeClient and the webhook signing secret; no other
    state. One instance may serve many requests.

    Usage:
        adapter = StripeAdapter.from_settings()
        session = adapter.retrieve_checkout_session("cs_xxx")

        # In tests
        adapter = StripeAdapter(client=MagicMock(), webhook_secret="whsec_test")
    """

    def __init__(
        self,
        client: stripe.StripeClient | None = None,
        webhook_secret: str = "",
    ) -> None:
        """
        Initialize the adapter.

        Args:
            client: Configured Stripe client (built from settings on first
                use when omitted)
            webhook_secret: Signing secret for webhook verification
        """
        self._client = client
        self.webhook_secret = webhook_secret

    @classmethod
    def from_settings(cls) -> StripeAdapter:
        """Build an adapter from Django settings."""
        return cls(webhook_secret=settings.STRIPE_WEBHOOK_SECRET)

    @staticmethod
    def build_client() -> stripe.StripeClient:
        """
        Create a Stripe client from settings.

        Requests time out after STRIPE_API_TIMEOUT_SECONDS and are never
        retried by the SDK.
        """
        http_client = stripe.RequestsClient(timeout=settings.STRIPE_API_TIMEOUT_SECONDS)
        return stripe.StripeClient(
            settings.STRIPE_SECRET_KEY,
            http_client=http_client,
            max_network_retries=0,
        )

    @property
    def client(self) -> stripe.StripeClient:
        """The Stripe client, created on first access."""
        if self._client is None:
            self._client = self.build_client()
        return self._client

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @property
    def webhook_signing_enabled(self) -> bool:
        """Whether webhook payloads must carry a valid signature."""
        return bool(self.webhook_secret)

    def _execute(
        self,
        log_context: dict[str, Any],
        call: Callable[[], Any],
        level: int = logging.INFO,
    ) -> Any:
        """
        Run one Stripe call with timing logs and error translation.

        Args:
            log_context: Logging context; must include "operation"
            call: Zero-argument callable performing the request
            level: Log level for start/completion records

        Returns:
            The Stripe object returned by the call
        """
        logger = self.get_logger()
        start_time = time.time()
        logger.log(level, "Starting Stripe operation", extra=log_context)

        try:
            obj = call()
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise  # Never reached, but satisfies type checker

        duration_ms = (time.time() - start_time) * 1000
        logger.log(
            level,
            "Stripe operation completed",
            extra={
                **log_context,
                "object_id": getattr(obj, "id", None),
                "status": getattr(obj, "status", None),
                "duration_ms": duration_ms,
            },
        )
        return obj

    # =========================================================================
    # Customers and Checkout
    # =========================================================================

    def create_customer(self, idempotency_key: str) -> CustomerResult:
        """
        Create an anonymous Stripe Customer.

        Args:
            idempotency_key: Unique key for idempotent creation

        Returns:
            CustomerResult with the new customer id
        """
        customer = self._execute(
            {"operation": "create_customer", "idempotency_key": idempotency_key},
            lambda: self.client.v1.customers.create(
                params={},
                options=_request_options(idempotency_key),
            ),
        )
        return CustomerResult(id=customer.id, raw_response=_to_dict(customer))

    def create_setup_checkout_session(
        self,
        customer_id: str,
        success_url: str,
        cancel_url: str,
        idempotency_key: str,
    ) -> CheckoutSessionResult:
        """
        Create a Checkout Session in setup mode.

        Setup mode collects a card for later off-session use without
        charging it.

        Args:
            customer_id: Customer to attach the payment method to
            success_url: Redirect after completion (may contain {CHECKOUT_SESSION_ID})
            cancel_url: Redirect when the customer cancels
            idempotency_key: Unique key for idempotent creation

        Returns:
            CheckoutSessionResult for the new session
        """
        session = self._execute(
            {
                "operation": "create_checkout_session",
                "customer_id": customer_id,
                "idempotency_key": idempotency_key,
            },
            lambda: self.client.v1.checkout.sessions.create(
                params={
                    "mode": "setup",
                    "payment_method_types": ["card"],
                    "customer": customer_id,
                    "success_url": success_url,
                    "cancel_url": cancel_url,
                },
                options=_request_options(idempotency_key),
            ),
        )
        return self._checkout_session_result(session)

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionResult:
        """
        Retrieve a Checkout Session by ID.

        Raises:
            StripeInvalidRequestError: Session not found
        """
        session = self._execute(
            {"operation": "retrieve_checkout_session", "session_id": session_id},
            lambda: self.client.v1.checkout.sessions.retrieve(session_id),
            level=logging.DEBUG,
        )
        return self._checkout_session_result(session)

    def retrieve_setup_intent(self, setup_intent_id: str) -> SetupIntentResult:
        """
        Retrieve the SetupIntent collected by a setup-mode session.

        Raises:
            StripeInvalidRequestError: SetupIntent not found
        """
        intent = self._execute(
            {"operation": "retrieve_setup_intent", "setup_intent_id": setup_intent_id},
            lambda: self.client.v1.setup_intents.retrieve(setup_intent_id),
            level=logging.DEBUG,
        )
        return SetupIntentResult(
            id=intent.id,
            status=intent.status,
            payment_method_id=_object_id(getattr(intent, "payment_method", None)),
            customer_id=_object_id(getattr(intent, "customer", None)),
            raw_response=_to_dict(intent),
        )

    def create_billing_portal_session(
        self,
        customer_id: str,
        return_url: str,
    ) -> PortalSessionResult:
        """
        Open a hosted billing portal session for a customer.

        Portal sessions are short-lived and safe to create repeatedly,
        so no idempotency key is attached.
        """
        portal = self._execute(
            {"operation": "create_billing_portal_session", "customer_id": customer_id},
            lambda: self.client.v1.billing_portal.sessions.create(
                params={"customer": customer_id, "return_url": return_url},
            ),
        )
        return PortalSessionResult(id=portal.id, url=portal.url, raw_response=_to_dict(portal))

    # =========================================================================
    # Payment Methods and Intents
    # =========================================================================

    def clone_payment_method(
        self,
        payment_method_id: str,
        customer_id: str | None,
        stripe_account: str,
        idempotency_key: str,
    ) -> PaymentMethodResult:
        """
        Clone a platform PaymentMethod onto a connected account.

        Args:
            payment_method_id: Platform payment method (pm_xxx)
            customer_id: Platform customer owning the payment method
            stripe_account: Connected account receiving the clone
            idempotency_key: Unique key for idempotent creation

        Returns:
            PaymentMethodResult with the connected-account payment method id
        """
        params: dict[str, Any] = {"payment_method": payment_method_id}
        if customer_id:
            params["customer"] = customer_id

        method = self._execute(
            {
                "operation": "clone_payment_method",
                "payment_method_id": payment_method_id,
                "stripe_account": stripe_account,
                "idempotency_key": idempotency_key,
            },
            lambda: self.client.v1.payment_methods.create(
                params=params,
                options=_request_options(idempotency_key, stripe_account),
            ),
        )
        return PaymentMethodResult(
            id=method.id,
            stripe_account=stripe_account,
            raw_response=_to_dict(method),
        )

    def create_payment_intent(self, params: CreatePaymentIntentParams) -> PaymentIntentResult:
        """
        Create a Stripe PaymentIntent.

        With capture_method="manual" and confirm=True this places an
        authorization hold: funds are reserved and the intent settles
        in "requires_capture".

        Raises:
            StripeCardDeclinedError: Card was declined
            StripeInvalidAccountError: Connected account unusable
            StripeAPIUnavailableError: Stripe service unavailable
        """
        request: dict[str, Any] = {
            "amount": params.amount_cents,
            "currency": params.currency,
            "capture_method": params.capture_method,
            "metadata": params.metadata,
        }
        if params.customer_id:
            request["customer"] = params.customer_id
        if params.payment_method_id:
            request["payment_method"] = params.payment_method_id
        if params.confirm:
            request["confirm"] = True
        if params.off_session:
            request["off_session"] = True

        intent = self._execute(
            {
                "operation": "create_payment_intent",
                "amount_cents": params.amount_cents,
                "currency": params.currency,
                "stripe_account": params.stripe_account,
                "idempotency_key": params.idempotency_key,
            },
            lambda: self.client.v1.payment_intents.create(
                params=request,
                options=_request_options(params.idempotency_key, params.stripe_account),
            ),
        )
        return self._payment_intent_result(intent, params.stripe_account)

    def capture_payment_intent(
        self,
        payment_intent_id: str,
        idempotency_key: str,
        stripe_account: str | None = None,
    ) -> PaymentIntentResult:
        """
        Capture an authorized PaymentIntent.

        Raises:
            StripeInvalidRequestError: PaymentIntent not capturable
        """
        intent = self._execute(
            {
                "operation": "capture_payment_intent",
                "payment_intent_id": payment_intent_id,
                "stripe_account": stripe_account,
                "idempotency_key": idempotency_key,
            },
            lambda: self.client.v1.payment_intents.capture(
                payment_intent_id,
                options=_request_options(idempotency_key, stripe_account),
            ),
        )
        return self._payment_intent_result(intent, stripe_account)

    def cancel_payment_intent(
        self,
        payment_intent_id: str,
        idempotency_key: str,
        stripe_account: str | None = None,
    ) -> PaymentIntentResult:
        """
        Cancel a PaymentIntent, releasing any authorization hold.

        Raises:
            StripeInvalidRequestError: PaymentIntent cannot be cancelled
        """
        intent = self._execute(
            {
                "operation": "cancel_payment_intent",
                "payment_intent_id": payment_intent_id,
                "stripe_account": stripe_account,
                "idempotency_key": idempotency_key,
            },
            lambda: self.client.v1.payment_intents.cancel(
                payment_intent_id,
                options=_request_options(idempotency_key, stripe_account),
            ),
        )
        return self._payment_intent_result(intent, stripe_account)

    # =========================================================================
    # Transfers
    # =========================================================================

    def create_transfer(
        self,
        amount_cents: int,
        destination_account: str,
        idempotency_key: str,
        currency: str,
        source_transaction: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> TransferResult:
        """
        Create a transfer to a connected Stripe account.

        Args:
            amount_cents: Amount to transfer in minor units
            destination_account: Stripe Connect account ID (acct_xxx)
            idempotency_key: Unique key for idempotent transfer
            currency: Currency code
            source_transaction: Charge funding the transfer (ch_xxx)
            metadata: Optional metadata dict

        Raises:
            StripeInvalidAccountError: Invalid destination account
        """
        request: dict[str, Any] = {
            "amount": amount_cents,
            "currency": currency,
            "destination": destination_account,
            "metadata": metadata or {},
        }
        if source_transaction:
            request["source_transaction"] = source_transaction

        transfer = self._execute(
            {
                "operation": "create_transfer",
                "amount_cents": amount_cents,
                "destination_account": destination_account,
                "idempotency_key": idempotency_key,
            },
            lambda: self.client.v1.transfers.create(
                params=request,
                options=_request_options(idempotency_key),
            ),
        )
        raw = _to_dict(transfer)
        return TransferResult(
            id=transfer.id,
            amount_cents=transfer.amount,
            currency=transfer.currency,
            destination_account=_object_id(transfer.destination),
            source_transaction=_object_id(getattr(transfer, "source_transaction", None)),
            metadata=dict(raw.get("metadata") or {}),
            raw_response=raw,
        )

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: str,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        The signature covers the exact bytes Stripe sent, so payload must
        be the unmodified request body. The event is parsed from those
        same bytes.

        Args:
            payload: Raw webhook payload bytes
            signature: Stripe-Signature header value

        Returns:
            Parsed event data dict

        Raises:
            StripeInvalidRequestError: Invalid signature or payload
        """
        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                self.webhook_secret,
            )
        except stripe.SignatureVerificationError as e:
            raise StripeInvalidRequestError(
                "Invalid webhook signature",
                stripe_code="signature_verification_failed",
                details={"error": str(e)},
            )
        except ValueError as e:
            raise StripeInvalidRequestError(
                "Invalid webhook payload",
                stripe_code="invalid_payload",
                details={"error": str(e)},
            )
        return _to_dict(event)

    # =========================================================================
    # Result Mapping
    # =========================================================================

    @staticmethod
    def _payment_intent_result(intent: Any, stripe_account: str | None) -> PaymentIntentResult:
        # Stripe objects are not mappings; nested values are read from the plain dict
        raw = _to_dict(intent)
        return PaymentIntentResult(
            id=intent.id,
            status=intent.status,
            amount_cents=intent.amount,
            currency=intent.currency,
            payment_method_id=_object_id(getattr(intent, "payment_method", None)),
            latest_charge_id=_object_id(getattr(intent, "latest_charge", None)),
            stripe_account=stripe_account,
            metadata=dict(raw.get("metadata") or {}),
            raw_response=raw,
        )

    @staticmethod
    def _checkout_session_result(session: Any) -> CheckoutSessionResult:
        return CheckoutSessionResult(
            id=session.id,
            customer_id=_object_id(getattr(session, "customer", None)),
            setup_intent_id=_object_id(getattr(session, "setup_intent", None)),
            url=getattr(session, "url", None),
            raw_response=_to_dict(session),
        )

    # =========================================================================
    # Error Handling
    # =========================================================================

    def _handle_stripe_error(
        self,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Args:
            error: The Stripe exception
            log_context: Logging context dict
            duration_ms: Operation duration for logging

        Raises:
            StripeCardDeclinedError: Card was declined
            StripeInsufficientFundsError: Insufficient funds
            StripeInvalidAccountError: Invalid Connect account
            StripeInvalidRequestError: Invalid request parameters
            StripeRateLimitError: Rate limited
            StripeTimeoutError: Request timed out
            StripeAPIUnavailableError: API unavailable
        """
        logger = self.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None) or getattr(
                getattr(error, "error", None), "decline_code", None
            )
            payment_intent_id = _declined_payment_intent_id(error)
            logger.warning(
                "Card error from Stripe",
                extra={
                    **log_context,
                    "decline_code": decline_code,
                    "payment_intent_id": payment_intent_id,
                },
            )

            error_class = (
                StripeInsufficientFundsError
                if decline_code == "insufficient_funds"
                else StripeCardDeclinedError
            )
            raise error_class(
                str(error.user_message or error),
                stripe_code=error.code,
                decline_code=decline_code,
                payment_intent_id=payment_intent_id,
            )

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )

            if "account" in str(error).lower():
                raise StripeInvalidAccountError(
                    str(error.user_message or error),
                    stripe_code=error.code,
                )

            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            )

        elif isinstance(error, stripe.PermissionError):
            # Platform lacks access to the connected account
            logger.error("Stripe permission error", extra=log_context)
            raise StripeInvalidAccountError(
                str(error.user_message or error),
                stripe_code="permission_error",
            )

        elif isinstance(error, stripe.RateLimitError):
            logger.warning("Rate limited by Stripe", extra=log_context)
            raise StripeRateLimitError(
                "Stripe rate limit exceeded.",
                stripe_code="rate_limit",
            )

        elif isinstance(error, stripe.APIConnectionError):
            logger.error("Connection error to Stripe", extra=log_context, exc_info=True)
            if "timed out" in str(error).lower() or "timeout" in str(error).lower():
                raise StripeTimeoutError(
                    "Stripe request timed out.",
                    stripe_code="timeout",
                )
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe.",
                stripe_code="api_connection_error",
            )

        elif isinstance(error, stripe.AuthenticationError):
            # Invalid API key - permanent, operational issue
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeAPIUnavailableError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            )

        elif isinstance(error, stripe.StripeError):
            logger.error("Stripe API error", extra=log_context, exc_info=True)
            raise StripeAPIUnavailableError(
                "Stripe service error.",
                stripe_code="api_error",
            )

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                f"Unexpected Stripe error: {error}",
                stripe_code="unknown_error",
            )


def _declined_payment_intent_id(error: stripe.CardError) -> str | None:
    """Return the PaymentIntent a card error refers to, if Stripe sent one."""
    body = getattr(error, "json_body", None) or {}
    intent = (body.get("error") or {}).get("payment_intent") or {}
    if isinstance(intent, dict):
        return intent.get("id")
    return _object_id(intent)
