"""
Payment-specific exceptions for checkout and split-payment operations.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentValidationError - Invalid split configuration or input (400)
    └── PaymentProcessingError - Payment processing failures (502)
        └── StripeError - Base for all Stripe errors
            ├── StripeCardDeclinedError - Card declined (permanent, 402)
            ├── StripeInsufficientFundsError - Insufficient funds (permanent, 402)
            ├── StripeInvalidAccountError - Invalid connected account (permanent, 502)
            ├── StripeInvalidRequestError - Invalid request params (permanent, 400)
            ├── StripeRateLimitError - Rate limited (transient, 503)
            ├── StripeAPIUnavailableError - API unavailable (transient, 502)
            └── StripeTimeoutError - Request timeout (transient, 504)

    SessionBindingError - Checkout session not bound to caller (inherits PermissionDeniedError)
    LockAcquisitionError - Session lock timeout (inherits ConflictError)
    InvalidStateTransitionError - Split-payment transition not allowed (inherits ConflictError)

Usage:
    from payments.exceptions import InvalidStateTransitionError

    raise InvalidStateTransitionError(
        "Cannot move split payment from 'created' to 'captured'",
        details={"current_state": "created", "target_state": "captured"},
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError, PermissionDeniedError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    All payment-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent API error responses.
    """

    default_error_code: str = "PAYMENT_ERROR"


class PaymentValidationError(PaymentError):
    """
    Raised when payment validation fails.

    Use for:
    - Non-positive hold or transfer amounts
    - Missing connected account or payout destination
    - Malformed SPLIT_PAYOUTS entries

    Example:
        if amount <= 0:
            raise PaymentValidationError(
                "Hold amount must be positive",
                details={"amount": amount},
            )
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"
    http_status: int = 400


class PaymentProcessingError(PaymentError):
    """Raised when payment processing fails at the processor."""

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"
    http_status: int = 502


# =============================================================================
# Stripe-Specific Exceptions
# =============================================================================


class StripeError(PaymentProcessingError):
    """
    Base exception for all Stripe-related errors.

    Provides common attributes for Stripe error handling:
    - stripe_code: Stripe's internal error code
    - decline_code: Card decline code (if applicable)
    - payment_intent_id: Intent attached to a card error (if any)
    - is_retryable: Whether the operation could be retried

    Nothing in this service retries automatically; is_retryable is
    reported to callers in error details.
    """

    default_error_code: str = "STRIPE_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        payment_intent_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code
        self.payment_intent_id = payment_intent_id


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class StripeCardDeclinedError(StripeError):
    """
    Card was declined by the issuing bank.

    Raised when confirming an authorization hold fails. A declined
    hold may still exist at Stripe (payment_intent_id is set when
    Stripe reports it) and must be cancelled by the caller.

    Common decline codes:
    - generic_decline
    - lost_card / stolen_card
    - expired_card
    - authentication_required (off-session SCA)
    """

    default_error_code: str = "CARD_DECLINED"
    http_status: int = 402
    is_retryable: bool = False


class StripeInsufficientFundsError(StripeError):
    """
    Insufficient funds on the payment method.

    Separate from StripeCardDeclinedError for clearer user messaging.
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"
    http_status: int = 402
    is_retryable: bool = False


class StripeInvalidAccountError(StripeError):
    """
    Invalid Stripe Connect account.

    Raised when the connected account or a transfer destination is
    not found, disabled, or unable to receive funds. This requires
    manual intervention to resolve the account status.
    """

    default_error_code: str = "INVALID_STRIPE_ACCOUNT"
    is_retryable: bool = False


class StripeInvalidRequestError(StripeError):
    """
    Invalid request parameters sent to Stripe.

    Possible causes:
    - Unknown checkout session id supplied by the client
    - Hold not capturable (already captured or cancelled)
    - Invalid webhook signature

    Check the stripe_code and details for specific information
    about what was invalid.
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"
    http_status: int = 400
    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors
# -----------------------------------------------------------------------------


class StripeRateLimitError(StripeError):
    """
    Rate limited by Stripe API.

    Stripe allows 100 requests/second in live mode, 25/second in test mode.
    """

    default_error_code: str = "STRIPE_RATE_LIMITED"
    http_status: int = 503
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """
    Stripe API is temporarily unavailable.

    This covers:
    - Network connectivity issues
    - Stripe server errors (5xx)
    - Unrecognized SDK errors
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


class StripeTimeoutError(StripeError):
    """
    Stripe API call timed out.

    The request was sent but no response was received within
    STRIPE_API_TIMEOUT_SECONDS.

    IMPORTANT: The operation may have succeeded on Stripe's side.
    Every create call carries a deterministic idempotency key, so
    repeating the checkout request returns the original object.
    """

    default_error_code: str = "STRIPE_TIMEOUT"
    http_status: int = 504
    is_retryable: bool = True


# =============================================================================
# Access and Concurrency Exceptions
# =============================================================================


class SessionBindingError(PermissionDeniedError):
    """
    Raised when a checkout session id is not bound to the caller.

    The binding is a signed cookie set when the session was created.
    Missing, tampered, expired, or foreign cookies all raise this error.
    """

    default_error_code: str = "SESSION_BINDING_MISMATCH"


class LockAcquisitionError(ConflictError):
    """
    Raised when a session lock cannot be acquired.

    Another request is finalizing the same checkout session and did not
    finish within SPLIT_PAYMENT_LOCK_TIMEOUT.

    Example:
        with DistributedLock(f"split_payment:{session_id}", ttl=120, timeout=5):
            ...
    """

    default_error_code: str = "LOCK_ACQUISITION_FAILED"


class InvalidStateTransitionError(ConflictError):
    """
    Raised when a split-payment state transition is not allowed.

    Attributes:
        details: Contains current_state and target_state
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "PaymentValidationError",
    "PaymentProcessingError",
    # Stripe-specific
    "StripeError",
    "StripeCardDeclinedError",
    "StripeInsufficientFundsError",
    "StripeInvalidAccountError",
    "StripeInvalidRequestError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
    "StripeTimeoutError",
    # Access and concurrency
    "SessionBindingError",
    "LockAcquisitionError",
    "InvalidStateTransitionError",
]
