"""
Split-payment finalization for completed checkout sessions.

This module provides the SplitPaymentOrchestrator which turns a completed
setup-mode checkout session into money movement:

1. Authorize two holds with the saved card: one on the platform account,
   one directly on a connected account (card cloned onto that account).
2. If both holds are authorized, capture both.
3. If both captures succeeded, transfer payout legs to their destination
   accounts, each funded from the platform charge.

Atomicity:
    Authorization failures are compensated: every hold that was created is
    cancelled and the run ends COMPENSATED without taking funds. Failures
    after money has moved end the run FAILED and are escalated to
    operators; nothing is reversed automatically.

Idempotency:
    Every Stripe call carries a key derived from (step, session id). The
    terminal outcome is cached under "split_payment:{session_id}" so a
    repeated request replays it without calling Stripe. Concurrent
    requests for one session are serialized with a DistributedLock.

Usage:
    from payments.services import SplitPaymentOrchestrator

    orchestrator = SplitPaymentOrchestrator(adapter)
    outcome = orchestrator.finalize("cs_test_123")
    return Response(outcome.body, status=outcome.status_code)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.core.cache import cache

from core.services import BaseService
from payments.adapters import CreatePaymentIntentParams, IdempotencyKeyGenerator
from payments.alerts import escalate_failed_run
from payments.exceptions import (
    InvalidStateTransitionError,
    PaymentValidationError,
    StripeCardDeclinedError,
    StripeError,
    StripeInsufficientFundsError,
)
from payments.locks import DistributedLock
from payments.state_machines import TERMINAL_STATES, SplitPaymentState, can_transition

if TYPE_CHECKING:
    from payments.adapters import PaymentIntentResult, StripeAdapter, TransferResult


logger = logging.getLogger(__name__)

AUTHORIZED_STATUS = "requires_capture"
CAPTURED_STATUS = "succeeded"


# =============================================================================
# Plan
# =============================================================================


@dataclass(frozen=True)
class PayoutLeg:
    """A transfer of `amount` (minor units) to connected account `destination`."""

    destination: str
    amount: int

    @classmethod
    def parse(cls, value: str) -> PayoutLeg:
        """
        Parse an "acct_id:amount" entry from SPLIT_PAYOUTS.

        Raises:
            PaymentValidationError: Entry is malformed
        """
        destination, sep, amount = value.strip().rpartition(":")
        if not sep or not destination:
            raise PaymentValidationError(
                f"Payout entry {value!r} must look like 'acct_id:amount'",
                details={"entry": value},
            )
        try:
            return cls(destination=destination, amount=int(amount))
        except ValueError:
            raise PaymentValidationError(
                f"Payout amount in {value!r} is not an integer",
                details={"entry": value},
            )


@dataclass(frozen=True)
class SplitPaymentPlan:
    """
    Amounts and accounts for one split payment.

    Attributes:
        currency: ISO 4217 currency code for holds and transfers
        primary_amount: Platform hold amount in minor units
        connected_account_id: Account holding the second hold
        connected_amount: Connected-account hold amount in minor units
        payouts: Transfers funded from the platform charge
    """

    currency: str
    primary_amount: int
    connected_account_id: str
    connected_amount: int
    payouts: tuple[PayoutLeg, ...] = ()

    def __post_init__(self) -> None:
        """Validate amounts and ids."""
        if not self.currency:
            raise PaymentValidationError("Split payment currency is required")
        if self.primary_amount <= 0 or self.connected_amount <= 0:
            raise PaymentValidationError(
                "Hold amounts must be positive",
                details={
                    "primary_amount": self.primary_amount,
                    "connected_amount": self.connected_amount,
                },
            )
        if not self.connected_account_id:
            raise PaymentValidationError("Connected account id is required")
        for leg in self.payouts:
            if leg.amount <= 0 or not leg.destination:
                raise PaymentValidationError(
                    "Payout legs need a destination and a positive amount",
                    details={"destination": leg.destination, "amount": leg.amount},
                )
        total = sum(leg.amount for leg in self.payouts)
        if total > self.primary_amount:
            raise PaymentValidationError(
                "Payouts exceed the platform hold amount",
                details={"payout_total": total, "primary_amount": self.primary_amount},
            )

    @classmethod
    def from_settings(cls) -> SplitPaymentPlan:
        """Build the plan from SPLIT_* settings."""
        return cls(
            currency=settings.SPLIT_PAYMENT_CURRENCY,
            primary_amount=settings.SPLIT_PRIMARY_HOLD_AMOUNT,
            connected_account_id=settings.SPLIT_CONNECTED_ACCOUNT_ID,
            connected_amount=settings.SPLIT_CONNECTED_HOLD_AMOUNT,
            payouts=tuple(PayoutLeg.parse(entry) for entry in settings.SPLIT_PAYOUTS),
        )


# =============================================================================
# Run
# =============================================================================


def _intent_summary(intent: PaymentIntentResult | None) -> dict[str, Any]:
    if intent is None:
        return {"id": None, "status": None}
    return {"id": intent.id, "status": intent.status, "amount": intent.amount_cents}


@dataclass
class SplitPaymentRun:
    """
    In-memory record of one finalization attempt.

    Attributes:
        session_id: Checkout session being finalized
        state: Current SplitPaymentState
        primary_hold: Platform PaymentIntent after authorization
        connected_hold: Connected-account PaymentIntent after authorization
        primary_capture: Platform PaymentIntent after capture
        connected_capture: Connected-account PaymentIntent after capture
        transfers: Payout transfers created so far
        history: (from_state, to_state) pairs in order
        failure_reason: Why the run ended COMPENSATED or FAILED
    """

    session_id: str
    state: str = SplitPaymentState.CREATED
    primary_hold: PaymentIntentResult | None = None
    connected_hold: PaymentIntentResult | None = None
    primary_capture: PaymentIntentResult | None = None
    connected_capture: PaymentIntentResult | None = None
    transfers: list[TransferResult] = field(default_factory=list)
    history: list[tuple[str, str]] = field(default_factory=list)
    failure_reason: str | None = None

    def transition_to(self, target: str) -> None:
        """
        Move the run to `target`.

        Raises:
            InvalidStateTransitionError: Transition is not allowed
        """
        current = self.state
        if not can_transition(current, target):
            raise InvalidStateTransitionError(
                f"Cannot move split payment from '{current}' to '{target}'",
                details={
                    "session_id": self.session_id,
                    "current_state": str(current),
                    "target_state": str(target),
                },
            )

        self.state = SplitPaymentState(target)
        self.history.append((str(current), str(target)))
        logger.info(
            f"Split payment {current} -> {target}",
            extra={
                "session_id": self.session_id,
                "from_state": str(current),
                "to_state": str(target),
            },
        )

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> dict[str, Any]:
        """Summary for logs and operator alerts."""
        return {
            "session_id": self.session_id,
            "state": str(self.state),
            "primary_hold": _intent_summary(self.primary_hold),
            "connected_hold": _intent_summary(self.connected_hold),
            "primary_capture": _intent_summary(self.primary_capture),
            "connected_capture": _intent_summary(self.connected_capture),
            "transfers": [
                {"id": t.id, "destination": t.destination_account, "amount": t.amount_cents}
                for t in self.transfers
            ],
            "history": [list(step) for step in self.history],
            "failure_reason": self.failure_reason,
        }


@dataclass
class SplitPaymentOutcome:
    """
    HTTP-ready result of a finalization.

    Attributes:
        state: Terminal state of the run
        status_code: HTTP status to respond with
        body: JSON body to respond with
        replayed: True when served from the cached record
    """

    state: str
    status_code: int
    body: dict[str, Any]
    replayed: bool = False


# =============================================================================
# Orchestrator
# =============================================================================


class SplitPaymentOrchestrator(BaseService):
    """
    Finalize checkout sessions into split payments.

    Instances hold the Stripe adapter and the plan; no request state.

    Usage:
        outcome = SplitPaymentOrchestrator(adapter).finalize(session_id)
    """

    RECORD_KEY = "split_payment:{session_id}"

    def __init__(
        self,
        adapter: StripeAdapter,
        plan: SplitPaymentPlan | None = None,
    ) -> None:
        self.adapter = adapter
        self.plan = plan or SplitPaymentPlan.from_settings()

    @classmethod
    def record_key(cls, session_id: str) -> str:
        return cls.RECORD_KEY.format(session_id=session_id)

    @classmethod
    def get_recorded_outcome(cls, session_id: str) -> SplitPaymentOutcome | None:
        """Return the cached terminal outcome for a session, if any."""
        record = cache.get(cls.record_key(session_id))
        if record is None:
            return None
        return SplitPaymentOutcome(**record, replayed=True)

    def finalize(self, session_id: str) -> SplitPaymentOutcome:
        """
        Finalize a checkout session exactly once.

        Args:
            session_id: Completed setup-mode checkout session id

        Returns:
            SplitPaymentOutcome with the response to send

        Raises:
            LockAcquisitionError: Another request is finalizing this session
            StripeError: Processor error before any hold was placed
        """
        logger = self.get_logger()

        recorded = self.get_recorded_outcome(session_id)
        if recorded is not None:
            logger.info(
                "Replaying recorded split payment outcome",
                extra={"session_id": session_id, "state": recorded.state},
            )
            return recorded

        with DistributedLock(
            f"split_payment:{session_id}",
            ttl=settings.SPLIT_PAYMENT_LOCK_TTL,
            timeout=settings.SPLIT_PAYMENT_LOCK_TIMEOUT,
        ):
            # A concurrent request may have finished while we waited
            recorded = self.get_recorded_outcome(session_id)
            if recorded is not None:
                logger.info(
                    "Replaying split payment outcome recorded while waiting",
                    extra={"session_id": session_id, "state": recorded.state},
                )
                return recorded

            outcome = self._run(SplitPaymentRun(session_id=session_id))
            cache.set(
                self.record_key(session_id),
                {
                    "state": outcome.state,
                    "status_code": outcome.status_code,
                    "body": outcome.body,
                },
                timeout=settings.SPLIT_PAYMENT_RECORD_TTL,
            )
            return outcome

    # =========================================================================
    # Steps
    # =========================================================================

    def _key(self, run: SplitPaymentRun, operation: str) -> str:
        return IdempotencyKeyGenerator.generate(operation, run.session_id)

    def _run(self, run: SplitPaymentRun) -> SplitPaymentOutcome:
        adapter = self.adapter
        plan = self.plan

        session = adapter.retrieve_checkout_session(run.session_id)
        if not session.setup_intent_id:
            raise PaymentValidationError(
                "Checkout session has no saved payment method",
                error_code="SETUP_INCOMPLETE",
                details={"session_id": run.session_id},
            )
        setup_intent = adapter.retrieve_setup_intent(session.setup_intent_id)
        if not setup_intent.payment_method_id:
            raise PaymentValidationError(
                "Checkout session has no saved payment method",
                error_code="SETUP_INCOMPLETE",
                details={"session_id": run.session_id},
            )
        customer_id = setup_intent.customer_id or session.customer_id
        metadata = {"checkout_session_id": run.session_id}

        # -- authorize ------------------------------------------------------
        run.transition_to(SplitPaymentState.AUTHORIZING)
        attempting_account: str | None = None
        try:
            run.primary_hold = adapter.create_payment_intent(
                CreatePaymentIntentParams(
                    amount_cents=plan.primary_amount,
                    currency=plan.currency,
                    customer_id=customer_id,
                    payment_method_id=setup_intent.payment_method_id,
                    capture_method="manual",
                    confirm=True,
                    off_session=True,
                    metadata=metadata,
                    idempotency_key=self._key(run, "authorize_primary"),
                )
            )
            attempting_account = plan.connected_account_id
            cloned = adapter.clone_payment_method(
                setup_intent.payment_method_id,
                customer_id=customer_id,
                stripe_account=plan.connected_account_id,
                idempotency_key=self._key(run, "clone_payment_method"),
            )
            run.connected_hold = adapter.create_payment_intent(
                CreatePaymentIntentParams(
                    amount_cents=plan.connected_amount,
                    currency=plan.currency,
                    payment_method_id=cloned.id,
                    capture_method="manual",
                    confirm=True,
                    off_session=True,
                    stripe_account=plan.connected_account_id,
                    metadata=metadata,
                    idempotency_key=self._key(run, "authorize_connected"),
                )
            )
        except StripeError as e:
            return self._compensate(run, e, declined_account=attempting_account)

        holds = (run.primary_hold, run.connected_hold)
        if any(hold.status != AUTHORIZED_STATUS for hold in holds):
            return self._compensate(run, None)

        run.transition_to(SplitPaymentState.AUTHORIZED)

        # -- capture --------------------------------------------------------
        try:
            run.primary_capture = adapter.capture_payment_intent(
                run.primary_hold.id,
                idempotency_key=self._key(run, "capture_primary"),
            )
            run.connected_capture = adapter.capture_payment_intent(
                run.connected_hold.id,
                idempotency_key=self._key(run, "capture_connected"),
                stripe_account=plan.connected_account_id,
            )
        except StripeError as e:
            return self._fail(run, f"Capture failed: {e.message}")

        run.transition_to(SplitPaymentState.CAPTURED)

        captures = (run.primary_capture, run.connected_capture)
        if any(capture.status != CAPTURED_STATUS for capture in captures):
            return self._fail(
                run,
                "Capture mismatch: "
                f"platform={run.primary_capture.status}, "
                f"connected={run.connected_capture.status}",
            )

        source_charge = run.primary_capture.latest_charge_id
        if not source_charge:
            return self._fail(run, "Captured platform payment has no charge to fund payouts")

        # -- payouts --------------------------------------------------------
        for index, leg in enumerate(plan.payouts):
            try:
                transfer = adapter.create_transfer(
                    amount_cents=leg.amount,
                    destination_account=leg.destination,
                    currency=plan.currency,
                    source_transaction=source_charge,
                    metadata=metadata,
                    idempotency_key=self._key(run, f"transfer_{index}"),
                )
            except StripeError as e:
                return self._fail(run, f"Payout to {leg.destination} failed: {e.message}")
            run.transfers.append(transfer)

        run.transition_to(SplitPaymentState.SETTLED)
        self.get_logger().info(
            "Split payment settled",
            extra={
                "session_id": run.session_id,
                "transfer_ids": [t.id for t in run.transfers],
            },
        )
        return SplitPaymentOutcome(
            state=str(run.state),
            status_code=200,
            body=session.raw_response,
        )

    def _compensate(
        self,
        run: SplitPaymentRun,
        error: StripeError | None,
        declined_account: str | None = None,
    ) -> SplitPaymentOutcome:
        """
        Cancel every hold created so far and end the run COMPENSATED.

        A declined confirmation can still leave an intent at Stripe; it is
        cancelled too when the error names it. If any cancellation fails
        the hold may still reserve funds, so the run ends FAILED and is
        escalated instead.
        """
        logger = self.get_logger()

        if error is None:
            reason = (
                "Authorization incomplete: "
                f"platform={run.primary_hold.status}, "
                f"connected={run.connected_hold.status}"
            )
        else:
            reason = f"Authorization failed: {error.message}"
        run.failure_reason = reason
        logger.warning(reason, extra={"session_id": run.session_id})

        to_cancel: list[tuple[str, str, str | None]] = []
        if run.primary_hold is not None:
            to_cancel.append(("cancel_primary", run.primary_hold.id, None))
        if run.connected_hold is not None:
            to_cancel.append(
                ("cancel_connected", run.connected_hold.id, self.plan.connected_account_id)
            )
        if error is not None and error.payment_intent_id:
            known = {intent_id for _, intent_id, _ in to_cancel}
            if error.payment_intent_id not in known:
                to_cancel.append(("cancel_declined", error.payment_intent_id, declined_account))

        for operation, intent_id, account in to_cancel:
            try:
                self.adapter.cancel_payment_intent(
                    intent_id,
                    idempotency_key=self._key(run, operation),
                    stripe_account=account,
                )
            except StripeError as e:
                return self._fail(run, f"{reason}; could not cancel hold {intent_id}: {e.message}")

        run.transition_to(SplitPaymentState.COMPENSATED)

        if error is None or isinstance(error, (StripeCardDeclinedError, StripeInsufficientFundsError)):
            status_code = 402
        else:
            status_code = error.http_status

        error_body: dict[str, Any] = {
            "message": error.message if error else reason,
            "code": error.error_code if error else "AUTHORIZATION_INCOMPLETE",
        }
        return SplitPaymentOutcome(
            state=str(run.state),
            status_code=status_code,
            body={"error": error_body, "state": str(run.state)},
        )

    def _fail(self, run: SplitPaymentRun, reason: str) -> SplitPaymentOutcome:
        """End the run FAILED and escalate to operators."""
        run.failure_reason = reason
        run.transition_to(SplitPaymentState.FAILED)
        self.get_logger().error(reason, extra={"session_id": run.session_id})
        escalate_failed_run(run, reason)
        return SplitPaymentOutcome(
            state=str(run.state),
            status_code=502,
            body={
                "error": {"message": reason, "code": "SPLIT_PAYMENT_FAILED"},
                "state": str(run.state),
            },
        )


__all__ = [
    "PayoutLeg",
    "SplitPaymentOrchestrator",
    "SplitPaymentOutcome",
    "SplitPaymentPlan",
    "SplitPaymentRun",
]
