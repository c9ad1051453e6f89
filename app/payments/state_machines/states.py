"""
State enum and transition table for split-payment runs.

A split-payment run is the finalization of one checkout session: two
authorization holds, their capture, and the payout transfers funded from
the captured platform charge.

State Machine Overview:

    created → authorizing → authorized → captured → settled (happy path)
    authorizing → compensated (a hold failed, created holds were cancelled)
    created/authorizing/authorized/captured → failed

Terminal states: SETTLED, COMPENSATED, FAILED
"""

from django.db import models


class SplitPaymentState(models.TextChoices):
    """
    States for a split-payment run.

    State Flow (Success):
        CREATED → AUTHORIZING → AUTHORIZED → CAPTURED → SETTLED

    Compensation Flow:
        AUTHORIZING → COMPENSATED

    Failure Flow:
        Any non-terminal state → FAILED

    CAPTURED → FAILED is the capture-mismatch case: money has moved
    and an operator must reconcile by hand.
    """

    CREATED = "created", "Created"
    AUTHORIZING = "authorizing", "Authorizing"
    AUTHORIZED = "authorized", "Authorized"
    CAPTURED = "captured", "Captured"
    SETTLED = "settled", "Settled"
    COMPENSATED = "compensated", "Compensated"
    FAILED = "failed", "Failed"


ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    SplitPaymentState.CREATED: frozenset(
        {SplitPaymentState.AUTHORIZING, SplitPaymentState.FAILED}
    ),
    SplitPaymentState.AUTHORIZING: frozenset(
        {
            SplitPaymentState.AUTHORIZED,
            SplitPaymentState.COMPENSATED,
            SplitPaymentState.FAILED,
        }
    ),
    SplitPaymentState.AUTHORIZED: frozenset(
        {SplitPaymentState.CAPTURED, SplitPaymentState.FAILED}
    ),
    SplitPaymentState.CAPTURED: frozenset(
        {SplitPaymentState.SETTLED, SplitPaymentState.FAILED}
    ),
    SplitPaymentState.SETTLED: frozenset(),
    SplitPaymentState.COMPENSATED: frozenset(),
    SplitPaymentState.FAILED: frozenset(),
}

TERMINAL_STATES: frozenset[str] = frozenset(
    state for state, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: str, target: str) -> bool:
    """Return whether a run in `current` may move to `target`."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


__all__ = [
    "ALLOWED_TRANSITIONS",
    "SplitPaymentState",
    "TERMINAL_STATES",
    "can_transition",
]
