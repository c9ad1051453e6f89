"""
State machine enum and helpers for split-payment runs.
"""

from payments.state_machines.states import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATES,
    SplitPaymentState,
    can_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "SplitPaymentState",
    "TERMINAL_STATES",
    "can_transition",
]
