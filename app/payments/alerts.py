"""
Operator alerting for split payments that need manual reconciliation.

A run that fails after money has moved (capture mismatch, payout failure,
or a hold that could not be released) is escalated two ways:

1. A CRITICAL record on the "payments.alerts" logger, which production
   log shipping routes to paging.
2. An email to settings.ADMINS via django.core.mail.mail_admins.

Escalation never raises: the HTTP response for the run must still be sent.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from django.core.mail import mail_admins

if TYPE_CHECKING:
    from payments.services.split_payment import SplitPaymentRun

alert_logger = logging.getLogger("payments.alerts")
logger = logging.getLogger(__name__)


def escalate_failed_run(run: SplitPaymentRun, reason: str) -> None:
    """
    Alert operators that a split-payment run needs manual attention.

    Args:
        run: The run that ended in a failed state
        reason: Short description of what went wrong
    """
    context = run.to_dict()
    alert_logger.critical(
        f"Split payment requires manual reconciliation: {reason}",
        extra={
            "session_id": run.session_id,
            "state": run.state,
            "primary_intent_id": context["primary_hold"]["id"],
            "primary_status": context["primary_capture"]["status"],
            "connected_intent_id": context["connected_hold"]["id"],
            "connected_status": context["connected_capture"]["status"],
        },
    )

    try:
        mail_admins(
            subject=f"Split payment {run.session_id} requires reconciliation",
            message=f"{reason}\n\n{json.dumps(context, indent=2, default=str)}",
            fail_silently=False,
        )
    except Exception:
        logger.exception(
            "Failed to email operators about split payment",
            extra={"session_id": run.session_id},
        )
