"""
Binding of checkout session ids to the browser that created them.

POST /create-checkout-session stores the new session id in a signed
cookie. Endpoints that act on a session id (finalization and the billing
portal) require the caller to present that cookie, so a leaked session id
alone cannot trigger charges or open another customer's portal.

Cookies are signed with SECRET_KEY and a dedicated salt through Django's
set_signed_cookie / get_signed_cookie, which also enforce max age.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.core import signing

from payments.exceptions import SessionBindingError

if TYPE_CHECKING:
    from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

COOKIE_SALT = "payments.checkout_session"


def bind_checkout_session(response: HttpResponse, session_id: str) -> None:
    """Attach the signed binding cookie for `session_id` to `response`."""
    response.set_signed_cookie(
        settings.CHECKOUT_SESSION_COOKIE_NAME,
        session_id,
        salt=COOKIE_SALT,
        max_age=settings.CHECKOUT_SESSION_COOKIE_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=settings.CHECKOUT_SESSION_COOKIE_SECURE,
    )


def verify_checkout_session(request: HttpRequest, session_id: str) -> None:
    """
    Check that the caller's binding cookie names `session_id`.

    Raises:
        SessionBindingError: Cookie missing, tampered, expired or foreign
    """
    if not settings.CHECKOUT_SESSION_BINDING_REQUIRED:
        return

    try:
        bound_session_id = request.get_signed_cookie(
            settings.CHECKOUT_SESSION_COOKIE_NAME,
            salt=COOKIE_SALT,
            max_age=settings.CHECKOUT_SESSION_COOKIE_MAX_AGE,
        )
    except KeyError:
        bound_session_id = None
    except signing.BadSignature:
        # SignatureExpired is a BadSignature
        logger.warning("Rejected tampered or expired checkout session cookie")
        bound_session_id = None

    if bound_session_id != session_id:
        raise SessionBindingError(
            "Checkout session is not bound to this browser",
            details={"session_id": session_id},
        )
