"""
Webhook event handlers for Stripe events.

This module provides a handler registry and implementations for
processing different Stripe webhook events.

The handler registry allows:
- Clean separation between event routing and handling
- Easy extension for new event types
- Unknown event types accepted without action

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    # Register a custom handler
    @register_handler("custom.event")
    def handle_custom_event(event: StripeEvent) -> ServiceResult:
        ...

    # Dispatch an event to its handler
    result = dispatch_webhook(StripeEvent.from_payload(event_data))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from core.services import ServiceResult

logger = logging.getLogger(__name__)


# =============================================================================
# Event
# =============================================================================


@dataclass
class StripeEvent:
    """
    A webhook event as delivered by Stripe.

    Attributes:
        event_type: Event type (e.g. "checkout.session.completed")
        data: The event's "data" member
        event_id: Stripe event id (evt_xxx), absent in hand-made payloads
    """

    event_type: str
    data: dict[str, Any] = field(default_factory=dict)
    event_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> StripeEvent:
        return cls(
            event_type=payload.get("type") or "",
            data=payload.get("data") or {},
            event_id=payload.get("id"),
        )

    @property
    def data_object(self) -> dict[str, Any]:
        """The object the event is about."""
        return self.data.get("object") or {}

    def get_object_id(self) -> str | None:
        return self.data_object.get("id")


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[StripeEvent], ServiceResult]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Usage:
        @register_handler("checkout.session.completed")
        def handle_checkout_completed(event: StripeEvent) -> ServiceResult:
            ...

    Args:
        event_type: The Stripe event type

    Returns:
        Decorator function that registers the handler
    """

    def decorator(func: Callable[[StripeEvent], ServiceResult]) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(event: StripeEvent) -> ServiceResult:
    """
    Dispatch a webhook event to the appropriate handler.

    Looks up the handler by event type and calls it. If no handler
    is registered, logs and returns success (unknown events are
    accepted and ignored).

    Args:
        event: The StripeEvent to process

    Returns:
        ServiceResult from the handler, or success if no handler
    """
    handler = WEBHOOK_HANDLERS.get(event.event_type)

    if not handler:
        logger.info(
            f"No handler registered for event type: {event.event_type}",
            extra={"stripe_event_id": event.event_id},
        )
        return ServiceResult.ok(None)

    logger.info(
        f"Dispatching {event.event_type} to handler",
        extra={"stripe_event_id": event.event_id},
    )

    return handler(event)


# =============================================================================
# Checkout Handlers
# =============================================================================


@register_handler("checkout.session.completed")
def handle_checkout_session_completed(event: StripeEvent) -> ServiceResult:
    """
    Acknowledge a completed checkout session.

    Money movement happens when the browser returns to the success page
    and calls GET /checkout-session; this handler only records receipt.
    """
    session_id = event.get_object_id()

    logger.info(
        "Payment received",
        extra={
            "stripe_event_id": event.event_id,
            "session_id": session_id,
            "customer_id": event.data_object.get("customer"),
        },
    )
    return ServiceResult.ok(session_id)
