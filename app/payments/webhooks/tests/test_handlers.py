"""
Tests for webhook event handlers and the handler registry.
"""

import logging

import pytest

from core.services import ServiceResult
from payments.webhooks.handlers import (
    WEBHOOK_HANDLERS,
    StripeEvent,
    dispatch_webhook,
    register_handler,
)


@pytest.fixture
def completed_event():
    return StripeEvent.from_payload(
        {
            "id": "evt_completed",
            "type": "checkout.session.completed",
            "data": {"object": {"id": "cs_test123", "customer": "cus_test"}},
        }
    )


@pytest.fixture
def restore_registry():
    """Undo registrations made by a test."""
    saved = dict(WEBHOOK_HANDLERS)
    yield
    WEBHOOK_HANDLERS.clear()
    WEBHOOK_HANDLERS.update(saved)


class TestStripeEvent:
    """Tests for StripeEvent parsing."""

    def test_from_payload(self, completed_event):
        """Should read type, id and data object."""
        assert completed_event.event_type == "checkout.session.completed"
        assert completed_event.event_id == "evt_completed"
        assert completed_event.get_object_id() == "cs_test123"

    def test_from_minimal_payload(self):
        """Should tolerate payloads without id or data."""
        event = StripeEvent.from_payload({"type": "ping"})

        assert event.event_id is None
        assert event.data_object == {}
        assert event.get_object_id() is None


class TestDispatchWebhook:
    """Tests for dispatch_webhook."""

    def test_checkout_session_completed_logs_receipt(self, completed_event, caplog):
        """Should log 'Payment received' for completed checkouts."""
        with caplog.at_level(logging.INFO, logger="payments.webhooks.handlers"):
            result = dispatch_webhook(completed_event)

        assert result.success is True
        assert result.data == "cs_test123"
        assert any(r.getMessage() == "Payment received" for r in caplog.records)

    def test_unknown_event_is_accepted(self):
        """Should succeed without action for unregistered types."""
        result = dispatch_webhook(StripeEvent(event_type="invoice.paid"))

        assert result.success is True
        assert result.data is None

    def test_register_handler(self, restore_registry):
        """Should route events to a newly registered handler."""
        seen = []

        @register_handler("customer.created")
        def handle_customer_created(event):
            seen.append(event.get_object_id())
            return ServiceResult.ok("handled")

        result = dispatch_webhook(
            StripeEvent(event_type="customer.created", data={"object": {"id": "cus_1"}})
        )

        assert result.data == "handled"
        assert seen == ["cus_1"]

    def test_checkout_handler_registered(self):
        """checkout.session.completed is handled out of the box."""
        assert "checkout.session.completed" in WEBHOOK_HANDLERS
