"""
Tests for payments app.

This package contains test modules for:
- test_split_payment.py: SplitPaymentOrchestrator and plan tests
- test_checkout_service.py: CheckoutService tests
- test_state_transitions.py: Split-payment state machine tests
- test_locks.py: DistributedLock tests
- test_session_binding.py: Signed-cookie session binding tests
- test_alerts.py: Operator escalation tests
- test_views.py: API endpoint tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_split_payment.py
"""
