"""
Pytest configuration shared by all apps.

Provides test markers by filename and resets the Django cache between
tests (split-payment records and locks live there).
"""

import pytest


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full checkout journeys)
    - test_views.py, test_handlers.py, test_split_payment.py, etc. → integration
    - test_state_transitions.py, test_locks.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    # Filename patterns for each category
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_handlers.py",
        "test_split_payment.py",
        "test_checkout_service.py",
        "test_exception_handler.py",
    ]

    unit_patterns = [
        "test_serializers.py",
        "test_stripe_adapter.py",
        "test_state_transitions.py",
        "test_locks.py",
        "test_session_binding.py",
        "test_alerts.py",
        "test_exceptions.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filepath = str(item.fspath)
        filename = filepath.split("/")[-1]

        # Check patterns in priority order
        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def clear_cache():
    """Give every test an empty cache."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()
