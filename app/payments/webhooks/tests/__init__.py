"""Tests for the Stripe webhook endpoint and handlers."""
