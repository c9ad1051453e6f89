"""
Tests for infrastructure endpoints.
"""

from unittest.mock import patch

from django.test import override_settings


class TestHealthCheck:
    """Tests for GET /health/."""

    def test_healthy(self, client):
        """Should report healthy with a configured key and working cache."""
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "cache": "connected",
            "stripe": "configured",
        }

    @override_settings(STRIPE_SECRET_KEY="")
    def test_missing_stripe_key(self, client):
        """Should answer 503 without a Stripe secret key."""
        response = client.get("/health/")

        assert response.status_code == 503
        assert response.json()["stripe"] == "missing_key"
        assert response.json()["status"] == "unhealthy"

    def test_cache_down(self, client):
        """Should report the cache as disconnected but stay up."""
        with patch("core.views.cache") as mock_cache:
            mock_cache.set.side_effect = ConnectionError("redis down")
            response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["cache"] == "disconnected"
