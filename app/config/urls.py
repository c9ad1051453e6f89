"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - Client entry page (index.html from STATIC_DIR)
    /checkout-session              - Finalize a checkout and run the split payment (GET)
    /create-checkout-session       - Start a setup-mode Checkout Session (POST)
    /setup                         - Publishable key and price ids (GET)
    /customer-portal               - Open a billing portal session (POST)
    /webhook                       - Stripe webhook endpoint (POST)
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)

Any other file in STATIC_DIR (success.html, canceled.html, assets) is served
from the site root by WhiteNoise before routing happens.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

from core.views import health_check

urlpatterns = [
    # Checkout, portal and webhook endpoints
    path("", include("payments.urls")),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # Documentation
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
]
