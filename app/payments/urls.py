"""
URL configuration for the payments app.

Routes:
    - GET  /                        - Client entry page
    - GET  /setup                   - Publishable configuration
    - POST /create-checkout-session - Create a checkout session
    - GET  /checkout-session        - Finalize the split payment
    - POST /customer-portal         - Open a billing portal session
    - POST /webhook                 - Stripe webhook endpoint

Paths carry no trailing slash to match the browser client.

Usage:
    # In config/urls.py
    urlpatterns = [
        path("", include("payments.urls")),
    ]
"""

from django.urls import path

from payments import views
from payments.webhooks.views import stripe_webhook

app_name = "payments"

urlpatterns = [
    path("", views.index, name="index"),
    path("setup", views.SetupView.as_view(), name="setup"),
    path(
        "create-checkout-session",
        views.CreateCheckoutSessionView.as_view(),
        name="create_checkout_session",
    ),
    path("checkout-session", views.CheckoutSessionView.as_view(), name="checkout_session"),
    path("customer-portal", views.CustomerPortalView.as_view(), name="customer_portal"),
    # Webhook endpoints
    path("webhook", stripe_webhook, name="stripe_webhook"),
]
