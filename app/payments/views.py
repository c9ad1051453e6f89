"""
DRF views for payments app.

This module provides API views for:
- The client entry page
- Publishable configuration for the client
- Checkout session creation and finalization (split payment)
- Billing portal access

Related files:
    - services/: CheckoutService, SplitPaymentOrchestrator
    - serializers.py: Request/response serializers
    - session_binding.py: Signed-cookie session ownership
    - webhooks/views.py: Stripe webhook endpoint
    - urls.py: URL routing

Endpoints:
    GET /                         - index.html from STATIC_DIR
    GET /setup                    - Publishable key and price ids
    POST /create-checkout-session - Create a setup-mode checkout session
    GET /checkout-session         - Finalize the split payment for a session
    POST /customer-portal         - Open a billing portal session

Security:
    - No user accounts; the checkout session id is bound to the browser
      that created it through a signed cookie
    - Webhook verifies Stripe signature
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.http import FileResponse, Http404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.adapters import StripeAdapter
from payments.exceptions import StripeError
from payments.serializers import (
    CheckoutSessionQuerySerializer,
    CreateCheckoutSessionResponseSerializer,
    CustomerPortalRequestSerializer,
    CustomerPortalResponseSerializer,
    SetupResponseSerializer,
    SplitPaymentErrorSerializer,
)
from payments.services import CheckoutService, SplitPaymentOrchestrator
from payments.session_binding import bind_checkout_session, verify_checkout_session

logger = logging.getLogger(__name__)


def index(request):
    """Serve the client entry page."""
    path = settings.STATIC_DIR / "index.html"
    if not path.is_file():
        raise Http404("index.html not found in STATIC_DIR")
    return FileResponse(path.open("rb"), content_type="text/html")


class StripeAdapterMixin:
    """
    Supplies the Stripe adapter to a view.

    Tests inject a mock with View.as_view(stripe_adapter=mock).
    """

    stripe_adapter: StripeAdapter | None = None

    def get_stripe_adapter(self) -> StripeAdapter:
        if self.stripe_adapter is None:
            self.stripe_adapter = StripeAdapter.from_settings()
        return self.stripe_adapter


class SetupView(APIView):
    """
    Publishable configuration for the client.

    GET /setup
    """

    permission_classes = [AllowAny]

    @extend_schema(responses={200: SetupResponseSerializer})
    def get(self, request):
        return Response(
            {
                "publishableKey": settings.STRIPE_PUBLISHABLE_KEY,
                "basicPrice": settings.BASIC_PRICE_ID,
                "proPrice": settings.PRO_PRICE_ID,
            }
        )


class CreateCheckoutSessionView(StripeAdapterMixin, APIView):
    """
    Create a customer and a setup-mode checkout session.

    POST /create-checkout-session

    Returns:
        200 {"sessionId": "cs_..."} and a signed binding cookie
        400 {"error": {"message": ...}} when Stripe rejects either call
    """

    permission_classes = [AllowAny]

    @extend_schema(
        request=None,
        responses={
            200: CreateCheckoutSessionResponseSerializer,
            400: OpenApiResponse(description="Stripe rejected the request"),
        },
    )
    def post(self, request):
        service = CheckoutService(self.get_stripe_adapter())
        try:
            session = service.create_checkout_session()
        except StripeError as e:
            logger.warning(
                "Checkout session creation failed",
                extra={"error_code": e.error_code},
            )
            return Response(
                {"error": {"message": e.message}},
                status=status.HTTP_400_BAD_REQUEST,
            )

        response = Response({"sessionId": session.id})
        bind_checkout_session(response, session.id)
        return response


class CheckoutSessionView(StripeAdapterMixin, APIView):
    """
    Finalize a completed checkout session into a split payment.

    GET /checkout-session?sessionId=cs_...

    Returns:
        200 with the Stripe checkout session object on settlement
        402 {"error", "state": "compensated"} when a hold was not authorized
        502 {"error", "state": "failed"} when capture or payouts failed
        403 when the session is not bound to this browser
        409 when another request is finalizing the same session
    """

    permission_classes = [AllowAny]

    @extend_schema(
        parameters=[
            OpenApiParameter("sessionId", str, OpenApiParameter.QUERY, required=True),
        ],
        responses={
            200: OpenApiResponse(description="Stripe checkout session object"),
            402: SplitPaymentErrorSerializer,
            403: OpenApiResponse(description="Session not bound to this browser"),
            409: OpenApiResponse(description="Session is being finalized"),
            502: SplitPaymentErrorSerializer,
        },
    )
    def get(self, request):
        serializer = CheckoutSessionQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        session_id = serializer.validated_data["sessionId"]

        verify_checkout_session(request, session_id)

        outcome = SplitPaymentOrchestrator(self.get_stripe_adapter()).finalize(session_id)
        return Response(outcome.body, status=outcome.status_code)


class CustomerPortalView(StripeAdapterMixin, APIView):
    """
    Open a billing portal session for the customer of a checkout session.

    POST /customer-portal {"sessionId": "cs_..."}
    """

    permission_classes = [AllowAny]

    @extend_schema(
        request=CustomerPortalRequestSerializer,
        responses={200: CustomerPortalResponseSerializer},
    )
    def post(self, request):
        serializer = CustomerPortalRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session_id = serializer.validated_data["sessionId"]

        verify_checkout_session(request, session_id)

        url = CheckoutService(self.get_stripe_adapter()).open_customer_portal(session_id)
        return Response({"url": url})
