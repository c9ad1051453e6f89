"""
DRF serializers for payments app.

This module provides serializers for:
- Checkout session requests (query string and JSON body)
- Response shapes used in the OpenAPI schema

Related files:
    - views.py: Payment API views

Usage:
    serializer = CheckoutSessionQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    session_id = serializer.validated_data["sessionId"]
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiExample, extend_schema_serializer
from rest_framework import serializers


class CheckoutSessionQuerySerializer(serializers.Serializer):
    """
    Query parameters for GET /checkout-session.

    Fields:
        sessionId: Checkout session id returned by create-checkout-session
    """

    sessionId = serializers.CharField(max_length=255, trim_whitespace=True)


class CustomerPortalRequestSerializer(serializers.Serializer):
    """
    Request body for POST /customer-portal.

    Fields:
        sessionId: Checkout session whose customer opens the portal
    """

    sessionId = serializers.CharField(max_length=255, trim_whitespace=True)


class CreateCheckoutSessionResponseSerializer(serializers.Serializer):
    sessionId = serializers.CharField(read_only=True)


@extend_schema_serializer(
    examples=[
        OpenApiExample(
            "Test mode configuration",
            value={
                "publishableKey": "pk_test_51H...",
                "basicPrice": "price_1HbasicXXXXXXXX",
                "proPrice": "price_1HproXXXXXXXXXX",
            },
            response_only=True,
        ),
    ]
)
class SetupResponseSerializer(serializers.Serializer):
    publishableKey = serializers.CharField(read_only=True)
    basicPrice = serializers.CharField(read_only=True)
    proPrice = serializers.CharField(read_only=True)


class CustomerPortalResponseSerializer(serializers.Serializer):
    url = serializers.URLField(read_only=True)


class SplitPaymentErrorSerializer(serializers.Serializer):
    """Body returned when a split payment is compensated or failed."""

    error = serializers.DictField(read_only=True)
    state = serializers.CharField(read_only=True)
