"""
DRF serializers for payments app.

This module provides serializers for:
- Creating a local subscription mirror from mapped Stripe attributes
- Applying webhook updates to an existing subscription mirror
- The subscribe API request and subscription responses

The create and webhook-update serializers are write paths used by
ConnectSubscriptionService; they are never exposed to API clients.

Usage:
    serializer = StripeConnectSubscriptionCreateSerializer(data=attrs)
    if serializer.is_valid():
        subscription = serializer.save()
"""

from __future__ import annotations

from rest_framework import serializers
from rest_framework.validators import UniqueTogetherValidator

from payments.models import StripeConnectSubscription


class StripeConnectSubscriptionCreateSerializer(serializers.ModelSerializer):
    """
    Validates a new subscription mirror.

    Identity fields (Stripe IDs, plan, user) are required here and nowhere
    else: once inserted they are never rewritten.
    """

    class Meta:
        model = StripeConnectSubscription
        fields = [
            "id_from_stripe",
            "customer_id_from_stripe",
            "plan_id_from_stripe",
            "stripe_connect_plan",
            "user",
            "quantity",
            "status",
            "application_fee_percent",
            "cancelled_at",
            "current_period_start",
            "current_period_end",
            "started_at",
            "ended_at",
            "stripe_created_at",
        ]
        extra_kwargs = {
            "quantity": {"min_value": 1},
        }
        validators = [
            UniqueTogetherValidator(
                queryset=StripeConnectSubscription.objects.all(),
                fields=["stripe_connect_plan", "user"],
                message="User is already subscribed to this plan.",
            ),
        ]


class StripeConnectSubscriptionWebhookUpdateSerializer(serializers.ModelSerializer):
    """
    Applies Stripe-reported changes to an existing subscription.

    Only fields Stripe can change after creation are writable. Identity
    fields present in the input are ignored.
    """

    class Meta:
        model = StripeConnectSubscription
        fields = list(StripeConnectSubscription.WEBHOOK_MUTABLE_FIELDS)
        extra_kwargs = {
            "quantity": {"min_value": 1},
        }


class StripeConnectSubscriptionSerializer(serializers.ModelSerializer):
    """Read serializer for subscription API responses."""

    project_id = serializers.UUIDField(
        source="stripe_connect_plan.project_id",
        read_only=True,
    )

    class Meta:
        model = StripeConnectSubscription
        fields = [
            "id",
            "id_from_stripe",
            "project_id",
            "quantity",
            "status",
            "current_period_start",
            "current_period_end",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CreateSubscriptionRequestSerializer(serializers.Serializer):
    """Request body for subscribing the current user to a project."""

    project_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


def flatten_errors(errors) -> dict[str, list[str]]:
    """Turn DRF ``serializer.errors`` into plain ``{field: [message, ...]}``."""
    flat: dict[str, list[str]] = {}
    for field_name, messages in errors.items():
        if not isinstance(messages, (list, tuple)):
            messages = [messages]
        flat[field_name] = [str(message) for message in messages]
    return flat
