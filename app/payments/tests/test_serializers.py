"""
Tests for subscription serializers.

The create serializer is fed by SubscriptionParamsMapper, so tests build
their input the same way the service does.
"""

from decimal import Decimal

from payments.adapters import SubscriptionParamsMapper, SubscriptionResult
from payments.serializers import (
    CreateSubscriptionRequestSerializer,
    StripeConnectSubscriptionCreateSerializer,
    StripeConnectSubscriptionSerializer,
    StripeConnectSubscriptionWebhookUpdateSerializer,
    flatten_errors,
)
from payments.state_machines import SubscriptionStatus
from payments.tests.factories import (
    StripeConnectPlanFactory,
    StripeConnectSubscriptionFactory,
)
from authentication.tests.factories import UserFactory


def mapped_attrs(plan, user, **overrides):
    values = {
        "id": "sub_serializer",
        "customer": "cus_connect_1",
        "plan": plan.id_from_stripe,
        "quantity": 1000,
        "status": "active",
        "application_fee_percent": 5.0,
        "created": 1700000000,
        "current_period_start": 1700000000,
        "current_period_end": 1702592000,
    }
    values.update(overrides)
    return SubscriptionParamsMapper.build(
        SubscriptionResult(**values),
        extra={"stripe_connect_plan": plan.id, "user": user.id},
    )


class TestStripeConnectSubscriptionCreateSerializer:
    def test_saves_mapped_subscription(self, db):
        plan = StripeConnectPlanFactory()
        user = UserFactory()

        serializer = StripeConnectSubscriptionCreateSerializer(
            data=mapped_attrs(plan, user)
        )

        assert serializer.is_valid(), serializer.errors
        subscription = serializer.save()
        assert subscription.id_from_stripe == "sub_serializer"
        assert subscription.stripe_connect_plan == plan
        assert subscription.user == user
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.application_fee_percent == Decimal("5.00")
        assert subscription.current_period_end is not None

    def test_rejects_second_subscription_for_plan_and_user(self, db):
        existing = StripeConnectSubscriptionFactory()

        serializer = StripeConnectSubscriptionCreateSerializer(
            data=mapped_attrs(existing.stripe_connect_plan, existing.user)
        )

        assert not serializer.is_valid()
        assert "non_field_errors" in serializer.errors

    def test_rejects_zero_quantity(self, db):
        serializer = StripeConnectSubscriptionCreateSerializer(
            data=mapped_attrs(StripeConnectPlanFactory(), UserFactory(), quantity=0)
        )

        assert not serializer.is_valid()
        assert "quantity" in serializer.errors

    def test_rejects_unknown_status(self, db):
        serializer = StripeConnectSubscriptionCreateSerializer(
            data=mapped_attrs(StripeConnectPlanFactory(), UserFactory(), status="weird")
        )

        assert not serializer.is_valid()
        assert "status" in serializer.errors


class TestStripeConnectSubscriptionWebhookUpdateSerializer:
    def test_ignores_identity_fields(self, db):
        subscription = StripeConnectSubscriptionFactory()
        original_plan = subscription.stripe_connect_plan
        other_plan = StripeConnectPlanFactory()

        serializer = StripeConnectSubscriptionWebhookUpdateSerializer(
            subscription,
            data={
                "status": "past_due",
                "quantity": 50,
                "stripe_connect_plan": other_plan.id,
                "id_from_stripe": "sub_rewritten",
            },
        )

        assert serializer.is_valid(), serializer.errors
        serializer.save()
        subscription.refresh_from_db()
        assert subscription.status == SubscriptionStatus.PAST_DUE
        assert subscription.quantity == 50
        assert subscription.stripe_connect_plan == original_plan
        assert subscription.id_from_stripe != "sub_rewritten"


class TestStripeConnectSubscriptionSerializer:
    def test_exposes_project_id(self, db):
        subscription = StripeConnectSubscriptionFactory()

        data = StripeConnectSubscriptionSerializer(subscription).data

        assert data["project_id"] == str(subscription.stripe_connect_plan.project_id)
        assert data["id_from_stripe"] == subscription.id_from_stripe
        assert data["status"] == "active"


class TestCreateSubscriptionRequestSerializer:
    def test_requires_positive_quantity(self):
        serializer = CreateSubscriptionRequestSerializer(
            data={"project_id": "6f1c1c3e-8f3b-4d5e-9a51-0c2f5e2f7d11", "quantity": 0}
        )

        assert not serializer.is_valid()
        assert "quantity" in serializer.errors

    def test_requires_uuid_project_id(self):
        serializer = CreateSubscriptionRequestSerializer(
            data={"project_id": "not-a-uuid", "quantity": 10}
        )

        assert not serializer.is_valid()
        assert "project_id" in serializer.errors


def test_flatten_errors_stringifies_messages():
    assert flatten_errors({"quantity": ["too small"], "status": "bad"}) == {
        "quantity": ["too small"],
        "status": ["bad"],
    }
