"""Tests for SubscriptionParamsMapper."""

from datetime import datetime, timezone
from decimal import Decimal

from payments.adapters import StripeAdapter, SubscriptionParamsMapper, SubscriptionResult


class TestSubscriptionParamsMapper:
    def test_maps_stripe_fields(self, mock_subscription):
        result = StripeAdapter._subscription_result(
            mock_subscription(canceled_at=1701000000)
        )

        attrs = SubscriptionParamsMapper.build(result)

        assert attrs["id_from_stripe"] == "sub_test123"
        assert attrs["customer_id_from_stripe"] == "cus_connect123"
        assert attrs["plan_id_from_stripe"] == "plan_test123"
        assert attrs["quantity"] == 1000
        assert attrs["status"] == "active"
        assert attrs["application_fee_percent"] == Decimal("5.0")
        assert attrs["current_period_start"] == datetime(
            2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc
        )
        assert attrs["cancelled_at"] == datetime.fromtimestamp(
            1701000000, tz=timezone.utc
        )
        assert attrs["ended_at"] is None

    def test_extra_attributes_are_merged(self):
        result = SubscriptionResult(
            id="sub_1",
            customer="cus_1",
            plan="plan_1",
            quantity=10,
            status="active",
        )

        attrs = SubscriptionParamsMapper.build(
            result, extra={"stripe_connect_plan": "plan-pk", "user": 7}
        )

        assert attrs["stripe_connect_plan"] == "plan-pk"
        assert attrs["user"] == 7
        assert attrs["id_from_stripe"] == "sub_1"

    def test_missing_timestamps_map_to_none(self):
        result = SubscriptionResult(
            id="sub_1",
            customer="cus_1",
            plan="plan_1",
            quantity=10,
            status="incomplete",
        )

        attrs = SubscriptionParamsMapper.build(result)

        assert attrs["stripe_created_at"] is None
        assert attrs["application_fee_percent"] is None
