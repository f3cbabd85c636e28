"""
Translate Stripe subscriptions into StripeConnectSubscription attributes.

The mapper is pure: it takes a SubscriptionResult (as returned by
StripeAdapter) plus caller-supplied attributes and returns a flat dict
ready for a serializer. Stripe's Unix timestamps become aware UTC
datetimes and the fee percent becomes a Decimal.

Usage:
    from payments.adapters import SubscriptionParamsMapper

    attrs = SubscriptionParamsMapper.build(
        stripe_subscription,
        extra={"stripe_connect_plan": plan.id, "user": user.id},
    )
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from payments.adapters.stripe_adapter import SubscriptionResult


def _timestamp(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


class SubscriptionParamsMapper:
    """Maps Stripe subscription fields onto local model field names."""

    @staticmethod
    def build(
        subscription: SubscriptionResult,
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Build the local attribute map for a Stripe subscription.

        Args:
            subscription: Subscription as returned by StripeAdapter
            extra: Attributes merged over the mapped ones (ownership links)

        Returns:
            Dict keyed by StripeConnectSubscription field names
        """
        attrs = {
            "id_from_stripe": subscription.id,
            "customer_id_from_stripe": subscription.customer,
            "plan_id_from_stripe": subscription.plan,
            "quantity": subscription.quantity,
            "status": subscription.status,
            "application_fee_percent": _decimal(subscription.application_fee_percent),
            "cancelled_at": _timestamp(subscription.canceled_at),
            "current_period_start": _timestamp(subscription.current_period_start),
            "current_period_end": _timestamp(subscription.current_period_end),
            "started_at": _timestamp(subscription.start_date),
            "ended_at": _timestamp(subscription.ended_at),
            "stripe_created_at": _timestamp(subscription.created),
        }
        if extra:
            attrs.update(extra)
        return attrs
