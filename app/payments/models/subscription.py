"""
StripeConnectSubscription model.

Local record of a user's recurring donation to a project, billed through
the project's plan on the organization's connected account.

Invariants:
    - At most one subscription per (plan, user), enforced by a unique
      constraint
    - ``id_from_stripe`` is the subscription ID on the connected account
    - Webhook synchronization only rewrites the fields Stripe can change
      (see WEBHOOK_MUTABLE_FIELDS); ownership never changes after insert
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import SubscriptionStatus


class StripeConnectSubscription(UUIDPrimaryKeyMixin, BaseModel):
    """
    A user's subscription to a project's plan.

    Fields:
        id_from_stripe: Stripe Subscription ID (sub_xxx)
        stripe_connect_plan: Plan subscribed to
        user: Subscribing user
        customer_id_from_stripe: Connect customer ID the subscription bills
        plan_id_from_stripe: Stripe Plan ID at creation time
        quantity: Plan units (monthly donation in cents for a 1-cent plan)
        status: Stripe subscription status
        application_fee_percent: Platform fee taken from each invoice
        cancelled_at: When cancellation was requested
        current_period_start / current_period_end: Active billing period
        started_at: Start of the subscription
        ended_at: When the subscription ended, if it has
        stripe_created_at: When Stripe created the subscription
    """

    WEBHOOK_MUTABLE_FIELDS = (
        "status",
        "quantity",
        "application_fee_percent",
        "cancelled_at",
        "current_period_start",
        "current_period_end",
        "ended_at",
    )

    id_from_stripe = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Subscription ID (sub_xxx)",
    )

    stripe_connect_plan = models.ForeignKey(
        "payments.StripeConnectPlan",
        on_delete=models.PROTECT,
        related_name="stripe_connect_subscriptions",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stripe_connect_subscriptions",
    )

    customer_id_from_stripe = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Stripe Customer ID on the connected account",
    )

    plan_id_from_stripe = models.CharField(
        max_length=255,
        help_text="Stripe Plan ID the subscription was created against",
    )

    quantity = models.PositiveIntegerField(
        help_text="Number of plan units",
    )

    status = models.CharField(
        max_length=30,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.INCOMPLETE,
        db_index=True,
    )

    application_fee_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
    )

    cancelled_at = models.DateTimeField(null=True, blank=True)
    current_period_start = models.DateTimeField(null=True, blank=True)
    current_period_end = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    ended_at = models.DateTimeField(null=True, blank=True)
    stripe_created_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Connect Subscription"
        verbose_name_plural = "Stripe Connect Subscriptions"
        constraints = [
            models.UniqueConstraint(
                fields=["stripe_connect_plan", "user"],
                name="unique_subscription_per_plan_and_user",
            ),
        ]
        indexes = [
            models.Index(
                fields=["stripe_connect_plan", "status"],
                name="subscription_plan_status_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"StripeConnectSubscription({self.id_from_stripe}, {self.status})"

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE
