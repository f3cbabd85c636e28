"""
StripeConnectPlan model.

The recurring price a project's backers subscribe to, created on the
organization's connected account. One unit of the plan is one cent per
month; subscriptions choose their donation with ``quantity``.
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class StripeConnectPlan(UUIDPrimaryKeyMixin, BaseModel):
    """
    Stripe plan owned by exactly one project.

    Fields:
        project: Owning project
        id_from_stripe: Stripe Plan ID (plan_xxx / price_xxx)
        amount: Unit amount in cents
        name: Plan display name
        stripe_created_at: When Stripe created the plan
    """

    project = models.OneToOneField(
        "projects.Project",
        on_delete=models.PROTECT,
        related_name="stripe_connect_plan",
    )

    id_from_stripe = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Plan ID",
    )

    amount = models.PositiveIntegerField(
        default=1,
        help_text="Unit amount in cents",
    )

    name = models.CharField(max_length=255, blank=True, default="")

    stripe_created_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Connect Plan"
        verbose_name_plural = "Stripe Connect Plans"

    def __str__(self) -> str:
        return f"StripeConnectPlan({self.id_from_stripe})"
