"""
Stripe card mirrors.

- StripePlatformCard: the user's default card on the platform customer
- StripeConnectCard: a copy of that card attached to a connect customer
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class StripePlatformCard(UUIDPrimaryKeyMixin, BaseModel):
    """
    Default card on a user's platform customer.

    Fields:
        user: Owning user (at most one default card per user)
        id_from_stripe: Stripe Card ID (card_xxx)
        customer_id_from_stripe: Platform customer the card belongs to
        brand, last4, exp_month, exp_year: Display details
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stripe_platform_card",
    )

    id_from_stripe = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Card ID (card_xxx)",
    )

    customer_id_from_stripe = models.CharField(
        max_length=255,
        help_text="Stripe Customer ID the card belongs to",
    )

    brand = models.CharField(max_length=50, blank=True, default="")
    last4 = models.CharField(max_length=4, blank=True, default="")
    exp_month = models.PositiveSmallIntegerField(null=True, blank=True)
    exp_year = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Platform Card"
        verbose_name_plural = "Stripe Platform Cards"

    def __str__(self) -> str:
        return f"StripePlatformCard({self.brand} {self.last4})"


class StripeConnectCard(UUIDPrimaryKeyMixin, BaseModel):
    """
    A platform card's copy on a connected account.

    Fields:
        id_from_stripe: Card ID on the connected account (card_xxx)
        stripe_connect_account: Account the card lives on
        stripe_connect_customer: Connect customer the card is attached to
        stripe_platform_card: Platform card it was derived from
    """

    id_from_stripe = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Card ID on the connected account (card_xxx)",
    )

    stripe_connect_account = models.ForeignKey(
        "payments.StripeConnectAccount",
        on_delete=models.PROTECT,
        related_name="stripe_connect_cards",
    )

    stripe_connect_customer = models.ForeignKey(
        "payments.StripeConnectCustomer",
        on_delete=models.PROTECT,
        related_name="stripe_connect_cards",
    )

    stripe_platform_card = models.ForeignKey(
        StripePlatformCard,
        on_delete=models.PROTECT,
        related_name="stripe_connect_cards",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Connect Card"
        verbose_name_plural = "Stripe Connect Cards"
        constraints = [
            models.UniqueConstraint(
                fields=["stripe_connect_account", "stripe_platform_card"],
                name="unique_connect_card_per_account",
            ),
        ]

    def __str__(self) -> str:
        return f"StripeConnectCard({self.id_from_stripe})"
