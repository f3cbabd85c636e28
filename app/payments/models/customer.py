"""
Stripe customer mirrors.

- StripePlatformCustomer: the user's customer on the platform account
- StripeConnectCustomer: a copy of that customer on one connected account

Connect customers are created lazily the first time a user subscribes to
a project of the organization owning the account, then reused.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class StripePlatformCustomer(UUIDPrimaryKeyMixin, BaseModel):
    """
    Platform-level Stripe customer for a user.

    Fields:
        user: Owning user (at most one platform customer per user)
        id_from_stripe: Stripe Customer ID (cus_xxx)
        email: Email the customer was created with
        currency: Customer's default currency, once Stripe assigns one
        delinquent: Whether Stripe flags the customer as delinquent
        stripe_created_at: When Stripe created the customer
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stripe_platform_customer",
    )

    id_from_stripe = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Customer ID (cus_xxx)",
    )

    email = models.EmailField(blank=True, default="")
    currency = models.CharField(max_length=3, blank=True, default="")
    delinquent = models.BooleanField(default=False)
    stripe_created_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Platform Customer"
        verbose_name_plural = "Stripe Platform Customers"

    def __str__(self) -> str:
        return f"StripePlatformCustomer({self.id_from_stripe})"


class StripeConnectCustomer(UUIDPrimaryKeyMixin, BaseModel):
    """
    A platform customer's copy on a connected account.

    Fields:
        id_from_stripe: Customer ID on the connected account (cus_xxx)
        stripe_connect_account: Account the customer lives on
        stripe_platform_customer: Platform customer it was derived from
        user: Owning user

    Webhooks for connect subscriptions report this customer's id, which
    is how the webhook path finds the connected account to query.
    """

    id_from_stripe = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Customer ID on the connected account (cus_xxx)",
    )

    stripe_connect_account = models.ForeignKey(
        "payments.StripeConnectAccount",
        on_delete=models.PROTECT,
        related_name="stripe_connect_customers",
    )

    stripe_platform_customer = models.ForeignKey(
        StripePlatformCustomer,
        on_delete=models.PROTECT,
        related_name="stripe_connect_customers",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stripe_connect_customers",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Connect Customer"
        verbose_name_plural = "Stripe Connect Customers"
        constraints = [
            models.UniqueConstraint(
                fields=["stripe_connect_account", "stripe_platform_customer"],
                name="unique_connect_customer_per_account",
            ),
        ]

    def __str__(self) -> str:
        return f"StripeConnectCustomer({self.id_from_stripe})"
