"""
StripeConnectAccount model.

Local mirror of an organization's Stripe connected account. Every Stripe
call made on behalf of a project's subscriptions is scoped to this
account's ``id_from_stripe``.

Usage:
    from payments.models import StripeConnectAccount

    account = organization.stripe_connect_account
    StripeAdapter.retrieve_subscription("sub_123", connect_account=account.id_from_stripe)
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class StripeConnectAccount(UUIDPrimaryKeyMixin, BaseModel):
    """
    Stripe connected account owned by an organization.

    Fields:
        organization: Owning organization (one account per organization)
        id_from_stripe: Stripe Account ID (acct_xxx)
        charges_enabled: Whether Stripe allows charges on the account
        payouts_enabled: Whether Stripe allows payouts from the account

    Note:
        Onboarding and capability updates are managed outside this app;
        only the flags needed to decide chargeability are mirrored.
    """

    organization = models.OneToOneField(
        "projects.Organization",
        on_delete=models.PROTECT,
        related_name="stripe_connect_account",
        help_text="Organization this connected account belongs to",
    )

    id_from_stripe = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Account ID (acct_xxx)",
    )

    charges_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled charges for this account",
    )

    payouts_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled payouts for this account",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Connect Account"
        verbose_name_plural = "Stripe Connect Accounts"

    def __str__(self) -> str:
        return f"StripeConnectAccount({self.id_from_stripe})"

    @property
    def can_accept_charges(self) -> bool:
        """Subscriptions can only be billed to accounts with charges enabled."""
        return self.charges_enabled
