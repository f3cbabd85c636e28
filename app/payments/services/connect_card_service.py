"""
Connect card provisioning.

Shares a user's platform card with a connected account (card token) and
attaches it to the user's connect customer there. The resulting
StripeConnectCard is reused for later subscriptions on that account.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError

from core.services import BaseService, ServiceResult

from payments.adapters import StripeAdapter
from payments.exceptions import StripeError
from payments.models import (
    StripeConnectAccount,
    StripeConnectCard,
    StripeConnectCustomer,
    StripePlatformCard,
    StripePlatformCustomer,
)


class ConnectCardService(BaseService):
    """Ensures a connect card exists for (platform card, account)."""

    def __init__(self, stripe_adapter: type | None = None):
        self.stripe = stripe_adapter or StripeAdapter

    def find_or_create(
        self,
        platform_card: StripePlatformCard,
        connect_customer: StripeConnectCustomer,
        platform_customer: StripePlatformCustomer,
        connect_account: StripeConnectAccount,
    ) -> ServiceResult[StripeConnectCard]:
        """
        Return the connect card, creating it on Stripe if needed.

        Two Stripe calls are made on a miss: a token sharing the platform
        card with the account, then attaching that token to the connect
        customer.
        """
        existing = self._find(platform_card, connect_account)
        if existing is not None:
            return ServiceResult.success(existing)

        try:
            token = self.stripe.create_card_token(
                platform_customer.id_from_stripe,
                platform_card.id_from_stripe,
                connect_account=connect_account.id_from_stripe,
            )
            card = self.stripe.create_customer_source(
                connect_customer.id_from_stripe,
                token,
                connect_account=connect_account.id_from_stripe,
            )
        except StripeError as exc:
            return self.handle_exception(
                exc,
                "Failed to create connect card",
                error_code="PROCESSOR_ERROR",
                log_level=logging.WARNING,
            )

        try:
            with self.atomic():
                connect_card = StripeConnectCard.objects.create(
                    id_from_stripe=card.id,
                    stripe_connect_account=connect_account,
                    stripe_connect_customer=connect_customer,
                    stripe_platform_card=platform_card,
                )
        except IntegrityError:
            connect_card = self._find(platform_card, connect_account)
            if connect_card is None:
                raise

        self.get_logger().info(
            "Connect card ready",
            extra={
                "connect_card_id": connect_card.id_from_stripe,
                "connect_account": connect_account.id_from_stripe,
            },
        )
        return ServiceResult.success(connect_card)

    @staticmethod
    def _find(
        platform_card: StripePlatformCard,
        connect_account: StripeConnectAccount,
    ) -> StripeConnectCard | None:
        return StripeConnectCard.objects.filter(
            stripe_connect_account=connect_account,
            stripe_platform_card=platform_card,
        ).first()
