"""
Connect customer provisioning.

Copies a user's platform customer onto an organization's connected
account the first time the user subscribes to one of its projects. The
local StripeConnectCustomer is reused on every later subscription to the
same account.

Usage:
    from payments.services import ConnectCustomerService

    result = ConnectCustomerService().find_or_create(platform_customer, connect_account)
    if result.success:
        connect_customer = result.data
"""

from __future__ import annotations

import logging

from django.db import IntegrityError

from core.services import BaseService, ServiceResult

from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.exceptions import StripeError
from payments.models import (
    StripeConnectAccount,
    StripeConnectCustomer,
    StripePlatformCustomer,
)


class ConnectCustomerService(BaseService):
    """
    Ensures a connect customer exists for (platform customer, account).

    Dependency Injection:
        The Stripe adapter can be injected for testing.
    """

    def __init__(self, stripe_adapter: type | None = None):
        self.stripe = stripe_adapter or StripeAdapter

    def find_or_create(
        self,
        platform_customer: StripePlatformCustomer,
        connect_account: StripeConnectAccount,
    ) -> ServiceResult[StripeConnectCustomer]:
        """
        Return the connect customer, creating it on Stripe if needed.

        Returns:
            ServiceResult with the StripeConnectCustomer, or a
            PROCESSOR_ERROR failure when Stripe rejects the create
        """
        existing = self._find(platform_customer, connect_account)
        if existing is not None:
            return ServiceResult.success(existing)

        idempotency_key = IdempotencyKeyGenerator.generate(
            operation="create_connect_customer",
            entity_id=f"{connect_account.id}:{platform_customer.id}",
        )

        try:
            customer = self.stripe.create_customer(
                email=platform_customer.email,
                connect_account=connect_account.id_from_stripe,
                description=platform_customer.user.get_full_name(),
                metadata={
                    "platform_customer_id": platform_customer.id_from_stripe,
                    "user_id": str(platform_customer.user_id),
                },
                idempotency_key=idempotency_key,
            )
        except StripeError as exc:
            return self.handle_exception(
                exc,
                "Failed to create connect customer",
                error_code="PROCESSOR_ERROR",
                log_level=logging.WARNING,
            )

        try:
            with self.atomic():
                connect_customer = StripeConnectCustomer.objects.create(
                    id_from_stripe=customer.id,
                    stripe_connect_account=connect_account,
                    stripe_platform_customer=platform_customer,
                    user_id=platform_customer.user_id,
                )
        except IntegrityError:
            connect_customer = self._find(platform_customer, connect_account)
            if connect_customer is None:
                raise

        self.get_logger().info(
            "Connect customer ready",
            extra={
                "connect_customer_id": connect_customer.id_from_stripe,
                "connect_account": connect_account.id_from_stripe,
            },
        )
        return ServiceResult.success(connect_customer)

    @staticmethod
    def _find(
        platform_customer: StripePlatformCustomer,
        connect_account: StripeConnectAccount,
    ) -> StripeConnectCustomer | None:
        return StripeConnectCustomer.objects.filter(
            stripe_connect_account=connect_account,
            stripe_platform_customer=platform_customer,
        ).first()
