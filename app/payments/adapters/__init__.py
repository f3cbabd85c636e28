"""
Payment adapters for external services.

All Stripe API calls go through StripeAdapter to ensure consistent error
handling, timeouts, idempotency, and observability. SubscriptionParamsMapper
turns Stripe subscriptions into local model attributes.

Usage:
    from payments.adapters import StripeAdapter, SubscriptionParamsMapper

    result = StripeAdapter.retrieve_subscription("sub_123", connect_account="acct_123")
    attrs = SubscriptionParamsMapper.build(result)
"""

from payments.adapters.stripe_adapter import (
    CardResult,
    CreateSubscriptionParams,
    CustomerResult,
    IdempotencyKeyGenerator,
    StripeAdapter,
    SubscriptionResult,
)
from payments.adapters.subscription_mapper import SubscriptionParamsMapper

__all__ = [
    "CardResult",
    "CreateSubscriptionParams",
    "CustomerResult",
    "IdempotencyKeyGenerator",
    "StripeAdapter",
    "SubscriptionParamsMapper",
    "SubscriptionResult",
]
