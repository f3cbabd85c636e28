"""
Payment domain models.

Local mirrors of Stripe objects used by Connect subscriptions:
- StripeConnectAccount: An organization's connected account
- StripeConnectPlan: A project's recurring plan
- StripePlatformCustomer / StripeConnectCustomer: Customer mirrors
- StripePlatformCard / StripeConnectCard: Card mirrors
- StripeConnectSubscription: A user's subscription to a project's plan
- WebhookEvent: Stripe webhook event tracking for idempotent processing
"""

from payments.models.card import StripeConnectCard, StripePlatformCard
from payments.models.connect_account import StripeConnectAccount
from payments.models.customer import StripeConnectCustomer, StripePlatformCustomer
from payments.models.plan import StripeConnectPlan
from payments.models.subscription import StripeConnectSubscription
from payments.models.webhook_event import WebhookEvent

__all__ = [
    "StripeConnectAccount",
    "StripeConnectCard",
    "StripeConnectCustomer",
    "StripeConnectPlan",
    "StripeConnectSubscription",
    "StripePlatformCard",
    "StripePlatformCustomer",
    "WebhookEvent",
]
