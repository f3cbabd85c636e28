"""
Status enums for payment models.
"""

from payments.state_machines.states import SubscriptionStatus, WebhookEventStatus

__all__ = [
    "SubscriptionStatus",
    "WebhookEventStatus",
]
