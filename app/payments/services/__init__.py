"""
Payment services for Connect subscriptions.

This module provides:
- ConnectSubscriptionService: Subscribe (find_or_create) and webhook sync
  (update_from_stripe)
- ConnectCustomerService: Provisions a user's customer on a connected account
- ConnectCardService: Provisions a user's card on a connected account

Usage:
    from payments.services import ConnectSubscriptionService

    result = ConnectSubscriptionService().find_or_create(
        project_id=project.id,
        user_id=user.id,
        quantity=1000,
    )
"""

from payments.services.connect_card_service import ConnectCardService
from payments.services.connect_customer_service import ConnectCustomerService
from payments.services.subscription_service import ConnectSubscriptionService

__all__ = [
    "ConnectCardService",
    "ConnectCustomerService",
    "ConnectSubscriptionService",
]
