"""
Status enums for payment models.

These are Django TextChoices for database storage and admin integration.

Subscription statuses mirror Stripe's subscription ``status`` values. The
local record never drives transitions itself: Stripe is authoritative and
changes arrive through the webhook synchronization path.

WebhookEvent States:
    pending → processing → processed
    processing → failed → processing (retry)
"""

from django.db import models


class SubscriptionStatus(models.TextChoices):
    """
    Stripe subscription statuses.

    Only ACTIVE subscriptions count towards a project's monthly total.
    """

    INCOMPLETE = "incomplete", "Incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired", "Incomplete Expired"
    TRIALING = "trialing", "Trialing"
    ACTIVE = "active", "Active"
    PAST_DUE = "past_due", "Past Due"
    CANCELED = "canceled", "Canceled"
    UNPAID = "unpaid", "Unpaid"
    PAUSED = "paused", "Paused"


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for stored Stripe webhook events.

    Terminal states: PROCESSED
    FAILED events are retried by the periodic retry task.
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"
