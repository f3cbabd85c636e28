"""
WebhookEvent model for Stripe webhook event tracking.

Stores every webhook event received from Stripe for idempotent
processing and audit trails. The unique stripe_event_id constraint
ensures duplicate webhooks are detected and handled correctly.

Usage:
    from payments.models import WebhookEvent

    event, created = WebhookEvent.objects.get_or_create(
        stripe_event_id="evt_1234567890",
        defaults={
            "event_type": "customer.subscription.updated",
            "account": "acct_123",
            "payload": webhook_payload,
        },
    )
    if not created and event.is_processed:
        return HttpResponse(status=200)
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import WebhookEventStatus


class WebhookEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    Tracks Stripe webhook events for idempotent processing.

    Processing Flow:
        1. Webhook arrives, verify Stripe signature
        2. Insert/get WebhookEvent with stripe_event_id
        3. If exists and PROCESSED or PROCESSING -> return 200
        4. Queue process_webhook_event
        5. Task routes to the handler for event_type
        6. Status becomes PROCESSED or FAILED
        7. retry_failed_webhooks re-queues FAILED events

    Fields:
        stripe_event_id: Unique Stripe Event ID (evt_xxx)
        event_type: Type of webhook event
        account: Connected account the event originated from (Connect events)
        payload: Full JSON payload from Stripe
        status: Processing status
        processed_at: When event was successfully processed
        error_message: Error details if processing failed
        retry_count: Number of processing attempts
    """

    stripe_event_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Event ID (evt_xxx)",
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Stripe event type (e.g., 'customer.subscription.updated')",
    )

    account = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Connected account ID for Connect events (acct_xxx)",
    )

    payload = models.JSONField(
        help_text="Full webhook payload from Stripe (JSON)",
    )

    status = models.CharField(
        max_length=20,
        choices=WebhookEventStatus.choices,
        default=WebhookEventStatus.PENDING,
        db_index=True,
    )

    processed_at = models.DateTimeField(null=True, blank=True)

    error_message = models.TextField(null=True, blank=True)

    retry_count = models.PositiveSmallIntegerField(
        default=0,
        help_text="Number of processing attempts",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Webhook Event"
        verbose_name_plural = "Webhook Events"
        indexes = [
            models.Index(
                fields=["status", "retry_count"],
                name="webhook_status_retry_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"WebhookEvent({self.stripe_event_id}, {self.event_type})"

    @property
    def is_processed(self) -> bool:
        return self.status == WebhookEventStatus.PROCESSED

    @property
    def is_processing(self) -> bool:
        return self.status == WebhookEventStatus.PROCESSING

    @property
    def can_retry(self) -> bool:
        """Failed events are retried until STRIPE_WEBHOOK_MAX_RETRIES attempts."""
        return (
            self.status == WebhookEventStatus.FAILED
            and self.retry_count < settings.STRIPE_WEBHOOK_MAX_RETRIES
        )

    def mark_processing(self) -> None:
        """
        Mark event as being processed.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.PROCESSING
        self.retry_count += 1

    def mark_processed(self) -> None:
        """
        Mark event as successfully processed.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.PROCESSED
        self.processed_at = timezone.now()
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        """
        Mark event as failed with error message.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.FAILED
        self.error_message = error_message

    def get_object(self) -> dict:
        """Return payload.data.object, or an empty dict if absent."""
        try:
            return self.payload.get("data", {}).get("object", {}) or {}
        except (AttributeError, TypeError):
            return {}

    def get_object_id(self) -> str | None:
        return self.get_object().get("id")
