"""
Tests for webhook Celery tasks.

Tests cover:
- process_webhook_event: dispatch, status transitions, failures
- retry_failed_webhooks: re-queuing under the retry cap
- cleanup_stuck_webhooks: resetting abandoned processing
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.test import override_settings
from django.utils import timezone

from core.services import ServiceResult
from payments.adapters import SubscriptionResult
from payments.models import WebhookEvent
from payments.state_machines import SubscriptionStatus, WebhookEventStatus
from payments.tasks import (
    cleanup_stuck_webhooks,
    process_webhook_event,
    retry_failed_webhooks,
)
from payments.tests.factories import WebhookEventFactory


# =============================================================================
# process_webhook_event
# =============================================================================


class TestProcessWebhookEvent:
    """Tests for process_webhook_event task."""

    def test_success_marks_processed(self, db):
        event = WebhookEventFactory()

        with patch("payments.webhooks.handlers.dispatch_webhook") as mock_dispatch:
            mock_dispatch.return_value = ServiceResult.success(None)
            result = process_webhook_event(str(event.id))

        assert result["status"] == "processed"
        event.refresh_from_db()
        assert event.status == WebhookEventStatus.PROCESSED
        assert event.retry_count == 1
        assert event.processed_at is not None

    def test_skips_processed_event(self, db):
        event = WebhookEventFactory(status=WebhookEventStatus.PROCESSED)

        with patch("payments.webhooks.handlers.dispatch_webhook") as mock_dispatch:
            result = process_webhook_event(str(event.id))

        assert result["status"] == "already_processed"
        mock_dispatch.assert_not_called()

    @override_settings(STRIPE_WEBHOOK_MAX_RETRIES=3)
    def test_skips_failed_event_past_retry_cap(self, db):
        event = WebhookEventFactory(status=WebhookEventStatus.FAILED, retry_count=3)

        with patch("payments.webhooks.handlers.dispatch_webhook") as mock_dispatch:
            result = process_webhook_event(str(event.id))

        assert result["status"] == "retries_exhausted"
        mock_dispatch.assert_not_called()
        event.refresh_from_db()
        assert event.retry_count == 3

    @override_settings(STRIPE_WEBHOOK_MAX_RETRIES=3)
    def test_processes_failed_event_under_retry_cap(self, db):
        event = WebhookEventFactory(status=WebhookEventStatus.FAILED, retry_count=2)

        with patch(
            "payments.webhooks.handlers.dispatch_webhook",
            return_value=ServiceResult.success(None),
        ):
            result = process_webhook_event(str(event.id))

        assert result["status"] == "processed"

    def test_missing_event(self, db):
        result = process_webhook_event(str(uuid.uuid4()))

        assert result["status"] == "not_found"

    def test_handler_failure_marks_failed(self, db):
        event = WebhookEventFactory()

        with patch("payments.webhooks.handlers.dispatch_webhook") as mock_dispatch:
            mock_dispatch.return_value = ServiceResult.failure(
                "Subscription not found", error_code="NOT_FOUND"
            )
            result = process_webhook_event(str(event.id))

        assert result["status"] == "handler_failed"
        assert result["error_code"] == "NOT_FOUND"
        event.refresh_from_db()
        assert event.status == WebhookEventStatus.FAILED
        assert event.error_message == "[NOT_FOUND] Subscription not found"

    def test_exception_marks_event_failed_and_raises(self, db):
        event = WebhookEventFactory()

        with patch("payments.webhooks.handlers.dispatch_webhook") as mock_dispatch:
            mock_dispatch.side_effect = Exception("Database connection lost")

            with pytest.raises(Exception, match="Database connection lost"):
                process_webhook_event(str(event.id))

        event.refresh_from_db()
        assert event.status == WebhookEventStatus.FAILED
        assert "Database connection lost" in event.error_message

    def test_end_to_end_subscription_update(
        self, subscription_webhook_event, stored_subscription
    ):
        stripe_view = SubscriptionResult(
            id=stored_subscription.id_from_stripe,
            customer=stored_subscription.customer_id_from_stripe,
            plan=stored_subscription.plan_id_from_stripe,
            quantity=stored_subscription.quantity,
            status="unpaid",
        )

        with patch(
            "payments.services.subscription_service.StripeAdapter.retrieve_subscription",
            return_value=stripe_view,
        ):
            result = process_webhook_event(str(subscription_webhook_event.id))

        assert result["status"] == "processed"
        stored_subscription.refresh_from_db()
        assert stored_subscription.status == SubscriptionStatus.UNPAID

    def test_event_before_local_insert_fails_for_retry(
        self, subscription_webhook_event, stored_subscription
    ):
        stored_subscription.delete()

        with patch(
            "payments.services.subscription_service.StripeAdapter.retrieve_subscription",
            return_value=SubscriptionResult(
                id="sub_any", customer="cus_any", plan=None, quantity=1, status="active"
            ),
        ):
            result = process_webhook_event(str(subscription_webhook_event.id))

        assert result["error_code"] == "NOT_FOUND"
        subscription_webhook_event.refresh_from_db()
        assert subscription_webhook_event.can_retry


# =============================================================================
# retry_failed_webhooks
# =============================================================================


class TestRetryFailedWebhooks:
    """Tests for retry_failed_webhooks task."""

    @override_settings(STRIPE_WEBHOOK_MAX_RETRIES=3)
    def test_queues_failed_events_under_cap(self, db):
        retryable = WebhookEventFactory(status=WebhookEventStatus.FAILED, retry_count=2)
        WebhookEventFactory(status=WebhookEventStatus.FAILED, retry_count=3)
        WebhookEventFactory(status=WebhookEventStatus.PENDING)
        WebhookEventFactory(status=WebhookEventStatus.PROCESSED)

        with patch("payments.tasks.process_webhook_event.delay") as mock_task:
            result = retry_failed_webhooks()

        assert result["queued_count"] == 1
        mock_task.assert_called_once_with(str(retryable.id))

    def test_queue_errors_are_skipped(self, db):
        WebhookEventFactory(status=WebhookEventStatus.FAILED, retry_count=1)
        WebhookEventFactory(status=WebhookEventStatus.FAILED, retry_count=1)

        with patch("payments.tasks.process_webhook_event.delay") as mock_task:
            mock_task.side_effect = [Exception("broker down"), None]
            result = retry_failed_webhooks()

        assert result["queued_count"] == 1


# =============================================================================
# cleanup_stuck_webhooks
# =============================================================================


class TestCleanupStuckWebhooks:
    """Tests for cleanup_stuck_webhooks task."""

    def test_resets_old_processing_events(self, db):
        stuck = WebhookEventFactory(status=WebhookEventStatus.PROCESSING)
        recent = WebhookEventFactory(status=WebhookEventStatus.PROCESSING)
        WebhookEvent.objects.filter(id=stuck.id).update(
            updated_at=timezone.now() - timedelta(hours=1)
        )

        result = cleanup_stuck_webhooks()

        assert result["reset_count"] == 1
        stuck.refresh_from_db()
        recent.refresh_from_db()
        assert stuck.status == WebhookEventStatus.FAILED
        assert recent.status == WebhookEventStatus.PROCESSING
