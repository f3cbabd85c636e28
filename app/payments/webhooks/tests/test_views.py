"""
Tests for the Stripe Connect webhook view.

Tests cover:
- Stripe signature verification
- Webhook event creation and idempotency
- Task queuing
"""

import json
from unittest.mock import patch

import pytest
from django.test import RequestFactory, override_settings

from payments.exceptions import StripeInvalidRequestError
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.tests.factories import WebhookEventFactory
from payments.webhooks.tests.conftest import subscription_event_payload
from payments.webhooks.views import stripe_connect_webhook


@pytest.fixture
def rf():
    return RequestFactory()


def make_webhook_request(rf, payload: dict, signature: str = "test_sig"):
    """Create a POST request to the Connect webhook endpoint."""
    return rf.post(
        "/api/v1/payments/webhooks/stripe/connect/",
        data=json.dumps(payload),
        content_type="application/json",
        HTTP_STRIPE_SIGNATURE=signature,
    )


@pytest.fixture
def verified():
    """Signature verification that returns the posted JSON."""
    with patch(
        "payments.webhooks.views.StripeAdapter.verify_webhook_signature",
        side_effect=lambda payload, signature, secret: json.loads(payload),
    ) as mock_verify:
        yield mock_verify


@pytest.fixture
def queued():
    with patch("payments.tasks.process_webhook_event.delay") as mock_task:
        yield mock_task


# =============================================================================
# Signature Verification Tests
# =============================================================================


class TestStripeConnectWebhookSignature:
    """Tests for signature verification."""

    def test_missing_signature_returns_400(self, rf, db):
        request = rf.post(
            "/api/v1/payments/webhooks/stripe/connect/",
            data=json.dumps({"id": "evt_test"}),
            content_type="application/json",
        )

        response = stripe_connect_webhook(request)

        assert response.status_code == 400
        assert b"Missing signature" in response.content

    def test_invalid_signature_returns_400(self, rf, db):
        with patch(
            "payments.webhooks.views.StripeAdapter.verify_webhook_signature",
            side_effect=StripeInvalidRequestError("Invalid signature"),
        ):
            response = stripe_connect_webhook(
                make_webhook_request(rf, subscription_event_payload(), "bad_sig")
            )

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()

    @override_settings(STRIPE_CONNECT_WEBHOOK_SECRET="whsec_connect")
    def test_uses_connect_signing_secret(self, rf, db, verified, queued):
        stripe_connect_webhook(make_webhook_request(rf, subscription_event_payload()))

        assert verified.call_args.kwargs["secret"] == "whsec_connect"

    def test_rejects_event_without_type(self, rf, db, verified, queued):
        response = stripe_connect_webhook(make_webhook_request(rf, {"id": "evt_1"}))

        assert response.status_code == 400
        queued.assert_not_called()

    def test_get_not_allowed(self, rf, db):
        response = stripe_connect_webhook(rf.get("/api/v1/payments/webhooks/stripe/connect/"))

        assert response.status_code == 405


# =============================================================================
# Event Storage Tests
# =============================================================================


class TestStripeConnectWebhookEvents:
    """Tests for event storage, idempotency, and queuing."""

    def test_stores_and_queues_new_event(self, rf, db, verified, queued):
        payload = subscription_event_payload(account="acct_connected")

        response = stripe_connect_webhook(make_webhook_request(rf, payload))

        assert response.status_code == 200
        event = WebhookEvent.objects.get(stripe_event_id=payload["id"])
        assert event.event_type == "customer.subscription.updated"
        assert event.account == "acct_connected"
        assert event.status == WebhookEventStatus.PENDING
        queued.assert_called_once_with(str(event.id))

    def test_duplicate_processed_event_not_requeued(self, rf, db, verified, queued):
        payload = subscription_event_payload()
        WebhookEventFactory(
            stripe_event_id=payload["id"], status=WebhookEventStatus.PROCESSED
        )

        response = stripe_connect_webhook(make_webhook_request(rf, payload))

        assert response.status_code == 200
        assert b"Already received" in response.content
        queued.assert_not_called()
        assert WebhookEvent.objects.count() == 1

    def test_duplicate_failed_event_requeued(self, rf, db, verified, queued):
        payload = subscription_event_payload()
        event = WebhookEventFactory(
            stripe_event_id=payload["id"], status=WebhookEventStatus.FAILED
        )

        stripe_connect_webhook(make_webhook_request(rf, payload))

        queued.assert_called_once_with(str(event.id))

    def test_queue_failure_still_acknowledges(self, rf, db, verified, queued):
        queued.side_effect = Exception("broker down")

        response = stripe_connect_webhook(
            make_webhook_request(rf, subscription_event_payload())
        )

        assert response.status_code == 200
        assert WebhookEvent.objects.get().status == WebhookEventStatus.PENDING
