"""
Webhook endpoint views for Stripe.

This module provides the HTTP endpoint for receiving Stripe Connect
webhooks (events that happen on connected accounts). The view:
1. Verifies the webhook signature with the Connect signing secret
2. Creates/retrieves the WebhookEvent record (idempotent)
3. Queues the event for async processing
4. Returns immediately

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_connect_webhook

    urlpatterns = [
        path("webhooks/stripe/connect/", stripe_connect_webhook),
    ]
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import StripeAdapter
from payments.exceptions import StripeInvalidRequestError
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus


logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_connect_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive and queue Stripe Connect webhook events.

    Stripe expects a 2xx response within 20 seconds, so handling is
    deferred to the process_webhook_event Celery task.

    Idempotency:
    - WebhookEvent.stripe_event_id is unique
    - Events already processed (or being processed) are acknowledged
      without re-queuing

    Returns:
        HttpResponse with status:
        - 200: Event accepted (new or duplicate)
        - 400: Missing/invalid signature or payload
    """
    payload = request.body
    signature = request.headers.get("Stripe-Signature", "")

    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return HttpResponse("Missing signature", status=400)

    try:
        event_data = StripeAdapter.verify_webhook_signature(
            payload,
            signature,
            secret=settings.STRIPE_CONNECT_WEBHOOK_SECRET,
        )
    except StripeInvalidRequestError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"error": str(e)},
        )
        return HttpResponse("Invalid signature", status=400)

    stripe_event_id = event_data.get("id")
    event_type = event_data.get("type")

    if not stripe_event_id or not event_type:
        logger.warning("Webhook missing required fields")
        return HttpResponse("Invalid event", status=400)

    logger.info(
        f"Received Stripe webhook: {event_type}",
        extra={
            "stripe_event_id": stripe_event_id,
            "event_type": event_type,
            "connect_account": event_data.get("account"),
        },
    )

    webhook_event, created = WebhookEvent.objects.get_or_create(
        stripe_event_id=stripe_event_id,
        defaults={
            "event_type": event_type,
            "account": event_data.get("account") or "",
            "payload": event_data,
            "status": WebhookEventStatus.PENDING,
        },
    )

    if not created and (webhook_event.is_processed or webhook_event.is_processing):
        logger.info(
            f"Webhook already {webhook_event.status}, returning success",
            extra={"stripe_event_id": stripe_event_id},
        )
        return HttpResponse("Already received", status=200)

    try:
        from payments.tasks import process_webhook_event

        process_webhook_event.delay(str(webhook_event.id))
        logger.info(
            "Webhook queued for processing",
            extra={
                "stripe_event_id": stripe_event_id,
                "webhook_event_id": str(webhook_event.id),
            },
        )
    except Exception as e:
        # Stored as PENDING; Stripe's redelivery re-queues it.
        logger.error(
            f"Failed to queue webhook: {type(e).__name__}",
            extra={"stripe_event_id": stripe_event_id},
            exc_info=True,
        )

    return HttpResponse("Accepted", status=200)
