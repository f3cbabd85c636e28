"""
Webhook event handlers for Stripe events.

This module provides a handler registry and the handlers for Connect
subscription events. Subscription events only carry a snapshot of the
object, so handlers pass its id to ConnectSubscriptionService, which
re-reads the live subscription from the connected account.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    @register_handler("custom.event")
    def handle_custom_event(webhook_event: WebhookEvent) -> ServiceResult:
        ...

    result = dispatch_webhook(webhook_event)
"""

from __future__ import annotations

import logging
from typing import Callable

from core.services import ServiceResult

from payments.models import WebhookEvent
from payments.services import ConnectSubscriptionService


logger = logging.getLogger(__name__)


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[WebhookEvent], ServiceResult]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Usage:
        @register_handler("customer.subscription.updated")
        def handle_subscription_updated(webhook_event: WebhookEvent) -> ServiceResult:
            ...
    """

    def decorator(func: Callable[[WebhookEvent], ServiceResult]) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Dispatch a webhook event to the appropriate handler.

    Unknown event types are logged and acknowledged with success so they
    are not retried.
    """
    handler = WEBHOOK_HANDLERS.get(webhook_event.event_type)

    if not handler:
        logger.info(
            f"No handler registered for event type: {webhook_event.event_type}",
            extra={"stripe_event_id": webhook_event.stripe_event_id},
        )
        return ServiceResult.success(None)

    logger.info(
        f"Dispatching {webhook_event.event_type} to handler",
        extra={"stripe_event_id": webhook_event.stripe_event_id},
    )

    return handler(webhook_event)


# =============================================================================
# Subscription Handlers
# =============================================================================


@register_handler("customer.subscription.updated")
@register_handler("customer.subscription.deleted")
def handle_subscription_changed(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Synchronize the local subscription mirror with Stripe.

    Deleted subscriptions are synchronized the same way: Stripe still
    returns them (status ``canceled``) and the mirror is kept.
    """
    subscription_id = webhook_event.get_object_id()
    connect_customer_id = webhook_event.get_object().get("customer")

    if not subscription_id or not connect_customer_id:
        logger.error(
            f"{webhook_event.event_type}: Could not extract subscription or customer id",
            extra={"stripe_event_id": webhook_event.stripe_event_id},
        )
        return ServiceResult.failure(
            "Could not extract subscription and customer ids from webhook",
            error_code="INVALID_WEBHOOK_PAYLOAD",
        )

    logger.info(
        f"Processing {webhook_event.event_type}",
        extra={
            "stripe_event_id": webhook_event.stripe_event_id,
            "subscription_id": subscription_id,
            "connect_account": webhook_event.account,
        },
    )

    return ConnectSubscriptionService().update_from_stripe(
        subscription_id, connect_customer_id
    )
