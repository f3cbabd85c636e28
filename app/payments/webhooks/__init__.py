"""
Webhook handling for Stripe Connect events.

Webhooks are verified, stored idempotently, and processed asynchronously
via Celery tasks.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_connect_webhook

    urlpatterns = [
        path("webhooks/stripe/connect/", stripe_connect_webhook),
    ]
"""

from payments.webhooks.handlers import dispatch_webhook, register_handler
from payments.webhooks.views import stripe_connect_webhook

__all__ = [
    "dispatch_webhook",
    "register_handler",
    "stripe_connect_webhook",
]
