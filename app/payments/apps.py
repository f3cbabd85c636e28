"""
Payments app configuration.

This app provides Stripe Connect subscriptions:
- Local mirrors of Connect accounts, plans, customers, cards and subscriptions
- Subscribe workflow and webhook synchronization
- Webhook ingestion and async processing
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
