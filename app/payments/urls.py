"""
URL configuration for the payments app.

Routes:
    - POST /subscriptions/ - Subscribe the current user to a project
    - POST /webhooks/stripe/connect/ - Stripe Connect webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.views import SubscriptionCreateView
from payments.webhooks.views import stripe_connect_webhook

app_name = "payments"

urlpatterns = [
    path("subscriptions/", SubscriptionCreateView.as_view(), name="subscription_create"),
    # Webhook endpoints
    path(
        "webhooks/stripe/connect/",
        stripe_connect_webhook,
        name="stripe_connect_webhook",
    ),
]
