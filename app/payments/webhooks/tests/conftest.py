"""
Pytest fixtures for webhook tests.

Provides Connect subscription event payloads and stored WebhookEvent
records wired to a real local subscription.
"""

import pytest

from payments.state_machines import WebhookEventStatus
from payments.tests.factories import (
    StripeConnectCustomerFactory,
    StripeConnectSubscriptionFactory,
    WebhookEventFactory,
    subscribable_project,
    subscribable_user,
)


def subscription_event_payload(
    subscription_id="sub_test_123",
    customer_id="cus_test_123",
    event_type="customer.subscription.updated",
    event_id="evt_test_123",
    account="acct_test_123",
):
    """A Connect event as Stripe posts it."""
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "account": account,
        "data": {
            "object": {
                "id": subscription_id,
                "object": "subscription",
                "customer": customer_id,
                "status": "active",
            }
        },
    }


@pytest.fixture
def project(db):
    """Project with a plan and a chargeable connected account."""
    return subscribable_project()


@pytest.fixture
def user(db):
    """User with a platform customer and default card."""
    return subscribable_user()


@pytest.fixture
def stored_subscription(project, user):
    """A local subscription whose connect customer is known."""
    connect_customer = StripeConnectCustomerFactory(
        stripe_connect_account=project.organization.stripe_connect_account,
        stripe_platform_customer=user.stripe_platform_customer,
    )
    return StripeConnectSubscriptionFactory(
        stripe_connect_plan=project.stripe_connect_plan,
        user=user,
        customer_id_from_stripe=connect_customer.id_from_stripe,
    )


@pytest.fixture
def subscription_webhook_event(stored_subscription):
    """A pending customer.subscription.updated event for stored_subscription."""
    account = stored_subscription.stripe_connect_plan.project.organization
    payload = subscription_event_payload(
        subscription_id=stored_subscription.id_from_stripe,
        customer_id=stored_subscription.customer_id_from_stripe,
        account=account.stripe_connect_account.id_from_stripe,
    )
    return WebhookEventFactory(
        stripe_event_id=payload["id"],
        event_type=payload["type"],
        account=payload["account"],
        payload=payload,
        status=WebhookEventStatus.PENDING,
    )
