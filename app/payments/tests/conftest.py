"""
Pytest fixtures for payment tests.

The ``stripe_adapter`` fixture is a MagicMock with the StripeAdapter
interface that answers like Stripe would for a healthy connected account.
Inject it into services instead of patching the stripe module:

    def test_subscribe(stripe_adapter, project, user):
        service = ConnectSubscriptionService(stripe_adapter=stripe_adapter)
        result = service.find_or_create(project.id, user.id, 1000)
        stripe_adapter.create_subscription.assert_called_once()
"""

import itertools
from unittest.mock import MagicMock

import pytest

from payments.adapters import (
    CardResult,
    CreateSubscriptionParams,
    CustomerResult,
    StripeAdapter,
    SubscriptionResult,
)
from payments.tests.factories import subscribable_project, subscribable_user


def build_subscription_result(params: CreateSubscriptionParams, sub_id: str, **overrides):
    """SubscriptionResult Stripe would return for ``params``."""
    values = {
        "id": sub_id,
        "customer": params.customer,
        "plan": params.plan,
        "quantity": params.quantity,
        "status": "active",
        "application_fee_percent": float(params.application_fee_percent),
        "created": 1700000000,
        "start_date": 1700000000,
        "current_period_start": 1700000000,
        "current_period_end": 1702592000,
    }
    values.update(overrides)
    return SubscriptionResult(**values)


@pytest.fixture
def stripe_adapter():
    """Mock StripeAdapter with successful default responses."""
    adapter = MagicMock(spec=StripeAdapter)
    counter = itertools.count(1)

    adapter.create_customer.side_effect = lambda email, connect_account, **kwargs: (
        CustomerResult(id=f"cus_connect_{next(counter)}", email=email)
    )
    adapter.create_card_token.return_value = "tok_shared"
    adapter.create_customer_source.side_effect = (
        lambda customer_id, source, connect_account, **kwargs: CardResult(
            id=f"card_connect_{next(counter)}",
            customer=customer_id,
            brand="Visa",
            last4="4242",
        )
    )
    adapter.create_subscription.side_effect = lambda params, connect_account: (
        build_subscription_result(params, f"sub_{next(counter)}")
    )
    return adapter


@pytest.fixture
def project(db):
    """Project with a plan and a chargeable connected account."""
    return subscribable_project()


@pytest.fixture
def user(db):
    """User with a platform customer and default card."""
    return subscribable_user()
