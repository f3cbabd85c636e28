"""
Pytest fixtures for Stripe adapter tests.

Sections:
    - Mock Stripe Objects
    - Mock Stripe Error Fixtures
    - Mock Stripe Client Fixtures
"""

from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest
import stripe


# =============================================================================
# Mock Stripe Objects
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with to_dict support."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)

    def to_dict(self) -> dict[str, Any]:
        return self.data


@pytest.fixture
def mock_subscription():
    """Create a mock Subscription response in the legacy single-plan shape."""

    def _create(
        id: str = "sub_test123",
        customer: str = "cus_connect123",
        plan: str = "plan_test123",
        quantity: int = 1000,
        status: str = "active",
        application_fee_percent: float | None = 5.0,
        **overrides: Any,
    ) -> MockStripeObject:
        data = {
            "id": id,
            "object": "subscription",
            "customer": customer,
            "plan": {"id": plan, "object": "plan", "amount": 1},
            "quantity": quantity,
            "status": status,
            "application_fee_percent": application_fee_percent,
            "created": 1700000000,
            "start_date": 1700000000,
            "current_period_start": 1700000000,
            "current_period_end": 1702592000,
            "canceled_at": None,
            "ended_at": None,
            "metadata": {},
        }
        data.update(overrides)
        return MockStripeObject(data)

    return _create


@pytest.fixture
def mock_item_subscription():
    """Create a mock Subscription reporting plan and period on its item."""

    def _create(
        id: str = "sub_items123",
        quantity: int = 250,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "subscription",
                "customer": "cus_connect123",
                "status": "active",
                "application_fee_percent": 5,
                "created": 1700000000,
                "start_date": 1700000000,
                "canceled_at": None,
                "ended_at": None,
                "metadata": {},
                "items": {
                    "object": "list",
                    "data": [
                        {
                            "id": "si_123",
                            "price": {"id": "price_test123"},
                            "quantity": quantity,
                            "current_period_start": 1700000000,
                            "current_period_end": 1702592000,
                        }
                    ],
                },
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
    ) -> stripe.CardError:
        error = stripe.CardError(message, None, code)
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such subscription: 'sub_missing'",
        param: str | None = "id",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(message, param, code=code)

    return _create


@pytest.fixture
def permission_error():
    """Create a Stripe PermissionError (platform lost access to the account)."""
    return stripe.PermissionError(
        "The provided key does not have access to account 'acct_gone'.",
    )


@pytest.fixture
def rate_limit_error():
    return stripe.RateLimitError("Too many requests hit the API too quickly.")


@pytest.fixture
def api_connection_error():
    return stripe.APIConnectionError("Could not connect to Stripe.")


@pytest.fixture
def api_error():
    return stripe.APIError("Something went wrong on Stripe's end.")


@pytest.fixture
def authentication_error():
    return stripe.AuthenticationError("Invalid API Key provided.")


@pytest.fixture
def signature_verification_error():
    return stripe.SignatureVerificationError(
        "Unable to verify webhook signature.",
        "bad_signature",
    )


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture
def mock_stripe_http_client():
    """Mock stripe.RequestsClient."""
    with patch("stripe.RequestsClient") as mock:
        yield mock


@pytest.fixture
def mock_stripe_subscription(mock_subscription, mock_stripe_http_client):
    """Mock stripe.Subscription API."""
    with patch("stripe.Subscription") as mock:
        mock.create.return_value = mock_subscription()
        mock.retrieve.return_value = mock_subscription()
        yield mock


@pytest.fixture
def mock_stripe_customer(mock_stripe_http_client):
    """Mock stripe.Customer API."""
    with patch("stripe.Customer") as mock:
        mock.create.return_value = MockStripeObject(
            {
                "id": "cus_connect123",
                "object": "customer",
                "email": "backer@example.com",
                "created": 1700000000,
                "metadata": {},
            }
        )
        mock.create_source.return_value = MockStripeObject(
            {
                "id": "card_connect123",
                "object": "card",
                "customer": "cus_connect123",
                "brand": "Visa",
                "last4": "4242",
                "exp_month": 12,
                "exp_year": 2030,
            }
        )
        yield mock


@pytest.fixture
def mock_stripe_token(mock_stripe_http_client):
    """Mock stripe.Token API."""
    with patch("stripe.Token") as mock:
        mock.create.return_value = MockStripeObject({"id": "tok_shared123"})
        yield mock


@pytest.fixture
def mock_stripe_webhook():
    """Mock stripe.Webhook API."""
    with patch("stripe.Webhook") as mock:
        mock.construct_event.return_value = MockStripeObject(
            {
                "id": "evt_test123",
                "type": "customer.subscription.updated",
                "account": "acct_test123",
                "data": {
                    "object": {
                        "id": "sub_test123",
                        "object": "subscription",
                        "customer": "cus_connect123",
                    }
                },
            }
        )
        yield mock
