"""
Payment processor exceptions.

Raised by payments.adapters.StripeAdapter when a Stripe call fails. The
subscription services catch them and return ServiceResult failures, so
callers above the service layer never see these raised.

Exception Hierarchy:
    StripeError (ExternalServiceError)
    ├── StripeCardDeclinedError - Card declined (permanent)
    ├── StripeInvalidAccountError - Connected account unusable (permanent)
    ├── StripeInvalidRequestError - Invalid request or missing object (permanent)
    ├── StripeAuthenticationError - Bad API key (permanent, operational)
    ├── StripeRateLimitError - Rate limited (transient)
    └── StripeAPIUnavailableError - Network or Stripe outage (transient)

``is_retryable`` is informational. Nothing in the subscription workflow
retries; callers that queue work (Celery tasks) may use it.

Usage:
    from payments.exceptions import StripeError

    try:
        StripeAdapter.create_subscription(params, connect_account="acct_123")
    except StripeError as e:
        logger.warning("Stripe call failed", extra=e.to_dict())
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import ExternalServiceError

if TYPE_CHECKING:
    from typing import Any


class StripeError(ExternalServiceError):
    """
    Base exception for all Stripe-related errors.

    Attributes:
        stripe_code: Stripe's error code (e.g. ``resource_missing``)
        decline_code: Card decline code (card errors only)
        is_retryable: Whether the failure is transient
    """

    default_error_code: str = "STRIPE_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code


class StripeCardDeclinedError(StripeError):
    """
    The connect card was declined when Stripe attempted the first invoice.

    ``decline_code`` carries the issuer's reason (``insufficient_funds``,
    ``expired_card``, ...).
    """

    default_error_code: str = "STRIPE_CARD_DECLINED"


class StripeInvalidAccountError(StripeError):
    """
    The connected account cannot be used.

    Covers accounts that were deauthorized, restricted, or never
    finished onboarding.
    """

    default_error_code: str = "STRIPE_INVALID_ACCOUNT"


class StripeInvalidRequestError(StripeError):
    """
    Invalid request parameters, or the referenced object does not exist
    on the connected account (``stripe_code == "resource_missing"``).
    """

    default_error_code: str = "STRIPE_INVALID_REQUEST"


class StripeAuthenticationError(StripeError):
    """The platform API key was rejected."""

    default_error_code: str = "STRIPE_AUTHENTICATION_FAILED"


class StripeRateLimitError(StripeError):
    """Rate limited by the Stripe API."""

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """
    Stripe could not be reached or returned a server error.

    The request may have been applied on Stripe's side.
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True
