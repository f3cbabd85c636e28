"""
Stripe API adapter for Connect subscription operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls should go through this
adapter to ensure consistent error handling, timeouts, idempotency,
and observability.

Every object operation is scoped to a connected account: the
``connect_account`` argument is passed to Stripe as ``stripe_account``
and must be a non-empty account ID.

Features:
- Configurable timeouts on all API calls
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Idempotency support for safe retries

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_WEBHOOK_SECRET: Platform webhook signing secret
- STRIPE_CONNECT_WEBHOOK_SECRET: Connect webhook signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)

Usage:
    from payments.adapters import StripeAdapter, CreateSubscriptionParams

    result = StripeAdapter.create_subscription(
        CreateSubscriptionParams(
            application_fee_percent=5,
            customer="cus_123",
            plan="plan_123",
            quantity=1000,
            source="card_123",
        ),
        connect_account="acct_123",
    )

    result = StripeAdapter.retrieve_subscription("sub_123", connect_account="acct_123")
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import stripe
from django.conf import settings

from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeAuthenticationError,
    StripeCardDeclinedError,
    StripeInvalidAccountError,
    StripeInvalidRequestError,
    StripeRateLimitError,
)


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreateSubscriptionParams:
    """
    Parameters for creating a subscription on a connected account.

    Attributes:
        application_fee_percent: Platform fee taken from each invoice
        customer: Connect customer ID (cus_xxx)
        plan: Plan ID (plan_xxx)
        quantity: Plan units
        source: Connect card ID charged for invoices (card_xxx)
        idempotency_key: Optional key for idempotent creation
        metadata: Key-value pairs to attach to the subscription
    """

    application_fee_percent: Decimal | int
    customer: str
    plan: str
    quantity: int
    source: str
    idempotency_key: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if self.quantity <= 0:
            raise ValueError("quantity must be positive")
        if not self.customer:
            raise ValueError("customer is required")
        if not self.plan:
            raise ValueError("plan is required")


@dataclass
class SubscriptionResult:
    """
    Processor-side view of a subscription.

    Timestamps are Unix seconds as Stripe reports them; None when Stripe
    omits the field.

    Attributes:
        id: Subscription ID (sub_xxx)
        customer: Customer ID on the connected account
        plan: Plan ID of the (single) subscription item
        quantity: Plan units
        status: Stripe status (active, past_due, canceled, ...)
        application_fee_percent: Platform fee percent
        created, start_date, current_period_start, current_period_end,
        canceled_at, ended_at: Stripe timestamps
        metadata: Attached metadata
        raw_response: Full Stripe response dict
    """

    id: str
    customer: str
    plan: str | None
    quantity: int | None
    status: str
    application_fee_percent: float | None = None
    created: int | None = None
    start_date: int | None = None
    current_period_start: int | None = None
    current_period_end: int | None = None
    canceled_at: int | None = None
    ended_at: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class CustomerResult:
    """Result from Stripe Customer creation."""

    id: str
    email: str | None = None
    created: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class CardResult:
    """
    Result from attaching a card source to a customer.

    Attributes:
        id: Card ID (card_xxx)
        customer: Customer ID the card is attached to
        brand, last4, exp_month, exp_year: Card display details
        raw_response: Full Stripe response dict
    """

    id: str
    customer: str | None
    brand: str | None = None
    last4: str | None = None
    exp_month: int | None = None
    exp_year: int | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe API calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation="create_subscription",
            entity_id=f"{plan.id}:{user.id}",
        )
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str,
        attempt: int = 1,
    ) -> str:
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


def _to_dict(obj: Any) -> dict[str, Any]:
    """Plain dict view of a Stripe object (or an already-plain dict)."""
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    return obj.to_dict()


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe Connect operations.

    All methods are class methods - no instance state is maintained.
    Services receive the class itself (or a test double with the same
    methods) as their processor dependency.

    Usage:
        result = StripeAdapter.create_subscription(params, connect_account="acct_123")
        result = StripeAdapter.retrieve_subscription("sub_123", connect_account="acct_123")
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _configure_stripe() -> None:
        """Configure Stripe client with API key and timeout."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _require_connect_account(connect_account: str | None) -> str:
        if not connect_account:
            raise ValueError("connect_account is required for Connect operations")
        return connect_account

    # =========================================================================
    # Subscriptions
    # =========================================================================

    @classmethod
    def create_subscription(
        cls,
        params: CreateSubscriptionParams,
        connect_account: str,
    ) -> SubscriptionResult:
        """
        Create a subscription on a connected account.

        Args:
            params: Subscription parameters
            connect_account: Connected account ID (acct_xxx)

        Returns:
            SubscriptionResult for the new subscription

        Raises:
            ValueError: connect_account is empty
            StripeCardDeclinedError: First invoice payment was declined
            StripeInvalidAccountError: Connected account unusable
            StripeInvalidRequestError: Invalid parameters
            StripeAPIUnavailableError: Stripe service unavailable
        """
        connect_account = cls._require_connect_account(connect_account)
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_subscription",
            "connect_account": connect_account,
            "customer": params.customer,
            "plan": params.plan,
            "quantity": params.quantity,
            "idempotency_key": params.idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            subscription = stripe.Subscription.create(
                customer=params.customer,
                items=[{"plan": params.plan, "quantity": params.quantity}],
                default_source=params.source,
                application_fee_percent=params.application_fee_percent,
                metadata=params.metadata,
                stripe_account=connect_account,
                idempotency_key=params.idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "subscription_id": subscription.id,
                    "status": subscription.status,
                    "duration_ms": duration_ms,
                },
            )

            return cls._subscription_result(subscription)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_subscription(
        cls,
        subscription_id: str,
        connect_account: str,
    ) -> SubscriptionResult:
        """
        Retrieve a subscription from a connected account.

        Raises:
            ValueError: connect_account is empty
            StripeInvalidRequestError: Subscription does not exist on the account
            StripeAPIUnavailableError: Stripe service unavailable
        """
        connect_account = cls._require_connect_account(connect_account)
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "retrieve_subscription",
            "connect_account": connect_account,
            "subscription_id": subscription_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            subscription = stripe.Subscription.retrieve(
                subscription_id,
                stripe_account=connect_account,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "status": subscription.status,
                    "duration_ms": duration_ms,
                },
            )

            return cls._subscription_result(subscription)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @staticmethod
    def _subscription_result(subscription: Any) -> SubscriptionResult:
        """
        Build a SubscriptionResult from a Stripe Subscription.

        Plan, quantity and billing period are read from the top level when
        present, otherwise from the first subscription item (newer API
        versions report them per item only).
        """
        data = _to_dict(subscription)
        items = _to_dict(data.get("items")).get("data") or []
        item = _to_dict(items[0]) if items else {}

        plan = _to_dict(data.get("plan")) or _to_dict(item.get("plan"))
        if not plan:
            plan = _to_dict(item.get("price"))

        def pick(key: str) -> Any:
            value = data.get(key)
            return value if value is not None else item.get(key)

        return SubscriptionResult(
            id=data["id"],
            customer=data.get("customer"),
            plan=plan.get("id"),
            quantity=pick("quantity"),
            status=data.get("status"),
            application_fee_percent=data.get("application_fee_percent"),
            created=data.get("created"),
            start_date=data.get("start_date"),
            current_period_start=pick("current_period_start"),
            current_period_end=pick("current_period_end"),
            canceled_at=data.get("canceled_at"),
            ended_at=data.get("ended_at"),
            metadata=dict(data.get("metadata") or {}),
            raw_response=data,
        )

    # =========================================================================
    # Customers and Cards
    # =========================================================================

    @classmethod
    def create_customer(
        cls,
        email: str,
        connect_account: str,
        description: str = "",
        metadata: dict[str, str] | None = None,
        idempotency_key: str | None = None,
    ) -> CustomerResult:
        """
        Create a customer on a connected account.

        Raises:
            ValueError: connect_account is empty
            StripeInvalidAccountError: Connected account unusable
            StripeAPIUnavailableError: Stripe service unavailable
        """
        connect_account = cls._require_connect_account(connect_account)
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_customer",
            "connect_account": connect_account,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            customer = stripe.Customer.create(
                email=email,
                description=description,
                metadata=metadata or {},
                stripe_account=connect_account,
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "customer_id": customer.id,
                    "duration_ms": duration_ms,
                },
            )

            data = _to_dict(customer)
            return CustomerResult(
                id=data["id"],
                email=data.get("email"),
                created=data.get("created"),
                metadata=dict(data.get("metadata") or {}),
                raw_response=data,
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def create_card_token(
        cls,
        platform_customer_id: str,
        platform_card_id: str,
        connect_account: str,
    ) -> str:
        """
        Share a platform customer's card with a connected account.

        Returns:
            Single-use token ID (tok_xxx) valid on the connected account
        """
        connect_account = cls._require_connect_account(connect_account)
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_card_token",
            "connect_account": connect_account,
            "platform_customer_id": platform_customer_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            token = stripe.Token.create(
                customer=platform_customer_id,
                card=platform_card_id,
                stripe_account=connect_account,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )

            return token.id

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def create_customer_source(
        cls,
        customer_id: str,
        source: str,
        connect_account: str,
        idempotency_key: str | None = None,
    ) -> CardResult:
        """
        Attach a card (by token) to a customer on a connected account.

        Raises:
            ValueError: connect_account is empty
            StripeCardDeclinedError: Card rejected while attaching
            StripeAPIUnavailableError: Stripe service unavailable
        """
        connect_account = cls._require_connect_account(connect_account)
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_customer_source",
            "connect_account": connect_account,
            "customer_id": customer_id,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            card = stripe.Customer.create_source(
                customer_id,
                source=source,
                stripe_account=connect_account,
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "card_id": card.id, "duration_ms": duration_ms},
            )

            data = _to_dict(card)
            return CardResult(
                id=data["id"],
                customer=data.get("customer"),
                brand=data.get("brand"),
                last4=data.get("last4"),
                exp_month=data.get("exp_month"),
                exp_year=data.get("exp_year"),
                raw_response=data,
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_webhook_signature(
        cls,
        payload: bytes,
        signature: str,
        secret: str | None = None,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw webhook payload bytes
            signature: Stripe-Signature header value
            secret: Signing secret (defaults to STRIPE_WEBHOOK_SECRET)

        Returns:
            Parsed event data dict

        Raises:
            StripeInvalidRequestError: Invalid signature or payload
        """
        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                secret or settings.STRIPE_WEBHOOK_SECRET,
            )
            return _to_dict(event)
        except stripe.SignatureVerificationError as e:
            raise StripeInvalidRequestError(
                "Invalid webhook signature",
                stripe_code="signature_verification_failed",
                details={"error": str(e)},
            )
        except ValueError as e:
            raise StripeInvalidRequestError(
                "Invalid webhook payload",
                stripe_code="invalid_payload",
                details={"error": str(e)},
            )

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Raises:
            StripeCardDeclinedError: Card was declined
            StripeInvalidAccountError: Connected account unusable
            StripeInvalidRequestError: Invalid request or missing object
            StripeAuthenticationError: API key rejected
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: API unavailable or unknown failure
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "decline_code": decline_code},
            )
            raise StripeCardDeclinedError(
                str(error.user_message or error),
                stripe_code=error.code,
                decline_code=decline_code,
            )

        elif isinstance(error, stripe.PermissionError):
            logger.error(
                "Connected account not accessible",
                extra=log_context,
            )
            raise StripeInvalidAccountError(
                str(error.user_message or error),
                stripe_code=error.code or "account_invalid",
            )

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )

            if error.code == "account_invalid":
                raise StripeInvalidAccountError(
                    str(error.user_message or error),
                    stripe_code=error.code,
                )

            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            )

        elif isinstance(error, stripe.RateLimitError):
            logger.warning(
                "Rate limited by Stripe",
                extra=log_context,
            )
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            )

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            )

        elif isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeAuthenticationError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            )

        elif isinstance(error, stripe.APIError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code="api_error",
            )

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                f"Unexpected Stripe error: {error}",
                stripe_code="unknown_error",
            )
