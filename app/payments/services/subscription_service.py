"""
Connect subscription lifecycle.

ConnectSubscriptionService owns the two ways a StripeConnectSubscription
changes:

- find_or_create: a user subscribes to a project. Returns the existing
  subscription for (plan, user) if there is one, otherwise provisions the
  connect customer and card, creates the subscription on the
  organization's connected account and stores the local mirror.
- update_from_stripe: a Connect webhook reported a change. Re-reads the
  subscription from Stripe and rewrites the mirror's mutable fields. This
  path never creates a mirror.

Both return a ServiceResult. Error codes:
    NOT_FOUND          A required local record does not exist
    PROJECT_NOT_READY  Project has no plan or no chargeable connected account
    USER_NOT_READY     User has no platform customer with a default card
    VALIDATION_ERROR   The mirror failed serializer validation (``errors``)
    PROCESSOR_ERROR    Stripe rejected a call (``details`` has Stripe's code)
    UNEXPECTED         Anything else; logged with traceback

There is no transaction around the whole workflow. Stripe objects created
before a failure are left in place and reused (customer, card) or
reconciled by the next webhook (subscription).

After a successful create or update, the project's monthly total and
donation goals are recomputed. Failures there are logged and do not
change the result.

Usage:
    from payments.services import ConnectSubscriptionService

    result = ConnectSubscriptionService().find_or_create(
        project_id=project.id,
        user_id=request.user.id,
        quantity=1000,
    )
    if result.success:
        subscription = result.data
"""

from __future__ import annotations

import logging
import uuid

from django.core.exceptions import ValidationError
from django.db import IntegrityError

from core.services import BaseService, ServiceResult

from authentication.models import User
from payments.adapters import (
    CreateSubscriptionParams,
    IdempotencyKeyGenerator,
    StripeAdapter,
    SubscriptionParamsMapper,
    SubscriptionResult,
)
from payments.exceptions import StripeError
from payments.models import (
    StripeConnectAccount,
    StripeConnectCard,
    StripeConnectCustomer,
    StripeConnectPlan,
    StripeConnectSubscription,
)
from payments.serializers import (
    StripeConnectSubscriptionCreateSerializer,
    StripeConnectSubscriptionWebhookUpdateSerializer,
    flatten_errors,
)
from payments.services.connect_card_service import ConnectCardService
from payments.services.connect_customer_service import ConnectCustomerService
from payments.validators import ProjectSubscribable, UserCanSubscribe
from projects.models import Project
from projects.services import DonationGoalsService, ProjectService

# Platform fee taken from every Connect subscription invoice
APPLICATION_FEE_PERCENT = 5


class ConnectSubscriptionService(BaseService):
    """
    Creates and synchronizes Connect subscriptions.

    Dependency Injection:
        The Stripe adapter can be injected for testing. The same adapter
        is handed to the customer and card provisioners.

    Usage:
        service = ConnectSubscriptionService(stripe_adapter=FakeStripe)
        result = service.update_from_stripe("sub_123", "cus_123")
    """

    def __init__(self, stripe_adapter: type | None = None):
        self.stripe = stripe_adapter or StripeAdapter
        self.customers = ConnectCustomerService(self.stripe)
        self.cards = ConnectCardService(self.stripe)

    # =========================================================================
    # Subscribe
    # =========================================================================

    def find_or_create(
        self,
        project_id: uuid.UUID,
        user_id: int,
        quantity: int,
    ) -> ServiceResult[StripeConnectSubscription]:
        """
        Return the user's subscription to the project, creating it if needed.

        Args:
            project_id: Project to subscribe to
            user_id: Subscribing user
            quantity: Plan units (monthly donation in cents)

        Returns:
            ServiceResult with the StripeConnectSubscription
        """
        logger = self.get_logger()
        log_context = {
            "project_id": str(project_id),
            "user_id": str(user_id),
            "quantity": quantity,
        }

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            return ServiceResult.failure(
                "Invalid quantity",
                error_code="VALIDATION_ERROR",
                errors={"quantity": ["Ensure this value is greater than or equal to 1."]},
            )

        try:
            project_result = self._get_project(project_id).bind(
                ProjectSubscribable.validate
            )
            if not project_result:
                logger.info(
                    "Subscription rejected",
                    extra={**log_context, "error_code": project_result.error_code},
                )
                return project_result
            project = project_result.data

            user_result = self._get_user(user_id).bind(UserCanSubscribe.validate)
            if not user_result:
                logger.info(
                    "Subscription rejected",
                    extra={**log_context, "error_code": user_result.error_code},
                )
                return user_result
            user = user_result.data

            plan = project.stripe_connect_plan
            existing = self._find_subscription(plan, user)
            if existing is not None:
                logger.info(
                    "Subscription already exists",
                    extra={**log_context, "subscription_id": existing.id_from_stripe},
                )
                result = ServiceResult.success(existing)
            else:
                result = self._create(project, plan, user, quantity)

        except Exception as exc:
            return self.handle_exception(
                exc, "Unexpected error creating subscription", error_code="UNEXPECTED"
            )

        if result.success:
            self._run_post_commit_effects(project)
        return result

    def _create(
        self,
        project: Project,
        plan: StripeConnectPlan,
        user: User,
        quantity: int,
    ) -> ServiceResult[StripeConnectSubscription]:
        connect_account = project.organization.stripe_connect_account
        platform_customer = user.stripe_platform_customer

        customer_result = self.customers.find_or_create(
            platform_customer, connect_account
        )
        if not customer_result:
            return customer_result
        connect_customer = customer_result.data

        card_result = self.cards.find_or_create(
            user.stripe_platform_card,
            connect_customer,
            platform_customer,
            connect_account,
        )
        if not card_result:
            return card_result

        return self._create_on_stripe(
            plan, user, connect_account, connect_customer, card_result.data, quantity
        ).bind(lambda stripe_subscription: self._insert(stripe_subscription, plan, user))

    def _create_on_stripe(
        self,
        plan: StripeConnectPlan,
        user: User,
        connect_account: StripeConnectAccount,
        connect_customer: StripeConnectCustomer,
        connect_card: StripeConnectCard,
        quantity: int,
    ) -> ServiceResult[SubscriptionResult]:
        # One key per call: Stripe caches declines per key. Concurrent
        # duplicates are resolved on insert.
        idempotency_key = IdempotencyKeyGenerator.generate(
            operation="create_subscription",
            entity_id=f"{plan.id}:{user.id}:{quantity}:{uuid.uuid4().hex}",
        )
        params = CreateSubscriptionParams(
            application_fee_percent=APPLICATION_FEE_PERCENT,
            customer=connect_customer.id_from_stripe,
            plan=plan.id_from_stripe,
            quantity=quantity,
            source=connect_card.id_from_stripe,
            idempotency_key=idempotency_key,
            metadata={"project_id": str(plan.project_id), "user_id": str(user.id)},
        )

        try:
            stripe_subscription = self.stripe.create_subscription(
                params, connect_account=connect_account.id_from_stripe
            )
        except StripeError as exc:
            return self.handle_exception(
                exc,
                "Stripe rejected subscription create",
                error_code="PROCESSOR_ERROR",
                log_level=logging.WARNING,
            )
        return ServiceResult.success(stripe_subscription)

    def _insert(
        self,
        stripe_subscription: SubscriptionResult,
        plan: StripeConnectPlan,
        user: User,
    ) -> ServiceResult[StripeConnectSubscription]:
        """
        Store the mirror for a subscription just created on Stripe.

        A concurrent call for the same (plan, user) may have inserted first.
        That record wins and is returned; the Stripe subscription created
        here is logged so it can be cancelled by hand.
        """
        attrs = SubscriptionParamsMapper.build(
            stripe_subscription,
            extra={"stripe_connect_plan": plan.id, "user": user.id},
        )
        serializer = StripeConnectSubscriptionCreateSerializer(data=attrs)

        if not serializer.is_valid():
            winner = self._find_subscription(plan, user)
            if winner is not None:
                return self._lost_race(winner, stripe_subscription)
            self.get_logger().error(
                "Subscription created on Stripe but not stored locally",
                extra={
                    "subscription_id": stripe_subscription.id,
                    "errors": flatten_errors(serializer.errors),
                },
            )
            return ServiceResult.failure(
                "Invalid subscription data",
                error_code="VALIDATION_ERROR",
                errors=flatten_errors(serializer.errors),
            )

        try:
            with self.atomic():
                subscription = serializer.save()
        except IntegrityError:
            winner = self._find_subscription(plan, user)
            if winner is None:
                raise
            return self._lost_race(winner, stripe_subscription)

        self.get_logger().info(
            "Subscription created",
            extra={
                "subscription_id": subscription.id_from_stripe,
                "plan_id": str(plan.id),
                "user_id": str(user.id),
                "status": subscription.status,
            },
        )
        return ServiceResult.success(subscription)

    def _lost_race(
        self,
        winner: StripeConnectSubscription,
        stripe_subscription: SubscriptionResult,
    ) -> ServiceResult[StripeConnectSubscription]:
        if winner.id_from_stripe != stripe_subscription.id:
            self.get_logger().warning(
                "Duplicate Stripe subscription created concurrently",
                extra={
                    "subscription_id": winner.id_from_stripe,
                    "orphaned_subscription_id": stripe_subscription.id,
                },
            )
        return ServiceResult.success(winner)

    # =========================================================================
    # Webhook synchronization
    # =========================================================================

    def update_from_stripe(
        self,
        subscription_id: str,
        connect_customer_id: str,
    ) -> ServiceResult[StripeConnectSubscription]:
        """
        Bring a subscription mirror in line with Stripe.

        Args:
            subscription_id: Stripe Subscription ID (sub_xxx)
            connect_customer_id: Customer ID on the connected account, as
                reported by the webhook event

        Returns:
            ServiceResult with the updated StripeConnectSubscription
        """
        log_context = {
            "subscription_id": subscription_id,
            "connect_customer_id": connect_customer_id,
        }

        try:
            account_result = self._get_connect_account(connect_customer_id)
            if not account_result:
                self.get_logger().warning(
                    "Webhook for unknown connect customer", extra=log_context
                )
                return account_result

            retrieve_result = self._retrieve_from_stripe(
                subscription_id, account_result.data
            )
            if not retrieve_result:
                return retrieve_result

            subscription_result = self._get_subscription(subscription_id)
            if not subscription_result:
                self.get_logger().warning(
                    "Webhook for subscription with no local record", extra=log_context
                )
                return subscription_result
            subscription = subscription_result.data

            attrs = SubscriptionParamsMapper.build(retrieve_result.data)
            project = Project.objects.select_related("stripe_connect_plan").get(
                stripe_connect_plan__id=subscription.stripe_connect_plan_id
            )

            serializer = StripeConnectSubscriptionWebhookUpdateSerializer(
                subscription, data=attrs
            )
            if not serializer.is_valid():
                return ServiceResult.failure(
                    "Invalid subscription data",
                    error_code="VALIDATION_ERROR",
                    errors=flatten_errors(serializer.errors),
                )
            subscription = serializer.save()

        except Exception as exc:
            return self.handle_exception(
                exc, "Unexpected error synchronizing subscription", error_code="UNEXPECTED"
            )

        self.get_logger().info(
            "Subscription synchronized",
            extra={**log_context, "status": subscription.status},
        )
        self._run_post_commit_effects(project)
        return ServiceResult.success(subscription)

    def _retrieve_from_stripe(
        self,
        subscription_id: str,
        connect_account: StripeConnectAccount,
    ) -> ServiceResult[SubscriptionResult]:
        try:
            stripe_subscription = self.stripe.retrieve_subscription(
                subscription_id, connect_account=connect_account.id_from_stripe
            )
        except StripeError as exc:
            return self.handle_exception(
                exc,
                "Failed to retrieve subscription from Stripe",
                error_code="PROCESSOR_ERROR",
                log_level=logging.WARNING,
            )
        return ServiceResult.success(stripe_subscription)

    # =========================================================================
    # Lookups
    # =========================================================================

    @staticmethod
    def _get_project(project_id: uuid.UUID) -> ServiceResult[Project]:
        try:
            project = (
                Project.objects.select_related(
                    "stripe_connect_plan",
                    "organization__stripe_connect_account",
                )
                .filter(pk=project_id)
                .first()
            )
        except (ValueError, ValidationError):
            project = None
        if project is None:
            return ServiceResult.failure("Project not found", error_code="NOT_FOUND")
        return ServiceResult.success(project)

    @staticmethod
    def _get_user(user_id: int) -> ServiceResult[User]:
        try:
            user = (
                User.objects.select_related(
                    "stripe_platform_customer",
                    "stripe_platform_card",
                )
                .prefetch_related("stripe_platform_card__stripe_connect_cards")
                .filter(pk=user_id)
                .first()
            )
        except (ValueError, ValidationError):
            user = None
        if user is None:
            return ServiceResult.failure("User not found", error_code="NOT_FOUND")
        return ServiceResult.success(user)

    @staticmethod
    def _get_connect_account(
        connect_customer_id: str,
    ) -> ServiceResult[StripeConnectAccount]:
        customer = (
            StripeConnectCustomer.objects.select_related("stripe_connect_account")
            .filter(id_from_stripe=connect_customer_id)
            .first()
        )
        if customer is None:
            return ServiceResult.failure(
                "Connect customer not found", error_code="NOT_FOUND"
            )
        return ServiceResult.success(customer.stripe_connect_account)

    @staticmethod
    def _get_subscription(subscription_id: str) -> ServiceResult[StripeConnectSubscription]:
        subscription = StripeConnectSubscription.objects.filter(
            id_from_stripe=subscription_id
        ).first()
        if subscription is None:
            return ServiceResult.failure(
                "Subscription not found", error_code="NOT_FOUND"
            )
        return ServiceResult.success(subscription)

    @staticmethod
    def _find_subscription(
        plan: StripeConnectPlan, user: User
    ) -> StripeConnectSubscription | None:
        return StripeConnectSubscription.objects.filter(
            stripe_connect_plan=plan, user=user
        ).first()

    # =========================================================================
    # Post-commit effects
    # =========================================================================

    def _run_post_commit_effects(self, project: Project) -> None:
        """Recompute project totals and donation goals; never fails the caller."""
        try:
            result = ProjectService.update_project_totals(project).bind(
                DonationGoalsService.update_project_goals
            )
        except Exception:
            self.get_logger().exception(
                "Project funding update failed",
                extra={"project_id": str(project.id)},
            )
            return

        if not result:
            self.get_logger().warning(
                "Project funding update failed",
                extra={"project_id": str(project.id), "error_code": result.error_code},
            )
