"""
Readiness gates for Connect subscriptions.

Each validator takes an already loaded record and returns it unchanged
inside a successful ServiceResult, or a failure carrying the gate's
error code. They never query for the record themselves: callers look it
up first and report a missing record as NOT_FOUND.

Usage:
    from payments.validators import ProjectSubscribable, UserCanSubscribe

    result = get_project(project_id).bind(ProjectSubscribable.validate)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import ServiceResult

if TYPE_CHECKING:
    from authentication.models import User
    from projects.models import Project


class ProjectSubscribable:
    """A project needs a plan and a chargeable connected account."""

    error_code = "PROJECT_NOT_READY"

    @classmethod
    def validate(cls, project: Project) -> ServiceResult[Project]:
        plan = getattr(project, "stripe_connect_plan", None)
        account = getattr(project.organization, "stripe_connect_account", None)

        if plan is None or account is None or not account.can_accept_charges:
            return ServiceResult.failure(
                "Project is not ready to accept subscriptions",
                error_code=cls.error_code,
            )
        return ServiceResult.success(project)


class UserCanSubscribe:
    """A user needs a platform customer with a default card attached."""

    error_code = "USER_NOT_READY"

    @classmethod
    def validate(cls, user: User) -> ServiceResult[User]:
        customer = getattr(user, "stripe_platform_customer", None)
        card = getattr(user, "stripe_platform_card", None)

        if (
            customer is None
            or card is None
            or card.customer_id_from_stripe != customer.id_from_stripe
        ):
            return ServiceResult.failure(
                "User has no usable payment source",
                error_code=cls.error_code,
            )
        return ServiceResult.success(user)
