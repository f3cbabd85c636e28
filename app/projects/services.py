"""
Project funding services.

These run after a subscription is created or synchronized from Stripe:

- ProjectService.update_project_totals: recompute the monthly total
- DonationGoalsService.update_project_goals: refresh goal progress

Usage:
    from projects.services import DonationGoalsService, ProjectService

    ProjectService.update_project_totals(project)
    DonationGoalsService.update_project_goals(project)
"""

from __future__ import annotations

from django.db.models import Sum

from core.services import BaseService, ServiceResult

from projects.models import DonationGoal, Project


class ProjectService(BaseService):
    """Keeps denormalized funding totals on Project in sync."""

    @classmethod
    def update_project_totals(cls, project: Project) -> ServiceResult[Project]:
        """
        Recompute ``total_monthly_donated`` from active subscriptions.

        The total is the sum of ``quantity`` over active subscriptions to
        the project's plan. Projects without a plan total zero.
        """
        # Local import: payments depends on projects, not the other way round.
        from payments.models import StripeConnectSubscription
        from payments.state_machines import SubscriptionStatus

        total = (
            StripeConnectSubscription.objects.filter(
                stripe_connect_plan__project=project,
                status=SubscriptionStatus.ACTIVE,
            ).aggregate(total=Sum("quantity"))["total"]
            or 0
        )

        project.total_monthly_donated = total
        project.save(update_fields=["total_monthly_donated", "updated_at"])

        cls.get_logger().info(
            "Updated project totals",
            extra={"project_id": str(project.id), "total_monthly_donated": total},
        )
        return ServiceResult.success(project)


class DonationGoalsService(BaseService):
    """Tracks which donation goals a project has reached."""

    @classmethod
    def update_project_goals(cls, project: Project) -> ServiceResult[list[DonationGoal]]:
        """
        Refresh ``achieved`` and ``current`` on every goal of the project.

        A goal is achieved once the project's monthly total reaches its
        amount. The current goal is the smallest unachieved one, or the
        largest goal when all are achieved.
        """
        goals = list(project.donation_goals.order_by("amount"))
        if not goals:
            return ServiceResult.success([])

        total = project.total_monthly_donated
        for goal in goals:
            goal.achieved = goal.amount <= total
            goal.current = False

        current = next((goal for goal in goals if not goal.achieved), goals[-1])
        current.current = True

        with cls.atomic():
            DonationGoal.objects.bulk_update(goals, ["achieved", "current"])

        cls.get_logger().debug(
            "Updated donation goals",
            extra={"project_id": str(project.id), "current_goal_id": str(current.id)},
        )
        return ServiceResult.success(goals)
