"""
Tests for project funding services.
"""

from payments.state_machines import SubscriptionStatus
from payments.tests.factories import (
    StripeConnectPlanFactory,
    StripeConnectSubscriptionFactory,
)
from projects.services import DonationGoalsService, ProjectService
from projects.tests.factories import DonationGoalFactory, ProjectFactory


class TestUpdateProjectTotals:
    def test_sums_active_subscriptions(self, db):
        plan = StripeConnectPlanFactory()
        StripeConnectSubscriptionFactory(stripe_connect_plan=plan, quantity=1000)
        StripeConnectSubscriptionFactory(stripe_connect_plan=plan, quantity=250)
        StripeConnectSubscriptionFactory(
            stripe_connect_plan=plan,
            quantity=9999,
            status=SubscriptionStatus.CANCELED,
        )
        StripeConnectSubscriptionFactory(quantity=5000)

        result = ProjectService.update_project_totals(plan.project)

        assert result.success
        plan.project.refresh_from_db()
        assert plan.project.total_monthly_donated == 1250

    def test_project_without_plan_totals_zero(self, db):
        project = ProjectFactory(total_monthly_donated=700)

        ProjectService.update_project_totals(project)

        project.refresh_from_db()
        assert project.total_monthly_donated == 0


class TestUpdateProjectGoals:
    def test_no_goals(self, db):
        result = DonationGoalsService.update_project_goals(ProjectFactory())

        assert result.success
        assert result.data == []

    def test_marks_achieved_and_current(self, db):
        project = ProjectFactory(total_monthly_donated=1500)
        reached = DonationGoalFactory(project=project, amount=1000)
        next_goal = DonationGoalFactory(project=project, amount=2000)
        later = DonationGoalFactory(project=project, amount=5000)

        DonationGoalsService.update_project_goals(project)

        for goal in (reached, next_goal, later):
            goal.refresh_from_db()
        assert (reached.achieved, reached.current) == (True, False)
        assert (next_goal.achieved, next_goal.current) == (False, True)
        assert (later.achieved, later.current) == (False, False)

    def test_all_achieved_keeps_largest_current(self, db):
        project = ProjectFactory(total_monthly_donated=10_000)
        small = DonationGoalFactory(project=project, amount=1000)
        large = DonationGoalFactory(project=project, amount=5000)

        DonationGoalsService.update_project_goals(project)

        small.refresh_from_db()
        large.refresh_from_db()
        assert small.achieved and large.achieved
        assert large.current and not small.current
