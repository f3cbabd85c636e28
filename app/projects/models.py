"""
Project domain models.

- Organization: Owner of projects; holds the Stripe connected account
  (``organization.stripe_connect_account``)
- Project: Funded entity; holds the Stripe plan (``project.stripe_connect_plan``)
- DonationGoal: Monthly funding milestone for a project

Amounts are stored in cents. A plan unit is one cent per month, so a
subscription's ``quantity`` is its monthly donation in cents.
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class Organization(UUIDPrimaryKeyMixin, BaseModel):
    """
    An organization running one or more projects.

    Fields:
        name: Organization display name
        slug: URL-safe unique identifier
    """

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Project(UUIDPrimaryKeyMixin, BaseModel):
    """
    A crowdfunded project backers can subscribe to.

    Fields:
        organization: Owning organization
        title: Project title
        total_monthly_donated: Sum of active subscription quantities (cents),
            maintained by ProjectService.update_project_totals
    """

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="projects",
    )
    title = models.CharField(max_length=255)
    total_monthly_donated = models.PositiveIntegerField(
        default=0,
        help_text="Monthly donations from active subscriptions, in cents",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Project({self.title})"


class DonationGoal(UUIDPrimaryKeyMixin, BaseModel):
    """
    A monthly funding milestone.

    Fields:
        project: Project the goal belongs to
        amount: Target monthly donation in cents
        description: What reaching the goal enables
        achieved: Whether the project total has reached ``amount``
        current: Whether this is the goal the project is working towards
    """

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="donation_goals",
    )
    amount = models.PositiveIntegerField(help_text="Target monthly amount in cents")
    description = models.TextField(blank=True, default="")
    achieved = models.BooleanField(default=False)
    current = models.BooleanField(default=False)

    class Meta:
        ordering = ["amount"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="donation_goal_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"DonationGoal({self.amount}, achieved={self.achieved})"
