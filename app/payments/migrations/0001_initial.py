import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _base_fields():
    return [
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_index=True,
                help_text="Timestamp when this record was created",
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                help_text="Timestamp when this record was last modified",
            ),
        ),
        (
            "id",
            models.UUIDField(
                default=uuid.uuid4,
                editable=False,
                help_text="Unique identifier for this record",
                primary_key=True,
                serialize=False,
            ),
        ),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("projects", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StripeConnectAccount",
            fields=_base_fields()
            + [
                (
                    "id_from_stripe",
                    models.CharField(
                        help_text="Stripe Account ID (acct_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "charges_enabled",
                    models.BooleanField(
                        default=False,
                        help_text="Whether Stripe has enabled charges for this account",
                    ),
                ),
                (
                    "payouts_enabled",
                    models.BooleanField(
                        default=False,
                        help_text="Whether Stripe has enabled payouts for this account",
                    ),
                ),
                (
                    "organization",
                    models.OneToOneField(
                        help_text="Organization this connected account belongs to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_account",
                        to="projects.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Connect Account",
                "verbose_name_plural": "Stripe Connect Accounts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StripeConnectPlan",
            fields=_base_fields()
            + [
                (
                    "id_from_stripe",
                    models.CharField(
                        help_text="Stripe Plan ID", max_length=255, unique=True
                    ),
                ),
                (
                    "amount",
                    models.PositiveIntegerField(
                        default=1, help_text="Unit amount in cents"
                    ),
                ),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("stripe_created_at", models.DateTimeField(blank=True, null=True)),
                (
                    "project",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_plan",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Connect Plan",
                "verbose_name_plural": "Stripe Connect Plans",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StripePlatformCustomer",
            fields=_base_fields()
            + [
                (
                    "id_from_stripe",
                    models.CharField(
                        help_text="Stripe Customer ID (cus_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("currency", models.CharField(blank=True, default="", max_length=3)),
                ("delinquent", models.BooleanField(default=False)),
                ("stripe_created_at", models.DateTimeField(blank=True, null=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_platform_customer",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Platform Customer",
                "verbose_name_plural": "Stripe Platform Customers",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StripePlatformCard",
            fields=_base_fields()
            + [
                (
                    "id_from_stripe",
                    models.CharField(
                        help_text="Stripe Card ID (card_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "customer_id_from_stripe",
                    models.CharField(
                        help_text="Stripe Customer ID the card belongs to",
                        max_length=255,
                    ),
                ),
                ("brand", models.CharField(blank=True, default="", max_length=50)),
                ("last4", models.CharField(blank=True, default="", max_length=4)),
                ("exp_month", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("exp_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_platform_card",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Platform Card",
                "verbose_name_plural": "Stripe Platform Cards",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StripeConnectCustomer",
            fields=_base_fields()
            + [
                (
                    "id_from_stripe",
                    models.CharField(
                        help_text="Stripe Customer ID on the connected account (cus_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "stripe_connect_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_customers",
                        to="payments.stripeconnectaccount",
                    ),
                ),
                (
                    "stripe_platform_customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_customers",
                        to="payments.stripeplatformcustomer",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_customers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Connect Customer",
                "verbose_name_plural": "Stripe Connect Customers",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("stripe_connect_account", "stripe_platform_customer"),
                        name="unique_connect_customer_per_account",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="StripeConnectCard",
            fields=_base_fields()
            + [
                (
                    "id_from_stripe",
                    models.CharField(
                        help_text="Stripe Card ID on the connected account (card_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "stripe_connect_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_cards",
                        to="payments.stripeconnectaccount",
                    ),
                ),
                (
                    "stripe_connect_customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_cards",
                        to="payments.stripeconnectcustomer",
                    ),
                ),
                (
                    "stripe_platform_card",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_cards",
                        to="payments.stripeplatformcard",
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Connect Card",
                "verbose_name_plural": "Stripe Connect Cards",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("stripe_connect_account", "stripe_platform_card"),
                        name="unique_connect_card_per_account",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="StripeConnectSubscription",
            fields=_base_fields()
            + [
                (
                    "id_from_stripe",
                    models.CharField(
                        help_text="Stripe Subscription ID (sub_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "customer_id_from_stripe",
                    models.CharField(
                        db_index=True,
                        help_text="Stripe Customer ID on the connected account",
                        max_length=255,
                    ),
                ),
                (
                    "plan_id_from_stripe",
                    models.CharField(
                        help_text="Stripe Plan ID the subscription was created against",
                        max_length=255,
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(help_text="Number of plan units"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("incomplete", "Incomplete"),
                            ("incomplete_expired", "Incomplete Expired"),
                            ("trialing", "Trialing"),
                            ("active", "Active"),
                            ("past_due", "Past Due"),
                            ("canceled", "Canceled"),
                            ("unpaid", "Unpaid"),
                            ("paused", "Paused"),
                        ],
                        db_index=True,
                        default="incomplete",
                        max_length=30,
                    ),
                ),
                (
                    "application_fee_percent",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=5, null=True
                    ),
                ),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("current_period_start", models.DateTimeField(blank=True, null=True)),
                ("current_period_end", models.DateTimeField(blank=True, null=True)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                ("stripe_created_at", models.DateTimeField(blank=True, null=True)),
                (
                    "stripe_connect_plan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_subscriptions",
                        to="payments.stripeconnectplan",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stripe_connect_subscriptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Connect Subscription",
                "verbose_name_plural": "Stripe Connect Subscriptions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["stripe_connect_plan", "status"],
                        name="subscription_plan_status_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("stripe_connect_plan", "user"),
                        name="unique_subscription_per_plan_and_user",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="WebhookEvent",
            fields=_base_fields()
            + [
                (
                    "stripe_event_id",
                    models.CharField(
                        help_text="Stripe Event ID (evt_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        db_index=True,
                        help_text="Stripe event type (e.g., 'customer.subscription.updated')",
                        max_length=100,
                    ),
                ),
                (
                    "account",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Connected account ID for Connect events (acct_xxx)",
                        max_length=255,
                    ),
                ),
                (
                    "payload",
                    models.JSONField(help_text="Full webhook payload from Stripe (JSON)"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("processed", "Processed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                (
                    "retry_count",
                    models.PositiveSmallIntegerField(
                        default=0, help_text="Number of processing attempts"
                    ),
                ),
            ],
            options={
                "verbose_name": "Webhook Event",
                "verbose_name_plural": "Webhook Events",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "retry_count"],
                        name="webhook_status_retry_idx",
                    )
                ],
            },
        ),
    ]
