"""
Add celery-beat schedules for webhook recovery.

This migration creates the periodic tasks that keep Stripe webhook
processing moving:
- retry_failed_webhooks every 15 minutes
- cleanup_stuck_webhooks every 10 minutes
"""

from django.db import migrations

PERIODIC_TASKS = [
    {
        "name": "Retry Failed Stripe Webhooks",
        "task": "payments.tasks.retry_failed_webhooks",
        "every": 15,
        "description": (
            "Re-queues failed webhook events that are under the retry cap, "
            "including subscription updates that arrived before the local record."
        ),
    },
    {
        "name": "Reset Stuck Stripe Webhooks",
        "task": "payments.tasks.cleanup_stuck_webhooks",
        "every": 10,
        "description": (
            "Marks webhook events stuck in processing for over 30 minutes "
            "as failed so they are retried."
        ),
    },
]


def create_periodic_tasks(apps, schema_editor):
    """Create the periodic webhook tasks."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    for entry in PERIODIC_TASKS:
        schedule, _ = IntervalSchedule.objects.get_or_create(
            every=entry["every"],
            period="minutes",
        )
        PeriodicTask.objects.get_or_create(
            name=entry["name"],
            defaults={
                "task": entry["task"],
                "interval": schedule,
                "enabled": True,
                "description": entry["description"],
            },
        )


def remove_periodic_tasks(apps, schema_editor):
    """Remove the periodic tasks on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(
        name__in=[entry["name"] for entry in PERIODIC_TASKS],
    ).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
