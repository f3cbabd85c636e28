"""
Celery configuration for the Django application.

Celery runs the Stripe webhook processing outside the request cycle:
- process_webhook_event: queued by the Connect webhook endpoint
- retry_failed_webhooks / cleanup_stuck_webhooks: periodic, scheduled by
  django-celery-beat's DatabaseScheduler

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all registered Django apps.

Usage:
    celery -A config worker -l info
    celery -A config beat -l info

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Looks for a tasks.py module in each installed app
app.autodiscover_tasks()
