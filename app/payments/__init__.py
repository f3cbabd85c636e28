"""
Payments app for Stripe Connect subscriptions.

This app handles:
- Subscribing users to projects on the organization's connected account
- Provisioning connect customers and cards from platform ones
- Synchronizing subscriptions from Connect webhooks

Related apps:
    - authentication: User model for subscribers
    - projects: Projects, organizations and donation goals

Usage:
    from payments.services import ConnectSubscriptionService

    result = ConnectSubscriptionService().find_or_create(project.id, user.id, 1000)
"""
