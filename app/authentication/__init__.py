"""
Authentication app.

Provides the email-based User model. Payment identities (platform
customer and card) hang off the user from the payments app.
"""
