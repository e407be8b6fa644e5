"""
Authentication application.

Provides the email-keyed User model whose role (patient, practitioner,
admin) is the principal capability consumed by the appointment and payment
apps.

Usage:
    from authentication.models import User, UserRole
"""
