"""
Authentication models.

This module defines the principal model consumed by the marketplace:
- User: Custom user model with email-based login and a closed role set

Related files:
    - managers.py: Custom user manager for email-based creation

Token issuance and registration are handled outside this project; the API
only needs an authenticated principal carrying an id and a role.
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class UserRole(models.TextChoices):
    """
    Closed set of marketplace roles.

    A user holds exactly one role for the lifetime of the account.
    """

    PATIENT = "patient", "Patient"
    PRACTITIONER = "practitioner", "Practitioner"
    ADMIN = "admin", "Admin"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        role: Marketplace role (patient, practitioner, admin)
        first_name / last_name: Display name used in gateway checkout
        phone_number: Optional, forwarded to the gateway as customer phone
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created

    Usage:
        patient = User.objects.create_user(
            email="patient@example.com",
            password="securepassword",
            role=UserRole.PATIENT,
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.PATIENT,
        db_index=True,
        help_text="Marketplace role of this user",
    )

    first_name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="User's first name",
    )
    last_name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="User's last name",
    )
    phone_number = models.CharField(
        max_length=32,
        blank=True,
        default="",
        help_text="Contact phone number",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Return "First Last", or the email when no name is set."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT

    @property
    def is_practitioner(self) -> bool:
        return self.role == UserRole.PRACTITIONER

    @property
    def is_platform_admin(self) -> bool:
        """Admins process payouts; superusers are treated as admins."""
        return self.role == UserRole.ADMIN or self.is_superuser
