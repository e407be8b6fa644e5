"""
Tests for the User model and its manager.
"""

import pytest

from authentication.models import User, UserRole
from authentication.tests.factories import (
    AdminFactory,
    PatientFactory,
    PractitionerFactory,
)


@pytest.mark.django_db
class TestUserRoles:
    """Role helpers used by the capability checks."""

    def test_patient_flags(self):
        """A patient is neither practitioner nor admin."""
        user = PatientFactory()

        assert user.is_patient
        assert not user.is_practitioner
        assert not user.is_platform_admin

    def test_practitioner_flags(self):
        """A practitioner is only a practitioner."""
        user = PractitionerFactory()

        assert user.is_practitioner
        assert not user.is_patient

    def test_admin_role_is_platform_admin(self):
        """The admin role grants platform admin."""
        assert AdminFactory().is_platform_admin

    def test_superuser_is_platform_admin(self):
        """Superusers are treated as admins regardless of stored role."""
        user = User.objects.create_superuser(
            email="root@example.com", password="pass12345"
        )

        assert user.role == UserRole.ADMIN
        assert user.is_platform_admin


@pytest.mark.django_db
class TestUserManager:
    """Tests for UserManager.create_user."""

    def test_email_required(self):
        """Creating a user without email raises."""
        with pytest.raises(ValueError):
            User.objects.create_user(email="", password="x")

    def test_password_hashed(self):
        """Passwords are stored hashed."""
        user = User.objects.create_user(email="a@Example.COM", password="secret123")

        assert user.check_password("secret123")
        assert user.password != "secret123"
        assert user.email == "a@example.com"

    def test_full_name_falls_back_to_email(self):
        """get_full_name returns the email when no name is set."""
        user = User.objects.create_user(email="anon@example.com")

        assert user.get_full_name() == "anon@example.com"
        assert not user.has_usable_password()

    def test_superuser_holds_admin_role(self):
        user = User.objects.create_superuser(email="root@example.com", password="x")

        assert user.is_staff and user.is_superuser
        assert user.role == UserRole.ADMIN

    def test_superuser_requires_staff_flag(self):
        with pytest.raises(ValueError):
            User.objects.create_superuser(
                email="root@example.com", password="x", is_staff=False
            )
