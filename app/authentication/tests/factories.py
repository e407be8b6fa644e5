"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import PatientFactory, PractitionerFactory

    patient = PatientFactory()
    practitioner = PractitionerFactory(first_name="Ada")
"""

import factory

from authentication.models import User, UserRole


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active patients by default through UserManager.create_user()
    so passwords are hashed.
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    role = UserRole.PATIENT
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )


class PatientFactory(UserFactory):
    email = factory.Sequence(lambda n: f"patient{n}@example.com")
    role = UserRole.PATIENT


class PractitionerFactory(UserFactory):
    email = factory.Sequence(lambda n: f"practitioner{n}@example.com")
    role = UserRole.PRACTITIONER


class AdminFactory(UserFactory):
    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    role = UserRole.ADMIN
    is_staff = True
