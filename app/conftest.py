"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import pytest


def pytest_configure():
    """Adjust Django settings before tests run."""
    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Tests never need a running Redis
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}
    }
    settings.CELERY_TASK_ALWAYS_EAGER = True

    # Use fast password hasher for tests (PBKDF2 is too slow with 870K iterations)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    settings.FLUTTERWAVE_SECRET_KEY = "FLWSECK_TEST-secret"
    settings.FLUTTERWAVE_WEBHOOK_SECRET = "test-webhook-hash"
    settings.FLUTTERWAVE_BASE_URL = "https://flutterwave.test/v3"


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full money-flow journeys)
    - test_views.py, test_services.py, test_handlers.py, etc. → integration
    - test_models.py, test_tx_ref.py, test_flutterwave_adapter.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_handlers.py",
        "test_payment_records.py",
        "test_escrow_release.py",
        "test_payout_service.py",
        "test_checkout.py",
        "test_locking.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_permissions.py",
        "test_exception_handler.py",
        "test_tx_ref.py",
        "test_flutterwave_adapter.py",
        "test_config.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


# =============================================================================
# Project-wide Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF client; use force_authenticate per test."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def patient(db):
    from authentication.tests.factories import PatientFactory

    return PatientFactory(first_name="Ada", last_name="Obi")


@pytest.fixture
def practitioner(db):
    from authentication.tests.factories import PractitionerFactory

    return PractitionerFactory(first_name="Tunde", last_name="Bello")


@pytest.fixture
def other_patient(db):
    from authentication.tests.factories import PatientFactory

    return PatientFactory()


@pytest.fixture
def admin_user(db):
    from authentication.tests.factories import AdminFactory

    return AdminFactory()
