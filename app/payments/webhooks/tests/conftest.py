"""
Pytest fixtures for Flutterwave webhook tests.

The gateway adapter is always a MagicMock whose verify_transaction answers
with a VerifiedTransaction built from the same values as the payload, so a
test only has to override what it wants to disagree.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from appointments.tests.factories import AppointmentFactory
from payments.adapters import VerifiedTransaction, build_tx_ref
from payments.config import EscrowSettings
from payments.tests.factories import charge_completed_payload

WEBHOOK_SECRET = "test-webhook-hash"


@pytest.fixture
def escrow_config():
    return EscrowSettings(
        commission_rate=Decimal("0.10"),
        webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def booked_appointment(patient, practitioner):
    return AppointmentFactory(patient=patient, practitioner=practitioner)


@pytest.fixture
def tx_ref(booked_appointment):
    return build_tx_ref(booked_appointment.id, issued_at_ms=1700000000000)


@pytest.fixture
def payload(tx_ref):
    return charge_completed_payload(tx_ref, amount="200.00", transaction_id=4975363)


@pytest.fixture
def raw_body(payload):
    return json.dumps(payload).encode()


@pytest.fixture
def verified(tx_ref):
    return VerifiedTransaction(
        id="4975363",
        tx_ref=tx_ref,
        status="successful",
        amount_cents=20000,
        fee_cents=280,
        currency="NGN",
    )


@pytest.fixture
def adapter(verified):
    adapter = MagicMock()
    adapter.verify_transaction.return_value = verified
    return adapter


@pytest.fixture
def notifications():
    return MagicMock()
