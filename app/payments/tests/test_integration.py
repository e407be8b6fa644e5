"""
End-to-end money flow through the public API.

A patient books and pays NGN 200.00 at 10% commission. The practitioner
ends with 180.00 available, withdraws 50.00, and gets it back when the
admin records the bank transfer as failed. Only the gateway is mocked.
"""

import json
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.test import Client
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from appointments.models import Appointment
from appointments.states import AppointmentStatus
from payments.adapters import VerifiedTransaction
from payments.ledger import Wallet
from payments.models import Payment, Payout
from payments.state_machines import PaymentStatus, PayoutStatus
from payments.tests.factories import charge_completed_payload

WEBHOOK_SECRET = "test-webhook-hash"
BANK_DETAILS = {
    "bank_name": "Access Bank",
    "account_number": "0123456789",
    "account_name": "Tunde Bello",
}


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def _wallet(practitioner):
    return Wallet.objects.get(practitioner=practitioner)


@pytest.fixture(autouse=True)
def webhook_secret(settings):
    settings.FLUTTERWAVE_WEBHOOK_SECRET = WEBHOOK_SECRET


@pytest.fixture
def checkout_gateway():
    with patch("payments.services.checkout.FlutterwaveAdapter") as adapter_class:
        adapter_class.return_value.initiate_payment.return_value = (
            "https://checkout.flutterwave.com/v3/hosted/pay/abc123"
        )
        yield adapter_class.return_value


@pytest.fixture
def paid_appointment(patient, practitioner, checkout_gateway):
    """Book, check out and deliver a verified charge.completed webhook."""
    patient_api = _client_for(patient)

    booking = patient_api.post(
        reverse("appointments:appointment-list"),
        {
            "practitioner_id": practitioner.id,
            "scheduled_at": (timezone.now() + timedelta(days=3)).isoformat(),
        },
        format="json",
    )
    assert booking.status_code == 201
    appointment_id = booking.data["id"]

    checkout = patient_api.post(
        reverse("payments:initiate"),
        {"appointment_id": appointment_id, "amount": 20000},
        format="json",
    )
    assert checkout.status_code == 201
    tx_ref = checkout.data["tx_ref"]

    verified = VerifiedTransaction(
        id="4975363",
        tx_ref=tx_ref,
        status="successful",
        amount_cents=20000,
        fee_cents=280,
        currency="NGN",
    )
    with patch("payments.webhooks.handlers.FlutterwaveAdapter") as adapter_class:
        adapter_class.return_value.verify_transaction.return_value = verified
        response = Client().post(
            reverse("payments:flutterwave_webhook"),
            data=json.dumps(charge_completed_payload(tx_ref, amount="200.00")),
            content_type="application/json",
            headers={"verif-hash": WEBHOOK_SECRET},
        )
    assert response.status_code == 200

    return Appointment.objects.get(pk=appointment_id)


class TestEscrowLifecycle:
    def test_payment_is_held_after_webhook(self, paid_appointment, practitioner):
        assert paid_appointment.status == AppointmentStatus.PAID

        payment = Payment.objects.get(appointment=paid_appointment)
        assert payment.status == PaymentStatus.HELD
        assert payment.gross_amount_cents == 20000
        assert payment.platform_fee_cents == 2000
        assert payment.practitioner_share_cents == 18000

        wallet = _wallet(practitioner)
        assert wallet.pending_balance_cents == 18000
        assert wallet.balance_cents == 0

    def test_complete_withdraw_and_failed_payout(
        self, paid_appointment, practitioner, admin_user
    ):
        practitioner_api = _client_for(practitioner)
        detail = reverse("appointments:appointment-detail", args=[paid_appointment.id])

        confirm = practitioner_api.post(f"{detail}confirm/", format="json")
        assert confirm.status_code == 200
        assert confirm.data["status"] == AppointmentStatus.PRACTITIONER_CONFIRMED

        complete = practitioner_api.post(
            f"{detail}complete/", {"notes": "Follow up in 2 weeks"}, format="json"
        )
        assert complete.status_code == 200
        assert complete.data["status"] == AppointmentStatus.COMPLETED

        wallet = _wallet(practitioner)
        assert wallet.balance_cents == 18000
        assert wallet.pending_balance_cents == 0
        assert wallet.total_earned_cents == 18000
        assert Payment.objects.get(appointment=paid_appointment).status == (
            PaymentStatus.COMPLETED
        )

        # Completing twice never releases twice
        again = practitioner_api.post(f"{detail}complete/", format="json")
        assert again.status_code == 409
        assert again.data["error_code"] == "ALREADY_COMPLETED"
        assert _wallet(practitioner).balance_cents == 18000

        withdrawal = practitioner_api.post(
            reverse("payments:withdrawals"),
            {"amount": 5000, "bank_details": BANK_DETAILS},
            format="json",
        )
        assert withdrawal.status_code == 201
        assert withdrawal.data["new_balance"] == 13000
        assert _wallet(practitioner).balance_cents == 13000

        process = _client_for(admin_user).post(
            reverse(
                "payments:process_payout",
                kwargs={"payout_id": withdrawal.data["payout_id"]},
            ),
            {"status": "failed", "admin_notes": "Account closed"},
            format="json",
        )
        assert process.status_code == 200
        assert process.data["status"] == PayoutStatus.FAILED
        assert _wallet(practitioner).balance_cents == 18000
        assert Payout.objects.get(pk=withdrawal.data["payout_id"]).status == (
            PayoutStatus.FAILED
        )

    def test_patient_cancel_refunds_escrow(self, paid_appointment, patient, practitioner):
        detail = reverse("appointments:appointment-detail", args=[paid_appointment.id])

        response = _client_for(patient).post(
            f"{detail}cancel/", {"reason": "Feeling better"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == AppointmentStatus.CANCELLED
        assert Payment.objects.get(appointment=paid_appointment).status == (
            PaymentStatus.REFUNDED
        )
        wallet = _wallet(practitioner)
        assert wallet.pending_balance_cents == 0
        assert wallet.balance_cents == 0

    def test_replayed_webhook_does_not_double_credit(
        self, paid_appointment, practitioner
    ):
        payment = Payment.objects.get(appointment=paid_appointment)
        verified = VerifiedTransaction(
            id=payment.gateway_transaction_id,
            tx_ref=payment.tx_ref,
            status="successful",
            amount_cents=20000,
            fee_cents=280,
            currency="NGN",
        )

        with patch("payments.webhooks.handlers.FlutterwaveAdapter") as adapter_class:
            adapter_class.return_value.verify_transaction.return_value = verified
            response = Client().post(
                reverse("payments:flutterwave_webhook"),
                data=json.dumps(charge_completed_payload(payment.tx_ref)),
                content_type="application/json",
                headers={"verif-hash": WEBHOOK_SECRET},
            )

        assert response.status_code == 200
        assert Payment.objects.count() == 1
        assert _wallet(practitioner).pending_balance_cents == 18000
