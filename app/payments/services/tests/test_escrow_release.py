"""
Tests for EscrowReleaseEngine.

Release and refund pair a conditional Payment update with a guarded wallet
update; a ledger refusal must roll both back.
"""

from unittest.mock import MagicMock

import pytest
from django.db import transaction

from payments.ledger import InsufficientPendingFunds, Wallet
from payments.models import Payment
from payments.services.escrow_release import EscrowReleaseEngine
from payments.state_machines import PaymentStatus
from payments.tests.factories import PaymentFactory, WalletFactory, create_escrowed_payment


@pytest.fixture
def notifications():
    return MagicMock()


@pytest.fixture
def engine(notifications):
    return EscrowReleaseEngine(notifications=notifications)


def _wallet(payment):
    return Wallet.objects.get(practitioner_id=payment.practitioner_id)


class TestRelease:
    """Tests for EscrowReleaseEngine.release()."""

    def test_moves_share_to_available(self, db, engine):
        payment = create_escrowed_payment()

        released = engine.release(payment.appointment_id)

        assert released.pk == payment.pk
        assert Payment.objects.get(pk=payment.pk).status == PaymentStatus.COMPLETED
        wallet = _wallet(payment)
        assert wallet.pending_balance_cents == 0
        assert wallet.balance_cents == payment.practitioner_share_cents
        assert wallet.total_earned_cents == payment.practitioner_share_cents

    def test_notifies_practitioner(self, db, engine, notifications):
        payment = create_escrowed_payment()

        engine.release(payment.appointment_id)

        notifications.funds_released.assert_called_once()
        kwargs = notifications.funds_released.call_args.kwargs
        assert kwargs["recipient_email"] == payment.practitioner.email
        assert kwargs["amount_display"] == "18,000.00 NGN"

    def test_second_release_moves_no_money(self, db, engine, notifications):
        """A repeated release returns None and leaves the wallet alone."""
        payment = create_escrowed_payment()
        engine.release(payment.appointment_id)

        assert engine.release(payment.appointment_id) is None

        wallet = _wallet(payment)
        assert wallet.balance_cents == payment.practitioner_share_cents
        assert wallet.total_earned_cents == payment.practitioner_share_cents
        assert notifications.funds_released.call_count == 1

    def test_release_without_payment_returns_none(self, db, engine):
        from appointments.tests.factories import AppointmentFactory

        assert engine.release(AppointmentFactory().id) is None

    def test_ledger_refusal_rolls_back_status(self, db, engine, notifications):
        """Pending below the share: payment stays HELD, error propagates."""
        payment = PaymentFactory()
        WalletFactory(practitioner=payment.practitioner, pending_balance_cents=100)

        with pytest.raises(InsufficientPendingFunds):
            with transaction.atomic():
                engine.release(payment.appointment_id)

        assert Payment.objects.get(pk=payment.pk).status == PaymentStatus.HELD
        assert _wallet(payment).pending_balance_cents == 100
        notifications.funds_released.assert_not_called()

    def test_release_logs_critical_on_ledger_refusal(self, db, engine, caplog):
        payment = PaymentFactory()

        with pytest.raises(InsufficientPendingFunds):
            engine.release(payment.appointment_id)

        assert any(record.levelname == "CRITICAL" for record in caplog.records)


class TestRefund:
    """Tests for EscrowReleaseEngine.refund()."""

    def test_reverses_pending_and_marks_refunded(self, db, engine):
        payment = create_escrowed_payment()

        refunded = engine.refund(payment.appointment_id)

        assert refunded.status == PaymentStatus.REFUNDED
        wallet = _wallet(payment)
        assert wallet.pending_balance_cents == 0
        assert wallet.balance_cents == 0
        assert wallet.total_earned_cents == 0

    def test_refund_after_release_does_nothing(self, db, engine):
        payment = create_escrowed_payment()
        engine.release(payment.appointment_id)

        assert engine.refund(payment.appointment_id) is None
        assert Payment.objects.get(pk=payment.pk).status == PaymentStatus.COMPLETED

    def test_refund_ledger_refusal_keeps_payment_held(self, db, engine):
        payment = PaymentFactory()

        with pytest.raises(InsufficientPendingFunds):
            with transaction.atomic():
                engine.refund(payment.appointment_id)

        assert Payment.objects.get(pk=payment.pk).status == PaymentStatus.HELD
