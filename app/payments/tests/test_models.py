"""
Tests for Payment and Payout models.

Covers FSM transitions, timestamps and the database constraints that back
the services' guarantees.
"""

import pytest
from django.db import IntegrityError, transaction
from django_fsm import TransitionNotAllowed

from payments.models import Payment
from payments.state_machines import PaymentStatus, PayoutStatus
from payments.tests.factories import PaymentFactory, PayoutFactory


class TestPaymentTransitions:
    """Payment state machine."""

    def test_hold_sets_paid_at(self, db):
        payment = Payment(status=PaymentStatus.INITIATED)

        payment.hold()

        assert payment.status == PaymentStatus.HELD
        assert payment.paid_at is not None

    def test_release_from_held(self, db):
        payment = PaymentFactory()

        payment.release()

        assert payment.status == PaymentStatus.COMPLETED
        assert payment.released_at is not None

    def test_refund_from_held(self, db):
        payment = PaymentFactory()

        payment.refund()

        assert payment.status == PaymentStatus.REFUNDED
        assert payment.refunded_at is not None

    @pytest.mark.parametrize("status", [PaymentStatus.COMPLETED, PaymentStatus.REFUNDED])
    def test_terminal_payment_cannot_be_released_again(self, db, status):
        payment = PaymentFactory(status=status)

        with pytest.raises(TransitionNotAllowed):
            payment.release()

    def test_status_cannot_be_assigned_directly(self, db):
        payment = PaymentFactory()

        with pytest.raises(AttributeError):
            payment.status = PaymentStatus.COMPLETED

    def test_is_held(self, db):
        assert PaymentFactory().is_held
        assert not PaymentFactory(status=PaymentStatus.COMPLETED).is_held


class TestPaymentConstraints:
    """Database-level guarantees for Payment."""

    def test_gateway_transaction_id_is_unique(self, db):
        PaymentFactory(gateway_transaction_id="TX1")

        with pytest.raises(IntegrityError), transaction.atomic():
            PaymentFactory(gateway_transaction_id="TX1")

    def test_one_payment_per_appointment(self, db):
        first = PaymentFactory()

        with pytest.raises(IntegrityError), transaction.atomic():
            PaymentFactory(appointment=first.appointment)

    def test_split_must_sum_to_gross(self, db):
        with pytest.raises(IntegrityError), transaction.atomic():
            PaymentFactory(
                gross_amount_cents=20000,
                platform_fee_cents=2000,
                practitioner_share_cents=17000,
            )

    def test_gross_must_be_positive(self, db):
        with pytest.raises(IntegrityError), transaction.atomic():
            PaymentFactory(
                gross_amount_cents=0,
                platform_fee_cents=0,
                practitioner_share_cents=0,
            )


class TestPayoutTransitions:
    """Payout state machine."""

    def test_process_then_complete(self, db):
        payout = PayoutFactory()

        payout.process(external_reference="TRF-1")
        assert payout.status == PayoutStatus.PROCESSING
        assert payout.processed_at is None

        payout.complete(admin_notes="Sent")
        assert payout.status == PayoutStatus.COMPLETED
        assert payout.processed_at is not None
        assert payout.external_reference == "TRF-1"
        assert payout.admin_notes == "Sent"

    def test_fail_directly_from_requested(self, db):
        payout = PayoutFactory()

        payout.fail(admin_notes="Account closed")

        assert payout.status == PayoutStatus.FAILED
        assert payout.is_final

    @pytest.mark.parametrize("status", [PayoutStatus.COMPLETED, PayoutStatus.FAILED])
    def test_final_payout_cannot_fail_again(self, db, status):
        payout = PayoutFactory(status=status)

        with pytest.raises(TransitionNotAllowed):
            payout.fail()

    def test_blank_values_do_not_overwrite_recorded_ones(self, db):
        payout = PayoutFactory(status=PayoutStatus.PROCESSING, external_reference="TRF-9")

        payout.complete()

        assert payout.external_reference == "TRF-9"

    def test_amount_must_be_positive(self, db):
        with pytest.raises(IntegrityError), transaction.atomic():
            PayoutFactory(amount_cents=0)
