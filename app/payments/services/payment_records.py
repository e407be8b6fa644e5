"""
Payment record store.

Owns every write to the Payment table. The two uniqueness constraints on
Payment (appointment, gateway_transaction_id) are the idempotency guard for
webhook redelivery: a second insert for the same charge fails inside a
savepoint and is classified into a domain exception.

Status changes after insert are conditional UPDATEs filtered on the
expected current status, so a payment can be released or refunded at most
once even when two requests race.

Usage:
    from payments.services.payment_records import PaymentRecordStore

    payment = PaymentRecordStore.create_from_charge(
        appointment_id=appointment.id,
        patient_id=appointment.patient_id,
        practitioner_id=appointment.practitioner_id,
        gateway_transaction_id="4975363",
        tx_ref=tx_ref,
        gross_amount_cents=2000000,
        gateway_fee_cents=28000,
        commission_rate=Decimal("0.10"),
    )
    payment.practitioner_share_cents  # 1800000
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.utils import timezone
from django_fsm import can_proceed

from core.services import BaseService

from payments.exceptions import DuplicateAppointmentPayment, DuplicateTransaction
from payments.ledger.exceptions import InvalidAmount
from payments.models import Payment
from payments.state_machines import PaymentStatus

if TYPE_CHECKING:
    from uuid import UUID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeSplit:
    """
    Division of a gross charge between platform and practitioner.

    platform_fee_cents + practitioner_share_cents == gross_amount_cents
    always holds.
    """

    gross_amount_cents: int
    platform_fee_cents: int
    practitioner_share_cents: int
    commission_rate: Decimal


def compute_split(gross_amount_cents: int, commission_rate: Decimal) -> FeeSplit:
    """
    Split a gross amount by commission rate, rounding the fee half-up.

    Example:
        compute_split(2000000, Decimal("0.10"))
        # FeeSplit(2000000, platform_fee_cents=200000, practitioner_share_cents=1800000)

    Raises:
        InvalidAmount: If gross is not a positive integer or the rate is
            outside [0, 1)
    """
    if (
        not isinstance(gross_amount_cents, int)
        or isinstance(gross_amount_cents, bool)
        or gross_amount_cents <= 0
    ):
        raise InvalidAmount(gross_amount_cents, "Gross amount must be a positive integer")

    rate = Decimal(str(commission_rate))
    if not (Decimal("0") <= rate < Decimal("1")):
        raise InvalidAmount(
            gross_amount_cents, f"Commission rate must be in [0, 1), got {rate}"
        )

    platform_fee = int(
        (Decimal(gross_amount_cents) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )
    return FeeSplit(
        gross_amount_cents=gross_amount_cents,
        platform_fee_cents=platform_fee,
        practitioner_share_cents=gross_amount_cents - platform_fee,
        commission_rate=rate,
    )


class PaymentRecordStore(BaseService):
    """
    Service class for Payment persistence.

    All methods are classmethods - no instance state is maintained.
    """

    @classmethod
    def create_from_charge(
        cls,
        *,
        appointment_id: UUID,
        patient_id,
        practitioner_id,
        gateway_transaction_id: str,
        tx_ref: str,
        gross_amount_cents: int,
        gateway_fee_cents: int,
        commission_rate: Decimal,
        currency: str = "NGN",
    ) -> Payment:
        """
        Record a verified charge as HELD.

        The insert runs in a savepoint so a uniqueness failure leaves the
        caller's transaction usable.

        Raises:
            InvalidAmount: Non-positive gross, negative gateway fee or bad rate
            DuplicateTransaction: gateway_transaction_id already recorded
            DuplicateAppointmentPayment: Appointment already has a payment
        """
        split = compute_split(gross_amount_cents, commission_rate)
        if (
            not isinstance(gateway_fee_cents, int)
            or isinstance(gateway_fee_cents, bool)
            or gateway_fee_cents < 0
        ):
            raise InvalidAmount(gateway_fee_cents, "Gateway fee cannot be negative")

        payment = Payment(
            appointment_id=appointment_id,
            patient_id=patient_id,
            practitioner_id=practitioner_id,
            gateway_transaction_id=str(gateway_transaction_id),
            tx_ref=tx_ref,
            currency=currency,
            gross_amount_cents=split.gross_amount_cents,
            gateway_fee_cents=gateway_fee_cents,
            platform_fee_cents=split.platform_fee_cents,
            practitioner_share_cents=split.practitioner_share_cents,
            commission_rate=split.commission_rate,
        )
        payment.hold()

        try:
            with transaction.atomic():
                payment.save(force_insert=True)
        except IntegrityError as e:
            raise cls._classify_integrity_error(
                appointment_id, str(gateway_transaction_id)
            ) from e

        logger.info(
            "Payment recorded",
            extra={
                "payment_id": str(payment.id),
                "appointment_id": str(appointment_id),
                "gateway_transaction_id": payment.gateway_transaction_id,
                "amount_cents": payment.gross_amount_cents,
                "practitioner_share_cents": payment.practitioner_share_cents,
            },
        )
        return payment

    @classmethod
    def _classify_integrity_error(cls, appointment_id, gateway_transaction_id: str):
        if Payment.objects.filter(gateway_transaction_id=gateway_transaction_id).exists():
            return DuplicateTransaction(gateway_transaction_id)
        if Payment.objects.filter(appointment_id=appointment_id).exists():
            return DuplicateAppointmentPayment(appointment_id, gateway_transaction_id)
        # Neither key collides: a CheckConstraint or FK failed, which is a bug
        return IntegrityError(
            f"Payment insert failed for appointment {appointment_id}"
        )

    @classmethod
    def find_by_appointment(cls, appointment_id: UUID) -> Payment | None:
        return Payment.objects.filter(appointment_id=appointment_id).first()

    @classmethod
    def mark_released(cls, appointment_id: UUID) -> Payment | None:
        """
        Move the appointment's payment HELD -> COMPLETED.

        Returns:
            The released Payment, or None if there was no HELD payment (no
            payment, already released, refunded, or lost a race)
        """
        return cls._conditional_transition(appointment_id, "release", "released_at")

    @classmethod
    def mark_refunded(cls, appointment_id: UUID) -> Payment | None:
        """
        Move the appointment's payment HELD -> REFUNDED.

        Returns:
            The refunded Payment, or None if there was no HELD payment
        """
        return cls._conditional_transition(appointment_id, "refund", "refunded_at")

    @classmethod
    def _conditional_transition(
        cls, appointment_id: UUID, action: str, timestamp_field: str
    ) -> Payment | None:
        payment = cls.find_by_appointment(appointment_id)
        transition_method = getattr(payment, action, None)

        if payment is None or not can_proceed(transition_method):
            logger.warning(
                "No held payment to %s",
                action,
                extra={
                    "appointment_id": str(appointment_id),
                    "payment_status": payment.status if payment else None,
                },
            )
            return None

        transition_method()
        updated = Payment.objects.filter(
            pk=payment.pk,
            status=PaymentStatus.HELD,
        ).update(
            status=payment.status,
            **{timestamp_field: getattr(payment, timestamp_field)},
            updated_at=timezone.now(),
        )

        if updated == 0:
            logger.warning(
                "Payment already left held state",
                extra={
                    "appointment_id": str(appointment_id),
                    "payment_id": str(payment.id),
                    "action": action,
                },
            )
            return None

        logger.info(
            "Payment status changed",
            extra={
                "appointment_id": str(appointment_id),
                "payment_id": str(payment.id),
                "status": payment.status,
            },
        )
        return payment
