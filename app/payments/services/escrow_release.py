"""
Escrow release engine.

Moves a practitioner's share out of escrow when an appointment completes,
or reverses it when a paid appointment is cancelled. Both operations pair a
conditional Payment status update with a guarded wallet update, and both
run inside the caller's transaction: a ledger failure rolls back the status
write along with the appointment transition that triggered it.

Usage:
    from payments.services.escrow_release import EscrowReleaseEngine

    engine = EscrowReleaseEngine()
    with transaction.atomic():
        ...  # appointment -> completed
        engine.release(appointment.id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import transaction

from core.services import BaseService

from notifications.services import NotificationService, format_amount
from payments.ledger import InsufficientPendingFunds, WalletLedger, wallet_ledger
from payments.services.payment_records import PaymentRecordStore

if TYPE_CHECKING:
    from uuid import UUID

    from payments.models import Payment


class EscrowReleaseEngine(BaseService):
    """
    Releases or refunds the escrowed share of an appointment's payment.

    Collaborators are injectable for tests; defaults are the real ledger,
    record store and notification service.
    """

    def __init__(
        self,
        ledger: WalletLedger | None = None,
        records: type[PaymentRecordStore] = PaymentRecordStore,
        notifications: type[NotificationService] = NotificationService,
    ):
        self.ledger = ledger or wallet_ledger
        self.records = records
        self.notifications = notifications

    def release(self, appointment_id: UUID) -> Payment | None:
        """
        Release the held share to the practitioner's available balance.

        Returns:
            The released Payment, or None when nothing was held (already
            released, refunded, or never paid). A None result moves no money.

        Raises:
            InsufficientPendingFunds: Pending balance is below the share. The
                enclosing transaction must roll back.
        """
        logger = self.get_logger()

        with transaction.atomic():
            payment = self.records.mark_released(appointment_id)
            if payment is None:
                logger.warning(
                    "Release skipped: no held payment",
                    extra={"appointment_id": str(appointment_id)},
                )
                return None

            try:
                self.ledger.release_to_available(
                    payment.practitioner_id, payment.practitioner_share_cents
                )
            except InsufficientPendingFunds:
                logger.critical(
                    "Escrow release failed: pending balance below held share",
                    extra={
                        "appointment_id": str(appointment_id),
                        "payment_id": str(payment.id),
                        "practitioner_id": str(payment.practitioner_id),
                        "amount_cents": payment.practitioner_share_cents,
                    },
                )
                raise

        practitioner = payment.practitioner
        self.notifications.funds_released(
            recipient_email=practitioner.email,
            recipient_name=practitioner.get_full_name(),
            amount_display=format_amount(
                payment.practitioner_share_cents, payment.currency
            ),
        )

        logger.info(
            "Escrow released",
            extra={
                "appointment_id": str(appointment_id),
                "payment_id": str(payment.id),
                "amount_cents": payment.practitioner_share_cents,
            },
        )
        return payment

    def refund(self, appointment_id: UUID) -> Payment | None:
        """
        Reverse the held share for a cancelled appointment.

        The card refund itself is issued by an admin in the gateway
        dashboard; this only takes the share out of the practitioner's
        pending balance and marks the payment REFUNDED.

        Returns:
            The refunded Payment, or None if nothing was held

        Raises:
            InsufficientPendingFunds: Pending balance is below the share
        """
        logger = self.get_logger()

        with transaction.atomic():
            payment = self.records.mark_refunded(appointment_id)
            if payment is None:
                return None

            try:
                self.ledger.reverse_pending(
                    payment.practitioner_id, payment.practitioner_share_cents
                )
            except InsufficientPendingFunds:
                logger.critical(
                    "Escrow refund failed: pending balance below held share",
                    extra={
                        "appointment_id": str(appointment_id),
                        "payment_id": str(payment.id),
                        "amount_cents": payment.practitioner_share_cents,
                    },
                )
                raise

        logger.info(
            "Escrow refunded",
            extra={
                "appointment_id": str(appointment_id),
                "payment_id": str(payment.id),
                "amount_cents": payment.gross_amount_cents,
            },
        )
        return payment
