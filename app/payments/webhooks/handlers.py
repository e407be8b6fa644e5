"""
Webhook reconciliation for Flutterwave charge events.

WebhookReconciliationHandler turns an inbound ``charge.completed`` delivery
into escrowed money: a HELD Payment, a pending wallet credit and a PAID
appointment, all in one transaction. The webhook body is never trusted on
its own: the transaction is re-fetched from the gateway's verify endpoint
and every field used for money movement must agree.

Every outcome is returned as a ServiceResult. Failures are expected
outcomes (forged, irrelevant, replayed or mismatched deliveries), and the
receiver acknowledges all of them so the gateway stops retrying.

Processing steps:
    1. Shared secret check (verif-hash header)
    2. Event filter: charge.completed with data.status == successful
    3. Payload parsing and tx_ref decoding
    4. Gateway verification (status, amount, tx_ref must match; currency
       must match the payload, or the configured currency when absent)
    5. One transaction: lock appointment, insert Payment, credit pending,
       mark appointment PAID
    6. Patient email after commit

Usage:
    from payments.webhooks.handlers import WebhookReconciliationHandler

    result = WebhookReconciliationHandler().handle(request.body, signature)
    if not result:
        logger.info(result.error, extra={"error_code": result.error_code})
"""

from __future__ import annotations

import hmac
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import transaction

from appointments.models import Appointment
from appointments.states import AppointmentStatus
from core.locking import compare_and_swap
from core.services import BaseService, ServiceResult

from notifications.services import NotificationService, format_amount
from payments.adapters import FlutterwaveAdapter, parse_tx_ref, to_minor_units
from payments.config import EscrowSettings
from payments.exceptions import (
    DuplicateAppointmentPayment,
    DuplicateTransaction,
    GatewayError,
    InvalidTxRef,
)
from payments.ledger import WalletLedger, wallet_ledger
from payments.models import Payment
from payments.services.payment_records import PaymentRecordStore

if TYPE_CHECKING:
    from typing import Any
    from uuid import UUID

    from payments.adapters import VerifiedTransaction


logger = logging.getLogger(__name__)

CHARGE_COMPLETED_EVENT = "charge.completed"
SUCCESSFUL_STATUS = "successful"


@dataclass(frozen=True)
class ChargeNotification:
    """Fields extracted from a charge.completed payload."""

    transaction_id: str
    tx_ref: str
    appointment_id: UUID
    amount_cents: int
    currency: str  # empty when the payload carries none


class WebhookReconciliationHandler(BaseService):
    """
    Applies verified Flutterwave charges to appointments and wallets.

    Collaborators are injectable; tests pass a mocked adapter.
    """

    def __init__(
        self,
        adapter: FlutterwaveAdapter | None = None,
        config: EscrowSettings | None = None,
        ledger: WalletLedger | None = None,
        records: type[PaymentRecordStore] = PaymentRecordStore,
        notifications: type[NotificationService] = NotificationService,
    ):
        self.adapter = adapter or FlutterwaveAdapter()
        self.config = config or EscrowSettings.from_settings()
        self.ledger = ledger or wallet_ledger
        self.records = records
        self.notifications = notifications

    # =========================================================================
    # Entry point
    # =========================================================================

    def handle(self, raw_body: bytes | str, signature: str | None) -> ServiceResult:
        """
        Process one webhook delivery.

        Args:
            raw_body: Request body as received
            signature: Value of the verif-hash header

        Returns:
            ServiceResult with the new Payment on success, or a failure
            describing why the delivery was ignored
        """
        if not self._signature_valid(signature):
            logger.warning("Webhook rejected: invalid verif-hash")
            return ServiceResult.failure(
                "Invalid webhook signature", error_code="INVALID_SIGNATURE"
            )

        try:
            payload = json.loads(raw_body)
        except (TypeError, ValueError):
            logger.warning("Webhook ignored: body is not valid JSON")
            return ServiceResult.failure(
                "Unparseable webhook body", error_code="INVALID_PAYLOAD"
            )

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            logger.warning("Webhook ignored: payload has no data object")
            return ServiceResult.failure(
                "Webhook payload missing data", error_code="INVALID_PAYLOAD"
            )

        data = payload["data"]
        event = payload.get("event")
        if event != CHARGE_COMPLETED_EVENT or data.get("status") != SUCCESSFUL_STATUS:
            logger.info(
                "Webhook ignored: not a successful charge",
                extra={"event": event, "charge_status": data.get("status")},
            )
            return ServiceResult.failure(
                "Event acknowledged, not a successful charge",
                error_code="IGNORED_EVENT",
            )

        return self._handle_charge_completed(data)

    def _signature_valid(self, signature: str | None) -> bool:
        secret = self.config.webhook_secret
        if not secret or not signature:
            return False
        return hmac.compare_digest(signature.encode(), secret.encode())

    # =========================================================================
    # charge.completed
    # =========================================================================

    def _handle_charge_completed(self, data: dict[str, Any]) -> ServiceResult:
        try:
            charge = self._parse_charge(data)
        except InvalidTxRef as e:
            logger.warning(
                "Webhook ignored: malformed tx_ref",
                extra={"tx_ref": e.tx_ref, "gateway_transaction_id": str(data.get("id"))},
            )
            return ServiceResult.failure(e.message, error_code=e.error_code)
        except (KeyError, ValueError) as e:
            logger.warning(
                "Webhook ignored: incomplete charge data",
                extra={"error": str(e)},
            )
            return ServiceResult.failure(
                "Incomplete charge data", error_code="INVALID_PAYLOAD"
            )

        log_context = {
            "gateway_transaction_id": charge.transaction_id,
            "appointment_id": str(charge.appointment_id),
            "tx_ref": charge.tx_ref,
        }

        try:
            verified = self.adapter.verify_transaction(charge.transaction_id)
        except GatewayError as e:
            logger.error(
                "Webhook not applied: gateway verification failed",
                extra={**log_context, "error_code": e.error_code},
            )
            return ServiceResult.failure(
                "Transaction could not be verified", error_code=e.error_code
            )

        discrepancy = self._find_discrepancy(charge, verified)
        if discrepancy:
            logger.warning(
                "Webhook not applied: verification mismatch",
                extra={**log_context, "discrepancy": discrepancy},
            )
            return ServiceResult.failure(
                f"Verification mismatch: {discrepancy}",
                error_code="VERIFICATION_MISMATCH",
            )

        return self._apply_charge(charge, verified, log_context)

    @staticmethod
    def _parse_charge(data: dict[str, Any]) -> ChargeNotification:
        transaction_id = data["id"]
        if transaction_id in (None, ""):
            raise ValueError("Missing transaction id")

        tx_ref = data["tx_ref"]
        return ChargeNotification(
            transaction_id=str(transaction_id),
            tx_ref=tx_ref,
            appointment_id=parse_tx_ref(tx_ref),
            amount_cents=to_minor_units(data["amount"]),
            currency=str(data.get("currency") or "").upper(),
        )

    def _find_discrepancy(
        self, charge: ChargeNotification, verified: VerifiedTransaction
    ) -> str | None:
        if not verified.is_successful:
            return f"status {verified.status!r}"
        if verified.amount_cents != charge.amount_cents:
            return f"amount {verified.amount_cents} != {charge.amount_cents}"
        if verified.tx_ref != charge.tx_ref:
            return "tx_ref"
        # Flutterwave omits currency from some charge payloads
        expected_currency = charge.currency or self.config.currency.upper()
        if verified.currency.upper() != expected_currency:
            return f"currency {verified.currency!r} != {expected_currency!r}"
        return None

    def _apply_charge(
        self,
        charge: ChargeNotification,
        verified: VerifiedTransaction,
        log_context: dict[str, Any],
    ) -> ServiceResult:
        with transaction.atomic():
            appointment = (
                Appointment.objects.select_for_update()
                .select_related("patient")
                .filter(pk=charge.appointment_id)
                .first()
            )
            if appointment is None:
                logger.warning("Webhook ignored: appointment not found", extra=log_context)
                return ServiceResult.failure(
                    "Appointment not found", error_code="APPOINTMENT_NOT_FOUND"
                )

            if appointment.status != AppointmentStatus.BOOKED:
                if Payment.objects.filter(
                    gateway_transaction_id=charge.transaction_id
                ).exists():
                    logger.info("Webhook replay ignored", extra=log_context)
                    return ServiceResult.failure(
                        "Transaction already recorded",
                        error_code=DuplicateTransaction.default_error_code,
                    )
                logger.warning(
                    "Webhook ignored: appointment not awaiting payment",
                    extra={**log_context, "appointment_status": appointment.status},
                )
                return ServiceResult.failure(
                    "Appointment is not awaiting payment",
                    error_code="APPOINTMENT_NOT_PAYABLE",
                )

            try:
                payment = self.records.create_from_charge(
                    appointment_id=appointment.id,
                    patient_id=appointment.patient_id,
                    practitioner_id=appointment.practitioner_id,
                    gateway_transaction_id=verified.id,
                    tx_ref=verified.tx_ref,
                    gross_amount_cents=verified.amount_cents,
                    gateway_fee_cents=verified.fee_cents,
                    commission_rate=self.config.commission_rate,
                    currency=verified.currency.upper(),
                )
            except (DuplicateTransaction, DuplicateAppointmentPayment) as e:
                logger.info(
                    "Webhook replay ignored",
                    extra={**log_context, "error_code": e.error_code},
                )
                return ServiceResult.failure(e.message, error_code=e.error_code)

            self.ledger.credit_pending(
                appointment.practitioner_id, payment.practitioner_share_cents
            )

            previous_status = appointment.status
            appointment.mark_paid()
            compare_and_swap(
                appointment,
                expected={"status": previous_status},
                fields=["status"],
            )

            patient = appointment.patient
            self.notifications.payment_confirmed(
                recipient_email=patient.email,
                recipient_name=patient.get_full_name(),
                amount_display=format_amount(payment.gross_amount_cents, payment.currency),
                scheduled_at=appointment.scheduled_at,
            )

        logger.info(
            "Webhook applied: payment held in escrow",
            extra={
                **log_context,
                "payment_id": str(payment.id),
                "amount_cents": payment.gross_amount_cents,
                "practitioner_share_cents": payment.practitioner_share_cents,
            },
        )
        return ServiceResult.success(payment)
