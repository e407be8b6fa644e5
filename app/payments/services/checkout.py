"""
Payment initiation for appointment fees.

Creates a hosted Flutterwave checkout for a BOOKED appointment and returns
the link the patient is redirected to. Nothing is persisted here: the
Payment row is only created by the webhook handler once the charge is
verified, so an abandoned checkout leaves no trace.

Usage:
    from payments.services import PaymentInitiationService

    checkout = PaymentInitiationService().initiate(
        patient=request.user,
        appointment_id=appointment.id,
        amount_cents=2000000,
        currency="NGN",
    )
    checkout.redirect_link
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from appointments.exceptions import AppointmentNotFound
from appointments.models import Appointment
from appointments.states import AppointmentStatus
from core.services import BaseService

from payments.adapters import FlutterwaveAdapter, build_tx_ref
from payments.config import EscrowSettings
from payments.exceptions import AppointmentNotPayable
from payments.ledger import InvalidAmount

if TYPE_CHECKING:
    from authentication.models import User


@dataclass(frozen=True)
class CheckoutSession:
    redirect_link: str
    tx_ref: str


class PaymentInitiationService(BaseService):
    """
    Starts gateway checkouts for booked appointments.

    The adapter is injectable so tests never reach the network.
    """

    def __init__(
        self,
        adapter: FlutterwaveAdapter | None = None,
        config: EscrowSettings | None = None,
    ):
        self.adapter = adapter or FlutterwaveAdapter()
        self.config = config or EscrowSettings.from_settings()

    def initiate(
        self,
        patient: User,
        appointment_id,
        amount_cents: int,
        currency: str | None = None,
    ) -> CheckoutSession:
        """
        Create a checkout for the patient's appointment.

        Raises:
            AppointmentNotFound: Appointment missing or not the caller's
            AppointmentNotPayable: Appointment is not awaiting payment
            InvalidAmount: amount_cents is not a positive integer
            GatewayInitiationFailed: Gateway rejected or was unreachable
        """
        appointment = (
            Appointment.objects.select_related("practitioner")
            .filter(pk=appointment_id, patient=patient)
            .first()
        )
        if appointment is None:
            raise AppointmentNotFound(appointment_id)

        if appointment.status != AppointmentStatus.BOOKED:
            raise AppointmentNotPayable(
                "Appointment is not awaiting payment",
                details={
                    "appointment_id": str(appointment.id),
                    "current_status": appointment.status,
                },
            )

        if (
            not isinstance(amount_cents, int)
            or isinstance(amount_cents, bool)
            or amount_cents <= 0
        ):
            raise InvalidAmount(amount_cents)

        currency = (currency or self.config.currency).upper()
        tx_ref = build_tx_ref(appointment.id)
        practitioner_name = appointment.practitioner.get_full_name()

        link = self.adapter.initiate_payment(
            tx_ref=tx_ref,
            amount_cents=amount_cents,
            currency=currency,
            customer_email=patient.email,
            customer_name=patient.get_full_name(),
            customer_phone=patient.phone_number,
            redirect_url=self.config.redirect_url,
            description=f"Consultation with {practitioner_name}",
            title=self.config.checkout_title,
        )

        self.get_logger().info(
            "Checkout initiated",
            extra={
                "appointment_id": str(appointment.id),
                "tx_ref": tx_ref,
                "amount_cents": amount_cents,
                "currency": currency,
            },
        )
        return CheckoutSession(redirect_link=link, tx_ref=tx_ref)
