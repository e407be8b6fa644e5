"""
Factory Boy factories for payment test data.

Usage:
    from payments.tests.factories import (
        PaymentFactory,
        PayoutFactory,
        WalletFactory,
        create_escrowed_payment,
    )

    wallet = WalletFactory(balance_cents=100000)
    payout = PayoutFactory(wallet=wallet)

    # PAID appointment + HELD payment + matching pending balance
    payment = create_escrowed_payment()
"""

from decimal import Decimal

import factory
from django.utils import timezone

from appointments.states import AppointmentStatus
from appointments.tests.factories import AppointmentFactory
from authentication.tests.factories import PractitionerFactory
from payments.adapters import build_tx_ref
from payments.ledger import wallet_ledger
from payments.models import Payment, Payout, Wallet
from payments.state_machines import PaymentStatus


class WalletFactory(factory.django.DjangoModelFactory):
    """Empty NGN wallet for a new practitioner."""

    class Meta:
        model = Wallet
        django_get_or_create = ("practitioner",)

    practitioner = factory.SubFactory(PractitionerFactory)
    balance_cents = 0
    pending_balance_cents = 0
    total_earned_cents = 0
    currency = "NGN"


class PaymentFactory(factory.django.DjangoModelFactory):
    """
    HELD payment of NGN 20,000 at 10% commission for a PAID appointment.

    Does not touch the wallet; use create_escrowed_payment when the ledger
    must agree with the payment.
    """

    class Meta:
        model = Payment

    appointment = factory.SubFactory(AppointmentFactory, status=AppointmentStatus.PAID)
    patient = factory.SelfAttribute("appointment.patient")
    practitioner = factory.SelfAttribute("appointment.practitioner")
    gateway_transaction_id = factory.Sequence(lambda n: str(4975000 + n))
    tx_ref = factory.LazyAttribute(lambda o: build_tx_ref(o.appointment.id))
    currency = "NGN"
    gross_amount_cents = 2000000
    gateway_fee_cents = 28000
    platform_fee_cents = 200000
    practitioner_share_cents = 1800000
    commission_rate = Decimal("0.1000")
    status = PaymentStatus.HELD
    paid_at = factory.LazyFunction(timezone.now)


class PayoutFactory(factory.django.DjangoModelFactory):
    """REQUESTED payout; does not debit the wallet."""

    class Meta:
        model = Payout

    wallet = factory.SubFactory(WalletFactory)
    practitioner = factory.SelfAttribute("wallet.practitioner")
    amount_cents = 50000
    bank_name = "Access Bank"
    account_number = "0123456789"
    account_name = factory.LazyAttribute(
        lambda o: o.practitioner.get_full_name() or "Account Holder"
    )


def create_escrowed_payment(appointment=None, **payment_kwargs) -> Payment:
    """
    Create a HELD payment and credit its share to the practitioner's
    pending balance, as the webhook handler would.

    Args:
        appointment: Funded appointment to attach to (created PAID if None)
        **payment_kwargs: Overrides for PaymentFactory
    """
    if appointment is None:
        appointment = AppointmentFactory(status=AppointmentStatus.PAID)
    payment = PaymentFactory(appointment=appointment, **payment_kwargs)
    wallet_ledger.credit_pending(payment.practitioner_id, payment.practitioner_share_cents)
    return payment


def charge_completed_payload(
    tx_ref: str,
    amount="200.00",
    *,
    transaction_id=4975363,
    currency="NGN",
    status="successful",
    event="charge.completed",
) -> dict:
    """Flutterwave charge.completed webhook body (amount in major units)."""
    return {
        "event": event,
        "data": {
            "id": transaction_id,
            "tx_ref": tx_ref,
            "flw_ref": f"FLW-MOCK-{transaction_id}",
            "amount": amount,
            "charged_amount": amount,
            "app_fee": "2.80",
            "currency": currency,
            "status": status,
            "customer": {"email": "patient@example.com"},
        },
    }
