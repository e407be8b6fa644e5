"""
Escrow and gateway configuration.

Settings are read from django.conf.settings once, into an immutable
EscrowSettings value, and passed to services through their constructors.
Business logic never reads settings directly.

Usage:
    from payments.config import EscrowSettings

    config = EscrowSettings.from_settings()
    engine = WebhookReconciliationHandler(config=config)

    # Tests build their own
    config = EscrowSettings(commission_rate=Decimal("0.20"), webhook_secret="s")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings


@dataclass(frozen=True)
class EscrowSettings:
    """
    Configuration for payment initiation, reconciliation and payouts.

    Attributes:
        commission_rate: Platform share of each gross charge, in [0, 1)
        min_withdrawal_cents: Smallest withdrawal a practitioner may request
        currency: Default charge currency (ISO 4217)
        webhook_secret: Shared secret expected in the verif-hash header
        redirect_url: Where the hosted checkout sends the patient afterwards
        checkout_title: Title shown on the hosted checkout page
    """

    commission_rate: Decimal = Decimal("0.10")
    min_withdrawal_cents: int = 5000
    currency: str = "NGN"
    webhook_secret: str = ""
    redirect_url: str = "http://localhost:3000/payment-success"
    checkout_title: str = "HealthMe Appointment Fee"

    def __post_init__(self):
        if not (Decimal("0") <= self.commission_rate < Decimal("1")):
            raise ValueError(
                f"commission_rate must be in [0, 1), got {self.commission_rate}"
            )
        if self.min_withdrawal_cents <= 0:
            raise ValueError("min_withdrawal_cents must be positive")

    @classmethod
    def from_settings(cls) -> EscrowSettings:
        return cls(
            commission_rate=Decimal(str(settings.PLATFORM_COMMISSION_RATE)),
            min_withdrawal_cents=settings.MIN_WITHDRAWAL_AMOUNT_CENTS,
            currency=settings.PAYMENT_CURRENCY,
            webhook_secret=settings.FLUTTERWAVE_WEBHOOK_SECRET,
            redirect_url=settings.PAYMENT_REDIRECT_URL,
            checkout_title=settings.PAYMENT_CHECKOUT_TITLE,
        )
