"""
Wallet model for practitioner balances.

A Wallet holds two buckets for one practitioner:
- pending_balance_cents: practitioner shares of charges still in escrow
- balance_cents: released funds available for withdrawal

plus total_earned_cents, the lifetime sum of released funds.

Balances are stored, not derived, and are only changed through
payments.ledger.services.WalletLedger, which issues single conditional
UPDATE statements. The CheckConstraints below are a second line of defense;
the ledger's WHERE clauses are what keep balances non-negative.

Usage:
    from payments.ledger.models import Wallet

    wallet = Wallet.objects.get(practitioner=user)
    wallet.balance_cents  # Available, in minor units
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin


class Wallet(UUIDPrimaryKeyMixin, BaseModel):
    """
    Per-practitioner balance record.

    Fields:
        practitioner: Owner (exactly one wallet per practitioner)
        balance_cents: Available balance in smallest currency unit
        pending_balance_cents: Escrowed balance in smallest currency unit
        total_earned_cents: Lifetime released earnings (never decreases)
        currency: ISO 4217 currency code
        last_withdrawal_at: When the last withdrawal was debited
    """

    practitioner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="wallet",
        help_text="Practitioner owning this wallet",
    )

    # ==========================================================================
    # Balances
    # ==========================================================================

    balance_cents = models.BigIntegerField(
        default=0,
        help_text="Available balance in smallest currency unit",
    )

    pending_balance_cents = models.BigIntegerField(
        default=0,
        help_text="Balance held in escrow, in smallest currency unit",
    )

    total_earned_cents = models.BigIntegerField(
        default=0,
        help_text="Lifetime released earnings in smallest currency unit",
    )

    currency = models.CharField(
        max_length=3,
        default="NGN",
        help_text="ISO 4217 currency code",
    )

    last_withdrawal_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the last withdrawal was debited",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Wallet"
        verbose_name_plural = "Wallets"
        constraints = [
            models.CheckConstraint(
                condition=Q(balance_cents__gte=0),
                name="wallet_balance_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(pending_balance_cents__gte=0),
                name="wallet_pending_balance_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(total_earned_cents__gte=0),
                name="wallet_total_earned_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"Wallet({self.practitioner_id}, available={self.balance_cents}, "
            f"pending={self.pending_balance_cents})"
        )
