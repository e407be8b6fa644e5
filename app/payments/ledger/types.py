"""
Value types for the wallet ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Wallet


@dataclass(frozen=True)
class WalletSnapshot:
    """
    Point-in-time copy of a wallet's balances.

    Returned by the ledger so callers never hold a Wallet instance whose
    in-memory balances are stale after an F() update.
    """

    practitioner_id: int
    balance_cents: int
    pending_balance_cents: int
    total_earned_cents: int
    currency: str
    last_withdrawal_at: datetime | None = None

    def __post_init__(self):
        if self.balance_cents < 0 or self.pending_balance_cents < 0:
            raise ValueError("Wallet balances cannot be negative")

    @classmethod
    def from_wallet(cls, wallet: Wallet) -> WalletSnapshot:
        return cls(
            practitioner_id=wallet.practitioner_id,
            balance_cents=wallet.balance_cents,
            pending_balance_cents=wallet.pending_balance_cents,
            total_earned_cents=wallet.total_earned_cents,
            currency=wallet.currency,
            last_withdrawal_at=wallet.last_withdrawal_at,
        )
