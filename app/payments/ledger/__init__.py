"""
Wallet ledger - practitioner pending and available balances.

Public API:
    Models:
        Wallet - One balance record per practitioner

    Service:
        wallet_ledger - Singleton instance of WalletLedger
        WalletLedger - Class with all balance operations

    Types:
        WalletSnapshot - Immutable copy of a wallet's balances

    Exceptions:
        InvalidAmount - Non-positive amount
        InsufficientFunds - Available balance too low
        InsufficientPendingFunds - Pending balance too low (invariant breach)

Usage:
    from payments.ledger import wallet_ledger, InsufficientFunds

    wallet_ledger.credit_pending(practitioner.id, 18000)
    try:
        wallet_ledger.debit_available(practitioner.id, 50000)
    except InsufficientFunds as e:
        print(f"Need {e.required}, have {e.available}")
"""

from .exceptions import InsufficientFunds, InsufficientPendingFunds, InvalidAmount
from .models import Wallet
from .services import WalletLedger, wallet_ledger
from .types import WalletSnapshot

__all__ = [
    # Models
    "Wallet",
    # Service
    "wallet_ledger",
    "WalletLedger",
    # Types
    "WalletSnapshot",
    # Exceptions
    "InvalidAmount",
    "InsufficientFunds",
    "InsufficientPendingFunds",
]
