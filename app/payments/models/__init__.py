"""
Payment domain models.

This module contains all payment-related models:
- Payment: Escrowed charge for one appointment
- Payout: Practitioner withdrawal to a bank account
- Wallet: Practitioner balances (defined in payments.ledger)
"""

from payments.ledger.models import Wallet
from payments.models.payment import Payment
from payments.models.payout import Payout

__all__ = [
    "Payment",
    "Payout",
    "Wallet",
]
