"""
Payment services for coordinating payment operations.

This module provides:
- PaymentRecordStore: Payment persistence with idempotent inserts
- EscrowReleaseEngine: Releases or refunds escrowed shares
- PayoutService: Withdrawal requests and admin processing
- PaymentInitiationService: Hosted checkout creation

Usage:
    from payments.services import EscrowReleaseEngine, PayoutService

    EscrowReleaseEngine().release(appointment.id)

    result = PayoutService().request_withdrawal(practitioner, 5000, bank_details)
"""

from payments.services.checkout import CheckoutSession, PaymentInitiationService
from payments.services.escrow_release import EscrowReleaseEngine
from payments.services.payment_records import (
    FeeSplit,
    PaymentRecordStore,
    compute_split,
)
from payments.services.payout_service import PayoutService, WithdrawalResult

__all__ = [
    "CheckoutSession",
    "EscrowReleaseEngine",
    "FeeSplit",
    "PaymentInitiationService",
    "PaymentRecordStore",
    "PayoutService",
    "WithdrawalResult",
    "compute_split",
]
