"""
Wallet ledger exceptions.

Exception Hierarchy:
    InvalidAmount (ValidationError) - Non-positive amount
    InsufficientFunds (ConflictError) - Available balance too low (HTTP 400)
    InsufficientPendingFunds (InvariantViolation) - Pending balance too low
        at release/refund time; means the books disagree with the payments
        table and must be investigated
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import status

from core.exceptions import ConflictError, InvariantViolation, ValidationError

if TYPE_CHECKING:
    from typing import Any


class InvalidAmount(ValidationError):
    default_error_code: str = "INVALID_AMOUNT"

    def __init__(self, amount: Any, reason: str = "Amount must be a positive integer"):
        self.amount = amount
        super().__init__(reason, details={"amount_cents": amount})


class _BalanceShortfall:
    """Shared message/details builder for balance errors."""

    balance_label = "balance"

    def _shortfall(self, practitioner_id, required: int, available: int | None):
        self.practitioner_id = practitioner_id
        self.required = required
        self.available = available
        message = f"Insufficient {self.balance_label}: required {required}"
        if available is not None:
            message += f", available {available}"
        details = {
            "practitioner_id": str(practitioner_id),
            "required_cents": required,
        }
        if available is not None:
            details["available_cents"] = available
        return message, details


class InsufficientFunds(_BalanceShortfall, ConflictError):
    """
    Raised when a debit would drive the available balance negative.

    The balance is left unchanged. Reported as HTTP 400 because the caller
    asked for more than they have.
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"
    http_status = status.HTTP_400_BAD_REQUEST
    balance_label = "balance"

    def __init__(self, practitioner_id, required: int, available: int | None = None):
        message, details = self._shortfall(practitioner_id, required, available)
        super().__init__(message, details=details)


class InsufficientPendingFunds(_BalanceShortfall, InvariantViolation):
    """
    Raised when a release or refund exceeds the pending balance.

    Never clamped: the enclosing transaction must roll back.
    """

    default_error_code: str = "INSUFFICIENT_PENDING_FUNDS"
    balance_label = "pending balance"

    def __init__(self, practitioner_id, required: int, available: int | None = None):
        message, details = self._shortfall(practitioner_id, required, available)
        super().__init__(message, details=details)
