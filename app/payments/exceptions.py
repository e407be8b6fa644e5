"""
Payment-specific exceptions.

Exception Hierarchy:
    Payment records
        DuplicateTransaction (ConflictError) - Gateway transaction already recorded
        DuplicateAppointmentPayment (ConflictError) - Appointment already paid
        AppointmentNotPayable (ConflictError) - Appointment not awaiting payment
    Gateway
        InvalidTxRef (ValidationError) - Merchant reference not in HLTH format
        GatewayError (ExternalServiceError)
        ├── GatewayInitiationFailed - Checkout link could not be created
        └── GatewayVerificationFailed - Transaction could not be verified
            └── GatewayTimeout - Verification exceeded the bounded timeout
    Payouts
        PayoutNotFound (NotFoundError)
        BelowMinimumWithdrawal (ValidationError)
        InvalidBankDetails (ValidationError)

Wallet balance errors live in payments.ledger.exceptions.

Usage:
    from payments.exceptions import DuplicateTransaction

    try:
        PaymentRecordStore.create_from_charge(...)
    except DuplicateTransaction:
        return  # webhook replay, already applied
"""

from __future__ import annotations

from core.exceptions import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)


# =============================================================================
# Payment Record Exceptions
# =============================================================================


class DuplicateTransaction(ConflictError):
    """
    Raised when a Payment already exists for a gateway transaction id.

    This is the idempotency signal for webhook redelivery; the handler
    acknowledges and does nothing else.
    """

    default_error_code: str = "DUPLICATE_TRANSACTION"

    def __init__(self, gateway_transaction_id: str):
        self.gateway_transaction_id = gateway_transaction_id
        super().__init__(
            "Transaction already recorded",
            details={"gateway_transaction_id": gateway_transaction_id},
        )


class DuplicateAppointmentPayment(ConflictError):
    """Raised when a different transaction already paid for the appointment."""

    default_error_code: str = "DUPLICATE_APPOINTMENT_PAYMENT"

    def __init__(self, appointment_id, gateway_transaction_id: str):
        self.appointment_id = appointment_id
        super().__init__(
            "Appointment already has a payment",
            details={
                "appointment_id": str(appointment_id),
                "gateway_transaction_id": gateway_transaction_id,
            },
        )


class AppointmentNotPayable(ConflictError):
    default_error_code: str = "APPOINTMENT_NOT_PAYABLE"


# =============================================================================
# Gateway Exceptions
# =============================================================================


class InvalidTxRef(ValidationError):
    default_error_code: str = "INVALID_TX_REF"

    def __init__(self, tx_ref: str):
        self.tx_ref = tx_ref
        super().__init__(
            "Malformed merchant transaction reference",
            details={"tx_ref": tx_ref},
        )


class GatewayError(ExternalServiceError):
    """
    Base for payment gateway failures.

    details carry the gateway's status code and message for logs; the API
    layer replaces the body with a generic retry message.
    """

    default_error_code: str = "GATEWAY_ERROR"


class GatewayInitiationFailed(GatewayError):
    default_error_code: str = "GATEWAY_INITIATION_FAILED"


class GatewayVerificationFailed(GatewayError):
    default_error_code: str = "GATEWAY_VERIFICATION_FAILED"


class GatewayTimeout(GatewayVerificationFailed):
    """
    Verification did not answer within FLUTTERWAVE_TIMEOUT_SECONDS.

    The webhook is acknowledged without crediting; the gateway's retry
    delivers it again and the idempotency key makes that safe.
    """

    default_error_code: str = "GATEWAY_TIMEOUT"


# =============================================================================
# Payout Exceptions
# =============================================================================


class PayoutNotFound(NotFoundError):
    default_error_code: str = "PAYOUT_NOT_FOUND"

    def __init__(self, payout_id):
        super().__init__("Payout not found", details={"payout_id": str(payout_id)})


class BelowMinimumWithdrawal(ValidationError):
    default_error_code: str = "BELOW_MINIMUM_WITHDRAWAL"

    def __init__(self, amount_cents: int, minimum_cents: int):
        super().__init__(
            f"Minimum withdrawal amount is {minimum_cents}",
            details={"amount_cents": amount_cents, "minimum_cents": minimum_cents},
        )


class InvalidBankDetails(ValidationError):
    default_error_code: str = "INVALID_BANK_DETAILS"
