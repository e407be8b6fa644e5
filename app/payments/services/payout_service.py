"""
Payout service for practitioner withdrawals.

A withdrawal debits the wallet and inserts the Payout in one transaction,
so a REQUESTED payout always corresponds to money already taken out of the
available balance. An admin later records the outcome of the bank transfer;
a FAILED outcome re-credits the wallet in the same transaction as the
status write, exactly once, because a FAILED payout cannot transition again.

Usage:
    from payments.services import PayoutService

    service = PayoutService()
    result = service.request_withdrawal(
        practitioner,
        amount_cents=5000,
        bank_details={
            "bank_name": "Access Bank",
            "account_number": "0123456789",
            "account_name": "Dr. Bello",
        },
    )
    result.new_balance_cents

    service.process_payout(result.payout.id, admin, PayoutStatus.FAILED)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import transaction
from django_fsm import TransitionNotAllowed

from core.exceptions import (
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.locking import compare_and_swap, lock_for_update
from core.services import BaseService

from notifications.services import NotificationService, format_amount
from payments.config import EscrowSettings
from payments.exceptions import (
    BelowMinimumWithdrawal,
    InvalidBankDetails,
    PayoutNotFound,
)
from payments.ledger import InvalidAmount, WalletLedger, wallet_ledger
from payments.models import Payout, Wallet
from payments.state_machines import PayoutStatus

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User


BANK_DETAIL_FIELDS = ("bank_name", "account_number", "account_name")

# Admin-selectable outcomes and the Payout transition each one runs
PROCESS_ACTIONS = {
    PayoutStatus.PROCESSING: "process",
    PayoutStatus.COMPLETED: "complete",
    PayoutStatus.FAILED: "fail",
}


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class WithdrawalResult:
    """
    Result of a withdrawal request.

    Attributes:
        payout: The REQUESTED Payout
        new_balance_cents: Available balance after the debit
    """

    payout: Payout
    new_balance_cents: int


# =============================================================================
# Payout Service
# =============================================================================


class PayoutService(BaseService):
    """
    Service for requesting and processing practitioner payouts.

    Safety Guarantees:
        - Debit is a guarded single UPDATE; a failed insert rolls it back
        - Processing locks the payout row and writes with compare-and-swap
        - Reversal of a failed payout happens in the same transaction as
          the FAILED status write
    """

    def __init__(
        self,
        config: EscrowSettings | None = None,
        ledger: WalletLedger | None = None,
        notifications: type[NotificationService] = NotificationService,
    ):
        self.config = config or EscrowSettings.from_settings()
        self.ledger = ledger or wallet_ledger
        self.notifications = notifications

    # =========================================================================
    # Practitioner operations
    # =========================================================================

    def request_withdrawal(
        self,
        practitioner: User,
        amount_cents: int,
        bank_details: dict[str, str],
    ) -> WithdrawalResult:
        """
        Withdraw from the practitioner's available balance.

        Raises:
            PermissionDeniedError: Caller is not a practitioner
            InvalidAmount: Amount is not a positive integer
            BelowMinimumWithdrawal: Amount is below the configured minimum
            InvalidBankDetails: A bank detail field is missing or blank
            InsufficientFunds: Amount exceeds the available balance
        """
        if not practitioner.is_practitioner:
            raise PermissionDeniedError(
                "Only practitioners can withdraw", error_code="FORBIDDEN"
            )
        if (
            not isinstance(amount_cents, int)
            or isinstance(amount_cents, bool)
            or amount_cents <= 0
        ):
            raise InvalidAmount(amount_cents)
        if amount_cents < self.config.min_withdrawal_cents:
            raise BelowMinimumWithdrawal(amount_cents, self.config.min_withdrawal_cents)

        details = self._clean_bank_details(bank_details)

        with self.atomic():
            snapshot = self.ledger.debit_available(practitioner.id, amount_cents)
            wallet_id = Wallet.objects.values_list("id", flat=True).get(
                practitioner_id=practitioner.id
            )
            payout = Payout.objects.create(
                practitioner=practitioner,
                wallet_id=wallet_id,
                amount_cents=amount_cents,
                **details,
            )

        self.get_logger().info(
            "Withdrawal requested",
            extra={
                "payout_id": str(payout.id),
                "practitioner_id": str(practitioner.id),
                "amount_cents": amount_cents,
                "balance_cents": snapshot.balance_cents,
            },
        )
        return WithdrawalResult(payout=payout, new_balance_cents=snapshot.balance_cents)

    @staticmethod
    def _clean_bank_details(bank_details) -> dict[str, str]:
        if not isinstance(bank_details, dict):
            raise InvalidBankDetails("Bank details are required")

        cleaned = {}
        missing = []
        for name in BANK_DETAIL_FIELDS:
            value = str(bank_details.get(name) or "").strip()
            if not value:
                missing.append(name)
            cleaned[name] = value

        if missing:
            raise InvalidBankDetails(
                "Incomplete bank details", details={"missing_fields": missing}
            )
        return cleaned

    def list_for_practitioner(self, practitioner: User) -> QuerySet[Payout]:
        return Payout.objects.filter(practitioner=practitioner).order_by("-requested_at")

    # =========================================================================
    # Admin operations
    # =========================================================================

    def list_pending(self) -> QuerySet[Payout]:
        """Payouts awaiting an admin, oldest first."""
        return (
            Payout.objects.filter(status=PayoutStatus.REQUESTED)
            .select_related("practitioner")
            .order_by("requested_at")
        )

    def process_payout(
        self,
        payout_id,
        admin: User,
        status: str,
        external_reference: str = "",
        admin_notes: str = "",
    ) -> Payout:
        """
        Record the outcome of a payout's bank transfer.

        Args:
            payout_id: Payout to process
            admin: Platform admin performing the action
            status: processing, completed or failed
            external_reference: Transfer reference from the bank
            admin_notes: Free-text notes

        Raises:
            PermissionDeniedError: Caller is not a platform admin
            ValidationError: status is not an admin-selectable outcome
            PayoutNotFound: No such payout
            InvalidStateTransitionError: Payout already final, or the
                requested move is not allowed from its current status
            StaleRecordError: Another admin processed it concurrently
        """
        if not admin.is_platform_admin:
            raise PermissionDeniedError(
                "Only admins can process payouts", error_code="FORBIDDEN"
            )
        if status not in PROCESS_ACTIONS:
            raise ValidationError(
                "Invalid payout status",
                details={"status": status, "allowed": list(PROCESS_ACTIONS)},
            )

        logger = self.get_logger()

        with self.atomic():
            try:
                payout = lock_for_update(Payout, payout_id)
            except NotFoundError as e:
                raise PayoutNotFound(payout_id) from e

            previous_status = payout.status
            transition_method = getattr(payout, PROCESS_ACTIONS[status])
            try:
                transition_method(
                    external_reference=external_reference,
                    admin_notes=admin_notes,
                )
            except TransitionNotAllowed as e:
                raise InvalidStateTransitionError(
                    f"Cannot move payout from '{previous_status}' to '{status}'",
                    details={
                        "payout_id": str(payout.id),
                        "current_status": previous_status,
                        "requested_status": status,
                    },
                ) from e

            payout.processed_by = admin
            compare_and_swap(
                payout,
                expected={"status": previous_status},
                fields=[
                    "status",
                    "external_reference",
                    "admin_notes",
                    "processed_by",
                    "processed_at",
                ],
            )

            if payout.status == PayoutStatus.FAILED:
                self.ledger.credit_available(payout.practitioner_id, payout.amount_cents)
                logger.info(
                    "Failed payout reversed to wallet",
                    extra={
                        "payout_id": str(payout.id),
                        "amount_cents": payout.amount_cents,
                    },
                )

        practitioner = payout.practitioner
        self.notifications.payout_processed(
            recipient_email=practitioner.email,
            recipient_name=practitioner.get_full_name(),
            amount_display=format_amount(payout.amount_cents, payout.wallet.currency),
            status=payout.status,
        )

        logger.info(
            "Payout processed",
            extra={
                "payout_id": str(payout.id),
                "admin_id": str(admin.id),
                "previous_status": previous_status,
                "status": payout.status,
            },
        )
        return payout
