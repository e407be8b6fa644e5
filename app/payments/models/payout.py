"""
Payout model for practitioner withdrawals.

A Payout is created when a practitioner withdraws from their available
balance. The wallet is debited in the same transaction as the insert, so a
REQUESTED payout always represents money already taken out of the wallet.
An admin then sends the bank transfer outside the platform and records the
outcome here.

Usage:
    from payments.models import Payout

    payout.process()  # requested -> processing
    payout.complete(external_reference="FLW-TRF-123")
    # or
    payout.fail(admin_notes="Account closed")  # wallet re-credited by service
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import PayoutStatus


class Payout(UUIDPrimaryKeyMixin, BaseModel):
    """
    Withdrawal from a practitioner's wallet to a bank account.

    State Flow:
        REQUESTED -> PROCESSING -> COMPLETED
        REQUESTED -> PROCESSING -> FAILED
        REQUESTED -> COMPLETED / FAILED (processed in one step)

    Fields:
        practitioner: Practitioner withdrawing
        wallet: Wallet debited
        amount_cents: Withdrawal amount in smallest currency unit
        bank_name / account_number / account_name: Bank details snapshot
        status: Current FSM state
        requested_at: When the withdrawal was requested
        processed_at: When an admin recorded the final outcome
        external_reference: Bank or gateway transfer reference
        admin_notes: Notes recorded by the processing admin
        processed_by: Admin who last processed the payout
        version: Compare-and-swap version
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    practitioner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payouts",
        help_text="Practitioner receiving the payout",
    )

    wallet = models.ForeignKey(
        "payments.Wallet",
        on_delete=models.PROTECT,
        related_name="payouts",
        help_text="Wallet the amount was debited from",
    )

    amount_cents = models.BigIntegerField(
        help_text="Payout amount in smallest currency unit",
    )

    # ==========================================================================
    # Bank Details
    # ==========================================================================

    bank_name = models.CharField(max_length=100)
    account_number = models.CharField(max_length=20)
    account_name = models.CharField(max_length=200)

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=PayoutStatus.REQUESTED,
        choices=PayoutStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payout (managed by FSM)",
    )

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for compare-and-swap updates",
    )

    # ==========================================================================
    # Processing Record
    # ==========================================================================

    requested_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the withdrawal was requested",
    )

    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payout reached a final state",
    )

    external_reference = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Transfer reference from the bank or gateway",
    )

    admin_notes = models.TextField(
        blank=True,
        default="",
        help_text="Notes recorded by the processing admin",
    )

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="Admin who processed the payout",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-requested_at"]
        verbose_name = "Payout"
        verbose_name_plural = "Payouts"
        indexes = [
            models.Index(fields=["practitioner", "status"], name="payout_practitioner_idx"),
            models.Index(fields=["status", "requested_at"], name="payout_status_requested_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="payout_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Payout({self.id}, {self.status}, {self.amount_cents})"

    @property
    def is_final(self) -> bool:
        return self.status in (PayoutStatus.COMPLETED, PayoutStatus.FAILED)

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=PayoutStatus.REQUESTED,
        target=PayoutStatus.PROCESSING,
    )
    def process(self, external_reference: str = "", admin_notes: str = ""):
        """
        Admin has started the bank transfer.

        Transition: REQUESTED -> PROCESSING
        """
        self._record(external_reference, admin_notes)

    @transition(
        field=status,
        source=[PayoutStatus.REQUESTED, PayoutStatus.PROCESSING],
        target=PayoutStatus.COMPLETED,
    )
    def complete(self, external_reference: str = "", admin_notes: str = ""):
        """
        Bank transfer confirmed.

        Transition: REQUESTED/PROCESSING -> COMPLETED
        """
        self._record(external_reference, admin_notes)
        self.processed_at = timezone.now()

    @transition(
        field=status,
        source=[PayoutStatus.REQUESTED, PayoutStatus.PROCESSING],
        target=PayoutStatus.FAILED,
    )
    def fail(self, external_reference: str = "", admin_notes: str = ""):
        """
        Bank transfer failed.

        Transition: REQUESTED/PROCESSING -> FAILED

        The caller must re-credit the wallet in the same transaction.
        """
        self._record(external_reference, admin_notes)
        self.processed_at = timezone.now()

    def _record(self, external_reference: str, admin_notes: str) -> None:
        if external_reference:
            self.external_reference = external_reference
        if admin_notes:
            self.admin_notes = admin_notes
