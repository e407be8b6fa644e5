"""
Payment model for escrowed consultation fees.

A Payment is the record of one verified gateway charge for one appointment.
It is created by the webhook reconciliation handler directly in HELD, with
the platform fee and practitioner share fixed at insert time.

Uniqueness on appointment and on gateway_transaction_id is what makes the
webhook idempotent: a replayed delivery fails the insert instead of
crediting the wallet twice.

Usage:
    from payments.models import Payment
    from payments.state_machines import PaymentStatus

    payment = Payment.objects.get(appointment_id=appointment.id)
    payment.practitioner_share_cents  # Credited to the pending balance
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import PaymentStatus


class Payment(UUIDPrimaryKeyMixin, BaseModel):
    """
    Escrowed charge for a single appointment.

    State Flow:
        INITIATED -> HELD -> COMPLETED (share released to practitioner)
        HELD -> REFUNDED (appointment cancelled before completion)

    Fields:
        appointment: Appointment paid for (one payment per appointment)
        patient / practitioner: Denormalized participants
        gateway_transaction_id: Flutterwave transaction id (idempotency key)
        tx_ref: Merchant reference sent at checkout
        gross_amount_cents: Amount charged, in smallest currency unit
        gateway_fee_cents: Fee reported by the gateway (charged on top)
        platform_fee_cents: Platform commission
        practitioner_share_cents: gross - platform fee
        commission_rate: Rate used for the split, kept for audit
        status: Current FSM state
        paid_at / released_at / refunded_at: Transition timestamps
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    appointment = models.OneToOneField(
        "appointments.Appointment",
        on_delete=models.PROTECT,
        related_name="payment",
        help_text="Appointment this payment covers",
    )

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments_made",
        help_text="Patient who was charged",
    )

    practitioner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments_received",
        help_text="Practitioner receiving the share",
    )

    # ==========================================================================
    # Gateway References
    # ==========================================================================

    gateway_transaction_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Gateway transaction id (unique, idempotency key)",
    )

    tx_ref = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Merchant reference (HLTH-<appointment>-<unix ms>)",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    currency = models.CharField(
        max_length=3,
        default="NGN",
        help_text="ISO 4217 currency code",
    )

    gross_amount_cents = models.BigIntegerField(
        help_text="Amount charged in smallest currency unit",
    )

    gateway_fee_cents = models.BigIntegerField(
        default=0,
        help_text="Gateway fee in smallest currency unit (not deducted)",
    )

    platform_fee_cents = models.BigIntegerField(
        help_text="Platform commission in smallest currency unit",
    )

    practitioner_share_cents = models.BigIntegerField(
        help_text="Practitioner share in smallest currency unit",
    )

    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.1000"),
        help_text="Commission rate applied to the gross amount",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=PaymentStatus.INITIATED,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current escrow state (managed by FSM)",
    )

    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the charge was verified",
    )

    released_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the share was released to the practitioner",
    )

    refunded_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the escrow was reversed for a refund",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        indexes = [
            models.Index(fields=["practitioner", "status"], name="payment_practitioner_idx"),
            models.Index(fields=["patient", "status"], name="payment_patient_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(gross_amount_cents__gt=0),
                name="payment_gross_positive",
            ),
            models.CheckConstraint(
                condition=Q(gateway_fee_cents__gte=0),
                name="payment_gateway_fee_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(platform_fee_cents__gte=0)
                & Q(practitioner_share_cents__gte=0),
                name="payment_split_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(
                    gross_amount_cents=F("platform_fee_cents")
                    + F("practitioner_share_cents")
                ),
                name="payment_split_sums_to_gross",
            ),
        ]

    def __str__(self) -> str:
        return f"Payment({self.id}, {self.status}, {self.gross_amount_cents} {self.currency})"

    @property
    def is_held(self) -> bool:
        return self.status == PaymentStatus.HELD

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=PaymentStatus.INITIATED,
        target=PaymentStatus.HELD,
    )
    def hold(self):
        """
        Record the verified charge as held in escrow.

        Transition: INITIATED -> HELD
        """
        self.paid_at = timezone.now()

    @transition(
        field=status,
        source=PaymentStatus.HELD,
        target=PaymentStatus.COMPLETED,
    )
    def release(self):
        """
        Transition: HELD -> COMPLETED

        Persisted with a conditional UPDATE by PaymentRecordStore.mark_released.
        """
        self.released_at = timezone.now()

    @transition(
        field=status,
        source=PaymentStatus.HELD,
        target=PaymentStatus.REFUNDED,
    )
    def refund(self):
        """
        Transition: HELD -> REFUNDED
        """
        self.refunded_at = timezone.now()
