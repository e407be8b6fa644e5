import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models


def _timestamps():
    return [
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_index=True,
                help_text="Timestamp when this record was created",
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                help_text="Timestamp when this record was last modified",
            ),
        ),
        (
            "id",
            models.UUIDField(
                default=uuid.uuid4,
                editable=False,
                help_text="Unique identifier for this record",
                primary_key=True,
                serialize=False,
            ),
        ),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("appointments", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Wallet",
            fields=_timestamps()
            + [
                (
                    "balance_cents",
                    models.BigIntegerField(
                        default=0,
                        help_text="Available balance in smallest currency unit",
                    ),
                ),
                (
                    "pending_balance_cents",
                    models.BigIntegerField(
                        default=0,
                        help_text="Balance held in escrow, in smallest currency unit",
                    ),
                ),
                (
                    "total_earned_cents",
                    models.BigIntegerField(
                        default=0,
                        help_text="Lifetime released earnings in smallest currency unit",
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="NGN", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                (
                    "last_withdrawal_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the last withdrawal was debited",
                        null=True,
                    ),
                ),
                (
                    "practitioner",
                    models.OneToOneField(
                        help_text="Practitioner owning this wallet",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="wallet",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Wallet",
                "verbose_name_plural": "Wallets",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("balance_cents__gte", 0)),
                        name="wallet_balance_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("pending_balance_cents__gte", 0)),
                        name="wallet_pending_balance_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_earned_cents__gte", 0)),
                        name="wallet_total_earned_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=_timestamps()
            + [
                (
                    "gateway_transaction_id",
                    models.CharField(
                        help_text="Gateway transaction id (unique, idempotency key)",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "tx_ref",
                    models.CharField(
                        db_index=True,
                        help_text="Merchant reference (HLTH-<appointment>-<unix ms>)",
                        max_length=64,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="NGN", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                (
                    "gross_amount_cents",
                    models.BigIntegerField(
                        help_text="Amount charged in smallest currency unit"
                    ),
                ),
                (
                    "gateway_fee_cents",
                    models.BigIntegerField(
                        default=0,
                        help_text="Gateway fee in smallest currency unit (not deducted)",
                    ),
                ),
                (
                    "platform_fee_cents",
                    models.BigIntegerField(
                        help_text="Platform commission in smallest currency unit"
                    ),
                ),
                (
                    "practitioner_share_cents",
                    models.BigIntegerField(
                        help_text="Practitioner share in smallest currency unit"
                    ),
                ),
                (
                    "commission_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0.1000"),
                        help_text="Commission rate applied to the gross amount",
                        max_digits=5,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("initiated", "Initiated"),
                            ("held", "Held"),
                            ("completed", "Completed"),
                            ("refunded", "Refunded"),
                        ],
                        db_index=True,
                        default="initiated",
                        help_text="Current escrow state (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "paid_at",
                    models.DateTimeField(
                        blank=True, help_text="When the charge was verified", null=True
                    ),
                ),
                (
                    "released_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the share was released to the practitioner",
                        null=True,
                    ),
                ),
                (
                    "refunded_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the escrow was reversed for a refund",
                        null=True,
                    ),
                ),
                (
                    "appointment",
                    models.OneToOneField(
                        help_text="Appointment this payment covers",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        help_text="Patient who was charged",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments_made",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "practitioner",
                    models.ForeignKey(
                        help_text="Practitioner receiving the share",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments_received",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["practitioner", "status"],
                        name="payment_practitioner_idx",
                    ),
                    models.Index(
                        fields=["patient", "status"],
                        name="payment_patient_status_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("gross_amount_cents__gt", 0)),
                        name="payment_gross_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("gateway_fee_cents__gte", 0)),
                        name="payment_gateway_fee_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("platform_fee_cents__gte", 0),
                            ("practitioner_share_cents__gte", 0),
                        ),
                        name="payment_split_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            (
                                "gross_amount_cents",
                                models.F("platform_fee_cents")
                                + models.F("practitioner_share_cents"),
                            )
                        ),
                        name="payment_split_sums_to_gross",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payout",
            fields=_timestamps()
            + [
                (
                    "amount_cents",
                    models.BigIntegerField(
                        help_text="Payout amount in smallest currency unit"
                    ),
                ),
                ("bank_name", models.CharField(max_length=100)),
                ("account_number", models.CharField(max_length=20)),
                ("account_name", models.CharField(max_length=200)),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("requested", "Requested"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="requested",
                        help_text="Current state of the payout (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, help_text="Version for compare-and-swap updates"
                    ),
                ),
                (
                    "requested_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the withdrawal was requested",
                    ),
                ),
                (
                    "processed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the payout reached a final state",
                        null=True,
                    ),
                ),
                (
                    "external_reference",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Transfer reference from the bank or gateway",
                        max_length=255,
                    ),
                ),
                (
                    "admin_notes",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Notes recorded by the processing admin",
                    ),
                ),
                (
                    "practitioner",
                    models.ForeignKey(
                        help_text="Practitioner receiving the payout",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payouts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Admin who processed the payout",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "wallet",
                    models.ForeignKey(
                        help_text="Wallet the amount was debited from",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payouts",
                        to="payments.wallet",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payout",
                "verbose_name_plural": "Payouts",
                "ordering": ["-requested_at"],
                "indexes": [
                    models.Index(
                        fields=["practitioner", "status"],
                        name="payout_practitioner_idx",
                    ),
                    models.Index(
                        fields=["status", "requested_at"],
                        name="payout_status_requested_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_cents__gt", 0)),
                        name="payout_amount_positive",
                    ),
                ],
            },
        ),
    ]
