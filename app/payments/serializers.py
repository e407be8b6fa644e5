"""
Serializers for the payments API.

Serializers:
    InitiatePaymentSerializer / CheckoutSessionSerializer: Checkout creation
    WalletSerializer: Wallet balances
    BankDetailsSerializer / WithdrawalRequestSerializer: Withdrawal request
    WithdrawalResultSerializer: Withdrawal response
    PayoutSerializer: Payout representation
    ProcessPayoutSerializer: Admin outcome for a payout

All amounts are integers in the smallest currency unit (kobo for NGN).
"""

from __future__ import annotations

from rest_framework import serializers

from payments.models import Payout
from payments.services.payout_service import PROCESS_ACTIONS


class InitiatePaymentSerializer(serializers.Serializer):
    appointment_id = serializers.UUIDField()
    amount = serializers.IntegerField(
        min_value=1, help_text="Amount in smallest currency unit"
    )
    currency = serializers.CharField(
        max_length=3, min_length=3, required=False, default=None
    )


class CheckoutSessionSerializer(serializers.Serializer):
    redirect_link = serializers.URLField()
    tx_ref = serializers.CharField()


class WalletSerializer(serializers.Serializer):
    """Serializes a payments.ledger.types.WalletSnapshot."""

    balance_cents = serializers.IntegerField()
    pending_balance_cents = serializers.IntegerField()
    total_earned_cents = serializers.IntegerField()
    currency = serializers.CharField()
    last_withdrawal_at = serializers.DateTimeField(allow_null=True)


class BankDetailsSerializer(serializers.Serializer):
    bank_name = serializers.CharField(max_length=100)
    account_number = serializers.RegexField(r"^\d{6,20}$", max_length=20)
    account_name = serializers.CharField(max_length=200)


class WithdrawalRequestSerializer(serializers.Serializer):
    amount = serializers.IntegerField(
        min_value=1, help_text="Amount in smallest currency unit"
    )
    bank_details = BankDetailsSerializer()


class WithdrawalResultSerializer(serializers.Serializer):
    payout_id = serializers.UUIDField(source="payout.id")
    new_balance = serializers.IntegerField(source="new_balance_cents")


class PayoutSerializer(serializers.ModelSerializer):
    practitioner_email = serializers.EmailField(
        source="practitioner.email", read_only=True
    )

    class Meta:
        model = Payout
        fields = [
            "id",
            "practitioner_email",
            "amount_cents",
            "bank_name",
            "account_number",
            "account_name",
            "status",
            "requested_at",
            "processed_at",
            "external_reference",
            "admin_notes",
        ]
        read_only_fields = fields


class ProcessPayoutSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[str(choice) for choice in PROCESS_ACTIONS])
    external_reference = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")
