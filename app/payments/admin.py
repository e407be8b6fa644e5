"""
Payment admin configuration.

This file imports admin configurations from the ledger submodule and
registers payment domain models with the Django admin. Status fields are
read-only: money-moving transitions go through the payment services.
"""

from django.contrib import admin

from payments.ledger.admin import WalletAdmin
from payments.models import Payment, Payout

__all__ = [
    "WalletAdmin",
    "PaymentAdmin",
    "PayoutAdmin",
]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "appointment",
        "practitioner",
        "gross_amount_cents",
        "practitioner_share_cents",
        "currency",
        "status",
        "paid_at",
    ]
    list_filter = ["status", "currency"]
    search_fields = ["gateway_transaction_id", "tx_ref", "practitioner__email"]
    readonly_fields = [field.name for field in Payment._meta.fields]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "practitioner",
        "amount_cents",
        "status",
        "requested_at",
        "processed_at",
        "processed_by",
    ]
    list_filter = ["status"]
    search_fields = ["practitioner__email", "external_reference", "account_number"]
    readonly_fields = [field.name for field in Payout._meta.fields]
    ordering = ["-requested_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
