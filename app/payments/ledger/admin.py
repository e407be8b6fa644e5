"""
Django admin configuration for wallets.

Balances are read-only here: every change must go through WalletLedger so
that it is a guarded atomic update.
"""

from django.contrib import admin

from .models import Wallet


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = [
        "practitioner",
        "balance_cents",
        "pending_balance_cents",
        "total_earned_cents",
        "currency",
        "last_withdrawal_at",
    ]
    search_fields = ["practitioner__email"]
    readonly_fields = [
        "id",
        "practitioner",
        "balance_cents",
        "pending_balance_cents",
        "total_earned_cents",
        "currency",
        "last_withdrawal_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
