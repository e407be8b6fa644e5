"""
Payments app configuration.

This app provides the escrow money flow:
- Practitioner wallets (pending and available balances)
- Payment records for verified gateway charges
- Flutterwave checkout and webhook reconciliation
- Practitioner withdrawals and admin payout processing
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
