"""
URL configuration for the payments app.

Routes:
    - POST /initiate/                          - Create checkout (patient)
    - POST /webhooks/flutterwave/              - Flutterwave webhook
    - GET  /wallet/                            - Wallet balances (practitioner)
    - GET/POST /withdrawals/                   - Withdrawals (practitioner)
    - GET  /admin/payouts/pending/             - Pending payouts (admin)
    - POST /admin/payouts/{id}/process/        - Process payout (admin)

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.views import (
    InitiatePaymentView,
    PendingPayoutsView,
    ProcessPayoutView,
    WalletView,
    WithdrawalView,
)
from payments.webhooks.views import flutterwave_webhook

app_name = "payments"

urlpatterns = [
    path("initiate/", InitiatePaymentView.as_view(), name="initiate"),
    # Webhook endpoints
    path("webhooks/flutterwave/", flutterwave_webhook, name="flutterwave_webhook"),
    # Practitioner wallet
    path("wallet/", WalletView.as_view(), name="wallet"),
    path("withdrawals/", WithdrawalView.as_view(), name="withdrawals"),
    # Admin
    path("admin/payouts/pending/", PendingPayoutsView.as_view(), name="pending_payouts"),
    path(
        "admin/payouts/<uuid:payout_id>/process/",
        ProcessPayoutView.as_view(),
        name="process_payout",
    ),
]
