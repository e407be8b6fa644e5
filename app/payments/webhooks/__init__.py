"""
Webhook handling for Flutterwave charge events.

Deliveries are verified against the gateway and applied synchronously in a
single transaction; the receiver always acknowledges handled outcomes.

Usage:
    # In urls.py
    from payments.webhooks.views import flutterwave_webhook

    urlpatterns = [
        path("webhooks/flutterwave/", flutterwave_webhook, name="flutterwave_webhook"),
    ]
"""

from payments.webhooks.handlers import WebhookReconciliationHandler
from payments.webhooks.views import flutterwave_webhook

__all__ = [
    "WebhookReconciliationHandler",
    "flutterwave_webhook",
]
