"""
Webhook endpoint view for Flutterwave.

The view:
1. Hands the raw body and verif-hash header to WebhookReconciliationHandler
2. Logs the outcome
3. Returns 200 "Accepted" for every handled outcome

Acknowledging ignored deliveries stops the gateway from retrying payloads
that will never apply (forged, irrelevant, replayed, mismatched). An
unexpected error (database outage) propagates as a 500 so the gateway
redelivers later; the idempotency key makes redelivery safe.

Usage:
    # In urls.py
    from payments.webhooks.views import flutterwave_webhook

    urlpatterns = [
        path("webhooks/flutterwave/", flutterwave_webhook, name="flutterwave_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.webhooks.handlers import WebhookReconciliationHandler

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "verif-hash"


@csrf_exempt
@require_POST
def flutterwave_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive Flutterwave charge notifications.

    Security:
    - Shared secret compared in constant time by the handler
    - Amount, status, tx_ref and currency re-verified with the gateway
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        HttpResponse 200 "Accepted"
    """
    result = WebhookReconciliationHandler().handle(
        request.body,
        request.headers.get(SIGNATURE_HEADER),
    )

    if result:
        logger.info(
            "Flutterwave webhook processed",
            extra={"payment_id": str(result.data.id)},
        )
    else:
        logger.info(
            "Flutterwave webhook acknowledged without changes",
            extra={"reason": result.error, "error_code": result.error_code},
        )

    return HttpResponse("Accepted", status=200)
