"""
Flutterwave v3 API adapter.

This module provides the FlutterwaveAdapter class which encapsulates every
call to the Flutterwave REST API. All gateway calls go through this adapter
to get consistent timeouts, error translation and structured logging.

Features:
- Bounded timeout on every request (FLUTTERWAVE_TIMEOUT_SECONDS)
- Gateway and network failures translated to payments.exceptions
- Major/minor unit conversion at the boundary; callers only see cents
- Structured logging with timing metrics

Configuration (via settings):
- FLUTTERWAVE_SECRET_KEY: API secret key (Bearer token)
- FLUTTERWAVE_BASE_URL: API root (default: https://api.flutterwave.com/v3)
- FLUTTERWAVE_TIMEOUT_SECONDS: Request timeout (default: 10)

Usage:
    from payments.adapters import FlutterwaveAdapter

    adapter = FlutterwaveAdapter()
    link = adapter.initiate_payment(
        tx_ref=tx_ref,
        amount_cents=2000000,
        currency="NGN",
        customer_email="patient@example.com",
        customer_name="Ada Obi",
        redirect_url="https://app.example.com/payment-success",
        description="Consultation",
    )

    verified = adapter.verify_transaction("4975363")
    verified.amount_cents  # 2000000
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

import httpx
from django.conf import settings

from payments.exceptions import (
    GatewayInitiationFailed,
    GatewayTimeout,
    GatewayVerificationFailed,
)

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = 100


# =============================================================================
# Unit Conversion
# =============================================================================


def to_major_units(amount_cents: int) -> Decimal:
    """Convert integer minor units to a major-unit Decimal (2000000 -> 20000.00)."""
    return (Decimal(amount_cents) / MINOR_UNITS_PER_MAJOR).quantize(Decimal("0.01"))


def to_minor_units(amount: Any) -> int:
    """
    Convert a major-unit amount from the gateway to integer minor units.

    Goes through str() so floats decoded from JSON (20000.5) are not
    carried with binary rounding error.

    Raises:
        ValueError: If amount is not a number
    """
    if isinstance(amount, bool):
        raise ValueError(f"Invalid amount: {amount!r}")
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return int((value * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class VerifiedTransaction:
    """
    Transaction as reported by the verify endpoint.

    Attributes:
        id: Gateway transaction id
        tx_ref: Merchant reference the charge was made with
        status: Gateway status ("successful", "failed", ...)
        amount_cents: Charged amount in minor units
        fee_cents: Gateway fee (app_fee) in minor units
        currency: ISO 4217 currency code
        raw_response: Full response data (for debugging)
    """

    id: str
    tx_ref: str
    status: str
    amount_cents: int
    fee_cents: int
    currency: str
    raw_response: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_successful(self) -> bool:
        return self.status == "successful"


# =============================================================================
# Adapter
# =============================================================================


class FlutterwaveAdapter:
    """
    Client for the Flutterwave v3 API.

    An httpx.Client may be injected (tests pass one built on
    httpx.MockTransport); otherwise one is created per call.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.FLUTTERWAVE_SECRET_KEY
        self.base_url = (base_url or settings.FLUTTERWAVE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FLUTTERWAVE_TIMEOUT_SECONDS
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        if self._client is not None:
            return self._client.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        with httpx.Client(timeout=self.timeout) as client:
            return client.request(method, url, headers=self._headers(), **kwargs)

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def initiate_payment(
        self,
        *,
        tx_ref: str,
        amount_cents: int,
        currency: str,
        customer_email: str,
        customer_name: str,
        redirect_url: str,
        description: str,
        customer_phone: str = "",
        title: str | None = None,
    ) -> str:
        """
        Create a hosted checkout and return its link.

        Raises:
            GatewayInitiationFailed: On non-success response or network error
        """
        log_context = {
            "operation": "initiate_payment",
            "tx_ref": tx_ref,
            "amount_cents": amount_cents,
            "currency": currency,
        }
        payload = {
            "tx_ref": tx_ref,
            "amount": str(to_major_units(amount_cents)),
            "currency": currency,
            "redirect_url": redirect_url,
            "customer": {
                "email": customer_email,
                "phonenumber": customer_phone,
                "name": customer_name,
            },
            "customizations": {
                "title": title or settings.PAYMENT_CHECKOUT_TITLE,
                "description": description,
            },
        }

        start_time = time.time()
        logger.info("Starting Flutterwave operation", extra=log_context)

        try:
            response = self._request("POST", "/payments", json=payload)
        except httpx.HTTPError as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Flutterwave request failed",
                extra={**log_context, "error": str(e), "duration_ms": duration_ms},
            )
            raise GatewayInitiationFailed(
                "Could not reach payment gateway",
                details={"tx_ref": tx_ref, "error": str(e)},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        body = self._json(response)
        link = (body.get("data") or {}).get("link")

        if response.status_code >= 400 or body.get("status") != "success" or not link:
            logger.error(
                "Flutterwave rejected payment initiation",
                extra={
                    **log_context,
                    "http_status": response.status_code,
                    "gateway_message": body.get("message"),
                    "duration_ms": duration_ms,
                },
            )
            raise GatewayInitiationFailed(
                "Payment gateway rejected checkout",
                details={
                    "tx_ref": tx_ref,
                    "http_status": response.status_code,
                    "gateway_message": body.get("message"),
                },
            )

        logger.info(
            "Flutterwave operation completed",
            extra={**log_context, "duration_ms": duration_ms},
        )
        return link

    def verify_transaction(self, transaction_id: str | int) -> VerifiedTransaction:
        """
        Fetch the authoritative state of a transaction.

        Raises:
            GatewayTimeout: If the gateway does not answer within the timeout
            GatewayVerificationFailed: On non-success response, network
                error or malformed data
        """
        log_context = {
            "operation": "verify_transaction",
            "gateway_transaction_id": str(transaction_id),
        }

        start_time = time.time()
        logger.info("Starting Flutterwave operation", extra=log_context)

        try:
            response = self._request("GET", f"/transactions/{transaction_id}/verify")
        except httpx.TimeoutException as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Flutterwave verification timed out",
                extra={**log_context, "duration_ms": duration_ms},
            )
            raise GatewayTimeout(
                "Payment gateway timed out",
                details={"gateway_transaction_id": str(transaction_id)},
            ) from e
        except httpx.HTTPError as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Flutterwave request failed",
                extra={**log_context, "error": str(e), "duration_ms": duration_ms},
            )
            raise GatewayVerificationFailed(
                "Could not reach payment gateway",
                details={"gateway_transaction_id": str(transaction_id), "error": str(e)},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        body = self._json(response)
        data = body.get("data") or {}

        if response.status_code >= 400 or body.get("status") != "success" or not data:
            logger.error(
                "Flutterwave rejected verification",
                extra={
                    **log_context,
                    "http_status": response.status_code,
                    "gateway_message": body.get("message"),
                    "duration_ms": duration_ms,
                },
            )
            raise GatewayVerificationFailed(
                "Payment gateway could not verify transaction",
                details={
                    "gateway_transaction_id": str(transaction_id),
                    "http_status": response.status_code,
                    "gateway_message": body.get("message"),
                },
            )

        try:
            verified = VerifiedTransaction(
                id=str(data["id"]),
                tx_ref=str(data.get("tx_ref", "")),
                status=str(data.get("status", "")),
                amount_cents=to_minor_units(data["amount"]),
                fee_cents=to_minor_units(data.get("app_fee") or 0),
                currency=str(data.get("currency", "")),
                raw_response=data,
            )
        except (KeyError, ValueError) as e:
            logger.error(
                "Flutterwave returned malformed transaction",
                extra={**log_context, "error": str(e)},
            )
            raise GatewayVerificationFailed(
                "Payment gateway returned malformed transaction",
                details={"gateway_transaction_id": str(transaction_id)},
            ) from e

        logger.info(
            "Flutterwave operation completed",
            extra={
                **log_context,
                "status": verified.status,
                "amount_cents": verified.amount_cents,
                "duration_ms": duration_ms,
            },
        )
        return verified
