"""
Payment adapters for external services.

All gateway API calls go through these adapters to ensure consistent error
handling, timeouts and observability.

Usage:
    from payments.adapters import FlutterwaveAdapter, build_tx_ref

    tx_ref = build_tx_ref(appointment.id)
    link = FlutterwaveAdapter().initiate_payment(tx_ref=tx_ref, ...)
"""

from payments.adapters.flutterwave_adapter import (
    FlutterwaveAdapter,
    VerifiedTransaction,
    to_major_units,
    to_minor_units,
)
from payments.adapters.tx_ref import build_tx_ref, parse_tx_ref

__all__ = [
    "FlutterwaveAdapter",
    "VerifiedTransaction",
    "build_tx_ref",
    "parse_tx_ref",
    "to_major_units",
    "to_minor_units",
]
