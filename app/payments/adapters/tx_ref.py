"""
Merchant transaction reference codec.

Every checkout is sent to the gateway with a tx_ref that embeds the
appointment id, so a webhook can be routed back to its appointment without
trusting any other field of the payload.

Format:
    HLTH-<appointment uuid, 32 lowercase hex chars>-<unix milliseconds>

Usage:
    from payments.adapters.tx_ref import build_tx_ref, parse_tx_ref

    tx_ref = build_tx_ref(appointment.id)
    parse_tx_ref(tx_ref)  # -> appointment.id
"""

from __future__ import annotations

import re
import time
import uuid

from payments.exceptions import InvalidTxRef

TX_REF_PREFIX = "HLTH"

_TX_REF_PATTERN = re.compile(r"HLTH-([0-9a-f]{32})-([0-9]+)")


def build_tx_ref(appointment_id: uuid.UUID, issued_at_ms: int | None = None) -> str:
    """
    Build a merchant reference for an appointment checkout.

    Args:
        appointment_id: Appointment UUID
        issued_at_ms: Unix time in milliseconds (defaults to now)
    """
    if issued_at_ms is None:
        issued_at_ms = int(time.time() * 1000)
    return f"{TX_REF_PREFIX}-{uuid.UUID(str(appointment_id)).hex}-{issued_at_ms}"


def parse_tx_ref(tx_ref: str) -> uuid.UUID:
    """
    Extract the appointment id from a merchant reference.

    Raises:
        InvalidTxRef: If tx_ref does not match the HLTH format exactly
    """
    match = _TX_REF_PATTERN.fullmatch(tx_ref) if isinstance(tx_ref, str) else None
    if match is None:
        raise InvalidTxRef(str(tx_ref))
    return uuid.UUID(hex=match.group(1))
