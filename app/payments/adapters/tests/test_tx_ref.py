"""
Tests for the merchant reference codec.
"""

import uuid

import pytest

from payments.adapters import build_tx_ref, parse_tx_ref
from payments.exceptions import InvalidTxRef


class TestBuildTxRef:
    def test_format(self):
        appointment_id = uuid.UUID("6f1c2d3e-4a5b-4c6d-8e7f-0123456789ab")

        tx_ref = build_tx_ref(appointment_id, issued_at_ms=1700000000123)

        assert tx_ref == "HLTH-6f1c2d3e4a5b4c6d8e7f0123456789ab-1700000000123"

    def test_defaults_to_current_time(self, appointment_id):
        tx_ref = build_tx_ref(appointment_id)

        timestamp = int(tx_ref.rsplit("-", 1)[1])
        assert timestamp > 1_600_000_000_000

    def test_accepts_string_id(self, appointment_id):
        assert build_tx_ref(str(appointment_id), 1) == build_tx_ref(appointment_id, 1)


class TestParseTxRef:
    def test_extracts_appointment_id(self, appointment_id):
        assert parse_tx_ref(build_tx_ref(appointment_id)) == appointment_id

    @pytest.mark.parametrize(
        "tx_ref",
        [
            "",
            "HLTH-123",
            "HLTH--1700000000000",
            "XXXX-" + "a" * 32 + "-1700000000000",
            "HLTH-" + "A" * 32 + "-1700000000000",  # uppercase hex
            "HLTH-" + "a" * 31 + "-1700000000000",
            "HLTH-" + "a" * 32 + "-",
            "HLTH-" + "a" * 32 + "-17000x",
            "HLTH-" + "a" * 32 + "-1700000000000-extra",
            " HLTH-" + "a" * 32 + "-1700000000000",
            "HLTH-" + "a" * 32 + "-1700000000000\n",
            "HLTH-" + "a" * 32 + "-\u0661\u0662\u0663",  # non-ASCII digits
            "HLTH-6f1c2d3e-4a5b-4c6d-8e7f-0123456789ab-1700000000000",
        ],
    )
    def test_rejects_malformed(self, tx_ref):
        with pytest.raises(InvalidTxRef) as exc_info:
            parse_tx_ref(tx_ref)

        assert exc_info.value.error_code == "INVALID_TX_REF"

    def test_rejects_non_string(self):
        with pytest.raises(InvalidTxRef):
            parse_tx_ref(None)
