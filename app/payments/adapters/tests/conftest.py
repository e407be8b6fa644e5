"""
Pytest fixtures for Flutterwave adapter tests.

The adapter is built on an httpx.Client backed by httpx.MockTransport, so
no request leaves the process. Each fixture records the requests it saw.
"""

import uuid

import httpx
import pytest

from payments.adapters import FlutterwaveAdapter

BASE_URL = "https://flutterwave.test/v3"


@pytest.fixture
def appointment_id():
    return uuid.uuid4()


@pytest.fixture
def recorded_requests():
    return []


@pytest.fixture
def make_adapter(recorded_requests):
    """
    Build an adapter whose transport answers with ``handler(request)``.

    Usage:
        adapter = make_adapter(lambda request: httpx.Response(200, json={...}))
    """

    def _make(handler):
        def _recording_handler(request):
            recorded_requests.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_recording_handler))
        return FlutterwaveAdapter(
            secret_key="FLWSECK_TEST-secret",
            base_url=BASE_URL,
            timeout=5,
            client=client,
        )

    return _make


@pytest.fixture
def verify_payload():
    """Successful verify response body, mirroring Flutterwave's shape."""

    def _payload(**overrides):
        data = {
            "id": 4975363,
            "tx_ref": "HLTH-" + "a" * 32 + "-1700000000000",
            "status": "successful",
            "amount": 20000,
            "app_fee": 280,
            "currency": "NGN",
        }
        data.update(overrides)
        return {"status": "success", "message": "Transaction fetched successfully", "data": data}

    return _payload
