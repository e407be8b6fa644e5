"""
Tests for payments app.

This package contains test modules for:
- test_models.py: Payment and Payout transitions and constraints
- test_views.py: API endpoint tests
- test_integration.py: Checkout to payout money flow through the API

Ledger, service, adapter and webhook tests live beside their packages.

Usage:
    pytest payments/tests/
    pytest payments/tests/test_integration.py
"""
