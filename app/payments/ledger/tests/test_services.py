"""
Tests for WalletLedger.

Each mutation is a single guarded UPDATE; these tests check the resulting
balances, the guards, and that a refused mutation leaves the row untouched.
"""

from datetime import datetime, timezone as dt_timezone

import pytest
from freezegun import freeze_time

from payments.ledger import (
    InsufficientFunds,
    InsufficientPendingFunds,
    InvalidAmount,
    Wallet,
    WalletSnapshot,
    wallet_ledger,
)
from payments.tests.factories import WalletFactory


def _wallet(practitioner):
    return Wallet.objects.get(practitioner=practitioner)


class TestGetOrCreate:
    """Tests for WalletLedger.get_or_create() and get_balance()."""

    def test_creates_zeroed_wallet(self, practitioner):
        """Should create a wallet with zero balances in the platform currency."""
        wallet = wallet_ledger.get_or_create(practitioner.id)

        assert wallet.practitioner_id == practitioner.id
        assert wallet.balance_cents == 0
        assert wallet.pending_balance_cents == 0
        assert wallet.total_earned_cents == 0
        assert wallet.currency == "NGN"

    def test_returns_existing_wallet(self, practitioner):
        """Should never create a second wallet for the same practitioner."""
        first = wallet_ledger.get_or_create(practitioner.id)
        second = wallet_ledger.get_or_create(practitioner.id)

        assert first.id == second.id
        assert Wallet.objects.filter(practitioner=practitioner).count() == 1

    def test_get_balance_returns_snapshot(self, practitioner):
        """Should return an immutable snapshot, creating the wallet lazily."""
        snapshot = wallet_ledger.get_balance(practitioner.id)

        assert isinstance(snapshot, WalletSnapshot)
        assert snapshot.balance_cents == 0
        assert snapshot.last_withdrawal_at is None


class TestCreditPending:
    """Tests for WalletLedger.credit_pending()."""

    def test_adds_to_pending_only(self, practitioner):
        """Should increase pending balance and leave available untouched."""
        snapshot = wallet_ledger.credit_pending(practitioner.id, 1800000)

        assert snapshot.pending_balance_cents == 1800000
        assert snapshot.balance_cents == 0
        assert snapshot.total_earned_cents == 0

    def test_credits_accumulate(self, practitioner):
        """Two credits should both be applied."""
        wallet_ledger.credit_pending(practitioner.id, 1000)
        wallet_ledger.credit_pending(practitioner.id, 2500)

        assert _wallet(practitioner).pending_balance_cents == 3500

    @pytest.mark.parametrize("amount", [0, -1, 10.5, "100", True, None])
    def test_rejects_non_positive_or_non_integer(self, practitioner, amount):
        """Should raise InvalidAmount and create nothing."""
        with pytest.raises(InvalidAmount):
            wallet_ledger.credit_pending(practitioner.id, amount)

        assert not Wallet.objects.filter(practitioner=practitioner).exists()


class TestReleaseToAvailable:
    """Tests for WalletLedger.release_to_available()."""

    def test_moves_pending_to_available_and_earned(self, practitioner):
        """Should decrement pending and increment available and total earned."""
        WalletFactory(practitioner=practitioner, pending_balance_cents=1800000)

        snapshot = wallet_ledger.release_to_available(practitioner.id, 1800000)

        assert snapshot.pending_balance_cents == 0
        assert snapshot.balance_cents == 1800000
        assert snapshot.total_earned_cents == 1800000

    def test_partial_release(self, practitioner):
        """Should leave the remainder in pending."""
        WalletFactory(practitioner=practitioner, pending_balance_cents=3000)

        snapshot = wallet_ledger.release_to_available(practitioner.id, 1000)

        assert snapshot.pending_balance_cents == 2000
        assert snapshot.balance_cents == 1000

    def test_refuses_release_beyond_pending(self, practitioner):
        """Should raise and leave every balance unchanged (never clamp)."""
        WalletFactory(
            practitioner=practitioner,
            pending_balance_cents=500,
            balance_cents=100,
            total_earned_cents=100,
        )

        with pytest.raises(InsufficientPendingFunds) as exc_info:
            wallet_ledger.release_to_available(practitioner.id, 1000)

        assert exc_info.value.required == 1000
        assert exc_info.value.available == 500
        wallet = _wallet(practitioner)
        assert wallet.pending_balance_cents == 500
        assert wallet.balance_cents == 100
        assert wallet.total_earned_cents == 100

    def test_refuses_release_without_wallet(self, practitioner):
        """A release for a practitioner with no wallet is an invariant breach."""
        with pytest.raises(InsufficientPendingFunds) as exc_info:
            wallet_ledger.release_to_available(practitioner.id, 1)

        assert exc_info.value.available is None


class TestReversePending:
    """Tests for WalletLedger.reverse_pending()."""

    def test_removes_from_pending_only(self, practitioner):
        """Should decrement pending without touching available or earned."""
        WalletFactory(practitioner=practitioner, pending_balance_cents=1800000)

        snapshot = wallet_ledger.reverse_pending(practitioner.id, 1800000)

        assert snapshot.pending_balance_cents == 0
        assert snapshot.balance_cents == 0
        assert snapshot.total_earned_cents == 0

    def test_refuses_reversal_beyond_pending(self, practitioner):
        WalletFactory(practitioner=practitioner, pending_balance_cents=10)

        with pytest.raises(InsufficientPendingFunds):
            wallet_ledger.reverse_pending(practitioner.id, 11)

        assert _wallet(practitioner).pending_balance_cents == 10


class TestDebitAvailable:
    """Tests for WalletLedger.debit_available()."""

    @freeze_time("2026-03-01 12:00:00")
    def test_debits_and_records_withdrawal_time(self, practitioner):
        """Should decrement available and stamp last_withdrawal_at."""
        WalletFactory(practitioner=practitioner, balance_cents=20000)

        snapshot = wallet_ledger.debit_available(practitioner.id, 5000)

        assert snapshot.balance_cents == 15000
        assert snapshot.last_withdrawal_at == datetime(
            2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc
        )

    def test_debit_of_entire_balance(self, practitioner):
        """Should allow the balance to reach exactly zero."""
        WalletFactory(practitioner=practitioner, balance_cents=5000)

        snapshot = wallet_ledger.debit_available(practitioner.id, 5000)

        assert snapshot.balance_cents == 0

    def test_insufficient_funds_leaves_balance_unchanged(self, practitioner):
        """Should raise InsufficientFunds reporting the available amount."""
        WalletFactory(practitioner=practitioner, balance_cents=4999)

        with pytest.raises(InsufficientFunds) as exc_info:
            wallet_ledger.debit_available(practitioner.id, 5000)

        assert exc_info.value.available == 4999
        assert exc_info.value.required == 5000
        wallet = _wallet(practitioner)
        assert wallet.balance_cents == 4999
        assert wallet.last_withdrawal_at is None

    def test_pending_balance_cannot_be_withdrawn(self, practitioner):
        """Escrowed funds are not available for withdrawal."""
        WalletFactory(practitioner=practitioner, pending_balance_cents=100000)

        with pytest.raises(InsufficientFunds):
            wallet_ledger.debit_available(practitioner.id, 5000)

    def test_no_wallet_reports_zero_available(self, practitioner):
        with pytest.raises(InsufficientFunds) as exc_info:
            wallet_ledger.debit_available(practitioner.id, 5000)

        assert exc_info.value.available == 0

    def test_sequential_debits_cannot_overdraw(self, practitioner):
        """The second of two debits that together exceed the balance fails."""
        WalletFactory(practitioner=practitioner, balance_cents=8000)

        wallet_ledger.debit_available(practitioner.id, 5000)
        with pytest.raises(InsufficientFunds):
            wallet_ledger.debit_available(practitioner.id, 5000)

        assert _wallet(practitioner).balance_cents == 3000


class TestCreditAvailable:
    """Tests for WalletLedger.credit_available()."""

    def test_restores_available_without_counting_as_earned(self, practitioner):
        """A payout reversal is not new earnings."""
        WalletFactory(practitioner=practitioner, balance_cents=1000, total_earned_cents=6000)

        snapshot = wallet_ledger.credit_available(practitioner.id, 5000)

        assert snapshot.balance_cents == 6000
        assert snapshot.total_earned_cents == 6000

    def test_rejects_invalid_amount(self, practitioner):
        with pytest.raises(InvalidAmount):
            wallet_ledger.credit_available(practitioner.id, 0)
