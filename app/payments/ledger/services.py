"""
Wallet ledger service for practitioner balances.

This module provides the WalletLedger class which encapsulates every write
to a Wallet. Each mutation is ONE conditional UPDATE statement built from
F() expressions, so concurrent operations on the same wallet (a withdrawal
racing a release, two webhook credits) can never lose an update, and a
guarded decrement can never drive a balance negative.

Usage:
    from payments.ledger.services import wallet_ledger

    wallet_ledger.credit_pending(practitioner.id, 18000)
    wallet_ledger.release_to_available(practitioner.id, 18000)
    snapshot = wallet_ledger.debit_available(practitioner.id, 5000)
    snapshot.balance_cents  # 13000
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .exceptions import InsufficientFunds, InsufficientPendingFunds, InvalidAmount
from .models import Wallet
from .types import WalletSnapshot

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class WalletLedger:
    """
    Service class for wallet balance operations.

    Key features:
    - Single-statement conditional updates (no read-modify-write)
    - Lazy wallet creation on first credit or first read
    - Guard failures surface as exceptions, never clamped

    All methods are static - no instance state is maintained.
    """

    @staticmethod
    def _validate_amount(amount_cents: Any) -> None:
        # bool is an int subclass; True must not move money
        if (
            not isinstance(amount_cents, int)
            or isinstance(amount_cents, bool)
            or amount_cents <= 0
        ):
            raise InvalidAmount(amount_cents)

    @staticmethod
    def _snapshot(practitioner_id) -> WalletSnapshot:
        return WalletSnapshot.from_wallet(
            Wallet.objects.get(practitioner_id=practitioner_id)
        )

    @staticmethod
    def _stored_value(practitioner_id, field_name: str) -> int | None:
        """Read a balance for error reporting only, never for decisions."""
        return (
            Wallet.objects.filter(practitioner_id=practitioner_id)
            .values_list(field_name, flat=True)
            .first()
        )

    @staticmethod
    def get_or_create(practitioner_id) -> Wallet:
        """
        Return the practitioner's wallet, creating a zeroed one if absent.

        Concurrent first calls are safe: get_or_create retries the lookup
        when the unique practitioner constraint rejects the second insert.
        """
        wallet, created = Wallet.objects.get_or_create(
            practitioner_id=practitioner_id,
            defaults={"currency": settings.PAYMENT_CURRENCY},
        )
        if created:
            logger.info(
                "Wallet created",
                extra={"practitioner_id": str(practitioner_id)},
            )
        return wallet

    @staticmethod
    def get_balance(practitioner_id) -> WalletSnapshot:
        return WalletSnapshot.from_wallet(WalletLedger.get_or_create(practitioner_id))

    @staticmethod
    def credit_pending(practitioner_id, amount_cents: int) -> WalletSnapshot:
        """
        Add an escrowed share to the pending balance.

        Raises:
            InvalidAmount: If amount_cents is not a positive integer
        """
        WalletLedger._validate_amount(amount_cents)

        with transaction.atomic():
            WalletLedger.get_or_create(practitioner_id)
            Wallet.objects.filter(practitioner_id=practitioner_id).update(
                pending_balance_cents=F("pending_balance_cents") + amount_cents,
                updated_at=timezone.now(),
            )
            snapshot = WalletLedger._snapshot(practitioner_id)

        logger.info(
            "Pending balance credited",
            extra={
                "practitioner_id": str(practitioner_id),
                "amount_cents": amount_cents,
                "pending_balance_cents": snapshot.pending_balance_cents,
            },
        )
        return snapshot

    @staticmethod
    def release_to_available(practitioner_id, amount_cents: int) -> WalletSnapshot:
        """
        Move funds from pending to available and count them as earned.

        The decrement and both increments are one UPDATE guarded by
        pending_balance_cents >= amount_cents.

        Raises:
            InvalidAmount: If amount_cents is not a positive integer
            InsufficientPendingFunds: If pending balance is below amount_cents
        """
        WalletLedger._validate_amount(amount_cents)

        with transaction.atomic():
            updated = Wallet.objects.filter(
                practitioner_id=practitioner_id,
                pending_balance_cents__gte=amount_cents,
            ).update(
                pending_balance_cents=F("pending_balance_cents") - amount_cents,
                balance_cents=F("balance_cents") + amount_cents,
                total_earned_cents=F("total_earned_cents") + amount_cents,
                updated_at=timezone.now(),
            )

            if updated == 0:
                available = WalletLedger._stored_value(
                    practitioner_id, "pending_balance_cents"
                )
                logger.critical(
                    "Release exceeds pending balance",
                    extra={
                        "practitioner_id": str(practitioner_id),
                        "amount_cents": amount_cents,
                        "pending_balance_cents": available,
                    },
                )
                raise InsufficientPendingFunds(practitioner_id, amount_cents, available)

            snapshot = WalletLedger._snapshot(practitioner_id)

        logger.info(
            "Funds released to available balance",
            extra={
                "practitioner_id": str(practitioner_id),
                "amount_cents": amount_cents,
                "balance_cents": snapshot.balance_cents,
            },
        )
        return snapshot

    @staticmethod
    def reverse_pending(practitioner_id, amount_cents: int) -> WalletSnapshot:
        """
        Remove an escrowed share that will be refunded to the patient.

        Raises:
            InvalidAmount: If amount_cents is not a positive integer
            InsufficientPendingFunds: If pending balance is below amount_cents
        """
        WalletLedger._validate_amount(amount_cents)

        with transaction.atomic():
            updated = Wallet.objects.filter(
                practitioner_id=practitioner_id,
                pending_balance_cents__gte=amount_cents,
            ).update(
                pending_balance_cents=F("pending_balance_cents") - amount_cents,
                updated_at=timezone.now(),
            )

            if updated == 0:
                available = WalletLedger._stored_value(
                    practitioner_id, "pending_balance_cents"
                )
                logger.critical(
                    "Refund exceeds pending balance",
                    extra={
                        "practitioner_id": str(practitioner_id),
                        "amount_cents": amount_cents,
                        "pending_balance_cents": available,
                    },
                )
                raise InsufficientPendingFunds(practitioner_id, amount_cents, available)

            snapshot = WalletLedger._snapshot(practitioner_id)

        logger.info(
            "Pending balance reversed",
            extra={
                "practitioner_id": str(practitioner_id),
                "amount_cents": amount_cents,
                "pending_balance_cents": snapshot.pending_balance_cents,
            },
        )
        return snapshot

    @staticmethod
    def debit_available(practitioner_id, amount_cents: int) -> WalletSnapshot:
        """
        Withdraw from the available balance.

        Raises:
            InvalidAmount: If amount_cents is not a positive integer
            InsufficientFunds: If available balance is below amount_cents;
                the balance is left unchanged
        """
        WalletLedger._validate_amount(amount_cents)

        with transaction.atomic():
            now = timezone.now()
            updated = Wallet.objects.filter(
                practitioner_id=practitioner_id,
                balance_cents__gte=amount_cents,
            ).update(
                balance_cents=F("balance_cents") - amount_cents,
                last_withdrawal_at=now,
                updated_at=now,
            )

            if updated == 0:
                available = WalletLedger._stored_value(practitioner_id, "balance_cents")
                raise InsufficientFunds(practitioner_id, amount_cents, available or 0)

            snapshot = WalletLedger._snapshot(practitioner_id)

        logger.info(
            "Available balance debited",
            extra={
                "practitioner_id": str(practitioner_id),
                "amount_cents": amount_cents,
                "balance_cents": snapshot.balance_cents,
            },
        )
        return snapshot

    @staticmethod
    def credit_available(practitioner_id, amount_cents: int) -> WalletSnapshot:
        """
        Return funds to the available balance (failed payout reversal).

        Raises:
            InvalidAmount: If amount_cents is not a positive integer
        """
        WalletLedger._validate_amount(amount_cents)

        with transaction.atomic():
            WalletLedger.get_or_create(practitioner_id)
            Wallet.objects.filter(practitioner_id=practitioner_id).update(
                balance_cents=F("balance_cents") + amount_cents,
                updated_at=timezone.now(),
            )
            snapshot = WalletLedger._snapshot(practitioner_id)

        logger.info(
            "Available balance credited",
            extra={
                "practitioner_id": str(practitioner_id),
                "amount_cents": amount_cents,
                "balance_cents": snapshot.balance_cents,
            },
        )
        return snapshot


# Singleton for convenient imports
wallet_ledger = WalletLedger()
