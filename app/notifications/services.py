"""
Notification service layer.

NotificationService is the only entry point domain code uses to tell a
person something happened. It never raises: scheduling or enqueue failures
are logged and swallowed so a completed financial transaction is never
reported as failed because an email could not be queued.

Delivery is deferred with transaction.on_commit, so a notification for a
rolled-back transaction is never sent. Outside a transaction the callback
runs immediately.

Usage:
    from notifications.services import NotificationService

    NotificationService.payment_confirmed(
        recipient_email=patient.email,
        recipient_name=patient.get_full_name(),
        amount_display="20,000.00 NGN",
        scheduled_at=appointment.scheduled_at,
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction

from core.services import BaseService

from notifications.tasks import send_email_notification

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)


def format_amount(amount_cents: int, currency: str) -> str:
    """Render minor units as a human amount, e.g. 1800000 -> '18,000.00 NGN'."""
    return f"{amount_cents / 100:,.2f} {currency.upper()}"


class NotificationService(BaseService):
    """
    Fire-and-forget notification port.

    All methods are classmethods and return None.
    """

    @classmethod
    def notify(cls, recipient_email: str, subject: str, message: str) -> None:
        """
        Queue an email for delivery after the current transaction commits.

        Args:
            recipient_email: Destination address
            subject: Email subject line
            message: Plain-text body
        """

        def enqueue():
            try:
                send_email_notification.delay(
                    recipient_email=recipient_email,
                    subject=subject,
                    message=message,
                )
            except Exception:
                # Broker outage must not surface to the request that triggered it
                cls.get_logger().exception(
                    "Failed to enqueue email notification",
                    extra={"recipient": recipient_email, "subject": subject},
                )

        try:
            transaction.on_commit(enqueue)
        except Exception:
            cls.get_logger().exception(
                "Failed to schedule email notification",
                extra={"recipient": recipient_email, "subject": subject},
            )

    # =========================================================================
    # Domain messages
    # =========================================================================

    @classmethod
    def payment_confirmed(
        cls,
        recipient_email: str,
        recipient_name: str,
        amount_display: str,
        scheduled_at: datetime,
    ) -> None:
        cls.notify(
            recipient_email,
            "Payment Confirmed - HealthMe",
            (
                f"Hello {recipient_name},\n\n"
                f"We received your payment of {amount_display} for your "
                f"appointment on {scheduled_at:%d %b %Y at %H:%M} UTC. "
                "The fee is held securely until your consultation is completed.\n"
            ),
        )

    @classmethod
    def funds_released(
        cls,
        recipient_email: str,
        recipient_name: str,
        amount_display: str,
    ) -> None:
        cls.notify(
            recipient_email,
            "Funds Released - HealthMe",
            (
                f"Hello {recipient_name},\n\n"
                f"{amount_display} from a completed consultation is now "
                "available in your wallet for withdrawal.\n"
            ),
        )

    @classmethod
    def appointment_confirmed(
        cls,
        recipient_email: str,
        recipient_name: str,
        scheduled_at: datetime,
    ) -> None:
        cls.notify(
            recipient_email,
            "Appointment Confirmed - HealthMe",
            (
                f"Hello {recipient_name},\n\n"
                "Your practitioner confirmed your appointment on "
                f"{scheduled_at:%d %b %Y at %H:%M} UTC.\n"
            ),
        )

    @classmethod
    def appointment_cancelled(
        cls,
        recipient_email: str,
        recipient_name: str,
        scheduled_at: datetime,
        reason: str,
    ) -> None:
        body = (
            f"Hello {recipient_name},\n\n"
            f"The appointment on {scheduled_at:%d %b %Y at %H:%M} UTC was cancelled."
        )
        if reason:
            body += f"\nReason: {reason}"
        cls.notify(recipient_email, "Appointment Cancelled - HealthMe", body + "\n")

    @classmethod
    def payout_processed(
        cls,
        recipient_email: str,
        recipient_name: str,
        amount_display: str,
        status: str,
    ) -> None:
        cls.notify(
            recipient_email,
            "Withdrawal Update - HealthMe",
            (
                f"Hello {recipient_name},\n\n"
                f"Your withdrawal of {amount_display} is now {status}.\n"
            ),
        )
