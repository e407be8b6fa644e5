"""
Celery tasks for notification delivery.

Tasks:
    send_email_notification: Deliver a plain-text email

Design:
    - Tasks receive primitive arguments only (JSON serializer)
    - SMTP/connection errors are retried with exponential backoff
    - The final failure is logged; nothing is re-raised to the caller of
      NotificationService, which has already returned
"""

from __future__ import annotations

import logging
import smtplib

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)

MAX_EMAIL_RETRIES = 3

# Errors worth retrying: the mail server or network may recover
TRANSIENT_EMAIL_ERRORS = (smtplib.SMTPException, ConnectionError, TimeoutError)


@shared_task(
    bind=True,
    autoretry_for=TRANSIENT_EMAIL_ERRORS,
    retry_backoff=True,
    retry_backoff_max=600,
    retry_kwargs={"max_retries": MAX_EMAIL_RETRIES},
)
def send_email_notification(
    self,
    recipient_email: str,
    subject: str,
    message: str,
) -> bool:
    """
    Send a plain-text email.

    Args:
        recipient_email: Destination address
        subject: Email subject line
        message: Plain-text body

    Returns:
        True if the backend accepted the message, False if skipped
    """
    if not recipient_email:
        logger.info("Email notification skipped: no recipient address")
        return False

    logger.info(
        "Sending email notification",
        extra={
            "recipient": recipient_email,
            "subject": subject,
            "attempt": self.request.retries + 1,
        },
    )

    sent = send_mail(
        subject=subject,
        message=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient_email],
        fail_silently=False,
    )

    logger.info(
        "Email notification sent",
        extra={"recipient": recipient_email, "subject": subject},
    )
    return bool(sent)
