"""
Tests for notification Celery tasks.
"""

import smtplib

from notifications.tasks import TRANSIENT_EMAIL_ERRORS, send_email_notification


class TestSendEmailNotification:
    def test_sends_plain_text_email(self, mailoutbox, settings):
        settings.DEFAULT_FROM_EMAIL = "noreply@healthme.test"

        sent = send_email_notification(
            recipient_email="ada@example.com",
            subject="Payment Confirmed - HealthMe",
            message="Hello Ada",
        )

        assert sent is True
        assert len(mailoutbox) == 1
        email = mailoutbox[0]
        assert email.to == ["ada@example.com"]
        assert email.from_email == "noreply@healthme.test"
        assert email.body == "Hello Ada"

    def test_skips_missing_recipient(self, mailoutbox):
        sent = send_email_notification(recipient_email="", subject="S", message="M")

        assert sent is False
        assert mailoutbox == []

    def test_smtp_errors_are_retried(self):
        assert issubclass(smtplib.SMTPServerDisconnected, TRANSIENT_EMAIL_ERRORS)
        assert send_email_notification.autoretry_for == TRANSIENT_EMAIL_ERRORS
