"""
Notifications application.

Asynchronous notification port. Domain services call NotificationService
after (or inside) their transaction; delivery happens in a Celery task once
the transaction commits, and delivery failures never reach the caller.

Usage:
    from notifications.services import NotificationService

    NotificationService.notify(
        recipient_email=patient.email,
        subject="Payment Confirmed - HealthMe",
        message="Your payment was received.",
    )
"""
