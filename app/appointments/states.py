"""
State enums for the appointment model.

Appointment States:
    booked → paid → practitioner_confirmed → completed
    booked/paid/practitioner_confirmed → cancelled
    paid/practitioner_confirmed → paid (reschedule)
    booked → booked (reschedule)

There is exactly one lifecycle. Rescheduling is an operation that keeps an
unpaid booking booked and sends a paid one back to paid so the practitioner
confirms the new time; it is not a state of its own.
"""

from django.db import models


class AppointmentStatus(models.TextChoices):
    """
    States for the Appointment model lifecycle.

    Terminal states: COMPLETED, CANCELLED

    State Flow:
        BOOKED → PAID                    (verified gateway charge, webhook only)
        PAID → PRACTITIONER_CONFIRMED    (practitioner)
        PRACTITIONER_CONFIRMED → COMPLETED (practitioner, releases escrow)

    Cancellation Flow:
        BOOKED/PAID/PRACTITIONER_CONFIRMED → CANCELLED (either party)
    """

    BOOKED = "booked", "Booked"
    PAID = "paid", "Paid"
    PRACTITIONER_CONFIRMED = "practitioner_confirmed", "Practitioner Confirmed"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"

    @classmethod
    def active(cls) -> list[str]:
        """States from which cancellation and rescheduling are allowed."""
        return [cls.BOOKED, cls.PAID, cls.PRACTITIONER_CONFIRMED]

    @classmethod
    def funded(cls) -> list[str]:
        """States in which a held payment exists for the appointment."""
        return [cls.PAID, cls.PRACTITIONER_CONFIRMED]


class ConsultationType(models.TextChoices):
    VIDEO = "video", "Video"
    IN_PERSON = "in_person", "In-person"
    PHONE = "phone", "Phone"
