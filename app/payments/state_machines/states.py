"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration,
driven by django-fsm transitions on the models.

State Machines Overview:

Payment States:
    initiated → held → completed (escrow released to the practitioner)
    initiated → held → refunded (appointment cancelled before completion)

Payout States:
    requested → processing → completed
    requested → processing → failed (wallet re-credited)
    requested → completed / failed (processed in one step)
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    Escrow states of a Payment.

    Terminal states: COMPLETED, REFUNDED

    Records are inserted directly in HELD by the webhook handler;
    INITIATED exists for checkouts recorded before confirmation.
    """

    INITIATED = "initiated", "Initiated"
    HELD = "held", "Held"
    COMPLETED = "completed", "Completed"
    REFUNDED = "refunded", "Refunded"


class PayoutStatus(models.TextChoices):
    """
    States for the Payout model lifecycle.

    Terminal states: COMPLETED, FAILED

    The wallet is debited when the payout is REQUESTED and re-credited
    when it becomes FAILED.
    """

    REQUESTED = "requested", "Requested"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
