"""
Appointment lifecycle exceptions.

Exception Hierarchy:
    AppointmentNotFound (NotFoundError) - Appointment absent or hidden
    Forbidden (PermissionDeniedError) - Principal is not the right party
    AlreadyCompleted (ConflictError) - Completion requested twice
    MissingCancellationReason (ValidationError) - Patient cancelled silently
    InvalidSchedule (ValidationError) - Booking time in the past

Invalid transitions raise core.exceptions.InvalidStateTransitionError.
"""

from __future__ import annotations

from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class AppointmentNotFound(NotFoundError):
    default_error_code = "APPOINTMENT_NOT_FOUND"

    def __init__(self, appointment_id):
        super().__init__(
            "Appointment not found",
            details={"appointment_id": str(appointment_id)},
        )


class Forbidden(PermissionDeniedError):
    """
    Raised when the acting principal may not perform a transition.

    Either the principal is not a party to the appointment, or is a party
    whose role does not own the action (e.g. a patient confirming).
    """

    default_error_code = "FORBIDDEN"


class AlreadyCompleted(ConflictError):
    """
    Raised when completion is requested for a completed appointment.

    Checked before any escrow logic runs so a repeated request can never
    trigger a second release.
    """

    default_error_code = "ALREADY_COMPLETED"

    def __init__(self, appointment_id):
        super().__init__(
            "Appointment is already completed",
            details={"appointment_id": str(appointment_id)},
        )


class MissingCancellationReason(ValidationError):
    default_error_code = "CANCELLATION_REASON_REQUIRED"


class InvalidSchedule(ValidationError):
    default_error_code = "INVALID_SCHEDULE"
