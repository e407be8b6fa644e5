"""
Participant capability checks for appointments.

Every lifecycle action is owned by one side of the appointment. Instead of
comparing role strings in each handler, callers resolve the principal's
ParticipantRole for the appointment once and check it.

Usage:
    from appointments.permissions import ParticipantRole, require_party

    role = require_party(request.user, appointment)
    require_party(request.user, appointment, ParticipantRole.PRACTITIONER)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

from appointments.exceptions import Forbidden

if TYPE_CHECKING:
    from appointments.models import Appointment


class ParticipantRole(models.TextChoices):
    """The two sides of an appointment."""

    PATIENT = "patient", "Patient"
    PRACTITIONER = "practitioner", "Practitioner"


def party_role(principal, appointment: Appointment) -> ParticipantRole | None:
    """
    Return the principal's side of the appointment, or None for outsiders.

    Matching is by user id only. A user's global role is not consulted, so
    an admin is an outsider unless booked on the appointment.
    """
    principal_id = getattr(principal, "pk", None)
    if principal_id is None:
        return None
    if principal_id == appointment.patient_id:
        return ParticipantRole.PATIENT
    if principal_id == appointment.practitioner_id:
        return ParticipantRole.PRACTITIONER
    return None


def is_party(principal, appointment: Appointment) -> bool:
    return party_role(principal, appointment) is not None


def require_party(
    principal,
    appointment: Appointment,
    role: ParticipantRole | None = None,
) -> ParticipantRole:
    """
    Resolve the principal's side, enforcing an optional required side.

    Raises:
        Forbidden: Principal is not a party, or is the wrong party
    """
    actual = party_role(principal, appointment)
    if actual is None:
        raise Forbidden(
            "You are not a participant in this appointment",
            details={"appointment_id": str(appointment.pk)},
        )
    if role is not None and actual != role:
        raise Forbidden(
            f"Only the {role.label.lower()} can perform this action",
            details={
                "appointment_id": str(appointment.pk),
                "required_role": role.value,
            },
        )
    return actual
