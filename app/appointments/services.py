"""
Appointment lifecycle service.

AppointmentLifecycleService is the only writer of appointment state outside
the payment webhook. Each transition:

1. Locks the appointment row (SELECT ... FOR UPDATE)
2. Checks the principal's side of the appointment
3. Runs the django-fsm transition on the locked instance
4. Persists with a status- and version-guarded UPDATE

Money moves in the same transaction as the status write: completion
releases the escrowed share, and cancelling a funded appointment refunds
it. If the ledger refuses, the status write rolls back with it.

Usage:
    from appointments.services import AppointmentLifecycleService

    service = AppointmentLifecycleService()
    appointment = service.book(patient, practitioner, scheduled_at)
    service.confirm(practitioner, appointment.id)
    service.complete(practitioner, appointment.id, notes="Follow up in 2 weeks")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import Q
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from core.exceptions import InvalidStateTransitionError, NotFoundError, ValidationError
from core.locking import compare_and_swap, lock_for_update
from core.services import BaseService

from appointments.exceptions import (
    AlreadyCompleted,
    AppointmentNotFound,
    Forbidden,
    InvalidSchedule,
    MissingCancellationReason,
)
from appointments.models import Appointment
from appointments.permissions import ParticipantRole, party_role, require_party
from appointments.states import AppointmentStatus, ConsultationType
from notifications.services import NotificationService
from payments.services.escrow_release import EscrowReleaseEngine

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from django.db.models import QuerySet

    from authentication.models import User


class AppointmentLifecycleService(BaseService):
    """
    Books appointments and drives them through their lifecycle.

    The escrow engine and notification service are injectable for tests.
    """

    def __init__(
        self,
        escrow_engine: EscrowReleaseEngine | None = None,
        notifications: type[NotificationService] = NotificationService,
    ):
        self.escrow_engine = escrow_engine or EscrowReleaseEngine()
        self.notifications = notifications

    # =========================================================================
    # Booking & Queries
    # =========================================================================

    def book(
        self,
        patient: User,
        practitioner: User,
        scheduled_at: datetime,
        duration_minutes: int = 30,
        consultation_type: str = ConsultationType.VIDEO,
        notes: str = "",
    ) -> Appointment:
        """
        Create a BOOKED appointment.

        Raises:
            Forbidden: Caller is not a patient
            ValidationError: Selected user is not an active practitioner
            InvalidSchedule: scheduled_at is not in the future
        """
        if not patient.is_patient:
            raise Forbidden("Only patients can book appointments")
        if not practitioner.is_practitioner or not practitioner.is_active:
            raise ValidationError(
                "Selected user is not an available practitioner",
                error_code="INVALID_PRACTITIONER",
                details={"practitioner_id": str(practitioner.pk)},
            )
        if scheduled_at <= timezone.now():
            raise InvalidSchedule("Appointment must be scheduled in the future")

        appointment = Appointment.objects.create(
            patient=patient,
            practitioner=practitioner,
            scheduled_at=scheduled_at,
            duration_minutes=duration_minutes,
            consultation_type=consultation_type,
            notes=notes,
        )

        self.get_logger().info(
            "Appointment booked",
            extra={
                "appointment_id": str(appointment.id),
                "patient_id": str(patient.pk),
                "practitioner_id": str(practitioner.pk),
            },
        )
        return appointment

    def list_for(self, principal: User) -> QuerySet[Appointment]:
        """Appointments where the principal is patient or practitioner."""
        return (
            Appointment.objects.filter(Q(patient=principal) | Q(practitioner=principal))
            .select_related("patient", "practitioner")
            .order_by("-scheduled_at")
        )

    def get_for_party(self, principal: User, appointment_id: UUID) -> Appointment:
        """
        Fetch an appointment the principal takes part in.

        Raises:
            AppointmentNotFound: Missing, or the principal is not a party
        """
        appointment = self.list_for(principal).filter(pk=appointment_id).first()
        if appointment is None:
            raise AppointmentNotFound(appointment_id)
        return appointment

    # =========================================================================
    # Transitions
    # =========================================================================

    def confirm(self, principal: User, appointment_id: UUID) -> Appointment:
        """Practitioner accepts a paid booking (PAID -> PRACTITIONER_CONFIRMED)."""
        appointment = self._transition(
            principal,
            appointment_id,
            role=ParticipantRole.PRACTITIONER,
            action="confirm",
            apply=lambda appt: appt.confirm(),
            fields=["status", "practitioner_confirmed_at"],
        )

        patient = appointment.patient
        self.notifications.appointment_confirmed(
            recipient_email=patient.email,
            recipient_name=patient.get_full_name(),
            scheduled_at=appointment.scheduled_at,
        )
        return appointment

    def complete(
        self,
        principal: User,
        appointment_id: UUID,
        notes: str = "",
        image_url: str = "",
    ) -> Appointment:
        """
        Practitioner marks the service delivered and escrow is released.

        The status write and the release share one transaction.

        Raises:
            AlreadyCompleted: Appointment was already completed
            InsufficientPendingFunds: Ledger refused the release; nothing
                is persisted
        """

        def check_not_completed(appointment):
            if appointment.status == AppointmentStatus.COMPLETED:
                raise AlreadyCompleted(appointment.id)

        def after_write(appointment):
            self.escrow_engine.release(appointment.id)

        return self._transition(
            principal,
            appointment_id,
            role=ParticipantRole.PRACTITIONER,
            action="complete",
            apply=lambda appt: appt.complete(notes=notes, image_url=image_url),
            fields=["status", "completed_at", "completion_notes", "completion_image_url"],
            before=check_not_completed,
            after_write=after_write,
        )

    def cancel(self, principal: User, appointment_id: UUID, reason: str = "") -> Appointment:
        """
        Either party cancels; a funded appointment is refunded from escrow.

        Raises:
            MissingCancellationReason: Patient cancelled without a reason
        """
        reason = (reason or "").strip()
        was_funded = False

        def check_reason(appointment):
            nonlocal was_funded
            if party_role(principal, appointment) == ParticipantRole.PATIENT and not reason:
                raise MissingCancellationReason("A cancellation reason is required")
            was_funded = appointment.status in AppointmentStatus.funded()

        def after_write(appointment):
            if was_funded:
                self.escrow_engine.refund(appointment.id)

        appointment = self._transition(
            principal,
            appointment_id,
            role=None,
            action="cancel",
            apply=lambda appt: appt.cancel(by=principal, reason=reason),
            fields=["status", "cancelled_by", "cancellation_reason", "cancelled_at"],
            before=check_reason,
            after_write=after_write,
        )

        other = (
            appointment.practitioner
            if principal.pk == appointment.patient_id
            else appointment.patient
        )
        self.notifications.appointment_cancelled(
            recipient_email=other.email,
            recipient_name=other.get_full_name(),
            scheduled_at=appointment.scheduled_at,
            reason=reason,
        )
        return appointment

    def reschedule(
        self,
        principal: User,
        appointment_id: UUID,
        scheduled_at: datetime,
    ) -> Appointment:
        """
        Patient moves the appointment; a paid one must be re-confirmed.

        Raises:
            InvalidSchedule: scheduled_at is not in the future
        """
        if scheduled_at <= timezone.now():
            raise InvalidSchedule("Appointment must be scheduled in the future")

        return self._transition(
            principal,
            appointment_id,
            role=ParticipantRole.PATIENT,
            action="reschedule",
            apply=lambda appt: appt.reschedule(scheduled_at),
            fields=["status", "scheduled_at", "practitioner_confirmed_at"],
        )

    def acknowledge(self, principal: User, appointment_id: UUID) -> Appointment:
        """
        Patient acknowledges a completed consultation.

        Records patient_confirmed_at only; no state change, no money movement.
        Repeated calls keep the first timestamp.
        """
        with self.atomic():
            appointment = self._lock(appointment_id)
            require_party(principal, appointment, ParticipantRole.PATIENT)

            if appointment.status != AppointmentStatus.COMPLETED:
                raise InvalidStateTransitionError(
                    "Only completed appointments can be acknowledged",
                    details={
                        "appointment_id": str(appointment.id),
                        "current_status": appointment.status,
                        "action": "acknowledge",
                    },
                )

            if appointment.patient_confirmed_at is None:
                appointment.patient_confirmed_at = timezone.now()
                compare_and_swap(
                    appointment,
                    expected={"status": AppointmentStatus.COMPLETED},
                    fields=["patient_confirmed_at"],
                )

        return appointment

    # =========================================================================
    # Internals
    # =========================================================================

    def _lock(self, appointment_id: UUID) -> Appointment:
        try:
            return lock_for_update(Appointment, appointment_id)
        except NotFoundError as e:
            raise AppointmentNotFound(appointment_id) from e

    def _transition(
        self,
        principal: User,
        appointment_id: UUID,
        *,
        role: ParticipantRole | None,
        action: str,
        apply: Callable[[Appointment], object],
        fields: list[str],
        before: Callable[[Appointment], None] | None = None,
        after_write: Callable[[Appointment], None] | None = None,
    ) -> Appointment:
        """
        Lock, authorize, transition and persist one appointment.

        ``before`` runs after authorization and before the FSM transition;
        ``after_write`` runs after the guarded UPDATE, inside the same
        transaction.
        """
        logger = self.get_logger()

        with self.atomic():
            appointment = self._lock(appointment_id)
            require_party(principal, appointment, role)

            if before is not None:
                before(appointment)

            previous_status = appointment.status
            try:
                apply(appointment)
            except TransitionNotAllowed as e:
                raise InvalidStateTransitionError(
                    f"Cannot {action} appointment in '{previous_status}' status",
                    details={
                        "appointment_id": str(appointment.id),
                        "current_status": previous_status,
                        "action": action,
                    },
                ) from e

            compare_and_swap(
                appointment,
                expected={"status": previous_status},
                fields=fields,
            )

            if after_write is not None:
                after_write(appointment)

        logger.info(
            "Appointment transition applied",
            extra={
                "appointment_id": str(appointment.id),
                "action": action,
                "from_status": previous_status,
                "to_status": appointment.status,
                "principal_id": str(principal.pk),
            },
        )
        return appointment
