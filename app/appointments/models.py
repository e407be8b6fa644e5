"""
Appointment model and its state machine.

An Appointment links one patient to one practitioner for a scheduled
consultation. Its status is an FSMField driven only through the transition
methods below; persistence of a transition goes through
core.locking.compare_and_swap so concurrent requests cannot both apply.

Usage:
    from appointments.models import Appointment
    from appointments.states import AppointmentStatus

    appointment = Appointment.objects.create(
        patient=patient,
        practitioner=practitioner,
        scheduled_at=timezone.now() + timedelta(days=2),
    )

    appointment.mark_paid()  # booked -> paid (webhook only)
    appointment.confirm()  # paid -> practitioner_confirmed
    appointment.complete(notes="Follow up in 2 weeks")

Note:
    Appointments are never hard-deleted. Cancellation is a state.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import RETURN_VALUE, FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from appointments.states import AppointmentStatus, ConsultationType


class Appointment(UUIDPrimaryKeyMixin, BaseModel):
    """
    A consultation booked by a patient with a practitioner.

    State Flow:
        BOOKED -> PAID -> PRACTITIONER_CONFIRMED -> COMPLETED
        BOOKED/PAID/PRACTITIONER_CONFIRMED -> CANCELLED

    Fields:
        patient: Booking patient (immutable)
        practitioner: Assigned practitioner (immutable)
        scheduled_at: Start of the consultation
        duration_minutes: Length of the consultation
        consultation_type: Video, in-person or phone
        status: Current FSM state
        cancellation_reason / cancelled_by / cancelled_at: Cancellation record
        completion_notes / completion_image_url: Evidence of service delivery
        practitioner_confirmed_at: When the practitioner accepted the booking
        patient_confirmed_at: When the patient acknowledged completion
        completed_at: When the practitioner marked the service delivered
        version: Compare-and-swap version
    """

    # ==========================================================================
    # Participants
    # ==========================================================================

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="patient_appointments",
        help_text="Patient who booked the appointment",
    )

    practitioner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="practitioner_appointments",
        help_text="Practitioner delivering the consultation",
    )

    # ==========================================================================
    # Schedule
    # ==========================================================================

    scheduled_at = models.DateTimeField(
        db_index=True,
        help_text="Start time of the consultation",
    )

    duration_minutes = models.PositiveSmallIntegerField(
        default=30,
        help_text="Consultation length in minutes",
    )

    consultation_type = models.CharField(
        max_length=20,
        choices=ConsultationType.choices,
        default=ConsultationType.VIDEO,
        help_text="How the consultation takes place",
    )

    notes = models.TextField(
        blank=True,
        default="",
        help_text="Patient's notes for the practitioner",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=AppointmentStatus.BOOKED,
        choices=AppointmentStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the appointment (managed by FSM)",
    )

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for compare-and-swap updates",
    )

    # ==========================================================================
    # Cancellation
    # ==========================================================================

    cancellation_reason = models.TextField(
        blank=True,
        default="",
        help_text="Reason given when the appointment was cancelled",
    )

    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="Participant who cancelled the appointment",
    )

    cancelled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the appointment was cancelled",
    )

    # ==========================================================================
    # Completion Evidence & Confirmations
    # ==========================================================================

    completion_notes = models.TextField(
        blank=True,
        default="",
        help_text="Practitioner's note describing the delivered service",
    )

    completion_image_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Optional image evidencing service delivery",
    )

    practitioner_confirmed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the practitioner confirmed the booking",
    )

    patient_confirmed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the patient acknowledged the completed service",
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the service was marked completed",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-scheduled_at"]
        verbose_name = "Appointment"
        verbose_name_plural = "Appointments"
        indexes = [
            models.Index(fields=["patient", "status"], name="appt_patient_status_idx"),
            models.Index(
                fields=["practitioner", "status"], name="appt_practitioner_status_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(patient=F("practitioner")),
                name="appointment_distinct_participants",
            ),
            models.CheckConstraint(
                condition=Q(duration_minutes__gt=0),
                name="appointment_duration_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Appointment({self.id}, {self.status}, {self.scheduled_at:%Y-%m-%d %H:%M})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_participants = (instance.patient_id, instance.practitioner_id)
        return instance

    def save(self, *args, **kwargs):
        """Refuse to persist a change of patient or practitioner."""
        loaded = getattr(self, "_loaded_participants", None)
        if loaded is not None and loaded != (self.patient_id, self.practitioner_id):
            raise ValueError("Appointment participants cannot be changed")
        super().save(*args, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.status in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=AppointmentStatus.BOOKED,
        target=AppointmentStatus.PAID,
    )
    def mark_paid(self):
        """
        Record that the consultation fee is held in escrow.

        Transition: BOOKED -> PAID

        Only the webhook reconciliation handler calls this, after the charge
        has been verified with the gateway.
        """
        pass

    @transition(
        field=status,
        source=AppointmentStatus.PAID,
        target=AppointmentStatus.PRACTITIONER_CONFIRMED,
    )
    def confirm(self):
        """
        Practitioner accepts the paid booking.

        Transition: PAID -> PRACTITIONER_CONFIRMED
        """
        self.practitioner_confirmed_at = timezone.now()

    @transition(
        field=status,
        source=AppointmentStatus.PRACTITIONER_CONFIRMED,
        target=AppointmentStatus.COMPLETED,
    )
    def complete(self, notes: str = "", image_url: str = ""):
        """
        Practitioner marks the service delivered.

        Transition: PRACTITIONER_CONFIRMED -> COMPLETED

        The caller must release the escrowed share in the same transaction.

        Args:
            notes: Free-text evidence of delivery
            image_url: Optional image reference
        """
        self.completed_at = timezone.now()
        self.completion_notes = notes
        self.completion_image_url = image_url

    @transition(
        field=status,
        source=AppointmentStatus.active(),
        target=AppointmentStatus.CANCELLED,
    )
    def cancel(self, by, reason: str = ""):
        """
        Cancel the appointment.

        Transition: BOOKED/PAID/PRACTITIONER_CONFIRMED -> CANCELLED

        Args:
            by: Participant cancelling
            reason: Cancellation reason (required for patients, enforced by
                the service layer)
        """
        self.cancelled_by = by
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()

    @transition(
        field=status,
        source=AppointmentStatus.active(),
        target=RETURN_VALUE(AppointmentStatus.BOOKED, AppointmentStatus.PAID),
    )
    def reschedule(self, scheduled_at):
        """
        Move the appointment to a new time.

        Transition: BOOKED -> BOOKED, PAID/PRACTITIONER_CONFIRMED -> PAID

        A practitioner confirmation applies to the old time only, so it is
        cleared and the practitioner must confirm again.

        Returns:
            The target status
        """
        self.scheduled_at = scheduled_at
        self.practitioner_confirmed_at = None
        if self.status == AppointmentStatus.BOOKED:
            return AppointmentStatus.BOOKED
        return AppointmentStatus.PAID
