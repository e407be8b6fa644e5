"""
Tests for the Appointment model and its state machine.
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from appointments.models import Appointment
from appointments.states import AppointmentStatus
from appointments.tests.factories import AppointmentFactory
from authentication.tests.factories import PatientFactory


@pytest.mark.django_db
class TestAppointmentTransitions:
    def test_defaults_to_booked(self):
        appointment = AppointmentFactory()

        assert appointment.status == AppointmentStatus.BOOKED
        assert appointment.version == 1
        assert not appointment.is_terminal

    def test_happy_path(self):
        appointment = AppointmentFactory()

        appointment.mark_paid()
        appointment.confirm()
        appointment.complete(notes="Prescribed rest", image_url="https://cdn.test/x.png")

        assert appointment.status == AppointmentStatus.COMPLETED
        assert appointment.practitioner_confirmed_at is not None
        assert appointment.completed_at is not None
        assert appointment.completion_notes == "Prescribed rest"
        assert appointment.is_terminal

    def test_cannot_confirm_unpaid(self):
        appointment = AppointmentFactory()

        with pytest.raises(TransitionNotAllowed):
            appointment.confirm()

    def test_cannot_complete_without_confirmation(self):
        appointment = AppointmentFactory(status=AppointmentStatus.PAID)

        with pytest.raises(TransitionNotAllowed):
            appointment.complete()

    @pytest.mark.parametrize(
        "terminal", [AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED]
    )
    def test_terminal_states_cannot_cancel(self, terminal):
        appointment = AppointmentFactory(status=terminal)

        with pytest.raises(TransitionNotAllowed):
            appointment.cancel(by=appointment.patient, reason="late")

    def test_cancel_records_who_and_why(self):
        appointment = AppointmentFactory(status=AppointmentStatus.PAID)

        appointment.cancel(by=appointment.practitioner, reason="Emergency")

        assert appointment.status == AppointmentStatus.CANCELLED
        assert appointment.cancelled_by == appointment.practitioner
        assert appointment.cancellation_reason == "Emergency"
        assert appointment.cancelled_at is not None

    def test_status_cannot_be_assigned(self):
        appointment = AppointmentFactory()

        with pytest.raises(AttributeError):
            appointment.status = AppointmentStatus.COMPLETED


@pytest.mark.django_db
class TestReschedule:
    def test_booked_stays_booked(self):
        appointment = AppointmentFactory()
        new_time = timezone.now() + timedelta(days=5)

        appointment.reschedule(new_time)

        assert appointment.status == AppointmentStatus.BOOKED
        assert appointment.scheduled_at == new_time

    @pytest.mark.parametrize(
        "funded", [AppointmentStatus.PAID, AppointmentStatus.PRACTITIONER_CONFIRMED]
    )
    def test_funded_returns_to_paid(self, funded):
        """Should drop the practitioner's confirmation of the old time."""
        appointment = AppointmentFactory(
            status=funded, practitioner_confirmed_at=timezone.now()
        )

        appointment.reschedule(timezone.now() + timedelta(days=5))

        assert appointment.status == AppointmentStatus.PAID
        assert appointment.practitioner_confirmed_at is None

    def test_completed_cannot_reschedule(self):
        appointment = AppointmentFactory(status=AppointmentStatus.COMPLETED)

        with pytest.raises(TransitionNotAllowed):
            appointment.reschedule(timezone.now() + timedelta(days=5))


@pytest.mark.django_db
class TestAppointmentIntegrity:
    def test_participants_are_immutable(self):
        appointment = Appointment.objects.get(pk=AppointmentFactory().pk)
        appointment.patient = PatientFactory()

        with pytest.raises(ValueError):
            appointment.save()

    def test_patient_cannot_be_own_practitioner(self):
        user = PatientFactory()

        with pytest.raises(IntegrityError), transaction.atomic():
            AppointmentFactory(patient=user, practitioner=user)

    def test_ordered_by_schedule_descending(self):
        earlier = AppointmentFactory(scheduled_at=timezone.now() + timedelta(days=1))
        later = AppointmentFactory(scheduled_at=timezone.now() + timedelta(days=9))

        assert list(Appointment.objects.all()) == [later, earlier]
