"""
Tests for AppointmentViewSet.

Covers role gating, party scoping and the error envelope of lifecycle
actions. Money movement is covered in test_services and the payments
integration tests.
"""

import uuid
from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from appointments.models import Appointment
from appointments.states import AppointmentStatus
from appointments.tests.factories import AppointmentFactory

LIST_URL = reverse("appointments:appointment-list")


def detail_url(appointment_id, action=None):
    if action is None:
        return reverse("appointments:appointment-detail", args=[appointment_id])
    return reverse(f"appointments:appointment-{action}", args=[appointment_id])


class TestBooking:
    def test_patient_books(self, api_client, patient, practitioner):
        api_client.force_authenticate(user=patient)
        scheduled_at = timezone.now() + timedelta(days=2)

        response = api_client.post(
            LIST_URL,
            {
                "practitioner_id": practitioner.id,
                "scheduled_at": scheduled_at.isoformat(),
                "consultation_type": "phone",
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == AppointmentStatus.BOOKED
        assert response.data["practitioner"]["id"] == practitioner.id
        assert response.data["practitioner"]["name"] == "Tunde Bello"
        assert Appointment.objects.filter(patient=patient).count() == 1

    def test_practitioner_cannot_book(self, api_client, practitioner):
        api_client.force_authenticate(user=practitioner)

        response = api_client.post(
            LIST_URL,
            {
                "practitioner_id": practitioner.id,
                "scheduled_at": (timezone.now() + timedelta(days=2)).isoformat(),
            },
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_past_time_is_400(self, api_client, patient, practitioner):
        api_client.force_authenticate(user=patient)

        response = api_client.post(
            LIST_URL,
            {
                "practitioner_id": practitioner.id,
                "scheduled_at": (timezone.now() - timedelta(days=1)).isoformat(),
            },
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_SCHEDULE"

    def test_unauthenticated(self, api_client, db):
        assert api_client.get(LIST_URL).status_code == status.HTTP_401_UNAUTHORIZED


class TestReading:
    def test_list_is_scoped_to_caller(self, api_client, patient):
        own = AppointmentFactory(patient=patient)
        AppointmentFactory()
        api_client.force_authenticate(user=patient)

        response = api_client.get(LIST_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [item["id"] for item in response.data] == [str(own.id)]

    def test_detail_for_party(self, api_client, practitioner):
        appointment = AppointmentFactory(practitioner=practitioner)
        api_client.force_authenticate(user=practitioner)

        response = api_client.get(detail_url(appointment.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == str(appointment.id)

    def test_detail_hidden_from_outsider(self, api_client, other_patient):
        appointment = AppointmentFactory()
        api_client.force_authenticate(user=other_patient)

        response = api_client.get(detail_url(appointment.id))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "APPOINTMENT_NOT_FOUND"


class TestLifecycleActions:
    def test_confirm(self, api_client, practitioner):
        appointment = AppointmentFactory(
            practitioner=practitioner, status=AppointmentStatus.PAID
        )
        api_client.force_authenticate(user=practitioner)

        response = api_client.post(detail_url(appointment.id, "confirm"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == AppointmentStatus.PRACTITIONER_CONFIRMED

    def test_patient_confirm_is_403(self, api_client, patient):
        appointment = AppointmentFactory(patient=patient, status=AppointmentStatus.PAID)
        api_client.force_authenticate(user=patient)

        response = api_client.post(detail_url(appointment.id, "confirm"))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "FORBIDDEN"

    def test_confirm_unpaid_is_409(self, api_client, practitioner):
        appointment = AppointmentFactory(practitioner=practitioner)
        api_client.force_authenticate(user=practitioner)

        response = api_client.post(detail_url(appointment.id, "confirm"))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "INVALID_STATE_TRANSITION"

    def test_complete_with_evidence(self, api_client, practitioner):
        appointment = AppointmentFactory(
            practitioner=practitioner, status=AppointmentStatus.PRACTITIONER_CONFIRMED
        )
        api_client.force_authenticate(user=practitioner)

        response = api_client.post(
            detail_url(appointment.id, "complete"),
            {"notes": "Prescribed rest", "image_url": "https://cdn.example.com/n.png"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["completion_image_url"] == "https://cdn.example.com/n.png"

    def test_patient_cancel_without_reason_is_400(self, api_client, patient):
        appointment = AppointmentFactory(patient=patient)
        api_client.force_authenticate(user=patient)

        response = api_client.post(detail_url(appointment.id, "cancel"), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "CANCELLATION_REASON_REQUIRED"

    def test_patient_cancel_with_reason(self, api_client, patient):
        appointment = AppointmentFactory(patient=patient)
        api_client.force_authenticate(user=patient)

        response = api_client.post(
            detail_url(appointment.id, "cancel"), {"reason": "Travelling"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == AppointmentStatus.CANCELLED
        assert response.data["cancellation_reason"] == "Travelling"

    def test_outsider_transition_is_403(self, api_client, other_patient):
        appointment = AppointmentFactory()
        api_client.force_authenticate(user=other_patient)

        response = api_client.post(
            detail_url(appointment.id, "cancel"), {"reason": "x"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reschedule(self, api_client, patient):
        appointment = AppointmentFactory(patient=patient, status=AppointmentStatus.PAID)
        api_client.force_authenticate(user=patient)
        new_time = timezone.now() + timedelta(days=10)

        response = api_client.post(
            detail_url(appointment.id, "reschedule"),
            {"scheduled_at": new_time.isoformat()},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == AppointmentStatus.PAID
        assert Appointment.objects.get(pk=appointment.pk).scheduled_at == new_time

    def test_acknowledge(self, api_client, patient):
        appointment = AppointmentFactory(patient=patient, status=AppointmentStatus.COMPLETED)
        api_client.force_authenticate(user=patient)

        response = api_client.post(detail_url(appointment.id, "acknowledge"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["patient_confirmed_at"] is not None

    def test_unknown_appointment_is_404(self, api_client, practitioner):
        api_client.force_authenticate(user=practitioner)

        response = api_client.post(detail_url(uuid.uuid4(), "confirm"))

        assert response.status_code == status.HTTP_404_NOT_FOUND
