"""
Serializers for the appointments API.

Serializers:
    AppointmentSerializer: Read-only appointment representation
    BookAppointmentSerializer: Booking request
    CompleteAppointmentSerializer: Completion evidence
    CancelAppointmentSerializer: Cancellation reason
    RescheduleAppointmentSerializer: New start time

Request serializers only check shape. Lifecycle rules (who may act, which
transitions are allowed) live in AppointmentLifecycleService.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from appointments.models import Appointment
from appointments.states import ConsultationType

User = get_user_model()


class ParticipantSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    email = serializers.EmailField(read_only=True)
    name = serializers.CharField(source="get_full_name", read_only=True)


class AppointmentSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for Appointment.

    Usage:
        serializer = AppointmentSerializer(appointment)
        serializer = AppointmentSerializer(appointments, many=True)
    """

    patient = ParticipantSerializer(read_only=True)
    practitioner = ParticipantSerializer(read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "patient",
            "practitioner",
            "scheduled_at",
            "duration_minutes",
            "consultation_type",
            "notes",
            "status",
            "cancellation_reason",
            "cancelled_at",
            "completion_notes",
            "completion_image_url",
            "practitioner_confirmed_at",
            "patient_confirmed_at",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookAppointmentSerializer(serializers.Serializer):
    practitioner_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        source="practitioner",
    )
    scheduled_at = serializers.DateTimeField()
    duration_minutes = serializers.IntegerField(min_value=5, max_value=480, default=30)
    consultation_type = serializers.ChoiceField(
        choices=ConsultationType.choices,
        default=ConsultationType.VIDEO,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CompleteAppointmentSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    image_url = serializers.URLField(
        required=False, allow_blank=True, default="", max_length=500
    )


class CancelAppointmentSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class RescheduleAppointmentSerializer(serializers.Serializer):
    scheduled_at = serializers.DateTimeField()
