import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "scheduled_at",
                    models.DateTimeField(
                        db_index=True, help_text="Start time of the consultation"
                    ),
                ),
                (
                    "duration_minutes",
                    models.PositiveSmallIntegerField(
                        default=30, help_text="Consultation length in minutes"
                    ),
                ),
                (
                    "consultation_type",
                    models.CharField(
                        choices=[
                            ("video", "Video"),
                            ("in_person", "In-person"),
                            ("phone", "Phone"),
                        ],
                        default="video",
                        help_text="How the consultation takes place",
                        max_length=20,
                    ),
                ),
                (
                    "notes",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Patient's notes for the practitioner",
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("booked", "Booked"),
                            ("paid", "Paid"),
                            ("practitioner_confirmed", "Practitioner Confirmed"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="booked",
                        help_text="Current state of the appointment (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, help_text="Version for compare-and-swap updates"
                    ),
                ),
                (
                    "cancellation_reason",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Reason given when the appointment was cancelled",
                    ),
                ),
                (
                    "cancelled_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the appointment was cancelled",
                        null=True,
                    ),
                ),
                (
                    "completion_notes",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Practitioner's note describing the delivered service",
                    ),
                ),
                (
                    "completion_image_url",
                    models.URLField(
                        blank=True,
                        default="",
                        help_text="Optional image evidencing service delivery",
                        max_length=500,
                    ),
                ),
                (
                    "practitioner_confirmed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the practitioner confirmed the booking",
                        null=True,
                    ),
                ),
                (
                    "patient_confirmed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the patient acknowledged the completed service",
                        null=True,
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the service was marked completed",
                        null=True,
                    ),
                ),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Participant who cancelled the appointment",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        help_text="Patient who booked the appointment",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="patient_appointments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "practitioner",
                    models.ForeignKey(
                        help_text="Practitioner delivering the consultation",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="practitioner_appointments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Appointment",
                "verbose_name_plural": "Appointments",
                "ordering": ["-scheduled_at"],
                "indexes": [
                    models.Index(
                        fields=["patient", "status"],
                        name="appt_patient_status_idx",
                    ),
                    models.Index(
                        fields=["practitioner", "status"],
                        name="appt_practitioner_status_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("patient", models.F("practitioner")), _negated=True
                        ),
                        name="appointment_distinct_participants",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("duration_minutes__gt", 0)),
                        name="appointment_duration_positive",
                    ),
                ],
            },
        ),
    ]
