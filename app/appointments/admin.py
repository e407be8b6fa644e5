"""
Django admin configuration for appointments.

Status is read-only: transitions must go through
AppointmentLifecycleService so escrow moves with them.
"""

from django.contrib import admin

from appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "patient",
        "practitioner",
        "scheduled_at",
        "consultation_type",
        "status",
    ]
    list_filter = ["status", "consultation_type"]
    search_fields = ["id", "patient__email", "practitioner__email"]
    date_hierarchy = "scheduled_at"
    readonly_fields = [
        "id",
        "patient",
        "practitioner",
        "status",
        "version",
        "cancelled_by",
        "cancelled_at",
        "practitioner_confirmed_at",
        "patient_confirmed_at",
        "completed_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-scheduled_at"]

    def has_delete_permission(self, request, obj=None):
        return False
