"""
Appointments application.

Owns the appointment lifecycle state machine and the participant
capability check. Fund movement triggered by lifecycle changes is delegated
to payments.services.EscrowReleaseEngine.

Usage:
    from appointments.models import Appointment, AppointmentStatus
    from appointments.services import AppointmentLifecycleService
"""
