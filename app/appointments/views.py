"""
Views for the appointments API.

ViewSets:
    AppointmentViewSet: Booking, listing and lifecycle actions

Endpoints:
    GET  /api/v1/appointments/                    - List own appointments
    POST /api/v1/appointments/                    - Book (patient)
    GET  /api/v1/appointments/{id}/               - Detail (404 for non-party)
    POST /api/v1/appointments/{id}/confirm/       - Confirm (practitioner)
    POST /api/v1/appointments/{id}/complete/      - Complete + release escrow (practitioner)
    POST /api/v1/appointments/{id}/cancel/        - Cancel (either party)
    POST /api/v1/appointments/{id}/reschedule/    - Reschedule (patient)
    POST /api/v1/appointments/{id}/acknowledge/   - Acknowledge completion (patient)

Domain errors raised by AppointmentLifecycleService are rendered by
core.exception_handler.
"""

from __future__ import annotations

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view

from appointments.serializers import (
    AppointmentSerializer,
    BookAppointmentSerializer,
    CancelAppointmentSerializer,
    CompleteAppointmentSerializer,
    RescheduleAppointmentSerializer,
)
from appointments.services import AppointmentLifecycleService
from authentication.permissions import IsPatient


@extend_schema_view(
    list=extend_schema(
        operation_id="list_appointments",
        summary="List appointments",
        description="Appointments where the caller is the patient or the practitioner.",
        tags=["Appointments"],
    ),
    retrieve=extend_schema(
        operation_id="get_appointment",
        summary="Get appointment",
        responses={
            200: AppointmentSerializer,
            404: OpenApiResponse(description="Not found or not a participant"),
        },
        tags=["Appointments"],
    ),
)
class AppointmentViewSet(
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for appointment operations.

    Permissions:
    - All endpoints require authentication
    - Booking requires the patient role
    - Lifecycle actions check the caller's side of the appointment
    """

    permission_classes = [IsAuthenticated]
    serializer_class = AppointmentSerializer
    service_class = AppointmentLifecycleService
    lookup_value_regex = "[0-9a-fA-F-]{32,36}"

    def get_service(self) -> AppointmentLifecycleService:
        return self.service_class()

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated(), IsPatient()]
        return super().get_permissions()

    def get_queryset(self):
        return self.get_service().list_for(self.request.user)

    def _respond(self, appointment, status_code=status.HTTP_200_OK):
        return Response(AppointmentSerializer(appointment).data, status=status_code)

    def retrieve(self, request, pk=None):
        appointment = self.get_service().get_for_party(request.user, pk)
        return self._respond(appointment)

    @extend_schema(
        operation_id="book_appointment",
        summary="Book appointment",
        request=BookAppointmentSerializer,
        responses={201: AppointmentSerializer},
        tags=["Appointments"],
    )
    def create(self, request):
        serializer = BookAppointmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        appointment = self.get_service().book(
            patient=request.user,
            **serializer.validated_data,
        )
        return self._respond(appointment, status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="confirm_appointment",
        summary="Confirm appointment",
        description="Practitioner accepts a paid booking.",
        request=None,
        responses={200: AppointmentSerializer},
        tags=["Appointments - Lifecycle"],
    )
    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):
        return self._respond(self.get_service().confirm(request.user, pk))

    @extend_schema(
        operation_id="complete_appointment",
        summary="Complete appointment",
        description=(
            "Practitioner marks the consultation delivered. The escrowed share "
            "is released to the practitioner's wallet in the same transaction."
        ),
        request=CompleteAppointmentSerializer,
        responses={
            200: AppointmentSerializer,
            409: OpenApiResponse(description="Already completed or not confirmed"),
        },
        tags=["Appointments - Lifecycle"],
    )
    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        serializer = CompleteAppointmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        appointment = self.get_service().complete(
            request.user,
            pk,
            notes=serializer.validated_data["notes"],
            image_url=serializer.validated_data["image_url"],
        )
        return self._respond(appointment)

    @extend_schema(
        operation_id="cancel_appointment",
        summary="Cancel appointment",
        description="Either party cancels. Patients must give a reason.",
        request=CancelAppointmentSerializer,
        responses={200: AppointmentSerializer},
        tags=["Appointments - Lifecycle"],
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        serializer = CancelAppointmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        appointment = self.get_service().cancel(
            request.user, pk, reason=serializer.validated_data["reason"]
        )
        return self._respond(appointment)

    @extend_schema(
        operation_id="reschedule_appointment",
        summary="Reschedule appointment",
        request=RescheduleAppointmentSerializer,
        responses={200: AppointmentSerializer},
        tags=["Appointments - Lifecycle"],
    )
    @action(detail=True, methods=["post"])
    def reschedule(self, request, pk=None):
        serializer = RescheduleAppointmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        appointment = self.get_service().reschedule(
            request.user, pk, serializer.validated_data["scheduled_at"]
        )
        return self._respond(appointment)

    @extend_schema(
        operation_id="acknowledge_appointment",
        summary="Acknowledge completed appointment",
        request=None,
        responses={200: AppointmentSerializer},
        tags=["Appointments - Lifecycle"],
    )
    @action(detail=True, methods=["post"])
    def acknowledge(self, request, pk=None):
        return self._respond(self.get_service().acknowledge(request.user, pk))
