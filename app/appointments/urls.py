"""
URL configuration for the appointments API.

Routes:
    /                       - List (GET), book (POST)
    /{id}/                  - Detail (GET)
    /{id}/confirm/          - Practitioner confirmation (POST)
    /{id}/complete/         - Completion and escrow release (POST)
    /{id}/cancel/           - Cancellation (POST)
    /{id}/reschedule/       - Reschedule (POST)
    /{id}/acknowledge/      - Patient acknowledgment (POST)
"""

from rest_framework.routers import DefaultRouter

from appointments.views import AppointmentViewSet

router = DefaultRouter()
router.register(r"", AppointmentViewSet, basename="appointment")

app_name = "appointments"
urlpatterns = router.urls
