"""
URL configuration for the HealthMe escrow backend.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/token/            - Obtain JWT pair (simplejwt)
    /api/v1/auth/token/refresh/    - Refresh JWT
    /api/v1/appointments/          - Appointment endpoints
        {id}/                      - Appointment detail
        {id}/confirm/              - Practitioner confirms
        {id}/complete/             - Practitioner completes (releases escrow)
        {id}/cancel/               - Either party cancels
        {id}/reschedule/           - Patient reschedules
        {id}/acknowledge/          - Patient acknowledges completion
    /api/v1/payments/              - Payment endpoints
        initiate/                  - Create Flutterwave checkout
        webhooks/flutterwave/      - Flutterwave webhook endpoint (POST)
        wallet/                    - Practitioner wallet
        withdrawals/               - Practitioner withdrawals
        admin/payouts/pending/     - Payouts awaiting processing
        admin/payouts/{id}/process/ - Record payout outcome

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication (simplejwt)
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # Appointments
    path("appointments/", include("appointments.urls")),
    # Payments
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "HealthMe Admin"
admin.site.site_title = "HealthMe Admin Portal"
admin.site.index_title = "Escrow & Payouts"
