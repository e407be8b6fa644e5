"""
Infrastructure endpoints that sit outside the business domain.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Report database and cache connectivity for load balancers and probes.

    The database is required; a cache outage only degrades the report.

    Returns:
        200 with {"status": "healthy", ...} when the database answers,
        503 with {"status": "unhealthy", ...} otherwise.
    """
    report = {"status": "healthy", "database": "connected", "cache": "connected"}

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        report["database"] = "disconnected"
        report["status"] = "unhealthy"

    # django-redis is configured with IGNORE_EXCEPTIONS, so an outage shows up
    # as a cache miss rather than an exception.
    cache.set("health_check", "ok", timeout=1)
    if cache.get("health_check") != "ok":
        report["cache"] = "disconnected"

    status_code = 200 if report["status"] == "healthy" else 503
    return JsonResponse(report, status=status_code)
