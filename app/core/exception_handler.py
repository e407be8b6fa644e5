"""
DRF exception handler for domain errors.

Maps the core.exceptions hierarchy onto HTTP status codes so views can let
service exceptions propagate instead of repeating try/except blocks.

Status mapping:
    ValidationError      -> 400
    PermissionDeniedError -> 403
    NotFoundError        -> 404
    ConflictError        -> 409 (unless the subclass sets http_status)
    ExternalServiceError -> 502, generic body
    InvariantViolation   -> 500, generic body

Configured via REST_FRAMEWORK["EXCEPTION_HANDLER"].
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    InvariantViolation,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
    (InvariantViolation, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

GATEWAY_UNAVAILABLE_MESSAGE = "Payment service unavailable, please retry."
INTERNAL_ERROR_MESSAGE = "An internal error occurred. The operation was not applied."


def status_for(exc: BaseApplicationError) -> int:
    """Return the HTTP status for a domain error."""
    explicit = getattr(exc, "http_status", None)
    if explicit:
        return explicit
    for error_class, code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return code
    return status.HTTP_400_BAD_REQUEST


def application_exception_handler(exc, context):
    """
    Render BaseApplicationError subclasses; defer everything else to DRF.
    """
    if not isinstance(exc, BaseApplicationError):
        return drf_exception_handler(exc, context)

    view = context.get("view")
    log_extra = {
        "error_code": exc.error_code,
        "view": view.__class__.__name__ if view else None,
        **exc.details,
    }

    if isinstance(exc, ExternalServiceError):
        logger.error(f"Upstream failure: {exc}", extra=log_extra)
        body = {"error": GATEWAY_UNAVAILABLE_MESSAGE, "error_code": exc.error_code}
    elif isinstance(exc, InvariantViolation):
        # Already logged at CRITICAL where raised
        body = {"error": INTERNAL_ERROR_MESSAGE, "error_code": exc.error_code}
    else:
        body = exc.to_dict()

    return Response(body, status=status_for(exc))
