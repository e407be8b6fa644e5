"""
Base exception classes for application-wide error handling.

Every domain error raised by a service inherits from BaseApplicationError so
that views and the DRF exception handler can render it uniformly.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Malformed or missing input (400)
    ├── NotFoundError - Resource absent or not visible to the caller (404)
    ├── PermissionDeniedError - Caller is not allowed to act (403)
    ├── ConflictError - Operation conflicts with current state (409)
    │   ├── StaleRecordError - Compare-and-swap lost to another writer
    │   └── InvalidStateTransitionError - FSM transition not allowed
    ├── ExternalServiceError - Third-party service failure (502)
    └── InvariantViolation - Internal bookkeeping broken (500)

Usage:
    from core.exceptions import ConflictError, NotFoundError

    raise NotFoundError(
        "Appointment not found",
        error_code="APPOINTMENT_NOT_FOUND",
        details={"appointment_id": str(appointment_id)},
    )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=400)

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, amounts, field errors)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Appointment not found",
                "error_code": "APPOINTMENT_NOT_FOUND",
                "details": {"appointment_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when service-layer input validation fails.

    For request body shape checks, use DRF serializer validation.
    Use this for rules only the service can evaluate (minimum amounts,
    required reasons, malformed gateway references).
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Also used when the resource exists but the caller has no relationship to
    it, so that its existence is not disclosed.
    """

    default_error_code: str = "NOT_FOUND"


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the principal lacks permission for an operation.

    For authentication failures (missing/invalid token), DRF's
    NotAuthenticated is used instead.
    """

    default_error_code: str = "PERMISSION_DENIED"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Covers duplicate inserts, invalid state transitions, optimistic
    locking failures and insufficient balances.
    """

    default_error_code: str = "CONFLICT"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    The original error is carried in details for logging; the API layer
    never returns it to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"


class InvariantViolation(BaseApplicationError):
    """
    Raised when stored state contradicts a bookkeeping invariant.

    Indicates a bug upstream rather than a caller mistake. Must be logged at
    CRITICAL and must abort the enclosing transaction.
    """

    default_error_code: str = "INVARIANT_VIOLATION"


class StaleRecordError(ConflictError):
    """
    Raised when a compare-and-swap update matches no row.

    Another writer changed the record (status or version) between the read
    and the conditional update. Callers may re-read and retry.
    """

    default_error_code: str = "STALE_RECORD"


class InvalidStateTransitionError(ConflictError):
    """
    Raised when a django-fsm transition is not allowed from the current state.

    Example:
        raise InvalidStateTransitionError(
            "Cannot confirm appointment in 'booked' status",
            details={"current_status": "booked", "action": "confirm"},
        )
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"
