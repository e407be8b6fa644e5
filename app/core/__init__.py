"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps. No business logic lives
here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for expected outcomes

Exceptions (import from core.exceptions):
    - BaseApplicationError and its HTTP-mapped subclasses

Exception handler (core.exception_handler):
    - application_exception_handler: DRF handler for domain errors

Note:
    Django models and model mixins are NOT imported here to avoid
    AppRegistryNotReady errors. Import them directly from their modules.
"""

from .services import BaseService, ServiceResult

from .exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    InvalidStateTransitionError,
    InvariantViolation,
    NotFoundError,
    PermissionDeniedError,
    StaleRecordError,
    ValidationError,
)

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
    "ExternalServiceError",
    "InvariantViolation",
    "StaleRecordError",
    "InvalidStateTransitionError",
]
