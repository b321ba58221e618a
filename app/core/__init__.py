"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code that provides a foundation
for the domain apps:

- Generic, reusable base classes (no domain-specific logic)
- Clear extension points for domain apps
- Infrastructure concerns separated from business logic

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - NotFoundError: Resource not found
    - ConflictError: State conflicts (duplicates, etc.)
    - ExternalServiceError: Third-party service failures

Helpers (import from core.helpers):
    - validate_uuid: UUID validation
    - get_client_ip: Client IP extraction from request

Note:
    - Business logic should NOT go here. Extend core classes in your domain apps.
    - Django models and model mixins are NOT imported here to avoid AppRegistryNotReady
      errors. Import them directly from their modules.
"""

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
)

# Helpers (no Django model dependencies)
from .helpers import get_client_ip, validate_uuid

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "NotFoundError",
    "ConflictError",
    "ExternalServiceError",
    # Helpers
    "validate_uuid",
    "get_client_ip",
]
