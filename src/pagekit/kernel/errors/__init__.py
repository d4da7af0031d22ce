"""Kernel error hierarchy: public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError                  (domain.py)
    │   └── ValidationError
    │       ├── InvalidCursorError         (pagination.py)
    │       └── SortFieldNotAllowedError   (pagination.py)
    ├── ApplicationError             (application.py)
    │   └── CursorKeyUnavailableError      (pagination.py)
    └── InfrastructureError          (infrastructure.py)
        └── QueryFailedError               (pagination.py)
"""

from pagekit.kernel.errors.application import ApplicationError
from pagekit.kernel.errors.base import BaseError
from pagekit.kernel.errors.domain import DomainError, ValidationError
from pagekit.kernel.errors.infrastructure import InfrastructureError
from pagekit.kernel.errors.pagination import (
    CursorKeyUnavailableError,
    InvalidCursorError,
    PaginationErrorCode,
    QueryFailedError,
    SortFieldNotAllowedError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "CursorKeyUnavailableError",
    "DomainError",
    "InfrastructureError",
    "InvalidCursorError",
    "PaginationErrorCode",
    "QueryFailedError",
    "SortFieldNotAllowedError",
    "ValidationError",
]
