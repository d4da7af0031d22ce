"""Infrastructure errors – I/O failures raised by queryable sources."""

from __future__ import annotations

from pagekit.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


__all__ = ["InfrastructureError"]
