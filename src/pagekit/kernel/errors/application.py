"""Application-layer errors – faults in how the library is wired or configured."""

from __future__ import annotations

from pagekit.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


__all__ = ["ApplicationError"]
