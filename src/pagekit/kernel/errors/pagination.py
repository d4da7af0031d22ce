"""Pagination errors – the closed set raised by the pagination and search engine."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pagekit.kernel.errors.application import ApplicationError
from pagekit.kernel.errors.domain import ValidationError
from pagekit.kernel.errors.infrastructure import InfrastructureError


class PaginationErrorCode(str, Enum):
    """Stable machine-readable codes carried by pagination errors."""

    INVALID_CURSOR = "INVALID_CURSOR"
    SORT_FIELD_NOT_ALLOWED = "SORT_FIELD_NOT_ALLOWED"
    CURSOR_KEY_UNAVAILABLE = "CURSOR_KEY_UNAVAILABLE"
    QUERY_FAILED = "QUERY_FAILED"


class InvalidCursorError(ValidationError):
    """The cursor is malformed, tampered with, or does not fit the sort spec.

    Always client-attributable; never retried.
    """

    default_code = PaginationErrorCode.INVALID_CURSOR.value

    def __init__(
        self,
        message: str = "Invalid cursor",
        *,
        reason: str = "malformed",
        **kwargs: Any,
    ) -> None:
        detail = dict(kwargs.pop("detail", None) or {})
        detail.setdefault("reason", reason)
        super().__init__(message, detail=detail, **kwargs)
        self.reason = reason


class SortFieldNotAllowedError(ValidationError):
    """One or more requested sort fields are not in the allowlist."""

    default_code = PaginationErrorCode.SORT_FIELD_NOT_ALLOWED.value

    def __init__(self, fields: list[str] | tuple[str, ...], **kwargs: Any) -> None:
        names = ", ".join(fields)
        super().__init__(
            f"Sort field(s) not allowed: {names}",
            errors=[{"field": f, "error": "not_allowed"} for f in fields],
            **kwargs,
        )
        self.fields = tuple(fields)


class CursorKeyUnavailableError(ApplicationError):
    """A fetched row has no usable value for a sort key, so no cursor can be built."""

    default_code = PaginationErrorCode.CURSOR_KEY_UNAVAILABLE.value

    def __init__(self, field: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message or f"Row has no value for cursor key '{field}'", **kwargs)
        self.field = field


class QueryFailedError(InfrastructureError):
    """The underlying data source failed to execute a query."""

    default_code = PaginationErrorCode.QUERY_FAILED.value

    def __init__(self, message: str = "Query execution failed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


__all__ = [
    "CursorKeyUnavailableError",
    "InvalidCursorError",
    "PaginationErrorCode",
    "QueryFailedError",
    "SortFieldNotAllowedError",
]
