"""Application pagination – SortDirection, SortParam, OffsetParams, CursorParams."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, ClassVar, TypeAlias

DEFAULT_PAGE_SIZE = 20
DEFAULT_MAX_PAGE_SIZE = 100


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, raw: Any) -> "SortDirection":
        """Accept any casing; anything other than ``desc`` means ascending."""
        if isinstance(raw, SortDirection):
            return raw
        return cls.DESC if str(raw or "").strip().upper() == "DESC" else cls.ASC

    def reversed(self) -> "SortDirection":
        return SortDirection.ASC if self is SortDirection.DESC else SortDirection.DESC


class PaginationMode(str, Enum):
    OFFSET = "OFFSET"
    CURSOR = "CURSOR"


@dataclasses.dataclass(frozen=True)
class SortParam:
    """Single sort criterion on a logical (client-facing) field name."""
    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", SortDirection.parse(self.direction))


@dataclasses.dataclass(frozen=True)
class TieBreaker:
    """Unique column appended to the sort so the composite order is total."""
    primary: str
    tie_breaker: str

    def __post_init__(self) -> None:
        if self.primary == self.tie_breaker:
            raise ValueError("primary and tie_breaker must be different fields")


@dataclasses.dataclass(frozen=True)
class OffsetParams:
    """Offset-based pagination parameters."""
    mode: ClassVar[PaginationMode] = PaginationMode.OFFSET

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sorts: tuple[SortParam, ...] = ()
    with_total: bool = False

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")
        object.__setattr__(self, "sorts", tuple(self.sorts))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclasses.dataclass(frozen=True)
class CursorParams:
    """Keyset pagination parameters.

    ``after`` and ``before`` are opaque signed cursors; they are decoded by
    the search engine, never here.
    """
    mode: ClassVar[PaginationMode] = PaginationMode.CURSOR

    limit: int = DEFAULT_PAGE_SIZE
    after: str | None = None
    before: str | None = None
    sorts: tuple[SortParam, ...] = ()

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError("limit must be >= 1")
        object.__setattr__(self, "sorts", tuple(self.sorts))


PaginationParams: TypeAlias = OffsetParams | CursorParams


__all__ = [
    "DEFAULT_MAX_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE",
    "CursorParams",
    "OffsetParams",
    "PaginationMode",
    "PaginationParams",
    "SortDirection",
    "SortParam",
    "TieBreaker",
]
