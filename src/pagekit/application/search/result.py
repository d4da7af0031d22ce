"""Application search – SearchResult and PageInfo."""
from __future__ import annotations

import dataclasses
import math
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

__all__ = ["PageInfo", "SearchResult"]


@dataclasses.dataclass(frozen=True)
class PageInfo:
    """Continuation metadata of a cursor page.

    ``None`` means unknown: a forward page does not look behind itself.
    """

    has_next: bool | None = None
    next_cursor: str | None = None
    has_previous: bool | None = None
    previous_cursor: str | None = None


@dataclasses.dataclass(frozen=True)
class SearchResult(Generic[T]):
    """One page of results.

    Offset pages carry ``page``/``page_size`` (and ``total`` when requested);
    cursor pages carry ``page_info`` instead.
    """

    items: list[T]
    total: int | None = None
    page: int | None = None
    page_size: int | None = None
    page_info: PageInfo | None = None

    @property
    def total_pages(self) -> int | None:
        if self.total is None or not self.page_size:
            return None
        return math.ceil(self.total / self.page_size)

    def map(self, fn: Callable[[T], Any]) -> "SearchResult[Any]":
        """Return a new result with each item transformed by *fn*."""
        return dataclasses.replace(self, items=[fn(item) for item in self.items])
