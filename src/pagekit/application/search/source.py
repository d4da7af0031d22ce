"""Application search – QueryableSource port and InMemorySource."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pagekit.application.pagination.types import SortDirection
from pagekit.application.search.predicates import Predicate, column_value

T = TypeVar("T")
S = TypeVar("S", bound="QueryableSource")


@runtime_checkable
class QueryableSource(Protocol):
    """Port: a generative query over rows.

    Every builder method returns a new source and leaves the receiver
    unchanged, so a base source can be reused for the page query and the
    count query of the same request.
    """

    def where(self: S, predicate: Predicate) -> S: ...
    def order_by(self: S, columns: Sequence[str], directions: Sequence[SortDirection]) -> S: ...
    def limit(self: S, count: int) -> S: ...
    def offset(self: S, count: int) -> S: ...
    def unordered(self: S) -> S: ...
    async def fetch(self) -> list[Any]: ...
    async def count(self, distinct_by: str | None = None) -> int: ...


class InMemorySource(Generic[T]):
    """Queryable source over a list of mappings or plain objects.

    Columns are looked up as mapping keys or attributes. ``None`` sorts
    before any other value in ascending order.
    """

    def __init__(self, rows: Iterable[T]) -> None:
        self._rows: tuple[T, ...] = tuple(rows)
        self._predicates: tuple[Predicate, ...] = ()
        self._ordering: tuple[tuple[str, SortDirection], ...] = ()
        self._limit: int | None = None
        self._offset = 0

    def _copy(self, **changes: Any) -> InMemorySource[T]:
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        for name, value in changes.items():
            setattr(clone, f"_{name}", value)
        return clone

    def where(self, predicate: Predicate) -> InMemorySource[T]:
        return self._copy(predicates=(*self._predicates, predicate))

    def order_by(self, columns: Sequence[str], directions: Sequence[SortDirection]) -> InMemorySource[T]:
        if len(columns) != len(directions):
            raise ValueError("columns and directions must have the same length")
        return self._copy(ordering=tuple(zip(columns, directions)))

    def limit(self, count: int) -> InMemorySource[T]:
        return self._copy(limit=count)

    def offset(self, count: int) -> InMemorySource[T]:
        return self._copy(offset=count)

    def unordered(self) -> InMemorySource[T]:
        return self._copy(ordering=(), limit=None, offset=0)

    def _filtered(self) -> list[T]:
        return [r for r in self._rows if all(p.matches(r) for p in self._predicates)]

    async def fetch(self) -> list[T]:
        rows = self._filtered()
        for column, direction in reversed(self._ordering):
            rows.sort(
                key=lambda r, c=column: (column_value(r, c) is not None, column_value(r, c)),
                reverse=direction is SortDirection.DESC,
            )
        end = None if self._limit is None else self._offset + self._limit
        return rows[self._offset:end]

    async def count(self, distinct_by: str | None = None) -> int:
        rows = self._filtered()
        if distinct_by is None:
            return len(rows)
        return len({column_value(r, distinct_by) for r in rows})


__all__ = ["InMemorySource", "QueryableSource"]
