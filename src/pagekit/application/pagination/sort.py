"""Application pagination – SortResolver port, AllowlistSortResolver, tie-breaker helpers."""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from pagekit.application.pagination.types import SortDirection, SortParam, TieBreaker
from pagekit.kernel.errors import SortFieldNotAllowedError


@runtime_checkable
class SortResolver(Protocol):
    """Port: map client sort fields to safe storage columns."""

    def resolve_column(self, field: str) -> str | None: ...

    def normalize_sorts(
        self,
        sorts: Sequence[SortParam],
        *,
        allowed: Iterable[str] | None = None,
        defaults: Sequence[SortParam] = (),
        tie_breaker: TieBreaker | None = None,
    ) -> tuple[SortParam, ...]: ...


def dedupe_sorts(sorts: Iterable[SortParam]) -> tuple[SortParam, ...]:
    """Collapse repeated fields; the last occurrence wins and keeps its position."""
    seen: set[str] = set()
    kept: list[SortParam] = []
    for sort in reversed(list(sorts)):
        if sort.field not in seen:
            seen.add(sort.field)
            kept.append(sort)
    return tuple(reversed(kept))


def ensure_tie_breaker(
    sorts: Sequence[SortParam],
    tie_breaker: TieBreaker | None,
) -> tuple[SortParam, ...]:
    """Append the tie-breaker field unless it is already part of *sorts*.

    The appended direction follows the ``primary`` field when present, then
    the first sort entry, then ``ASC``.
    """
    sorts = tuple(sorts)
    if tie_breaker is None:
        return sorts
    if any(s.field == tie_breaker.tie_breaker for s in sorts):
        return sorts

    direction = next(
        (s.direction for s in sorts if s.field == tie_breaker.primary),
        sorts[0].direction if sorts else SortDirection.ASC,
    )
    return (*sorts, SortParam(tie_breaker.tie_breaker, direction))


class AllowlistSortResolver:
    """Resolve sort fields against a server-authored ``field -> column`` map.

    The allowlist is the only injection defence: a field that is not a key of
    *allowed_fields* never reaches the query, and callers must reject the
    request (see :meth:`require_columns`) rather than silently drop it.
    """

    def __init__(self, allowed_fields: Mapping[str, str]) -> None:
        self._columns: Mapping[str, str] = MappingProxyType(dict(allowed_fields))

    @property
    def allowed(self) -> tuple[str, ...]:
        return tuple(self._columns)

    def resolve_column(self, field: str) -> str | None:
        return self._columns.get(field)

    def require_columns(self, sorts: Iterable[SortParam]) -> tuple[str, ...]:
        """Resolve every sort or raise :class:`SortFieldNotAllowedError` naming all offenders."""
        sorts = tuple(sorts)
        rejected = [s.field for s in sorts if self.resolve_column(s.field) is None]
        if rejected:
            raise SortFieldNotAllowedError(rejected)
        return tuple(self._columns[s.field] for s in sorts)

    def normalize_sorts(
        self,
        sorts: Sequence[SortParam],
        *,
        allowed: Iterable[str] | None = None,
        defaults: Sequence[SortParam] = (),
        tie_breaker: TieBreaker | None = None,
    ) -> tuple[SortParam, ...]:
        allowed_set = set(self._columns if allowed is None else allowed)
        filtered = dedupe_sorts(s for s in sorts if s.field in allowed_set)
        base = filtered or tuple(defaults)
        return ensure_tie_breaker(base, tie_breaker)


__all__ = ["AllowlistSortResolver", "SortResolver", "dedupe_sorts", "ensure_tie_breaker"]
