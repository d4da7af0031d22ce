"""Application search – driver-neutral filter expressions and the keyset predicate.

Queryable sources translate these nodes into their own query language
(SQLAlchemy clauses, Python callables, …). Every node can also be evaluated
directly against a row with :meth:`matches`.
"""
from __future__ import annotations

import dataclasses
import operator
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Callable, Literal, TypeAlias

from pagekit.application.pagination.types import SortDirection

Operator = Literal["=", "!=", ">", ">=", "<", "<="]

OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


class TextSearchMode(str, Enum):
    ANY = "ANY"  # any column contains the term
    ALL = "ALL"  # every column contains the term


def column_value(row: Any, column: str) -> Any:
    """Read *column* from a mapping row or an attribute-bearing object."""
    if isinstance(row, Mapping):
        return row.get(column)
    return getattr(row, column, None)


@dataclasses.dataclass(frozen=True)
class Comparison:
    column: str
    op: Operator
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"unsupported operator {self.op!r}")

    def matches(self, row: Any) -> bool:
        current = column_value(row, self.column)
        # SQL semantics: any comparison involving NULL is not true.
        if current is None or self.value is None:
            return False
        return bool(OPERATORS[self.op](current, self.value))


@dataclasses.dataclass(frozen=True, init=False)
class AllOf:
    terms: tuple[Predicate, ...]

    def __init__(self, *terms: Predicate) -> None:
        object.__setattr__(self, "terms", terms)

    def matches(self, row: Any) -> bool:
        return all(t.matches(row) for t in self.terms)


@dataclasses.dataclass(frozen=True, init=False)
class AnyOf:
    terms: tuple[Predicate, ...]

    def __init__(self, *terms: Predicate) -> None:
        object.__setattr__(self, "terms", terms)

    def matches(self, row: Any) -> bool:
        return any(t.matches(row) for t in self.terms)


@dataclasses.dataclass(frozen=True)
class TextMatch:
    """Case-insensitive substring match of *term* over *columns*."""
    columns: tuple[str, ...]
    term: str
    mode: TextSearchMode = TextSearchMode.ANY

    def _contains(self, row: Any, column: str) -> bool:
        value = column_value(row, column)
        return value is not None and self.term.lower() in str(value).lower()

    def matches(self, row: Any) -> bool:
        hits = (self._contains(row, c) for c in self.columns)
        return all(hits) if self.mode is TextSearchMode.ALL else any(hits)


Predicate: TypeAlias = "Comparison | AllOf | AnyOf | TextMatch"


def build_keyset_predicate(
    columns: Sequence[str],
    directions: Sequence[SortDirection],
    values: Sequence[Any],
    *,
    backward: bool = False,
) -> AnyOf:
    """Build the "strictly after the cursor" predicate for a composite order.

    For columns ``c1..cn`` with last-seen values ``v1..vn``::

        (c1 ⋗ v1) OR (c1 = v1 AND c2 ⋗ v2) OR … OR (c1 = v1 AND … AND cn ⋗ vn)

    where ``⋗`` is ``>`` for ``ASC`` and ``<`` for ``DESC``. With
    ``backward=True`` the operators flip, selecting rows strictly before.
    """
    if not (len(columns) == len(directions) == len(values)) or not columns:
        raise ValueError("columns, directions and values must be non-empty and of equal length")

    clauses: list[Predicate] = []
    for i, (column, direction, value) in enumerate(zip(columns, directions, values)):
        ascending = (direction is SortDirection.ASC) != backward
        bound = Comparison(column, ">" if ascending else "<", value)
        prefix = [Comparison(c, "=", v) for c, v in zip(columns[:i], values[:i])]
        clauses.append(AllOf(*prefix, bound) if prefix else bound)
    return AnyOf(*clauses)


__all__ = [
    "OPERATORS",
    "AllOf",
    "AnyOf",
    "Comparison",
    "Operator",
    "Predicate",
    "TextMatch",
    "TextSearchMode",
    "build_keyset_predicate",
    "column_value",
]
