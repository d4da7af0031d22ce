"""Application search – SearchOptions and SearchParams."""
from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable

from pagekit.application.pagination.types import PaginationParams, SortParam, TieBreaker
from pagekit.application.search.predicates import TextSearchMode

__all__ = ["SearchOptions", "SearchParams"]

_SAFE_COLUMN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


@dataclasses.dataclass(frozen=True)
class SearchOptions:
    """Server-authored search configuration for one list endpoint.

    ``allowed_fields`` maps client-facing field names to safe storage
    columns; it governs both sorting and filtering. ``accessors`` read a
    logical field from a fetched row when it is not available as a key or
    attribute of the same name (aliased or computed selects).
    """

    allowed_fields: Mapping[str, str]
    default_sorts: tuple[SortParam, ...]
    tie_breaker: TieBreaker | None = None
    text_searchable_columns: tuple[str, ...] = ()
    allowed_filters: tuple[str, ...] = ()
    min_query_length: int = 1
    search_mode: TextSearchMode = TextSearchMode.ANY
    accessors: Mapping[str, Callable[[Any], Any]] = dataclasses.field(default_factory=dict)
    normalize_filter_value: Callable[[str, Any], Any] | None = None
    count_distinct_by: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_fields", MappingProxyType(dict(self.allowed_fields)))
        object.__setattr__(self, "default_sorts", tuple(self.default_sorts))
        object.__setattr__(self, "text_searchable_columns", tuple(self.text_searchable_columns))
        object.__setattr__(self, "allowed_filters", tuple(self.allowed_filters))
        object.__setattr__(self, "accessors", MappingProxyType(dict(self.accessors)))

        if not self.default_sorts:
            raise ValueError("default_sorts must not be empty")
        unknown = [s.field for s in self.default_sorts if s.field not in self.allowed_fields]
        if self.tie_breaker is not None:
            unknown += [
                f for f in (self.tie_breaker.primary, self.tie_breaker.tie_breaker)
                if f not in self.allowed_fields
            ]
        if unknown:
            raise ValueError(f"fields missing from allowed_fields: {', '.join(unknown)}")
        if self.count_distinct_by is not None and not _SAFE_COLUMN.match(self.count_distinct_by):
            raise ValueError("count_distinct_by must be a plain column or alias.column")
        if self.min_query_length < 0:
            raise ValueError("min_query_length must be >= 0")


@dataclasses.dataclass(frozen=True)
class SearchParams:
    pagination: PaginationParams
    query: str | None = None
    filters: Mapping[str, Any] = dataclasses.field(default_factory=dict)
