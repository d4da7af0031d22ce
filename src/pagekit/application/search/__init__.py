"""Application search – search engine, expressions and queryable sources."""
from pagekit.application.search.engine import SearchEngine
from pagekit.application.search.predicates import (
    AllOf,
    AnyOf,
    Comparison,
    Predicate,
    TextMatch,
    TextSearchMode,
    build_keyset_predicate,
    column_value,
)
from pagekit.application.search.query import SearchOptions, SearchParams
from pagekit.application.search.result import PageInfo, SearchResult
from pagekit.application.search.source import InMemorySource, QueryableSource

__all__ = [
    "AllOf",
    "AnyOf",
    "Comparison",
    "InMemorySource",
    "PageInfo",
    "Predicate",
    "QueryableSource",
    "SearchEngine",
    "SearchOptions",
    "SearchParams",
    "SearchResult",
    "TextMatch",
    "TextSearchMode",
    "build_keyset_predicate",
    "column_value",
]
