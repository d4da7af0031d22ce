"""Application pagination – params, sort resolution, cursor signing."""
from pagekit.application.pagination.cursor import (
    CursorSigner,
    CursorToken,
    HmacCursorSigner,
    RotatingCursorSigner,
    build_cursor_signer,
    sort_fingerprint,
)
from pagekit.application.pagination.params import normalize_pagination
from pagekit.application.pagination.parsing import parse_pagination, parse_sort_expression, parse_sorts
from pagekit.application.pagination.policy import enforce_bounds
from pagekit.application.pagination.sort import (
    AllowlistSortResolver,
    SortResolver,
    dedupe_sorts,
    ensure_tie_breaker,
)
from pagekit.application.pagination.types import (
    DEFAULT_MAX_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    CursorParams,
    OffsetParams,
    PaginationMode,
    PaginationParams,
    SortDirection,
    SortParam,
    TieBreaker,
)

__all__ = [
    "DEFAULT_MAX_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE",
    "AllowlistSortResolver",
    "CursorParams",
    "CursorSigner",
    "CursorToken",
    "HmacCursorSigner",
    "OffsetParams",
    "PaginationMode",
    "PaginationParams",
    "RotatingCursorSigner",
    "SortDirection",
    "SortParam",
    "SortResolver",
    "TieBreaker",
    "build_cursor_signer",
    "dedupe_sorts",
    "enforce_bounds",
    "ensure_tie_breaker",
    "normalize_pagination",
    "parse_pagination",
    "parse_sort_expression",
    "parse_sorts",
    "sort_fingerprint",
]
