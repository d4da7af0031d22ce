"""Application search – SearchEngine: offset and keyset pagination over a QueryableSource."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pagekit.application.pagination.cursor import CursorSigner, CursorToken, sort_fingerprint
from pagekit.application.pagination.params import normalize_pagination
from pagekit.application.pagination.policy import enforce_bounds
from pagekit.application.pagination.sort import AllowlistSortResolver, SortResolver
from pagekit.application.pagination.types import (
    DEFAULT_MAX_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    CursorParams,
    OffsetParams,
    SortDirection,
    SortParam,
)
from pagekit.application.search.predicates import Comparison, TextMatch, build_keyset_predicate, column_value
from pagekit.application.search.query import SearchOptions, SearchParams
from pagekit.application.search.result import PageInfo, SearchResult
from pagekit.application.search.source import QueryableSource
from pagekit.kernel.errors import CursorKeyUnavailableError, InvalidCursorError, SortFieldNotAllowedError
from pagekit.observability.logging import get_logger

T = TypeVar("T")

_log = get_logger(__name__)

__all__ = ["SearchEngine"]


def _key_value(row: Any, field: str, column: str) -> Any:
    """Read a cursor key by its storage column, falling back to the logical field."""
    value = column_value(row, column.rpartition(".")[2])
    if value is None and column != field:
        value = column_value(row, field)
    return value


class SearchEngine(Generic[T]):
    """Turn :class:`SearchParams` + :class:`SearchOptions` into a :class:`SearchResult`.

    Offset mode orders the rows, applies ``LIMIT``/``OFFSET`` and optionally
    counts. Cursor mode verifies the incoming cursor, narrows the rows with
    the keyset predicate, fetches ``limit + 1`` rows to learn whether more
    exist and signs a cursor for the last row of the page.

    Failures raised by *source* propagate unchanged.
    """

    def __init__(
        self,
        sort_resolver: SortResolver,
        cursor_signer: CursorSigner,
        source: QueryableSource,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ) -> None:
        self._resolver = sort_resolver
        self._signer = cursor_signer
        self._source = source
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    @classmethod
    def for_options(
        cls,
        options: SearchOptions,
        cursor_signer: CursorSigner,
        source: QueryableSource,
        **kwargs: Any,
    ) -> "SearchEngine[Any]":
        """Engine whose sort resolver is the allowlist in *options*."""
        return cls(AllowlistSortResolver(options.allowed_fields), cursor_signer, source, **kwargs)

    async def search(self, params: SearchParams, options: SearchOptions) -> SearchResult[T]:
        source = self._apply_text_search(self._source, params.query, options)
        source = self._apply_filters(source, params.filters, options)

        pagination = enforce_bounds(
            normalize_pagination(
                params.pagination,
                default_sorts=options.default_sorts,
                default_page_size=self._default_page_size,
            ),
            self._max_page_size,
        )
        sorts = self._resolver.normalize_sorts(
            pagination.sorts,
            allowed=tuple(options.allowed_fields),
            defaults=options.default_sorts,
            tie_breaker=options.tie_breaker,
        )
        columns = self._columns(sorts)

        if isinstance(pagination, OffsetParams):
            return await self._offset_page(source, pagination, sorts, columns, options)
        return await self._cursor_page(source, pagination, sorts, columns, options)

    # ------------------------------------------------------------------
    # Query plan pieces
    # ------------------------------------------------------------------

    def _columns(self, sorts: tuple[SortParam, ...]) -> tuple[str, ...]:
        columns = [self._resolver.resolve_column(s.field) for s in sorts]
        rejected = [s.field for s, c in zip(sorts, columns) if c is None]
        if rejected:
            raise SortFieldNotAllowedError(rejected)
        return tuple(c for c in columns if c is not None)

    def _apply_text_search(
        self, source: QueryableSource, query: str | None, options: SearchOptions
    ) -> QueryableSource:
        if query is None or not options.text_searchable_columns:
            return source
        term = query.strip()
        if not term or len(term) < options.min_query_length:
            return source
        return source.where(TextMatch(options.text_searchable_columns, term, options.search_mode))

    def _apply_filters(
        self, source: QueryableSource, filters: Mapping[str, Any], options: SearchOptions
    ) -> QueryableSource:
        allowed = set(options.allowed_filters)
        for field, value in filters.items():
            if field not in allowed:
                continue
            column = self._resolver.resolve_column(field)
            if column is None:
                continue
            if options.normalize_filter_value is not None:
                value = options.normalize_filter_value(field, value)
            source = source.where(Comparison(column, "=", value))
        return source

    # ------------------------------------------------------------------
    # Offset mode
    # ------------------------------------------------------------------

    async def _offset_page(
        self,
        source: QueryableSource,
        params: OffsetParams,
        sorts: tuple[SortParam, ...],
        columns: tuple[str, ...],
        options: SearchOptions,
    ) -> SearchResult[T]:
        directions = [s.direction for s in sorts]
        page_query = source.order_by(columns, directions).offset(params.offset).limit(params.page_size)
        items = await page_query.fetch()

        total: int | None = None
        if params.with_total:
            total = await source.unordered().count(options.count_distinct_by)

        _log.debug(
            "search.offset",
            page=params.page,
            page_size=params.page_size,
            sort=[s.field for s in sorts],
            items=len(items),
            total=total,
        )
        return SearchResult(items=list(items), total=total, page=params.page, page_size=params.page_size)

    # ------------------------------------------------------------------
    # Cursor (keyset) mode
    # ------------------------------------------------------------------

    def _decode(self, cursor: str, sorts: tuple[SortParam, ...]) -> CursorToken:
        token = self._signer.verify(cursor)
        if token.fields != tuple(s.field for s in sorts) or token.fingerprint != sort_fingerprint(sorts):
            raise InvalidCursorError("Cursor does not match the requested sort order", reason="sort_mismatch")
        return token

    def _token_for(
        self,
        row: Any,
        sorts: tuple[SortParam, ...],
        columns: tuple[str, ...],
        options: SearchOptions,
    ) -> CursorToken:
        keys: list[tuple[str, Any]] = []
        for sort, column in zip(sorts, columns):
            accessor = options.accessors.get(sort.field)
            value = accessor(row) if accessor is not None else _key_value(row, sort.field, column)
            if value is None:
                raise CursorKeyUnavailableError(sort.field)
            keys.append((sort.field, value))
        return CursorToken(keys=tuple(keys), fingerprint=sort_fingerprint(sorts))

    async def _cursor_page(
        self,
        source: QueryableSource,
        params: CursorParams,
        sorts: tuple[SortParam, ...],
        columns: tuple[str, ...],
        options: SearchOptions,
    ) -> SearchResult[T]:
        if params.after and params.before:
            raise InvalidCursorError("after and before are mutually exclusive", reason="conflicting_cursors")

        # empty strings count as absent cursors
        backward = bool(params.before)
        cursor = params.before if backward else params.after
        directions: list[SortDirection] = [s.direction for s in sorts]
        query = source.order_by(columns, [d.reversed() for d in directions] if backward else directions)

        if cursor:
            token = self._decode(cursor, sorts)
            query = query.where(build_keyset_predicate(columns, directions, token.values, backward=backward))

        rows = list(await query.limit(params.limit + 1).fetch())
        has_more = len(rows) > params.limit
        items = rows[: params.limit]

        def sign(row: Any) -> str:
            return self._signer.sign(self._token_for(row, sorts, columns, options))

        if backward:
            items.reverse()
            page_info = PageInfo(
                has_next=True if items else None,
                next_cursor=sign(items[-1]) if items else None,
                has_previous=has_more,
                previous_cursor=sign(items[0]) if has_more else None,
            )
        else:
            # resuming with ``after`` means the cursor row precedes this page
            resumed = bool(cursor)
            page_info = PageInfo(
                has_next=has_more,
                next_cursor=sign(items[-1]) if has_more else None,
                has_previous=True if resumed else None,
                previous_cursor=sign(items[0]) if resumed and items else None,
            )

        _log.debug(
            "search.cursor",
            limit=params.limit,
            direction="backward" if backward else "forward",
            resumed=bool(cursor),
            sort=[s.field for s in sorts],
            items=len(items),
            has_next=page_info.has_next,
        )
        return SearchResult(items=items, page_info=page_info)
