"""Unit tests for the search engine, keyset predicates and InMemorySource."""
import asyncio
import dataclasses

import pytest

from pagekit.application.pagination import (
    CursorParams,
    HmacCursorSigner,
    OffsetParams,
    SortDirection,
    SortParam,
    TieBreaker,
)
from pagekit.application.search import (
    AllOf,
    AnyOf,
    Comparison,
    InMemorySource,
    QueryableSource,
    SearchEngine,
    SearchOptions,
    SearchParams,
    SearchResult,
    TextMatch,
    TextSearchMode,
    build_keyset_predicate,
)
from pagekit.kernel.errors import CursorKeyUnavailableError, InvalidCursorError, SortFieldNotAllowedError

NAMES = ["Ada", "Grace", "Linus", "Guido", "Barbara"]


def _people(n=25):
    return [
        {"id": i, "name": f"{NAMES[i % 5]} {i}", "age": 20 + (i % 7), "team": "core" if i % 2 else "web"}
        for i in range(1, n + 1)
    ]


def _options(**overrides):
    values = {
        "allowed_fields": {"id": "id", "name": "name", "age": "age", "team": "team"},
        "default_sorts": (SortParam("id"),),
        "tie_breaker": TieBreaker("age", "id"),
        "text_searchable_columns": ("name",),
        "allowed_filters": ("team",),
    }
    values.update(overrides)
    return SearchOptions(**values)


def _engine(rows=None, signer=None, **kwargs):
    options = kwargs.pop("options", None) or _options()
    source = InMemorySource(_people() if rows is None else rows)
    return SearchEngine.for_options(options, signer or HmacCursorSigner("secret"), source, **kwargs), options


def _search(engine, options, pagination, **kwargs):
    return asyncio.run(engine.search(SearchParams(pagination=pagination, **kwargs), options))


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class TestKeysetPredicate:
    def test_two_column_ascending(self):
        predicate = build_keyset_predicate(["age", "id"], [SortDirection.ASC, SortDirection.ASC], [30, 5])
        assert predicate.matches({"age": 30, "id": 6})
        assert predicate.matches({"age": 31, "id": 1})
        assert not predicate.matches({"age": 30, "id": 4})
        assert not predicate.matches({"age": 29, "id": 99})
        assert not predicate.matches({"age": 30, "id": 5})

    def test_shape(self):
        predicate = build_keyset_predicate(["age", "id"], [SortDirection.ASC, SortDirection.ASC], [30, 5])
        assert predicate == AnyOf(
            Comparison("age", ">", 30),
            AllOf(Comparison("age", "=", 30), Comparison("id", ">", 5)),
        )

    def test_descending_flips_operator(self):
        predicate = build_keyset_predicate(["age", "id"], [SortDirection.DESC, SortDirection.ASC], [30, 5])
        assert predicate.matches({"age": 29, "id": 1})
        assert predicate.matches({"age": 30, "id": 6})
        assert not predicate.matches({"age": 31, "id": 6})

    def test_backward(self):
        predicate = build_keyset_predicate(
            ["age", "id"], [SortDirection.ASC, SortDirection.ASC], [30, 5], backward=True
        )
        assert predicate.matches({"age": 30, "id": 4})
        assert predicate.matches({"age": 29, "id": 99})
        assert not predicate.matches({"age": 30, "id": 6})

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            build_keyset_predicate(["age", "id"], [SortDirection.ASC], [30, 5])

    def test_empty(self):
        with pytest.raises(ValueError):
            build_keyset_predicate([], [], [])


class TestExpressions:
    def test_comparison_with_null_is_false(self):
        assert not Comparison("age", ">", 1).matches({"age": None})
        assert not Comparison("age", "=", None).matches({"age": None})

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            Comparison("age", "LIKE", 1)  # type: ignore[arg-type]

    def test_attribute_rows(self):
        @dataclasses.dataclass
        class Row:
            age: int

        assert Comparison("age", ">=", 18).matches(Row(age=18))

    def test_text_match_modes(self):
        row = {"name": "Ada Lovelace", "team": "core"}
        assert TextMatch(("name", "team"), "ada").matches(row)
        assert not TextMatch(("name", "team"), "ada", TextSearchMode.ALL).matches(row)
        assert TextMatch(("name", "team"), "e", TextSearchMode.ALL).matches(row)


# ---------------------------------------------------------------------------
# InMemorySource
# ---------------------------------------------------------------------------


class TestInMemorySource:
    def test_is_queryable_source(self):
        assert isinstance(InMemorySource([]), QueryableSource)

    def test_generative(self):
        base = InMemorySource(_people(5))
        narrowed = base.where(Comparison("id", ">", 3))
        assert len(asyncio.run(base.fetch())) == 5
        assert len(asyncio.run(narrowed.fetch())) == 2

    def test_multi_column_order(self):
        rows = [{"a": 1, "b": 2}, {"a": 2, "b": 1}, {"a": 1, "b": 1}]
        ordered = InMemorySource(rows).order_by(["a", "b"], [SortDirection.DESC, SortDirection.ASC])
        assert asyncio.run(ordered.fetch()) == [{"a": 2, "b": 1}, {"a": 1, "b": 1}, {"a": 1, "b": 2}]

    def test_none_sorts_first(self):
        rows = [{"v": 2}, {"v": None}, {"v": 1}]
        ordered = InMemorySource(rows).order_by(["v"], [SortDirection.ASC])
        assert [r["v"] for r in asyncio.run(ordered.fetch())] == [None, 1, 2]

    def test_offset_limit(self):
        src = InMemorySource(_people(10)).order_by(["id"], [SortDirection.ASC]).offset(3).limit(2)
        assert [r["id"] for r in asyncio.run(src.fetch())] == [4, 5]

    def test_count_ignores_limit(self):
        src = InMemorySource(_people(10)).limit(2)
        assert asyncio.run(src.unordered().count()) == 10

    def test_count_distinct(self):
        assert asyncio.run(InMemorySource(_people(10)).count("team")) == 2


# ---------------------------------------------------------------------------
# SearchOptions
# ---------------------------------------------------------------------------


class TestSearchOptions:
    def test_requires_default_sorts(self):
        with pytest.raises(ValueError):
            _options(default_sorts=())

    def test_defaults_must_be_allowlisted(self):
        with pytest.raises(ValueError):
            _options(default_sorts=(SortParam("createdAt"),))

    def test_tie_breaker_must_be_allowlisted(self):
        with pytest.raises(ValueError):
            _options(tie_breaker=TieBreaker("age", "uuid"))

    def test_count_distinct_by_must_be_safe(self):
        with pytest.raises(ValueError):
            _options(count_distinct_by="id); DROP TABLE people; --")

    def test_allowlist_is_read_only(self):
        options = _options()
        with pytest.raises(TypeError):
            options.allowed_fields["password"] = "password"  # type: ignore[index]


# ---------------------------------------------------------------------------
# SearchEngine – offset mode
# ---------------------------------------------------------------------------


class TestSearchEngineOffset:
    def test_second_page_with_total(self):
        engine, options = _engine()
        result = _search(engine, options, OffsetParams(page=2, page_size=10, with_total=True))
        assert [r["id"] for r in result.items] == list(range(11, 21))
        assert result.total == 25
        assert result.page == 2
        assert result.page_size == 10
        assert result.total_pages == 3
        assert result.page_info is None

    def test_total_not_counted_by_default(self):
        engine, options = _engine()
        result = _search(engine, options, OffsetParams(page=1, page_size=5))
        assert result.total is None
        assert len(result.items) == 5

    def test_tie_breaker_makes_order_total(self):
        engine, options = _engine()
        result = _search(engine, options, OffsetParams(page_size=25, sorts=(SortParam("age", SortDirection.DESC),)))
        keys = [(r["age"], r["id"]) for r in result.items]
        assert keys == sorted(keys, key=lambda k: (-k[0], -k[1]))

    def test_page_size_clamped(self):
        engine, options = _engine(max_page_size=7)
        result = _search(engine, options, OffsetParams(page_size=50))
        assert result.page_size == 7
        assert len(result.items) == 7

    def test_disallowed_sort_falls_back_to_defaults(self):
        engine, options = _engine()
        result = _search(engine, options, OffsetParams(page_size=3, sorts=(SortParam("password"),)))
        assert [r["id"] for r in result.items] == [1, 2, 3]

    def test_unresolvable_default_sort(self):
        options = _options()
        engine = SearchEngine(_NoColumns(), HmacCursorSigner("secret"), InMemorySource(_people()))
        with pytest.raises(SortFieldNotAllowedError):
            _search(engine, options, OffsetParams())

    def test_text_search(self):
        engine, options = _engine()
        result = _search(engine, options, OffsetParams(page_size=25, with_total=True), query="  ada ")
        assert result.total == 5
        assert all(r["name"].startswith("Ada") for r in result.items)

    def test_short_query_ignored(self):
        engine, options = _engine(options=_options(min_query_length=3))
        result = _search(engine, options, OffsetParams(with_total=True), query="ad")
        assert result.total == 25

    def test_filters(self):
        engine, options = _engine()
        result = _search(
            engine, options, OffsetParams(page_size=25, with_total=True), filters={"team": "web", "age": 21}
        )
        assert result.total == 12
        assert {r["team"] for r in result.items} == {"web"}

    def test_filter_value_normalizer(self):
        engine, options = _engine(options=_options(normalize_filter_value=lambda field, value: value.lower()))
        result = _search(engine, options, OffsetParams(with_total=True), filters={"team": "CORE"})
        assert result.total == 13

    def test_count_distinct(self):
        engine, options = _engine(options=_options(count_distinct_by="age"))
        result = _search(engine, options, OffsetParams(with_total=True))
        assert result.total == 7

    def test_source_errors_propagate(self):
        engine, options = _engine()
        engine = SearchEngine.for_options(options, HmacCursorSigner("secret"), _BrokenSource())
        with pytest.raises(ConnectionError):
            _search(engine, options, OffsetParams())


# ---------------------------------------------------------------------------
# SearchEngine – cursor mode
# ---------------------------------------------------------------------------


class TestSearchEngineCursor:
    def test_walks_every_row_exactly_once(self):
        engine, options = _engine()
        pages, after = [], None
        while True:
            result = _search(engine, options, CursorParams(limit=10, after=after))
            pages.append(result)
            if not result.page_info.has_next:
                break
            after = result.page_info.next_cursor
        assert [len(p.items) for p in pages] == [10, 10, 5]
        assert [p.page_info.has_next for p in pages] == [True, True, False]
        assert pages[-1].page_info.next_cursor is None
        assert [r["id"] for p in pages for r in p.items] == list(range(1, 26))
        assert all(p.total is None for p in pages)

    def test_descending_with_duplicates(self):
        engine, options = _engine()
        sorts = (SortParam("age", SortDirection.DESC),)
        seen, after = [], None
        for _ in range(10):
            result = _search(engine, options, CursorParams(limit=4, after=after, sorts=sorts))
            seen.extend(result.items)
            if not result.page_info.has_next:
                break
            after = result.page_info.next_cursor
        expected = sorted(_people(), key=lambda r: (-r["age"], -r["id"]))
        assert seen == expected

    def test_backward_page(self):
        engine, options = _engine()
        first = _search(engine, options, CursorParams(limit=10))
        second = _search(engine, options, CursorParams(limit=10, after=first.page_info.next_cursor))
        back = _search(engine, options, CursorParams(limit=5, before=second.page_info.next_cursor))
        assert [r["id"] for r in back.items] == [15, 16, 17, 18, 19]
        assert back.page_info.has_next is True
        assert back.page_info.has_previous is True
        earlier = _search(engine, options, CursorParams(limit=5, before=back.page_info.previous_cursor))
        assert [r["id"] for r in earlier.items] == [10, 11, 12, 13, 14]
        forward = _search(engine, options, CursorParams(limit=5, after=back.page_info.next_cursor))
        assert [r["id"] for r in forward.items] == [20, 21, 22, 23, 24]

    def test_backward_to_start(self):
        engine, options = _engine()
        first = _search(engine, options, CursorParams(limit=3))
        back = _search(engine, options, CursorParams(limit=10, before=first.page_info.next_cursor))
        assert [r["id"] for r in back.items] == [1, 2]
        assert back.page_info.has_previous is False
        assert back.page_info.previous_cursor is None

    def test_limit_clamped(self):
        engine, options = _engine(max_page_size=4)
        result = _search(engine, options, CursorParams(limit=100))
        assert len(result.items) == 4
        assert result.page_info.has_next is True

    def test_tampered_cursor(self):
        engine, options = _engine()
        cursor = _search(engine, options, CursorParams(limit=2)).page_info.next_cursor
        with pytest.raises(InvalidCursorError):
            _search(engine, options, CursorParams(limit=2, after="f" + cursor[1:]))

    def test_foreign_secret(self):
        engine, options = _engine()
        cursor = _search(engine, options, CursorParams(limit=2)).page_info.next_cursor
        other, _ = _engine(signer=HmacCursorSigner("another-secret"))
        with pytest.raises(InvalidCursorError) as exc_info:
            _search(other, options, CursorParams(limit=2, after=cursor))
        assert exc_info.value.reason == "signature_mismatch"

    def test_cursor_bound_to_sort_order(self):
        engine, options = _engine()
        sorts = (SortParam("age"),)
        cursor = _search(engine, options, CursorParams(limit=2, sorts=sorts)).page_info.next_cursor
        flipped = (SortParam("age", SortDirection.DESC),)
        with pytest.raises(InvalidCursorError) as exc_info:
            _search(engine, options, CursorParams(limit=2, after=cursor, sorts=flipped))
        assert exc_info.value.reason == "sort_mismatch"

    def test_after_and_before_conflict(self):
        engine, options = _engine()
        cursor = _search(engine, options, CursorParams(limit=2)).page_info.next_cursor
        with pytest.raises(InvalidCursorError) as exc_info:
            _search(engine, options, CursorParams(limit=2, after=cursor, before=cursor))
        assert exc_info.value.reason == "conflicting_cursors"

    def test_missing_key_value(self):
        rows = [{"id": i, "age": None if i == 2 else 30} for i in range(1, 5)]
        engine, options = _engine(rows=rows)
        with pytest.raises(CursorKeyUnavailableError) as exc_info:
            _search(engine, options, CursorParams(limit=1, sorts=(SortParam("age"),)))
        assert exc_info.value.field == "age"

    def test_accessor_reads_aliased_value(self):
        rows = [{"person_id": i, "years": 20 + i} for i in range(1, 6)]
        options = _options(
            allowed_fields={"id": "person_id", "age": "years"},
            allowed_filters=(),
            text_searchable_columns=(),
            accessors={"id": lambda r: r["person_id"], "age": lambda r: r["years"]},
        )
        engine, _ = _engine(rows=rows, options=options)
        first = _search(engine, options, CursorParams(limit=2))
        second = _search(engine, options, CursorParams(limit=2, after=first.page_info.next_cursor))
        assert [r["person_id"] for r in second.items] == [3, 4]

    def test_aliased_columns_without_accessors(self):
        rows = [{"id": i, "created_at": 100 + i // 2} for i in range(1, 8)]
        options = _options(
            allowed_fields={"createdAt": "created_at", "id": "id"},
            default_sorts=(SortParam("createdAt", SortDirection.DESC),),
            tie_breaker=TieBreaker("createdAt", "id"),
            allowed_filters=(),
            text_searchable_columns=(),
        )
        engine, _ = _engine(rows=rows, options=options)
        seen, after = [], None
        for _ in range(10):
            result = _search(engine, options, CursorParams(limit=2, after=after))
            seen.extend(r["id"] for r in result.items)
            if not result.page_info.has_next:
                break
            after = result.page_info.next_cursor
        assert seen == [7, 6, 5, 4, 3, 2, 1]

    def test_empty_before_is_ignored(self):
        engine, options = _engine(rows=_people(10))
        first = _search(engine, options, CursorParams(limit=3))
        second = _search(engine, options, CursorParams(limit=3, after=first.page_info.next_cursor, before=""))
        assert [r["id"] for r in second.items] == [4, 5, 6]
        assert second.page_info.has_next is True

    def test_empty_after_starts_from_the_top(self):
        engine, options = _engine(rows=_people(10))
        result = _search(engine, options, CursorParams(limit=3, after="", before=""))
        assert [r["id"] for r in result.items] == [1, 2, 3]
        assert result.page_info.has_previous is None

    def test_forward_page_links_back(self):
        engine, options = _engine()
        first = _search(engine, options, CursorParams(limit=5))
        assert first.page_info.has_previous is None
        assert first.page_info.previous_cursor is None
        second = _search(engine, options, CursorParams(limit=5, after=first.page_info.next_cursor))
        assert second.page_info.has_previous is True
        back = _search(engine, options, CursorParams(limit=5, before=second.page_info.previous_cursor))
        assert [r["id"] for r in back.items] == [1, 2, 3, 4, 5]
        assert back.page_info.has_previous is False

    def test_empty_source(self):
        engine, options = _engine(rows=[])
        result = _search(engine, options, CursorParams(limit=5))
        assert result.items == []
        assert result.page_info.has_next is False
        assert result.page_info.next_cursor is None

    def test_map_keeps_page_info(self):
        engine, options = _engine()
        result = _search(engine, options, CursorParams(limit=3))
        mapped = result.map(lambda r: r["id"])
        assert isinstance(mapped, SearchResult)
        assert mapped.items == [1, 2, 3]
        assert mapped.page_info == result.page_info


class _NoColumns:
    def resolve_column(self, field):
        return None

    def normalize_sorts(self, sorts, *, allowed=None, defaults=(), tie_breaker=None):
        return tuple(sorts) or tuple(defaults)


class _BrokenSource(InMemorySource):
    def __init__(self):
        super().__init__([])

    async def fetch(self):
        raise ConnectionError("database unavailable")
