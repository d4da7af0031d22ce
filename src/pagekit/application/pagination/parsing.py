"""Application pagination – parse transport-level pagination input.

Accepts the recognised fields of any transport (GraphQL arguments, query
strings, JSON bodies)::

    mode, page, pageSize | page_size, limit, after, before,
    sorts: [{field, direction}], withTotal | with_total

Every problem is collected and reported in a single
:class:`~pagekit.kernel.errors.ValidationError`.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pagekit.application.pagination.sort import AllowlistSortResolver
from pagekit.application.pagination.types import (
    DEFAULT_PAGE_SIZE,
    CursorParams,
    OffsetParams,
    PaginationMode,
    PaginationParams,
    SortDirection,
    SortParam,
)
from pagekit.kernel.errors import ValidationError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def _pick(raw: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if raw.get(name) is not None:
            return raw[name]
    return None


def _positive_int(value: Any, field: str, errors: list[dict[str, Any]]) -> int | None:
    if isinstance(value, bool):
        errors.append({"field": field, "error": "must be an integer"})
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        errors.append({"field": field, "error": "must be an integer"})
        return None
    if number < 1:
        errors.append({"field": field, "error": "must be >= 1"})
        return None
    return number


def _flag(value: Any, field: str, errors: list[dict[str, Any]]) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text not in _FALSE:
        errors.append({"field": field, "error": "must be a boolean"})
    return False


def parse_sort_expression(expression: str) -> SortParam:
    """Parse ``field``, ``field:desc`` or ``-field`` into a :class:`SortParam`."""
    text = expression.strip()
    if text.startswith("-"):
        return SortParam(text[1:], SortDirection.DESC)
    field, _, direction = text.partition(":")
    return SortParam(field.strip(), SortDirection.parse(direction))


def _sorts(value: Any, errors: list[dict[str, Any]]) -> tuple[SortParam, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, Mapping, SortParam)):
        value = [value]
    if not isinstance(value, Iterable):
        errors.append({"field": "sorts", "error": "must be a list"})
        return ()
    sorts: list[SortParam] = []
    for index, item in enumerate(value):
        if isinstance(item, SortParam):
            sorts.append(item)
        elif isinstance(item, str):
            sorts.append(parse_sort_expression(item))
        elif isinstance(item, Mapping) and isinstance(item.get("field"), str):
            sorts.append(SortParam(item["field"], SortDirection.parse(item.get("direction"))))
        else:
            errors.append({"field": f"sorts[{index}]", "error": "expected {field, direction}"})
            continue
        if not sorts[-1].field:
            sorts.pop()
            errors.append({"field": f"sorts[{index}]", "error": "field must not be empty"})
    return tuple(sorts)


def _mode(raw: Mapping[str, Any], errors: list[dict[str, Any]]) -> PaginationMode:
    value = raw.get("mode")
    if value is None:
        cursorish = any(raw.get(k) is not None for k in ("after", "before", "limit"))
        return PaginationMode.CURSOR if cursorish else PaginationMode.OFFSET
    try:
        return PaginationMode(str(getattr(value, "value", value)).upper())
    except ValueError:
        errors.append({"field": "mode", "error": "must be OFFSET or CURSOR"})
        return PaginationMode.OFFSET


def parse_pagination(
    raw: Mapping[str, Any],
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    resolver: AllowlistSortResolver | None = None,
) -> PaginationParams:
    """Build :class:`OffsetParams` or :class:`CursorParams` from *raw*.

    When *resolver* is given, every requested sort field must be allowlisted;
    otherwise :class:`~pagekit.kernel.errors.SortFieldNotAllowedError` is raised.
    """
    errors: list[dict[str, Any]] = []
    mode = _mode(raw, errors)
    sorts = _sorts(raw.get("sorts"), errors)

    if mode is PaginationMode.OFFSET:
        page = _pick(raw, "page")
        page_size = _pick(raw, "pageSize", "page_size")
        with_total = _pick(raw, "withTotal", "with_total")
        values: dict[str, Any] = {
            "page": 1 if page is None else _positive_int(page, "page", errors),
            "page_size": default_page_size if page_size is None else _positive_int(page_size, "pageSize", errors),
            "with_total": False if with_total is None else _flag(with_total, "withTotal", errors),
        }
    else:
        limit = _pick(raw, "limit")
        values = {
            "limit": default_page_size if limit is None else _positive_int(limit, "limit", errors),
            "after": _cursor(raw.get("after"), "after", errors),
            "before": _cursor(raw.get("before"), "before", errors),
        }
        if values["after"] and values["before"]:
            errors.append({"field": "before", "error": "after and before are mutually exclusive"})

    if errors:
        raise ValidationError("Invalid pagination parameters", errors=errors)

    if resolver is not None:
        resolver.require_columns(sorts)

    if mode is PaginationMode.OFFSET:
        return OffsetParams(sorts=sorts, **values)
    return CursorParams(sorts=sorts, **values)


def _cursor(value: Any, field: str, errors: list[dict[str, Any]]) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        errors.append({"field": field, "error": "must be a string"})
        return None
    return value


def parse_sorts(expressions: Iterable[str]) -> tuple[SortParam, ...]:
    """Parse a sequence of sort expressions, skipping blanks."""
    return tuple(parse_sort_expression(e) for e in expressions if e and e.strip())


__all__ = ["parse_pagination", "parse_sort_expression", "parse_sorts"]
