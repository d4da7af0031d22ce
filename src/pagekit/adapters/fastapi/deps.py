"""FastAPI adapter – pagination dependency and OpenAPI helpers.

Query string contract::

    ?mode=CURSOR&limit=10&after=<cursor>&sort=createdAt:desc&sort=name
    ?page=2&pageSize=20&withTotal=true&sort=-createdAt
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Query

from pagekit.application.pagination.parsing import parse_pagination, parse_sorts
from pagekit.application.pagination.types import PaginationParams


# ---------------------------------------------------------------------------
# Pagination dependency
# ---------------------------------------------------------------------------

async def pagination_params(
    mode: str | None = Query(default=None, description="OFFSET or CURSOR"),
    page: str | None = Query(default=None, description="1-based page number (offset mode)"),
    page_size: str | None = Query(default=None, alias="pageSize", description="Items per page (offset mode)"),
    limit: str | None = Query(default=None, description="Items per page (cursor mode)"),
    after: str | None = Query(default=None, description="Opaque cursor to resume after"),
    before: str | None = Query(default=None, description="Opaque cursor to resume before"),
    sort: list[str] | None = Query(default=None, description="field[:asc|desc] or -field; repeatable"),
    with_total: str | None = Query(default=None, alias="withTotal", description="Count all rows (offset mode)"),
) -> PaginationParams:
    """Extract pagination parameters from the query string.

    Range and type problems surface as :class:`~pagekit.kernel.errors.ValidationError`
    so they share the error body produced by :class:`FastAPIExceptionMapper`.
    """
    raw: dict[str, Any] = {
        "mode": mode,
        "page": page,
        "pageSize": page_size,
        "limit": limit,
        "after": after,
        "before": before,
        "sorts": list(parse_sorts(sort or [])),
        "withTotal": with_total,
    }
    return parse_pagination(raw)


FastAPIPaginationDep = Annotated[PaginationParams, Depends(pagination_params)]


# ---------------------------------------------------------------------------
# OpenAPI extra helpers
# ---------------------------------------------------------------------------

_ERROR_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "code": {"type": "string"},
        "message": {"type": "string"},
        "detail": {"type": "object"},
        "errors": {"type": "array", "items": {"type": "object"}},
    },
    "required": ["code", "message"],
}

_EXAMPLES: dict[int, tuple[str, str]] = {
    400: ("INVALID_CURSOR", "Cursor signature mismatch"),
    500: ("CURSOR_KEY_UNAVAILABLE", "Row has no value for cursor key"),
    503: ("QUERY_FAILED", "Query execution failed"),
}


def error_responses(*codes: int) -> dict[str, dict[str, object]]:
    """Build an ``openapi_extra["responses"]`` dict for the given HTTP codes.

    Usage::

        @router.get("/learners", openapi_extra={"responses": error_responses(400, 503)})
        async def list_learners(pagination: FastAPIPaginationDep): ...
    """
    result: dict[str, dict[str, object]] = {}
    for code in codes:
        error_code, message = _EXAMPLES.get(code, ("error", "Error"))
        result[str(code)] = {
            "description": message,
            "content": {
                "application/json": {
                    "schema": _ERROR_SCHEMA,
                    "example": {"code": error_code, "message": message, "detail": {}},
                }
            },
        }
    return result


__all__ = ["FastAPIPaginationDep", "error_responses", "pagination_params"]
