"""Application pagination – page size bounds policy."""
from __future__ import annotations

import dataclasses

from pagekit.application.pagination.types import CursorParams, OffsetParams, PaginationParams


def enforce_bounds(params: PaginationParams, max_page_size: int) -> PaginationParams:
    """Clamp ``page_size`` / ``limit`` to *max_page_size*; ``max_page_size <= 0`` disables the cap."""
    if max_page_size <= 0:
        return params
    if isinstance(params, OffsetParams) and params.page_size > max_page_size:
        return dataclasses.replace(params, page_size=max_page_size)
    if isinstance(params, CursorParams) and params.limit > max_page_size:
        return dataclasses.replace(params, limit=max_page_size)
    return params


__all__ = ["enforce_bounds"]
