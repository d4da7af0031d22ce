"""Application pagination – canonicalise client pagination input."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

from pagekit.application.pagination.parsing import parse_pagination
from pagekit.application.pagination.sort import dedupe_sorts
from pagekit.application.pagination.types import DEFAULT_PAGE_SIZE, PaginationParams, SortParam


def normalize_pagination(
    params: PaginationParams | Mapping[str, Any],
    *,
    default_sorts: Sequence[SortParam] = (),
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> PaginationParams:
    """Return *params* in canonical form.

    Raw mappings go through :func:`parse_pagination` first, which fills
    ``page``/``page_size``/``limit`` defaults. Sorts are de-duplicated
    (last occurrence wins) and fall back to *default_sorts* when empty.
    Cursors are left untouched; decoding them is the search engine's job.
    Upper bounds are not enforced here, see :func:`enforce_bounds`.
    """
    if isinstance(params, Mapping):
        params = parse_pagination(params, default_page_size=default_page_size)

    sorts = dedupe_sorts(params.sorts) or dedupe_sorts(default_sorts)
    if not sorts:
        raise ValueError("no sorts requested and no default_sorts configured")
    return dataclasses.replace(params, sorts=sorts)


__all__ = ["normalize_pagination"]
