"""SQLAlchemy adapter – SqlAlchemySource.

Wraps an ``AsyncSession`` and a ``Select`` statement. Pagination
expressions are compiled into SQLAlchemy clauses; column names are looked
up in an explicit map of safe names, never interpolated into SQL.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Select, and_, distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagekit.application.pagination.types import SortDirection
from pagekit.application.search.predicates import (
    OPERATORS,
    AllOf,
    AnyOf,
    Comparison,
    Predicate,
    TextMatch,
    TextSearchMode,
)
from pagekit.kernel.errors import QueryFailedError
from pagekit.observability.logging import get_logger

_log = get_logger(__name__)


def escape_like(term: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so *term* matches literally."""
    return term.replace(escape, escape * 2).replace("%", f"{escape}%").replace("_", f"{escape}_")


def _columns_of(statement: Select[Any]) -> dict[str, Any]:
    columns: dict[str, Any] = {}
    for column in statement.selected_columns:
        columns.setdefault(column.key, column)
        table = getattr(column, "table", None)
        name = getattr(table, "name", None)
        if name:
            columns[f"{name}.{column.key}"] = column
    return columns


class SqlAlchemySource:
    """Queryable source backed by a SQLAlchemy ``Select``.

    Parameters
    ----------
    session:
        Async session that executes the statement.
    statement:
        Base query, typically ``select(Model)`` with any fixed filters.
    columns:
        Safe column name → column element. Defaults to the statement's
        selected columns keyed by ``key`` and ``table.key``.
    scalars:
        Return ORM entities (``True``) or row mappings (``False``).
    """

    def __init__(
        self,
        session: AsyncSession,
        statement: Select[Any],
        columns: Mapping[str, Any] | None = None,
        *,
        scalars: bool = True,
    ) -> None:
        self._session = session
        self._statement = statement
        self._columns: Mapping[str, Any] = dict(columns) if columns is not None else _columns_of(statement)
        self._scalars = scalars

    @property
    def statement(self) -> Select[Any]:
        return self._statement

    def _with(self, statement: Select[Any]) -> SqlAlchemySource:
        return SqlAlchemySource(self._session, statement, self._columns, scalars=self._scalars)

    def _column(self, name: str) -> Any:
        try:
            return self._columns[name]
        except KeyError:
            raise ValueError(f"Unknown column {name!r}") from None

    def _compile(self, predicate: Predicate) -> Any:
        match predicate:
            case Comparison(column=column, op=op, value=value):
                return OPERATORS[op](self._column(column), value)
            case AllOf(terms=terms):
                return and_(*(self._compile(t) for t in terms))
            case AnyOf(terms=terms):
                return or_(*(self._compile(t) for t in terms))
            case TextMatch(columns=columns, term=term, mode=mode):
                pattern = f"%{escape_like(term)}%"
                clauses = [self._column(c).ilike(pattern, escape="\\") for c in columns]
                return and_(*clauses) if mode is TextSearchMode.ALL else or_(*clauses)
            case _:
                raise TypeError(f"Unsupported predicate {predicate!r}")

    def where(self, predicate: Predicate) -> SqlAlchemySource:
        return self._with(self._statement.where(self._compile(predicate)))

    def order_by(self, columns: Sequence[str], directions: Sequence[SortDirection]) -> SqlAlchemySource:
        clauses = [
            self._column(c).desc() if d is SortDirection.DESC else self._column(c).asc()
            for c, d in zip(columns, directions, strict=True)
        ]
        return self._with(self._statement.order_by(None).order_by(*clauses))

    def limit(self, count: int) -> SqlAlchemySource:
        return self._with(self._statement.limit(count))

    def offset(self, count: int) -> SqlAlchemySource:
        return self._with(self._statement.offset(count))

    def unordered(self) -> SqlAlchemySource:
        return self._with(self._statement.order_by(None).limit(None).offset(None))

    async def _execute(self, statement: Any) -> Any:
        try:
            return await self._session.execute(statement)
        except SQLAlchemyError as exc:
            _log.warning("sqlalchemy.query_failed", error=type(exc).__name__)
            raise QueryFailedError(cause=exc) from exc

    async def fetch(self) -> list[Any]:
        result = await self._execute(self._statement)
        if self._scalars:
            return list(result.scalars().all())
        return [dict(row) for row in result.mappings().all()]

    async def count(self, distinct_by: str | None = None) -> int:
        base = self._statement.order_by(None).limit(None).offset(None)
        if distinct_by is None:
            statement = select(func.count()).select_from(base.subquery())
        else:
            statement = base.with_only_columns(
                func.count(distinct(self._column(distinct_by))), maintain_column_froms=True
            )
        result = await self._execute(statement)
        return int(result.scalar_one())


__all__ = ["SqlAlchemySource", "escape_like"]
