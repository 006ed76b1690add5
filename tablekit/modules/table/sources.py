"""Row sources that plug into ``TableBuilder.build`` as fetch callbacks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from tablekit.modules.table.schemas import RowWindow, SortFilter


def _sort_key(column: str, descending: bool):
    # Missing values sort first in both directions.
    if descending:
        return lambda row: (row.get(column) is None, row.get(column))
    return lambda row: (row.get(column) is not None, row.get(column))


class InMemoryRowSource:
    """Sort and slice a list of dict rows."""

    def __init__(self, rows: Iterable[Mapping[str, Any]]) -> None:
        self._rows = list(rows)

    async def count(self) -> int:
        return len(self._rows)

    async def fetch_page(self, sort: SortFilter, window: RowWindow) -> list[Mapping[str, Any]]:
        ordered = list(self._rows)
        # Stable sorts applied from lowest to highest priority.
        for column, direction in reversed(list(sort.items())):
            if not any(column in row for row in ordered):
                continue
            descending = direction < 0
            ordered.sort(key=_sort_key(column, descending), reverse=descending)
        return ordered[window.offset : window.end_index]


def apply_table_window(
    stmt: Select,
    sort: SortFilter,
    window: RowWindow,
    columns: Mapping[str, ColumnElement[Any]],
    tie_breaker: ColumnElement[Any] | None = None,
) -> Select:
    """Add ORDER BY for known sort columns, then LIMIT/OFFSET for the row window.

    ``tie_breaker`` is ordered ascending after the sort columns so pages stay
    stable when sort values repeat or no sort column is known.
    """
    order_by = []
    for name, direction in sort.items():
        column = columns.get(name)
        if column is None:
            continue
        order_by.append(column.desc() if direction < 0 else column.asc())
    if tie_breaker is not None:
        order_by.append(tie_breaker.asc())
    if order_by:
        stmt = stmt.order_by(*order_by)
    return stmt.limit(window.limit).offset(window.offset)


async def count_rows(session: AsyncSession, stmt: Select) -> int:
    """Count rows the statement would return."""
    count_stmt = select(func.count()).select_from(stmt.subquery())
    return int((await session.scalar(count_stmt)) or 0)
