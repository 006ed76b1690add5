from __future__ import annotations

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, select

from tablekit.modules.table.schemas import RowWindow
from tablekit.modules.table.sources import InMemoryRowSource, apply_table_window, count_rows

ITEMS = Table(
    "items",
    MetaData(),
    Column("id", Integer, primary_key=True),
    Column("name", String(64)),
    Column("price", Integer),
)

ROWS = [
    {"id": 1, "name": "bass", "price": 300},
    {"id": 2, "name": "amp", "price": 150},
    {"id": 3, "name": "cable", "price": 150},
    {"id": 4, "name": "drum", "price": None},
]


def compile_sql(stmt) -> str:
    return " ".join(str(stmt.compile(compile_kwargs={"literal_binds": True})).split())


@pytest.mark.asyncio
async def test_in_memory_source_sorts_by_priority_then_slices() -> None:
    source = InMemoryRowSource(ROWS)

    page = await source.fetch_page({"price": -1, "name": 1}, RowWindow(start_index=1, end_index=3))

    assert [row["id"] for row in page] == [1, 2, 3]


@pytest.mark.asyncio
async def test_in_memory_source_puts_missing_values_first_when_ascending() -> None:
    source = InMemoryRowSource(ROWS)

    page = await source.fetch_page({"price": 1}, RowWindow(start_index=1, end_index=2))

    assert [row["id"] for row in page] == [4, 2]


@pytest.mark.asyncio
async def test_in_memory_source_puts_missing_values_first_when_descending() -> None:
    source = InMemoryRowSource([{"id": 1, "p": 3}, {"id": 2, "p": None}, {"id": 3, "p": 1}])

    page = await source.fetch_page({"p": -1}, RowWindow(start_index=1, end_index=3))

    assert [row["id"] for row in page] == [2, 1, 3]


@pytest.mark.asyncio
async def test_in_memory_source_descending_keeps_ties_in_secondary_order() -> None:
    source = InMemoryRowSource(ROWS)

    page = await source.fetch_page({"price": -1, "name": -1}, RowWindow(start_index=1, end_index=4))

    assert [row["id"] for row in page] == [4, 1, 3, 2]


@pytest.mark.asyncio
async def test_in_memory_source_ignores_unknown_columns() -> None:
    source = InMemoryRowSource(ROWS)

    page = await source.fetch_page({"colour": -1}, RowWindow(start_index=2, end_index=3))

    assert [row["id"] for row in page] == [2, 3]


@pytest.mark.asyncio
async def test_in_memory_source_window_past_data_is_empty() -> None:
    source = InMemoryRowSource(ROWS)

    assert await source.count() == 4
    assert await source.fetch_page({}, RowWindow(start_index=11, end_index=20)) == []


def test_apply_table_window_orders_known_columns_and_limits() -> None:
    stmt = apply_table_window(
        select(ITEMS),
        {"price": -1, "bogus": 1, "name": 1},
        RowWindow(start_index=21, end_index=30),
        {"price": ITEMS.c.price, "name": ITEMS.c.name},
    )

    sql = compile_sql(stmt)

    assert "ORDER BY items.price DESC, items.name ASC" in sql
    assert "LIMIT 10 OFFSET 20" in sql


def test_apply_table_window_without_known_columns_keeps_natural_order() -> None:
    stmt = apply_table_window(
        select(ITEMS),
        {"bogus": -1},
        RowWindow(start_index=1, end_index=5),
        {"price": ITEMS.c.price},
    )

    sql = compile_sql(stmt)

    assert "ORDER BY" not in sql
    assert "LIMIT 5" in sql


def test_apply_table_window_appends_tie_breaker_after_sort_columns() -> None:
    stmt = apply_table_window(
        select(ITEMS),
        {"price": -1},
        RowWindow(start_index=1, end_index=5),
        {"price": ITEMS.c.price},
        tie_breaker=ITEMS.c.id,
    )

    assert "ORDER BY items.price DESC, items.id ASC" in compile_sql(stmt)


def test_apply_table_window_orders_by_tie_breaker_when_no_column_is_known() -> None:
    stmt = apply_table_window(
        select(ITEMS),
        {"bogus": -1},
        RowWindow(start_index=6, end_index=10),
        {"price": ITEMS.c.price},
        tie_breaker=ITEMS.c.id,
    )

    sql = compile_sql(stmt)

    assert "ORDER BY items.id ASC" in sql
    assert "LIMIT 5 OFFSET 5" in sql


class FakeSession:
    def __init__(self, value) -> None:
        self.value = value
        self.statements: list = []

    async def scalar(self, stmt):
        self.statements.append(stmt)
        return self.value


@pytest.mark.asyncio
async def test_count_rows_wraps_statement_in_count_query() -> None:
    session = FakeSession(42)

    total = await count_rows(session, select(ITEMS).where(ITEMS.c.price > 100))

    assert total == 42
    sql = compile_sql(session.statements[0])
    assert "count(*)" in sql
    assert "FROM (SELECT" in sql
    assert "items.price > 100" in sql


@pytest.mark.asyncio
async def test_count_rows_treats_null_as_zero() -> None:
    assert await count_rows(FakeSession(None), select(ITEMS)) == 0
