"""Table builder: sort, paginate and fetch one page of rows."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from fastapi import Request

from tablekit.core.metrics import TABLE_BUILDS_TOTAL, TABLE_FETCH_DURATION_SECONDS
from tablekit.modules.table.config import TableConfig, get_table_config
from tablekit.modules.table.pagination import compute_pagination
from tablekit.modules.table.schemas import RowWindow, SortFilter, TableResult
from tablekit.modules.table.sorter import extract_sort

logger = logging.getLogger(__name__)

FetchPage = Callable[[SortFilter, RowWindow], Awaitable[Sequence[Any]]]


class TableBuilder:
    """Assemble a table page from query params, row count and a fetch callback."""

    def __init__(self, config: TableConfig | None = None) -> None:
        self.config = config if config is not None else get_table_config()

    async def build(
        self,
        query: Mapping[str, str],
        original_url: str,
        total_rows: int,
        fetch_page: FetchPage,
    ) -> TableResult[Any]:
        """Build one page; ``fetch_page`` is awaited exactly once and its errors propagate."""
        sort_filter = extract_sort(query, self.config)
        pagination = compute_pagination(total_rows, query, original_url, self.config)
        logger.debug(
            "Building table for %s: page=%s rows=%s-%s sort=%s",
            original_url,
            pagination.current_page,
            pagination.row_window.start_index,
            pagination.row_window.end_index,
            sort_filter,
        )

        started_at = perf_counter()
        try:
            rows = await fetch_page(sort_filter, pagination.row_window)
        except Exception:
            TABLE_BUILDS_TOTAL.labels(outcome="fetch_failed").inc()
            raise
        finally:
            TABLE_FETCH_DURATION_SECONDS.observe(perf_counter() - started_at)

        TABLE_BUILDS_TOTAL.labels(outcome="ok").inc()
        return TableResult(rows=list(rows), pagination=pagination, sorter=sort_filter)


@dataclass(slots=True)
class TableRequest:
    query: dict[str, str]
    original_url: str


def get_table_request(request: Request) -> TableRequest:
    """FastAPI dependency extracting query params and original URL."""
    original_url = request.url.path
    if request.url.query:
        original_url = f"{original_url}?{request.url.query}"
    return TableRequest(query=dict(request.query_params), original_url=original_url)


def get_table_builder() -> TableBuilder:
    """Dependency provider for table builder."""
    return TableBuilder()
