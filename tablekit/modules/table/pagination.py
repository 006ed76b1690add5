"""Page window and navigation link calculation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode

from tablekit.modules.table.config import TableConfig, get_table_config
from tablekit.modules.table.schemas import PageLink, PaginationResult, RowWindow

logger = logging.getLogger(__name__)

# Page params with more digits than this are invalid.
MAX_PARAM_DIGITS = 18


def parse_positive_int(value: object) -> int | None:
    """Return value as a positive int, or None when it is not one."""
    if value is None:
        return None
    text = str(value).strip()
    if not text.isdecimal() or len(text) > MAX_PARAM_DIGITS:
        return None
    number = int(text)
    return number if number > 0 else None


def parse_page_params(query: Mapping[str, str], config: TableConfig) -> tuple[int, int]:
    """Resolve (page, rows_per_page) from query, defaulting invalid values."""
    names = config.query_param_names
    page = parse_positive_int(query.get(names.page))
    rows_per_page = parse_positive_int(query.get(names.num_per_page))

    if page is None:
        if names.page in query:
            logger.debug("Invalid %s=%r, using page 1", names.page, query[names.page])
        page = 1
    if rows_per_page is None:
        if names.num_per_page in query:
            logger.debug(
                "Invalid %s=%r, using default %s",
                names.num_per_page,
                query[names.num_per_page],
                config.default_rows_per_page,
            )
        rows_per_page = config.default_rows_per_page
    return page, rows_per_page


def _set_param(params: Sequence[tuple[str, str]], key: str, value: str) -> list[tuple[str, str]]:
    """Overwrite the first ``key`` and drop repeats, or append when absent."""
    result: list[tuple[str, str]] = []
    replaced = False
    for name, current in params:
        if name != key:
            result.append((name, current))
        elif not replaced:
            result.append((name, value))
            replaced = True
    if not replaced:
        result.append((key, value))
    return result


@dataclass(frozen=True, slots=True)
class PageUrlTemplate:
    """Canonical link template; only the page value differs between links."""

    base_path: str
    params: tuple[tuple[str, str], ...]
    page_param: str

    @classmethod
    def from_url(
        cls,
        original_url: str,
        config: TableConfig,
        page: int,
        rows_per_page: int,
    ) -> PageUrlTemplate:
        base_path, _, query_string = original_url.partition("?")
        params = parse_qsl(query_string, keep_blank_values=True)
        names = config.query_param_names
        params = _set_param(params, names.page, str(page))
        params = _set_param(params, names.num_per_page, str(rows_per_page))
        return cls(base_path=base_path, params=tuple(params), page_param=names.page)

    def with_page(self, page: int) -> str:
        query_string = urlencode(_set_param(self.params, self.page_param, str(page)))
        return f"{self.base_path}?{query_string}"


def surrounding_pages(current_page: int, total_pages: int, budget: int) -> tuple[list[int], list[int]]:
    """Spend a shared link budget alternately before and after the current page.

    First and last pages are never included. Once one side runs out of pages the
    other side takes the rest of the budget.
    """
    before_pages: list[int] = []
    after_pages: list[int] = []
    before = min(current_page - 1, total_pages - 1)
    after = current_page + 1

    while budget > 0:
        emitted = False
        if before >= 2:
            before_pages.insert(0, before)
            before -= 1
            budget -= 1
            emitted = True
        if budget > 0 and after <= total_pages - 1:
            after_pages.append(after)
            after += 1
            budget -= 1
            emitted = True
        if not emitted:
            break
    return before_pages, after_pages


def compute_pagination(
    total_rows: int,
    query: Mapping[str, str],
    original_url: str,
    config: TableConfig | None = None,
) -> PaginationResult:
    """Compute row window and navigation links for the requested page.

    The requested page is not clamped to the available pages; an out-of-range
    page yields a row window past the data. The row window is never truncated
    to ``total_rows``.
    """
    if config is None:
        config = get_table_config()
    if total_rows < 0:
        raise ValueError("total_rows must be non-negative")

    page, rows_per_page = parse_page_params(query, config)
    total_pages = -(-total_rows // rows_per_page)
    row_window = RowWindow(
        start_index=rows_per_page * (page - 1) + 1,
        end_index=rows_per_page * page,
    )
    template = PageUrlTemplate.from_url(original_url, config, page, rows_per_page)

    result = PaginationResult(
        current_page=page,
        rows_per_page=rows_per_page,
        total_rows=total_rows,
        total_pages=total_pages,
        rows_per_page_options=list(config.rows_per_page_options),
        row_window=row_window,
        current_page_url=template.with_page(page),
    )
    if total_pages <= 1:
        return result

    if page > 1:
        result.first_page_url = template.with_page(1)
        result.prev_page_url = template.with_page(page - 1)
    if page < total_pages:
        result.last_page_url = template.with_page(total_pages)
        result.next_page_url = template.with_page(page + 1)

    before_pages, after_pages = surrounding_pages(
        page,
        total_pages,
        config.num_surrounding_page_links,
    )
    result.page_links_before = [PageLink(index=index, url=template.with_page(index)) for index in before_pages]
    result.page_links_after = [PageLink(index=index, url=template.with_page(index)) for index in after_pages]
    result.ellipsis_before = bool(before_pages) and before_pages[0] > 2
    result.ellipsis_after = bool(after_pages) and after_pages[-1] < total_pages - 1
    return result
