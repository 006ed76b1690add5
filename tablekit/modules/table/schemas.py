"""Table result schemas."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, model_serializer

T = TypeVar("T")

SortFilter = dict[str, int]

NAVIGATION_LINK_FIELDS = frozenset({"first_page_url", "last_page_url", "prev_page_url", "next_page_url"})


class RowWindow(BaseModel):
    """Inclusive 1-based range of rows for one page."""

    start_index: int
    end_index: int

    @property
    def offset(self) -> int:
        return self.start_index - 1

    @property
    def limit(self) -> int:
        return self.end_index - self.start_index + 1


class PageLink(BaseModel):
    """Link to a single page."""

    index: int
    url: str


class PaginationResult(BaseModel):
    """Page boundaries and navigation links for one request."""

    current_page: int
    rows_per_page: int
    total_rows: int
    total_pages: int
    rows_per_page_options: list[int] = Field(default_factory=list)
    row_window: RowWindow
    current_page_url: str
    first_page_url: str | None = None
    last_page_url: str | None = None
    prev_page_url: str | None = None
    next_page_url: str | None = None
    page_links_before: list[PageLink] = Field(default_factory=list)
    page_links_after: list[PageLink] = Field(default_factory=list)
    ellipsis_before: bool = False
    ellipsis_after: bool = False

    @model_serializer(mode="wrap")
    def omit_absent_links(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        """Navigation links that do not apply are left out, not rendered as null."""
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if not (key in NAVIGATION_LINK_FIELDS and value is None)
        }


class TableResult(BaseModel, Generic[T]):
    """One page of rows with its pagination and applied sort."""

    rows: list[T]
    pagination: PaginationResult
    sorter: SortFilter
