"""Table configuration and the process-wide registry."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tablekit.core.config import Settings
from tablekit.shared.exceptions import ConfigurationMissingException

logger = logging.getLogger(__name__)


class QueryParamNames(BaseModel):
    """Query-string keys the table reads.

    ``sorter`` maps a sort key to its direction key, e.g. ``{"sort": "order"}``
    means ``?sort=title&order=desc``. Declaration order is tie-break priority.
    """

    model_config = ConfigDict(frozen=True)

    page: str = Field(default="page", min_length=1)
    num_per_page: str = Field(default="num_per_page", min_length=1)
    sorter: dict[str, str] = Field(default_factory=lambda: {"sort": "order"})


class TableConfig(BaseModel):
    """Immutable table settings shared by every request."""

    model_config = ConfigDict(frozen=True)

    query_param_names: QueryParamNames = Field(default_factory=QueryParamNames)
    default_sort_order: dict[str, int] = Field(default_factory=dict)
    default_rows_per_page: int = Field(default=10, gt=0)
    num_surrounding_page_links: int = Field(default=4, ge=0)
    rows_per_page_options: list[int] = Field(default_factory=list)

    @field_validator("default_sort_order")
    @classmethod
    def validate_sort_directions(cls, value: dict[str, int]) -> dict[str, int]:
        invalid = [column for column, direction in value.items() if direction not in (1, -1)]
        if invalid:
            raise ValueError(f"sort directions must be 1 or -1 (invalid: {', '.join(invalid)})")
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> TableConfig:
        """Build table config from application settings."""
        return cls(
            query_param_names=QueryParamNames(
                page=settings.table_page_param,
                num_per_page=settings.table_num_per_page_param,
                sorter=dict(settings.table_sorter),
            ),
            default_sort_order=dict(settings.table_default_sort_order),
            default_rows_per_page=settings.table_default_rows_per_page,
            num_surrounding_page_links=settings.table_num_surrounding_page_links,
            rows_per_page_options=list(settings.table_rows_per_page_options),
        )


_table_config: TableConfig | None = None


def configure_table(config: TableConfig) -> TableConfig:
    """Register process-wide table config (called once at startup)."""
    global _table_config
    _table_config = config
    logger.info(
        "Table configured: rows_per_page=%s surrounding_links=%s sorter=%s",
        config.default_rows_per_page,
        config.num_surrounding_page_links,
        config.query_param_names.sorter,
    )
    return config


def get_table_config() -> TableConfig:
    """Return registered table config."""
    if _table_config is None:
        raise ConfigurationMissingException("Table configuration has not been registered")
    return _table_config


def reset_table_config() -> None:
    """Drop registered config (used in tests)."""
    global _table_config
    _table_config = None
