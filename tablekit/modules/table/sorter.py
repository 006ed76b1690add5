"""Sort filter extraction from request query parameters."""

from __future__ import annotations

from collections.abc import Mapping

from tablekit.modules.table.config import TableConfig, get_table_config
from tablekit.modules.table.schemas import SortFilter

ASCENDING = 1
DESCENDING = -1


def extract_sort(query: Mapping[str, str], config: TableConfig | None = None) -> SortFilter:
    """Build ordered column -> direction mapping from query parameters.

    Sort keys are scanned in the declared order of the configured sorter, so the
    first matching key wins tie-breaks. Direction is descending only for an
    explicit ``desc``. Column names are passed through unchecked; falls back to
    the default sort order when no sort key is present.
    """
    if config is None:
        config = get_table_config()

    sort_filter: SortFilter = {}
    for sort_key, direction_key in config.query_param_names.sorter.items():
        column = query.get(sort_key)
        if column is None:
            continue
        sort_filter[column] = DESCENDING if query.get(direction_key) == "desc" else ASCENDING

    if not sort_filter:
        return dict(config.default_sort_order)
    return sort_filter
