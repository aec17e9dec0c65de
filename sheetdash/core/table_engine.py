from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from sheetdash.core.columns import (
    CATEGORICAL,
    DATE_RANGE,
    NO_FILTER,
    NUMERIC_RANGE,
    TEXT,
    ColumnSpec,
)
from sheetdash.core.dataset import RecordSet
from sheetdash.core.exceptions import SchemaError
from sheetdash.core.table_state import ASC, DESC, SortKey, TableState

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


# -----------------------------------------------------------------------------
# Filter value helpers
# -----------------------------------------------------------------------------
def is_empty_filter(value: Any) -> bool:
    """A filter value that imposes no constraint (absent, "", or a range with no bounds)."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return all(_is_missing_bound(v) for v in value)
    return False


def _is_missing_bound(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def _range_pair(value: Any) -> Tuple[Any, Any]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise SchemaError(f"Range filters take a [low, high] pair, got {value!r}")
    low, high = value
    return (None if _is_missing_bound(low) else low), (None if _is_missing_bound(high) else high)


def _numeric_bound(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _date_bound(value: Any) -> Optional[pd.Timestamp]:
    if value is None:
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return pd.Timestamp(ts).normalize()


def column_mask(records: RecordSet, spec: ColumnSpec, value: Any) -> Optional[np.ndarray]:
    """
    Boolean mask of rows matching one column filter, or None when the filter is inactive.

    - categorical: case-sensitive equality
    - numeric range: low <= value <= high (inclusive, parsed numerically)
    - date range: low < value < high (exclusive on both ends, calendar dates)
    - text: case-insensitive substring
    """
    if is_empty_filter(value):
        return None

    kind = spec.filter_kind

    if kind == CATEGORICAL:
        return (records.values(spec.field) == str(value)).to_numpy()

    if kind == TEXT:
        return records.values(spec.field).str.contains(str(value), case=False, regex=False).to_numpy()

    if kind == NUMERIC_RANGE:
        low, high = _range_pair(value)
        low, high = _numeric_bound(low), _numeric_bound(high)
        series = records.numeric(spec.field)
        mask = series.notna()
        if low is not None:
            mask &= series >= low
        if high is not None:
            mask &= series <= high
        return mask.to_numpy()

    if kind == DATE_RANGE:
        low, high = _range_pair(value)
        low, high = _date_bound(low), _date_bound(high)
        series = records.dates(spec.field)
        mask = series.notna()
        if low is not None:
            mask &= series > low
        if high is not None:
            mask &= series < high
        return mask.to_numpy()

    raise SchemaError(f"Column '{spec.field}' is not filterable")


def filter_mask(records: RecordSet, filters: Dict[str, Any], exclude: Optional[str] = None) -> np.ndarray:
    """Conjunction of every active column filter, optionally ignoring one column."""
    mask = np.ones(len(records), dtype=bool)
    for column, value in filters.items():
        if column == exclude:
            continue
        col_mask = column_mask(records, records.column(column), value)
        if col_mask is not None:
            mask &= col_mask
    return mask


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------
class TableEngine:
    """
    Consistent filtered -> sorted -> paginated view over an immutable RecordSet.

    All derived data (filtered rows, facets, page rows) is recomputed from
    (records, state) on demand; only the TableState is mutated by operations.
    """

    def __init__(
        self,
        records: RecordSet,
        state: Optional[TableState] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.records = records
        self.state = state if state is not None else TableState()
        self.page_size = page_size

        # Drop state that refers to columns the current schema doesn't have
        known = set(records.fields)
        self.state.filters = {k: v for k, v in self.state.filters.items() if k in known}
        self.state.sorting = [k for k in self.state.sorting if k.column in known]
        self.clamp_page()

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------
    def set_filter(self, column: str, value: Any) -> None:
        """Replace the filter for one column; an empty value clears it."""
        spec = self.records.column(column)
        if spec.filter_kind == NO_FILTER:
            raise SchemaError(f"Column '{column}' is not filterable")

        if is_empty_filter(value):
            self.state.filters.pop(column, None)
        elif spec.filter_kind in (NUMERIC_RANGE, DATE_RANGE):
            self.state.filters[column] = list(_range_pair(value))
        else:
            self.state.filters[column] = value

        logger.debug("Filter set", extra={"column": column, "value": value})
        self.clamp_page()

    def set_range_filter(self, column: str, low: Any, high: Any) -> None:
        """Write both bounds of a range filter as one value."""
        self.set_filter(column, [low, high])

    def toggle_filter_value(self, column: str, value: str) -> None:
        """Categorical toggle: selecting the active value again clears the filter."""
        if self.state.filters.get(column) == value:
            self.set_filter(column, None)
        else:
            self.set_filter(column, value)

    def get_filter(self, column: str) -> Any:
        return self.state.filters.get(column)

    def clear_filters(self) -> None:
        self.state.filters.clear()
        self.clamp_page()

    def _mask(self, exclude: Optional[str] = None) -> np.ndarray:
        return filter_mask(self.records, self.state.filters, exclude=exclude)

    def filtered_row_ids(self) -> pd.Index:
        return self.records.row_ids[self._mask()]

    def filtered_rows(self) -> List[Dict[str, str]]:
        return self.records.records(list(self.filtered_row_ids()))

    # -------------------------------------------------------------------------
    # Facets (derived from all filters except the column's own)
    # -------------------------------------------------------------------------
    def get_faceted_values(self, column: str) -> Dict[str, int]:
        """Distinct values of a column with their row counts, sorted by value."""
        values = self.records.values(column)[self._mask(exclude=column)]
        counts = values.value_counts(sort=False)
        return {str(k): int(v) for k, v in sorted(counts.items())}

    def get_faceted_min_max(self, column: str) -> Optional[Tuple[Any, Any]]:
        """[min, max] of a numeric or date column, or None when no row parses."""
        spec = self.records.column(column)
        mask = self._mask(exclude=column)
        if spec.is_date:
            series = self.records.dates(column)[mask].dropna()
        else:
            series = self.records.numeric(column)[mask].dropna()
        if series.empty:
            return None
        low, high = series.min(), series.max()
        if spec.is_date:
            return pd.Timestamp(low), pd.Timestamp(high)
        return float(low), float(high)

    # -------------------------------------------------------------------------
    # Sorting
    # -------------------------------------------------------------------------
    def set_sort(self, column: str, direction: Optional[str], append: bool = False) -> None:
        """
        Replace (or append to) the sort sequence. direction=None removes the column.
        """
        self.records.column(column)
        if direction not in (ASC, DESC, None):
            raise ValueError(f"Unknown sort direction '{direction}'")

        remaining = [k for k in self.state.sorting if k.column != column]
        if direction is None:
            self.state.sorting = remaining
            return

        key = SortKey(column=column, direction=direction)
        self.state.sorting = remaining + [key] if append else [key]

    def toggle_sort(self, column: str) -> None:
        """Header click cycle: none -> asc -> desc -> none."""
        current = next((k for k in self.state.sorting if k.column == column), None)
        if current is None:
            self.set_sort(column, ASC)
        elif current.direction == ASC:
            self.set_sort(column, DESC)
        else:
            self.set_sort(column, None)

    def sort_direction(self, column: str) -> Optional[str]:
        return next((k.direction for k in self.state.sorting if k.column == column), None)

    def sorted_row_ids(self) -> pd.Index:
        """
        Filtered row ids in sort order.

        Keys are applied least significant first with a stable sort, so ties keep
        the order produced by the more significant keys and finally dataset order.
        """
        ids = self.filtered_row_ids()
        for key in reversed(self.state.sorting):
            series = self.records.sort_values(key.column).loc[ids]
            ids = series.sort_values(ascending=key.ascending, kind="mergesort", na_position="last").index
        return ids

    def sorted_rows(self) -> List[Dict[str, str]]:
        return self.records.records(list(self.sorted_row_ids()))

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------
    def row_count(self) -> int:
        return int(self._mask().sum())

    def page_count(self) -> int:
        return max(1, math.ceil(self.row_count() / self.page_size))

    def clamp_page(self) -> None:
        """Pull page_index back into range after the filtered set changed."""
        last = self.page_count() - 1
        clamped = min(max(self.state.page_index, 0), last)
        if clamped != self.state.page_index:
            logger.debug("Page index clamped", extra={"from": self.state.page_index, "to": clamped})
            self.state.page_index = clamped

    def can_previous_page(self) -> bool:
        return self.state.page_index > 0

    def can_next_page(self) -> bool:
        return self.state.page_index < self.page_count() - 1

    def next_page(self) -> None:
        if self.can_next_page():
            self.state.page_index += 1

    def previous_page(self) -> None:
        if self.can_previous_page():
            self.state.page_index -= 1

    def set_page(self, page_index: int) -> None:
        self.state.page_index = page_index
        self.clamp_page()

    def page_row_ids(self) -> List[str]:
        start = self.state.page_index * self.page_size
        return list(self.sorted_row_ids()[start:start + self.page_size])

    def page_rows(self) -> List[Dict[str, str]]:
        return self.records.records(self.page_row_ids())

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------
    def toggle_row_selection(self, row_id: str) -> None:
        row_id = str(row_id)
        if row_id in self.state.selection:
            self.state.selection.discard(row_id)
        else:
            self.state.selection.add(row_id)

    def set_row_selected(self, row_id: str, selected: bool) -> None:
        if selected:
            self.state.selection.add(str(row_id))
        else:
            self.state.selection.discard(str(row_id))

    def toggle_all_on_page(self, selected: bool) -> None:
        """Select / deselect the rows on the current page only."""
        page_ids = self.page_row_ids()
        if selected:
            self.state.selection.update(page_ids)
        else:
            self.state.selection.difference_update(page_ids)

    def is_all_page_selected(self) -> bool:
        page_ids = self.page_row_ids()
        return bool(page_ids) and all(rid in self.state.selection for rid in page_ids)

    def is_some_page_selected(self) -> bool:
        return any(rid in self.state.selection for rid in self.page_row_ids())

    def clear_selection(self) -> None:
        self.state.selection.clear()

    def selected_row_ids(self) -> List[str]:
        """Selected ids that exist in the current records, in dataset order."""
        return [rid for rid in self.records.row_ids if rid in self.state.selection]

    def selected_rows(self) -> List[Dict[str, str]]:
        return self.records.records(self.selected_row_ids())

    def selected_numbers(self) -> Tuple[str, ...]:
        """Snapshot of the selected phone numbers, handed to the dispatcher as-is."""
        return tuple(self.records.numbers(self.selected_row_ids()))

    # -------------------------------------------------------------------------
    # Column visibility (cosmetic only)
    # -------------------------------------------------------------------------
    def set_column_visibility(self, column: str, visible: bool) -> None:
        spec = self.records.column(column)
        if not spec.hideable and not visible:
            return
        self.state.column_visibility[column] = bool(visible)

    def is_column_visible(self, column: str) -> bool:
        return self.state.column_visibility.get(column, True)

    def visible_columns(self) -> List[ColumnSpec]:
        return [c for c in self.records.columns if self.is_column_visible(c.field)]
