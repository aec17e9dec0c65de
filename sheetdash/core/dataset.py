from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from sheetdash.core.columns import ColumnSpec, NUMBER_FIELD
from sheetdash.core.exceptions import SchemaError


class RecordSet:
    """
    Immutable collection of sheet records used throughout the dashboard.

    Includes:
    - One string-normalised DataFrame indexed by row id
    - Lazily parsed numeric / date Series for range filters and sorting
    - Column specs describing how each field is filtered

    A refresh never patches a RecordSet; it builds a new one.
    """

    def __init__(
        self,
        frame: pd.DataFrame,
        columns: Sequence[ColumnSpec],
        date_format: Optional[str] = None,
    ) -> None:
        self.columns: List[ColumnSpec] = list(columns)
        self._by_field: Dict[str, ColumnSpec] = {c.field: c for c in self.columns}
        self.date_format = date_format

        missing = [c.field for c in self.columns if c.field not in frame.columns]
        if missing:
            raise SchemaError(f"Record frame is missing columns: {missing}")

        if not frame.index.is_unique:
            raise SchemaError("Record row ids must be unique")

        # Pre-normalise everything to str so predicates never see NaN/None
        self._frame = frame[[c.field for c in self.columns]].fillna("").astype(str).copy()
        self._frame.index = self._frame.index.astype(str)

        self._numeric_cache: Dict[str, pd.Series] = {}
        self._date_cache: Dict[str, pd.Series] = {}

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------
    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Any]],
        columns: Sequence[ColumnSpec],
        date_format: Optional[str] = None,
    ) -> RecordSet:
        """
        Build a RecordSet from positional rows. Short rows are padded with "",
        extra trailing cells are dropped. Row ids are the row positions.
        """
        fields = [c.field for c in columns]
        width = len(fields)
        normalised = [
            [("" if cell is None else str(cell)) for cell in list(row)[:width]]
            + [""] * max(0, width - len(row))
            for row in rows
        ]
        frame = pd.DataFrame(normalised, columns=fields, dtype=str)
        frame.index = [str(i) for i in range(len(normalised))]
        return cls(frame, columns, date_format=date_format)

    @classmethod
    def empty(cls, columns: Sequence[ColumnSpec]) -> RecordSet:
        return cls.from_rows([], columns)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._frame)

    @property
    def frame(self) -> pd.DataFrame:
        """Return a copy so callers cannot mutate the loaded records."""
        return self._frame.copy()

    @property
    def row_ids(self) -> pd.Index:
        return self._frame.index

    @property
    def fields(self) -> List[str]:
        return [c.field for c in self.columns]

    def column(self, field: str) -> ColumnSpec:
        try:
            return self._by_field[field]
        except KeyError:
            raise SchemaError(f"Unknown column '{field}'")

    def values(self, field: str) -> pd.Series:
        """Raw string values for a column."""
        self.column(field)
        return self._frame[field]

    def numeric(self, field: str) -> pd.Series:
        """
        Column parsed as floats (NaN where unparseable).

        Values such as "9" and "10" must compare numerically, never lexicographically.
        """
        cached = self._numeric_cache.get(field)
        if cached is not None:
            return cached

        raw = self.values(field).str.replace(",", "", regex=False).str.strip()
        parsed = pd.to_numeric(raw, errors="coerce")
        self._numeric_cache[field] = parsed
        return parsed

    def dates(self, field: str) -> pd.Series:
        """Column parsed as calendar dates (NaT where unparseable)."""
        cached = self._date_cache.get(field)
        if cached is not None:
            return cached

        raw = self.values(field).str.strip()
        fmt = self.date_format or "mixed"
        parsed = pd.to_datetime(raw.where(raw != ""), format=fmt, errors="coerce").dt.normalize()
        self._date_cache[field] = parsed
        return parsed

    def sort_values(self, field: str) -> pd.Series:
        """Series used as the sort comparator for a column, by its filter kind."""
        spec = self.column(field)
        if spec.is_numeric:
            return self.numeric(field)
        if spec.is_date:
            return self.dates(field)
        return self.values(field)

    def records(self, row_ids: Optional[Sequence[str]] = None) -> List[Dict[str, str]]:
        """Records as dicts with an extra "id" key, in the order of row_ids (or dataset order)."""
        frame = self._frame if row_ids is None else self._frame.loc[list(row_ids)]
        out = frame.reset_index(names="id")
        return out.to_dict("records")

    def numbers(self, row_ids: Sequence[str]) -> List[str]:
        """Phone numbers for the given row ids, skipping ids not in this dataset."""
        known = [rid for rid in row_ids if rid in self._frame.index]
        return self._frame.loc[known, NUMBER_FIELD].tolist() if NUMBER_FIELD in self._frame else []
