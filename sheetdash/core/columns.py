from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from sheetdash.core.exceptions import SchemaError

CATEGORICAL = "categorical"
NUMERIC_RANGE = "numeric_range"
DATE_RANGE = "date_range"
TEXT = "text"
NO_FILTER = "none"

FILTER_KINDS = (CATEGORICAL, NUMERIC_RANGE, DATE_RANGE, TEXT, NO_FILTER)

# Column holding the recipient phone number (dispatcher input)
NUMBER_FIELD = "number"


@dataclass(frozen=True)
class ColumnSpec:
    """
    Declares one sheet column: its record field, header label and filter kind.

    :param field: record attribute / DataFrame column name
    :param label: header shown in the table and filter bar
    :param filter_kind: one of FILTER_KINDS; decides predicate, facet and sort comparator
    :param hideable: whether the column appears in the visibility menu
    """
    field: str
    label: str
    filter_kind: str = NO_FILTER
    hideable: bool = True

    @property
    def is_numeric(self) -> bool:
        return self.filter_kind == NUMERIC_RANGE

    @property
    def is_date(self) -> bool:
        return self.filter_kind == DATE_RANGE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ColumnSpec:
        if "field" not in data:
            raise SchemaError(f"Column entry without 'field': {data!r}")
        kind = data.get("filter", NO_FILTER)
        if kind not in FILTER_KINDS:
            raise SchemaError(f"Unknown filter kind '{kind}' for column '{data['field']}'")
        return cls(
            field=str(data["field"]),
            label=str(data.get("label") or data["field"]),
            filter_kind=kind,
            hideable=bool(data.get("hideable", True)),
        )


DEFAULT_COLUMNS: List[ColumnSpec] = [
    ColumnSpec("source", "Source", CATEGORICAL),
    ColumnSpec("date", "Date", DATE_RANGE),
    ColumnSpec("name", "Name"),
    ColumnSpec("number", "Number"),
    ColumnSpec("no_of_seats", "No. of Seats", NUMERIC_RANGE),
    ColumnSpec("requirement", "Requirement", CATEGORICAL),
    ColumnSpec("location", "Location", CATEGORICAL),
    ColumnSpec("budget_per_seat", "Budget per Seat", NUMERIC_RANGE),
    ColumnSpec("visit_planned", "Visit Planned", DATE_RANGE),
    ColumnSpec("visit1", "Visit 1"),
    ColumnSpec("status", "Status", CATEGORICAL),
    ColumnSpec("remarks", "Remarks", TEXT),
]

# Same sheet layout without the seat count column
COMPACT_COLUMNS: List[ColumnSpec] = [c for c in DEFAULT_COLUMNS if c.field != "no_of_seats"]

SCHEMA_VARIANTS: Dict[str, List[ColumnSpec]] = {
    "default": DEFAULT_COLUMNS,
    "compact": COMPACT_COLUMNS,
}


def resolve_columns(variant: str | None, raw_columns: Sequence[Dict[str, Any]] | None = None) -> List[ColumnSpec]:
    """
    Return the column list for a deployment.

    Explicit ``columns`` entries win over the named ``schema`` variant.

    Raises:
        SchemaError: on unknown variant, duplicate fields or a missing number column
    """
    if raw_columns:
        columns = [ColumnSpec.from_dict(entry) for entry in raw_columns]
    else:
        name = variant or "default"
        if name not in SCHEMA_VARIANTS:
            raise SchemaError(
                f"Unknown schema variant '{name}' (expected one of {sorted(SCHEMA_VARIANTS)})"
            )
        columns = list(SCHEMA_VARIANTS[name])

    fields = [c.field for c in columns]
    duplicates = sorted({f for f in fields if fields.count(f) > 1})
    if duplicates:
        raise SchemaError(f"Duplicate column fields in schema: {duplicates}")

    if NUMBER_FIELD not in fields:
        raise SchemaError(f"Schema must declare a '{NUMBER_FIELD}' column")

    return columns
