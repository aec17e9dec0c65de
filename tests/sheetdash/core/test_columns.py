from __future__ import annotations

import pytest

from sheetdash.core.columns import (
    CATEGORICAL,
    DEFAULT_COLUMNS,
    NO_FILTER,
    ColumnSpec,
    resolve_columns,
)
from sheetdash.core.exceptions import SchemaError


def test_default_and_compact_variants():
    default = resolve_columns(None)
    compact = resolve_columns("compact")

    assert [c.field for c in default] == [c.field for c in DEFAULT_COLUMNS]
    assert "no_of_seats" in [c.field for c in default]
    assert "no_of_seats" not in [c.field for c in compact]
    assert len(compact) == len(default) - 1


def test_explicit_columns_win_over_variant():
    columns = resolve_columns(
        "compact",
        [
            {"field": "number", "label": "Phone"},
            {"field": "city", "filter": "categorical", "hideable": False},
        ],
    )

    assert columns == [
        ColumnSpec("number", "Phone", NO_FILTER, True),
        ColumnSpec("city", "city", CATEGORICAL, False),
    ]


@pytest.mark.parametrize(
    "variant, raw",
    [
        ("wide", None),
        (None, [{"field": "number"}, {"field": "number"}]),
        (None, [{"field": "name"}]),
        (None, [{"field": "number", "filter": "fuzzy"}]),
        (None, [{"label": "No field"}]),
    ],
)
def test_invalid_schemas_raise(variant, raw):
    with pytest.raises(SchemaError):
        resolve_columns(variant, raw)
