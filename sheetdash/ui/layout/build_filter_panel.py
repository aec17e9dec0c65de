from __future__ import annotations

from typing import List

import dash_bootstrap_components as dbc
from dash import dcc, html

from sheetdash.core.columns import CATEGORICAL, DATE_RANGE, NUMERIC_RANGE, TEXT, ColumnSpec
from sheetdash.ui.ids import IDs, filter_id


def _categorical_filter(col: ColumnSpec) -> html.Div:
    return html.Div(
        [
            html.Label(col.label, className="form-label"),
            dcc.Dropdown(
                id=filter_id(IDs.Pattern.FILTER_SELECT, col.field),
                options=[],
                multi=False,
                clearable=True,
                placeholder="All",
                style={"minWidth": "160px"},
            ),
        ],
        className="text-center",
    )


def _numeric_filter(col: ColumnSpec) -> html.Div:
    return html.Div(
        [
            html.Label(col.label, className="form-label"),
            html.Div(
                [
                    dcc.Input(
                        id=filter_id(IDs.Pattern.FILTER_MIN, col.field),
                        type="number",
                        placeholder="min",
                        debounce=True,
                        className="form-control form-control-sm",
                        style={"width": "90px"},
                    ),
                    dcc.Input(
                        id=filter_id(IDs.Pattern.FILTER_MAX, col.field),
                        type="number",
                        placeholder="max",
                        debounce=True,
                        className="form-control form-control-sm",
                        style={"width": "90px"},
                    ),
                ],
                className="d-flex gap-1",
            ),
        ],
        className="text-center",
    )


def _date_filter(col: ColumnSpec) -> html.Div:
    return html.Div(
        [
            html.Label(col.label, className="form-label d-block"),
            dcc.DatePickerRange(
                id=filter_id(IDs.Pattern.FILTER_DATE, col.field),
                clearable=True,
                display_format="YYYY-MM-DD",
                start_date_placeholder_text="From",
                end_date_placeholder_text="To",
            ),
        ],
        className="text-center",
    )


def build_filter_panel(columns: List[ColumnSpec]) -> dbc.Card:
    """
    Filter bar: one control per filterable column, built from the schema.
    Options / placeholders are filled in from facets by the render callback.
    """
    controls = []
    text_inputs = []
    for col in columns:
        if col.filter_kind == CATEGORICAL:
            controls.append(_categorical_filter(col))
        elif col.filter_kind == NUMERIC_RANGE:
            controls.append(_numeric_filter(col))
        elif col.filter_kind == DATE_RANGE:
            controls.append(_date_filter(col))
        elif col.filter_kind == TEXT:
            text_inputs.append(
                dcc.Input(
                    id=filter_id(IDs.Pattern.FILTER_TEXT, col.field),
                    type="text",
                    placeholder=f"Filter by {col.label.lower()}...",
                    debounce=True,
                    className="form-control",
                    style={"maxWidth": "24rem"},
                )
            )

    controls.append(
        html.Div(
            dbc.Button("Refresh", id=IDs.Control.REFRESH_BTN, color="primary"),
            className="d-flex align-items-end",
        )
    )

    hideable = [c for c in columns if c.hideable]
    visibility_menu = dbc.DropdownMenu(
        label="Columns",
        color="secondary",
        children=[
            html.Div(
                dcc.Checklist(
                    id=IDs.Control.COLUMN_VISIBILITY,
                    options=[{"label": f" {c.label}", "value": c.field} for c in hideable],
                    value=[c.field for c in hideable],
                    labelStyle={"display": "block"},
                ),
                className="px-3 py-1",
            )
        ],
        className="ms-auto",
    )

    return dbc.Card(
        [
            dbc.CardHeader("Filters", className="fw-semibold"),
            dbc.CardBody(
                [
                    html.Div(controls, className="d-flex flex-wrap gap-3"),
                    html.Div(
                        text_inputs + [visibility_menu],
                        className="d-flex align-items-center gap-2 pt-3",
                    ),
                ]
            ),
        ],
        className="sd-filters mt-3",
    )
