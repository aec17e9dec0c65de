from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import dash_bootstrap_components as dbc
import pandas as pd
from dash import html

from sheetdash.core.table_engine import TableEngine
from sheetdash.core.table_state import ASC, DESC
from sheetdash.ui.ids import IDs, row_toggle_id, sort_header_id

FONT_FAMILY = 'system-ui, -apple-system, BlinkMacSystemFont, "SF Pro Text", "Segoe UI", sans-serif'

HEADER_STYLE = {
    "fontFamily": FONT_FAMILY,
    "fontSize": "12px",
    "fontWeight": "600",
    "backgroundColor": "#f3f4f6",
    "borderBottom": "1px solid #e5e7eb",
    "color": "#111827",
    "padding": "8px 12px",
    "whiteSpace": "nowrap",
}

CELL_STYLE = {
    "fontFamily": FONT_FAMILY,
    "fontSize": "12px",
    "padding": "6px 12px",
    "borderBottom": "1px solid #e5e7eb",
    "color": "#374151",
    "verticalAlign": "middle",
}

SORT_ICONS = {ASC: " ▲", DESC: " ▼", None: ""}


def categorical_options(facets: Dict[str, int], selected: Optional[str]) -> List[dict]:
    """
    Dropdown options for a categorical filter. The active value is always kept so
    the dropdown never drops it when other filters hide its rows.
    """
    values = [v for v in facets if v != ""]
    if selected and selected not in facets:
        values = [selected] + values
    return [{"label": f"{v} ({facets.get(v, 0)})", "value": v} for v in values]


def format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def range_placeholders(min_max: Optional[Tuple[Any, Any]]) -> Tuple[str, str]:
    if min_max is None:
        return "min", "max"
    return format_number(min_max[0]), format_number(min_max[1])


def date_bounds(min_max: Optional[Tuple[pd.Timestamp, pd.Timestamp]]) -> Tuple[Optional[str], Optional[str]]:
    if min_max is None:
        return None, None
    return min_max[0].date().isoformat(), min_max[1].date().isoformat()


def _selection_box(checked: bool, indeterminate: bool = False) -> html.Span:
    mark = "☑" if checked else ("▣" if indeterminate else "☐")
    return html.Span(mark, className="sd-check", style={"fontSize": "16px", "lineHeight": "1"})


def build_records_table(engine: TableEngine) -> dbc.Table:
    """
    Builds a styled dbc.Table for the current page.
    Selection boxes and sortable headers are clickable Divs (n_clicks), so
    re-rendering the table never looks like a user toggle.
    """
    columns = engine.visible_columns()
    rows = engine.page_rows()

    all_selected = engine.is_all_page_selected()
    some_selected = engine.is_some_page_selected()

    header_cells = [
        html.Th(
            html.Div(
                _selection_box(all_selected, some_selected and not all_selected),
                id={"type": IDs.Pattern.PAGE_TOGGLE, "index": "page"},
                n_clicks=0,
                title="Select all on page",
                style={"cursor": "pointer"},
            ),
            style={**HEADER_STYLE, "width": "36px"},
        )
    ]
    for col in columns:
        header_cells.append(
            html.Th(
                html.Div(
                    col.label + SORT_ICONS[engine.sort_direction(col.field)],
                    id=sort_header_id(col.field),
                    n_clicks=0,
                    style={"cursor": "pointer", "userSelect": "none"},
                ),
                style=HEADER_STYLE,
            )
        )

    body_rows = []
    for record in rows:
        row_id = record["id"]
        selected = row_id in engine.state.selection
        cells = [
            html.Td(
                html.Div(
                    _selection_box(selected),
                    id=row_toggle_id(row_id),
                    n_clicks=0,
                    style={"cursor": "pointer"},
                ),
                style=CELL_STYLE,
            )
        ]
        for col in columns:
            cells.append(html.Td(record.get(col.field, ""), style=CELL_STYLE))
        body_rows.append(html.Tr(cells, className="table-active" if selected else None))

    if not body_rows:
        body_rows = [
            html.Tr(
                html.Td("No results.", colSpan=len(columns) + 1, className="text-center text-muted py-4"),
            )
        ]

    return dbc.Table(
        [html.Thead(html.Tr(header_cells)), html.Tbody(body_rows)],
        bordered=False,
        hover=True,
        responsive=True,
        className="mb-0",
        style={"border": "1px solid #e5e7eb", "borderRadius": "4px"},
    )


def page_label(engine: TableEngine) -> str:
    return f"Page {engine.state.page_index + 1} of {engine.page_count()}"


def selection_summary(engine: TableEngine) -> str:
    return f"{len(engine.selected_row_ids())} of {engine.row_count()} row(s) selected."


def build_message_preview(
    header_kind: Optional[str],
    header_text: Optional[str],
    image: Optional[str],
    text1: Optional[str],
    text2: Optional[str],
    text3: Optional[str],
) -> html.Div:
    """Chat-bubble preview of the template as the recipient would see it."""
    parts: List[Any] = []
    if header_kind == "image" and image:
        parts.append(
            html.Img(
                src=image,
                alt="image",
                style={"width": "100%", "height": "160px", "objectFit": "cover", "borderRadius": "8px"},
                className="mb-2",
            )
        )
    if header_kind == "text" and header_text:
        parts.append(html.Div(header_text, className="fw-bold mb-2"))

    for text in (text1, text2, text3):
        if text:
            parts.append(html.Div(text, className="mb-2"))

    parts.append(html.Div("If you have any queries, please click on Live Chat ⬇️", className="mb-2"))
    parts.append(html.Hr(className="my-1"))
    for action in ("Live Chat", "Visit website", "Contact Us"):
        parts.append(html.Div(action, className="text-primary text-center py-1"))

    return html.Div(
        html.Div(parts, className="bg-white rounded p-2 small", style={"maxWidth": "24rem"}),
        className="p-2",
        style={"backgroundColor": "#d6d3d1"},
    )
