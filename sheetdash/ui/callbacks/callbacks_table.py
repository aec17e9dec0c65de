from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

import dash
from dash import ALL, Input, Output, State, exceptions

from sheetdash.core.columns import CATEGORICAL, DATE_RANGE, NUMERIC_RANGE, TEXT
from sheetdash.core.exceptions import SchemaError
from sheetdash.core.table_engine import TableEngine
from sheetdash.ui.callbacks.callbacks_utils import engine_from_store, values_by_column
from sheetdash.ui.helpers import (
    build_records_table,
    categorical_options,
    date_bounds,
    page_label,
    range_placeholders,
    selection_summary,
)
from sheetdash.ui.ids import IDs

if TYPE_CHECKING:
    from sheetdash.ui.config import AppConfig

logger = logging.getLogger(__name__)

FILTER_PATTERNS = (
    IDs.Pattern.FILTER_SELECT,
    IDs.Pattern.FILTER_MIN,
    IDs.Pattern.FILTER_MAX,
    IDs.Pattern.FILTER_DATE,
    IDs.Pattern.FILTER_TEXT,
)
CLICK_PATTERNS = (IDs.Pattern.SORT_HEADER, IDs.Pattern.ROW_TOGGLE, IDs.Pattern.PAGE_TOGGLE)

# positions of the filter Inputs in dash.ctx.inputs_list
_SELECT, _MIN, _MAX, _DATE_START, _DATE_END, _TEXT = range(6)

# positions of the pattern Outputs in dash.ctx.outputs_list
_OUT_OPTIONS, _OUT_MIN, _OUT_MAX, _OUT_DATE = 6, 7, 8, 9


def _apply_filter_controls(engine: TableEngine, inputs_list: list) -> None:
    """Rebuild every column filter from the current values of the filter controls."""
    selects = values_by_column(inputs_list[_SELECT])
    mins = values_by_column(inputs_list[_MIN])
    maxs = values_by_column(inputs_list[_MAX])
    starts = values_by_column(inputs_list[_DATE_START])
    ends = values_by_column(inputs_list[_DATE_END])
    texts = values_by_column(inputs_list[_TEXT])

    for col in engine.records.columns:
        field = col.field
        if col.filter_kind == CATEGORICAL and field in selects:
            engine.set_filter(field, selects[field])
        elif col.filter_kind == NUMERIC_RANGE and (field in mins or field in maxs):
            engine.set_range_filter(field, mins.get(field), maxs.get(field))
        elif col.filter_kind == DATE_RANGE and (field in starts or field in ends):
            engine.set_range_filter(field, starts.get(field), ends.get(field))
        elif col.filter_kind == TEXT and field in texts:
            engine.set_filter(field, texts[field])


def apply_table_event(
    engine: TableEngine,
    triggered_id: Any,
    triggered_value: Any,
    inputs_list: list,
    visible_fields: Optional[List[str]],
) -> None:
    """
    Apply one UI event to the engine state.

    Raises PreventUpdate for events that change nothing (re-rendered clickable
    controls report n_clicks=0, unknown triggers, rejected filter values).
    """
    if triggered_id is None:
        raise exceptions.PreventUpdate

    if isinstance(triggered_id, dict):
        kind = triggered_id.get("type")

        if kind in CLICK_PATTERNS and not triggered_value:
            raise exceptions.PreventUpdate

        if kind in FILTER_PATTERNS:
            try:
                _apply_filter_controls(engine, inputs_list)
            except SchemaError:
                logger.exception("Rejected filter input")
                raise exceptions.PreventUpdate
        elif kind == IDs.Pattern.SORT_HEADER:
            engine.toggle_sort(triggered_id["column"])
        elif kind == IDs.Pattern.ROW_TOGGLE:
            engine.toggle_row_selection(triggered_id["index"])
        elif kind == IDs.Pattern.PAGE_TOGGLE:
            engine.toggle_all_on_page(not engine.is_all_page_selected())
        else:
            raise exceptions.PreventUpdate

    elif triggered_id == IDs.Control.PAGE_PREV_BTN:
        engine.previous_page()
    elif triggered_id == IDs.Control.PAGE_NEXT_BTN:
        engine.next_page()
    elif triggered_id == IDs.Control.COLUMN_VISIBILITY:
        visible = set(visible_fields or [])
        for col in engine.records.columns:
            if col.hideable:
                engine.set_column_visibility(col.field, col.field in visible)
    elif triggered_id == IDs.Store.DATASET_VERSION:
        # Row ids are positional: they mean nothing across loads
        engine.clear_selection()
        engine.set_page(0)
    else:
        raise exceptions.PreventUpdate


def render_table_outputs(ctx: AppConfig, state_data: object, outputs_list: list) -> Tuple[Any, ...]:
    """Everything the render callback writes, in Output order."""
    engine = engine_from_store(ctx, state_data)

    select_options = []
    for spec in outputs_list[_OUT_OPTIONS]:
        column = spec["id"]["column"]
        select_options.append(
            categorical_options(engine.get_faceted_values(column), engine.get_filter(column))
        )

    min_placeholders = []
    for spec in outputs_list[_OUT_MIN]:
        low, _ = range_placeholders(engine.get_faceted_min_max(spec["id"]["column"]))
        min_placeholders.append(low or "min")

    max_placeholders = []
    for spec in outputs_list[_OUT_MAX]:
        _, high = range_placeholders(engine.get_faceted_min_max(spec["id"]["column"]))
        max_placeholders.append(high or "max")

    visible_months = []
    date_placeholders = []
    for spec in outputs_list[_OUT_DATE]:
        low, _ = date_bounds(engine.get_faceted_min_max(spec["id"]["column"]))
        visible_months.append(low)
        date_placeholders.append(low or "From")

    load_error = ctx.dataset_manager.last_error if ctx.dataset_manager is not None else None
    alert = f"Could not load the sheet: {load_error}" if load_error else None

    return (
        build_records_table(engine),
        page_label(engine),
        not engine.can_previous_page(),
        not engine.can_next_page(),
        selection_summary(engine),
        not engine.selected_row_ids(),
        select_options,
        min_placeholders,
        max_placeholders,
        visible_months,
        date_placeholders,
        alert,
        bool(load_error),
    )


def register_table_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # UI events -> table-state store
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.TABLE_STATE, "data"),
        Input({"type": IDs.Pattern.FILTER_SELECT, "column": ALL}, "value"),
        Input({"type": IDs.Pattern.FILTER_MIN, "column": ALL}, "value"),
        Input({"type": IDs.Pattern.FILTER_MAX, "column": ALL}, "value"),
        Input({"type": IDs.Pattern.FILTER_DATE, "column": ALL}, "start_date"),
        Input({"type": IDs.Pattern.FILTER_DATE, "column": ALL}, "end_date"),
        Input({"type": IDs.Pattern.FILTER_TEXT, "column": ALL}, "value"),
        Input({"type": IDs.Pattern.SORT_HEADER, "column": ALL}, "n_clicks"),
        Input({"type": IDs.Pattern.ROW_TOGGLE, "index": ALL}, "n_clicks"),
        Input({"type": IDs.Pattern.PAGE_TOGGLE, "index": ALL}, "n_clicks"),
        Input(IDs.Control.PAGE_PREV_BTN, "n_clicks"),
        Input(IDs.Control.PAGE_NEXT_BTN, "n_clicks"),
        Input(IDs.Control.COLUMN_VISIBILITY, "value"),
        Input(IDs.Store.DATASET_VERSION, "data"),
        State(IDs.Store.TABLE_STATE, "data"),
        prevent_initial_call=True,
    )
    def sync_table_state(*args):
        state_data = args[-1]
        visible_fields = args[11]
        triggered_value = dash.ctx.triggered[0].get("value") if dash.ctx.triggered else None

        engine = engine_from_store(ctx, state_data)
        apply_table_event(engine, dash.ctx.triggered_id, triggered_value, dash.ctx.inputs_list, visible_fields)
        return engine.state.to_dict()

    # ---------------------------------------------------------
    # table-state store -> table, pager, filter facets
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.TABLE_CONTAINER, "children"),
        Output(IDs.Control.PAGE_LABEL, "children"),
        Output(IDs.Control.PAGE_PREV_BTN, "disabled"),
        Output(IDs.Control.PAGE_NEXT_BTN, "disabled"),
        Output(IDs.Control.SELECTION_SUMMARY, "children"),
        Output(IDs.Control.OPEN_SEND_BTN, "disabled"),
        Output({"type": IDs.Pattern.FILTER_SELECT, "column": ALL}, "options"),
        Output({"type": IDs.Pattern.FILTER_MIN, "column": ALL}, "placeholder"),
        Output({"type": IDs.Pattern.FILTER_MAX, "column": ALL}, "placeholder"),
        Output({"type": IDs.Pattern.FILTER_DATE, "column": ALL}, "initial_visible_month"),
        Output({"type": IDs.Pattern.FILTER_DATE, "column": ALL}, "start_date_placeholder_text"),
        Output(IDs.Control.LOAD_ALERT, "children"),
        Output(IDs.Control.LOAD_ALERT, "is_open"),
        Input(IDs.Store.TABLE_STATE, "data"),
        Input(IDs.Store.DATASET_VERSION, "data"),
    )
    def render_table(state_data, _version):
        return render_table_outputs(ctx, state_data, dash.ctx.outputs_list)
