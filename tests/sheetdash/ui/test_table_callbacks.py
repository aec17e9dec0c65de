from __future__ import annotations

from pathlib import Path

import pytest
from dash import exceptions

from sheetdash.config.model import AppSettings, Credentials, GlobalConfig
from sheetdash.core.columns import CATEGORICAL, DATE_RANGE, NUMERIC_RANGE, TEXT, ColumnSpec
from sheetdash.core.dataset import RecordSet
from sheetdash.core.table_state import TableState
from sheetdash.services.dataset_service import DatasetManager
from sheetdash.ui.callbacks.callbacks_table import apply_table_event, render_table_outputs
from sheetdash.ui.callbacks.callbacks_utils import engine_from_store
from sheetdash.ui.config import AppConfig
from sheetdash.ui.ids import IDs, filter_id, row_toggle_id, sort_header_id

COLUMNS = [
    ColumnSpec("source", "Source", CATEGORICAL),
    ColumnSpec("date", "Date", DATE_RANGE),
    ColumnSpec("number", "Number", hideable=False),
    ColumnSpec("seats", "Seats", NUMERIC_RANGE),
    ColumnSpec("remarks", "Remarks", TEXT),
]

ROWS = [
    ["Web", "2024-01-10", "900001", "10", "call back"],
    ["Referral", "2024-01-11", "900002", "9", ""],
    ["Web", "2024-01-12", "900003", "100", "CALL later"],
]


class FakeSheetClient:
    def __init__(self, rows):
        self.rows = rows

    def load_records(self):
        return RecordSet.from_rows(self.rows, COLUMNS)


def _ctx(rows=ROWS, page_size=2) -> AppConfig:
    settings = AppSettings(
        config_root=Path("config"),
        global_config=GlobalConfig(columns=COLUMNS, page_size=page_size),
        credentials=Credentials("sheet-123", "Leads", "api-key", "wa-token", "555000"),
    )
    manager = DatasetManager(FakeSheetClient(rows))
    manager.refresh()
    return AppConfig(settings=settings, dataset_manager=manager)


def _entries(kind, prop, values):
    return [
        {"id": filter_id(kind, column), "property": prop, "value": value}
        for column, value in values.items()
    ]


def _filter_inputs(select=None, low=None, high=None, start=None, end=None, text=None):
    """Filter Inputs in the order the sync callback declares them."""
    return [
        _entries(IDs.Pattern.FILTER_SELECT, "value", {"source": select}),
        _entries(IDs.Pattern.FILTER_MIN, "value", {"seats": low}),
        _entries(IDs.Pattern.FILTER_MAX, "value", {"seats": high}),
        _entries(IDs.Pattern.FILTER_DATE, "start_date", {"date": start}),
        _entries(IDs.Pattern.FILTER_DATE, "end_date", {"date": end}),
        _entries(IDs.Pattern.FILTER_TEXT, "value", {"remarks": text}),
    ]


def _outputs_list():
    """Output specs of the render callback; only the pattern entries are read."""
    return [
        {}, {}, {}, {}, {}, {},
        [{"id": filter_id(IDs.Pattern.FILTER_SELECT, "source"), "property": "options"}],
        [{"id": filter_id(IDs.Pattern.FILTER_MIN, "seats"), "property": "placeholder"}],
        [{"id": filter_id(IDs.Pattern.FILTER_MAX, "seats"), "property": "placeholder"}],
        [{"id": filter_id(IDs.Pattern.FILTER_DATE, "date"), "property": "initial_visible_month"}],
        [{"id": filter_id(IDs.Pattern.FILTER_DATE, "date"), "property": "start_date_placeholder_text"}],
        {}, {},
    ]


def test_filter_event_maps_every_control_to_its_column():
    engine = engine_from_store(_ctx(), None)

    apply_table_event(
        engine,
        filter_id(IDs.Pattern.FILTER_MIN, "seats"),
        9,
        _filter_inputs(select="Web", low=9, high=None, start="2024-01-09", end=None, text="call"),
        None,
    )

    assert engine.state.filters == {
        "source": "Web",
        "seats": [9, None],
        "date": ["2024-01-09", None],
        "remarks": "call",
    }
    assert list(engine.filtered_row_ids()) == ["0", "2"]


def test_clearing_a_control_clears_its_filter():
    engine = engine_from_store(_ctx(), TableState(filters={"source": "Web"}).to_dict())

    apply_table_event(engine, filter_id(IDs.Pattern.FILTER_SELECT, "source"), None, _filter_inputs(), None)

    assert engine.state.filters == {}


def test_rerendered_click_controls_are_ignored():
    engine = engine_from_store(_ctx(), None)

    for triggered in (row_toggle_id("0"), sort_header_id("seats"), {"type": IDs.Pattern.PAGE_TOGGLE, "index": "page"}):
        with pytest.raises(exceptions.PreventUpdate):
            apply_table_event(engine, triggered, 0, _filter_inputs(), None)

    assert engine.state == TableState()


def test_click_events_update_sort_selection_and_page():
    engine = engine_from_store(_ctx(), None)

    apply_table_event(engine, sort_header_id("seats"), 1, _filter_inputs(), None)
    apply_table_event(engine, row_toggle_id("1"), 1, _filter_inputs(), None)
    apply_table_event(engine, IDs.Control.PAGE_NEXT_BTN, 1, _filter_inputs(), None)
    apply_table_event(engine, {"type": IDs.Pattern.PAGE_TOGGLE, "index": "page"}, 1, _filter_inputs(), None)

    assert engine.sort_direction("seats") == "asc"
    assert engine.state.page_index == 1
    # page 2 under seats asc is row "2" (100); row "1" was selected on page 1
    assert engine.selected_row_ids() == ["1", "2"]


def test_visibility_event_keeps_fixed_columns():
    engine = engine_from_store(_ctx(), None)

    apply_table_event(engine, IDs.Control.COLUMN_VISIBILITY, ["source"], _filter_inputs(), ["source"])

    assert [c.field for c in engine.visible_columns()] == ["source", "number"]


def test_dataset_version_change_drops_selection_and_page():
    data = TableState(selection={"0", "2"}, page_index=1).to_dict()
    engine = engine_from_store(_ctx(), data)

    apply_table_event(engine, IDs.Store.DATASET_VERSION, 2, _filter_inputs(), None)

    assert engine.state.selection == set()
    assert engine.state.page_index == 0


def test_unknown_trigger_prevents_update():
    engine = engine_from_store(_ctx(), None)

    with pytest.raises(exceptions.PreventUpdate):
        apply_table_event(engine, None, None, _filter_inputs(), None)
    with pytest.raises(exceptions.PreventUpdate):
        apply_table_event(engine, "something-else", 1, _filter_inputs(), None)


def test_render_outputs_follow_state():
    ctx = _ctx()
    data = TableState(filters={"source": "Web"}, selection={"2"}).to_dict()

    outputs = render_table_outputs(ctx, data, _outputs_list())

    (_table, label, prev_disabled, next_disabled, summary, send_disabled,
     options, min_ph, max_ph, months, date_ph, alert, alert_open) = outputs
    assert label == "Page 1 of 1"
    assert prev_disabled and next_disabled
    assert summary == "1 of 2 row(s) selected."
    assert send_disabled is False
    # own filter excluded from its facet
    assert [o["value"] for o in options[0]] == ["Referral", "Web"]
    assert min_ph == ["10"]
    assert max_ph == ["100"]
    assert months == ["2024-01-10"]
    assert date_ph == ["2024-01-10"]
    assert alert is None and alert_open is False


def test_render_outputs_without_selection_disable_send():
    outputs = render_table_outputs(_ctx(), None, _outputs_list())

    assert outputs[5] is True
