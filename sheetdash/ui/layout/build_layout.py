from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc

from sheetdash.core.table_state import TableState
from sheetdash.ui.ids import IDs
from sheetdash.ui.layout.build_filter_panel import build_filter_panel
from sheetdash.ui.layout.build_navbar import build_navbar
from sheetdash.ui.layout.build_progress_panel import build_progress_panel
from sheetdash.ui.layout.build_send_panel import build_send_panel
from sheetdash.ui.layout.build_table_panel import build_table_panel

if TYPE_CHECKING:
    from sheetdash.ui.config import AppConfig


def build_layout(ctx: AppConfig):
    cfg = ctx.global_config
    version = ctx.dataset_manager.version if ctx.dataset_manager is not None else 0

    return dbc.Container(
        fluid=True,
        className="sd-root",
        children=[
            build_navbar(cfg),

            # App-level stores
            dcc.Store(id=IDs.Store.TABLE_STATE, storage_type="memory", data=TableState().to_dict()),
            dcc.Store(id=IDs.Store.DATASET_VERSION, data=version),
            dcc.Store(id=IDs.Store.ACTIVE_JOB, storage_type="memory"),

            build_filter_panel(list(cfg.columns)),
            build_table_panel(),
            build_send_panel(),
            build_progress_panel(),
        ],
    )
