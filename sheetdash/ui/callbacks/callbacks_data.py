from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
from dash import Input, Output, exceptions, no_update

from sheetdash.core.exceptions import SheetFetchError
from sheetdash.ui.ids import IDs

if TYPE_CHECKING:
    from sheetdash.ui.config import AppConfig

logger = logging.getLogger(__name__)


def register_data_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    @app.callback(
        Output(IDs.Store.DATASET_VERSION, "data"),
        Output(IDs.Control.LOAD_ALERT, "children", allow_duplicate=True),
        Output(IDs.Control.LOAD_ALERT, "is_open", allow_duplicate=True),
        Input(IDs.Control.REFRESH_BTN, "n_clicks"),
        prevent_initial_call=True,
    )
    def refresh_records(n_clicks):
        if not n_clicks or ctx.dataset_manager is None:
            raise exceptions.PreventUpdate

        try:
            records = ctx.dataset_manager.refresh()
        except SheetFetchError as e:
            # previous records stay on screen
            return no_update, f"Could not load the sheet: {e}", True

        logger.info(
            "Records refreshed",
            extra={"version": ctx.dataset_manager.version, "n_rows": len(records)},
        )
        return ctx.dataset_manager.version, None, False
