from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from sheetdash.ui.ids import IDs


def build_progress_panel() -> html.Div:
    """Blocking overlay shown while a batch runs, plus its poll timer and report download."""
    return html.Div(
        [
            dbc.Modal(
                [
                    dbc.ModalHeader(dbc.ModalTitle("Sending messages"), close_button=False),
                    dbc.ModalBody(
                        [
                            dbc.Progress(
                                id=IDs.Control.PROGRESS_BAR,
                                value=0,
                                striped=True,
                                animated=True,
                                className="mb-3",
                            ),
                            html.Div(id=IDs.Control.PROGRESS_TEXT, className="fw-semibold"),
                            html.Div(id=IDs.Control.PROGRESS_ERRORS, className="text-danger small"),
                        ]
                    ),
                    dbc.ModalFooter(
                        dbc.Button(
                            "Cancel",
                            id=IDs.Control.PROGRESS_CANCEL_BTN,
                            color="secondary",
                            outline=True,
                        )
                    ),
                ],
                id=IDs.Control.PROGRESS_MODAL,
                is_open=False,
                backdrop="static",
                keyboard=False,
                centered=True,
            ),
            dcc.Interval(id=IDs.Control.PROGRESS_INTERVAL, interval=500, disabled=True),
            dcc.Download(id=IDs.Control.DOWNLOAD_ERRORS),
        ]
    )
