from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from sheetdash.ui.ids import IDs


def build_table_panel() -> dbc.Card:
    return dbc.Card(
        [
            dbc.CardHeader(
                html.Div(
                    [
                        html.Strong("Records"),
                        dbc.Button(
                            "Send Messages",
                            id=IDs.Control.OPEN_SEND_BTN,
                            color="success",
                            size="sm",
                            disabled=True,
                            className="ms-auto",
                        ),
                    ],
                    className="d-flex align-items-center",
                ),
                className="p-2",
            ),
            dbc.CardBody(
                [
                    dbc.Alert(id=IDs.Control.LOAD_ALERT, color="danger", is_open=False, className="mb-2"),
                    html.Div(id=IDs.Control.BATCH_RESULT),
                    dcc.Loading(
                        id="records-table-loading",
                        type="default",
                        children=html.Div(
                            id=IDs.Control.TABLE_CONTAINER,
                            style={"overflowX": "auto"},
                        ),
                    ),
                    html.Div(
                        [
                            html.Div(
                                id=IDs.Control.SELECTION_SUMMARY,
                                className="text-muted small flex-grow-1",
                            ),
                            html.Span(id=IDs.Control.PAGE_LABEL, className="small me-2"),
                            dbc.Button(
                                "Previous",
                                id=IDs.Control.PAGE_PREV_BTN,
                                color="secondary",
                                outline=True,
                                size="sm",
                                className="me-2",
                            ),
                            dbc.Button(
                                "Next",
                                id=IDs.Control.PAGE_NEXT_BTN,
                                color="secondary",
                                outline=True,
                                size="sm",
                            ),
                        ],
                        className="d-flex align-items-center pt-3",
                    ),
                ],
                className="sd-main-body",
            ),
        ],
        className="sd-maincard mt-3",
    )
