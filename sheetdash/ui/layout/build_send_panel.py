from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from sheetdash.services.templates import HEADER_IMAGE, HEADER_TEXT
from sheetdash.ui.ids import IDs


def build_send_panel() -> dbc.Modal:
    """Send dialog: template fields on the left, live preview on the right."""
    form = html.Div(
        [
            html.Label("Header", className="form-label"),
            dbc.Select(
                id=IDs.Control.HEADER_KIND,
                options=[
                    {"label": "Text", "value": HEADER_TEXT},
                    {"label": "Image", "value": HEADER_IMAGE},
                ],
                placeholder="Select header",
                className="mb-3",
            ),
            html.Div(
                dbc.Input(
                    id=IDs.Control.HEADER_TEXT,
                    type="text",
                    placeholder="Enter text for header",
                ),
                id=IDs.Control.HEADER_TEXT_CONTAINER,
                style={"display": "none"},
                className="mb-3",
            ),
            html.Div(
                [
                    dcc.Upload(
                        id=IDs.Control.HEADER_IMAGE,
                        children=html.Div(["Drag and drop or ", html.A("select an image")]),
                        accept="image/*",
                        multiple=False,
                        className="sd-upload",
                        style={
                            "borderWidth": "1px",
                            "borderStyle": "dashed",
                            "borderRadius": "6px",
                            "padding": "12px",
                            "textAlign": "center",
                        },
                    ),
                    html.Small(id=IDs.Control.HEADER_IMAGE_NAME, className="text-muted"),
                ],
                id=IDs.Control.HEADER_IMAGE_CONTAINER,
                style={"display": "none"},
                className="mb-3",
            ),
            html.Label("Text1", className="form-label"),
            dbc.Textarea(id=IDs.Control.TEXT1, placeholder="Enter text1", className="mb-3"),
            html.Div(
                [
                    html.Label("Text2", className="form-label"),
                    dbc.Textarea(id=IDs.Control.TEXT2, placeholder="Enter text2"),
                ],
                id=IDs.Control.TEXT2_CONTAINER,
                style={"display": "none"},
                className="mb-3",
            ),
            html.Div(
                [
                    html.Label("Text3", className="form-label"),
                    dbc.Textarea(id=IDs.Control.TEXT3, placeholder="Enter text3"),
                ],
                id=IDs.Control.TEXT3_CONTAINER,
                style={"display": "none"},
                className="mb-3",
            ),
            html.Div(id=IDs.Control.FORM_ERRORS),
        ]
    )

    return dbc.Modal(
        [
            dbc.ModalHeader(dbc.ModalTitle("Send Messages")),
            dbc.ModalBody(
                dbc.Row(
                    [
                        dbc.Col(form, md=6),
                        dbc.Col(html.Div(id=IDs.Control.MESSAGE_PREVIEW), md=6),
                    ]
                )
            ),
            dbc.ModalFooter(
                dbc.Button("Submit", id=IDs.Control.SEND_SUBMIT_BTN, color="primary"),
            ),
        ],
        id=IDs.Control.SEND_MODAL,
        is_open=False,
        size="lg",
        scrollable=True,
    )
