from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, Tuple

import dash
import dash_bootstrap_components as dbc
from dash import Input, Output, State, dcc, exceptions, html, no_update

from sheetdash.services.dispatcher import CANCELLED, FAILED, BatchJob, run_template_batch
from sheetdash.services.error_report import ERROR_REPORT_FILENAME
from sheetdash.services.templates import HEADER_IMAGE, HEADER_TEXT, MessageForm
from sheetdash.ui.callbacks.callbacks_utils import engine_from_store
from sheetdash.ui.helpers import build_message_preview
from sheetdash.ui.ids import IDs
from sheetdash.validation.errors import ValidationError
from sheetdash.validation.message_validation import validate_message_form

if TYPE_CHECKING:
    from sheetdash.ui.config import AppConfig

logger = logging.getLogger(__name__)

SHOWN = {"display": "block"}
HIDDEN = {"display": "none"}


def _form_from_inputs(header, header_text, image, text1, text2, text3) -> MessageForm:
    return MessageForm.from_dict(
        {
            "header": header,
            "header_text": header_text,
            "image": image if header == HEADER_IMAGE else None,
            "text1": text1,
            "text2": text2,
            "text3": text3,
        }
    )


def _progress_text(job: BatchJob) -> str:
    return f"Progress: {job.progress} out of {job.total}"


def _result_message(job: BatchJob):
    n_errors = len(job.errors)
    if job.status == FAILED:
        return dbc.Alert("Sending stopped unexpectedly. Check the logs.", color="danger", dismissable=True)

    sent = job.attempted - n_errors
    text = f"{sent} of {job.total} message(s) sent"
    if n_errors:
        text += f", {n_errors} failed (see {ERROR_REPORT_FILENAME})"
    if job.status == CANCELLED:
        text += ". Cancelled before the end of the list"
    return dbc.Alert(text + ".", color="warning" if n_errors or job.status == CANCELLED else "success", dismissable=True)


def start_batch(ctx: AppConfig, form: MessageForm, state_data: object) -> Optional[BatchJob]:
    """
    Validate the form, snapshot the selected numbers and hand the batch to the job runner.

    Returns None when nothing is selected.

    Raises:
        ValidationError: when the form is incomplete
    """
    validate_message_form(form)

    targets = engine_from_store(ctx, state_data).selected_numbers()
    if not targets:
        return None

    job = BatchJob.for_targets(targets)
    credentials = ctx.credentials
    global_config = ctx.global_config
    exporter = ctx.exporter

    def run(j: BatchJob):
        return run_template_batch(j, form, credentials, global_config, export=exporter.export)

    ctx.job_runner.submit(job, run)
    logger.info(
        "Batch submitted",
        extra={"job_id": job.job_id, "total": job.total, "header": form.header},
    )
    return job


def progress_outputs(job: Optional[BatchJob]) -> Tuple[Any, ...]:
    """
    (bar value, bar label, progress text, error count, overlay open, interval disabled,
    result message, download) for one poll tick.
    """
    if job is None:
        return 0, "", "", "", False, True, no_update, no_update

    if not job.is_done:
        pct = int(100 * job.progress / job.total) if job.total else 0
        errors = f"Errors: {len(job.errors)}" if job.errors else ""
        return pct, f"{pct}%", _progress_text(job), errors, True, False, no_update, no_update

    download = dcc.send_string(job.report, ERROR_REPORT_FILENAME) if job.report else no_update
    return 0, "", "", "", False, True, _result_message(job), download


def register_send_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Open / close the send dialog
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.SEND_MODAL, "is_open"),
        Input(IDs.Control.OPEN_SEND_BTN, "n_clicks"),
        State(IDs.Control.SEND_MODAL, "is_open"),
        prevent_initial_call=True,
    )
    def open_send_modal(n_clicks, is_open):
        if not n_clicks:
            raise exceptions.PreventUpdate
        return not is_open

    # ---------------------------------------------------------
    # Reveal fields: header text / image, text2 after text1, text3 after text2
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.HEADER_TEXT_CONTAINER, "style"),
        Output(IDs.Control.HEADER_IMAGE_CONTAINER, "style"),
        Output(IDs.Control.TEXT2_CONTAINER, "style"),
        Output(IDs.Control.TEXT3_CONTAINER, "style"),
        Input(IDs.Control.HEADER_KIND, "value"),
        Input(IDs.Control.TEXT1, "value"),
        Input(IDs.Control.TEXT2, "value"),
    )
    def toggle_form_fields(header, text1, text2):
        return (
            SHOWN if header == HEADER_TEXT else HIDDEN,
            SHOWN if header == HEADER_IMAGE else HIDDEN,
            SHOWN if text1 else HIDDEN,
            SHOWN if text1 and text2 else HIDDEN,
        )

    @app.callback(
        Output(IDs.Control.HEADER_IMAGE_NAME, "children"),
        Input(IDs.Control.HEADER_IMAGE, "filename"),
    )
    def show_image_name(filename):
        return filename or "No image selected."

    # ---------------------------------------------------------
    # Live preview
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.MESSAGE_PREVIEW, "children"),
        Input(IDs.Control.HEADER_KIND, "value"),
        Input(IDs.Control.HEADER_TEXT, "value"),
        Input(IDs.Control.HEADER_IMAGE, "contents"),
        Input(IDs.Control.TEXT1, "value"),
        Input(IDs.Control.TEXT2, "value"),
        Input(IDs.Control.TEXT3, "value"),
    )
    def update_preview(header, header_text, image, text1, text2, text3):
        return build_message_preview(header, header_text, image, text1, text2, text3)

    # ---------------------------------------------------------
    # Submit: validate, snapshot selection, start the batch
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.FORM_ERRORS, "children"),
        Output(IDs.Store.ACTIVE_JOB, "data"),
        Output(IDs.Control.PROGRESS_INTERVAL, "disabled"),
        Output(IDs.Control.PROGRESS_MODAL, "is_open"),
        Output(IDs.Control.SEND_MODAL, "is_open", allow_duplicate=True),
        Input(IDs.Control.SEND_SUBMIT_BTN, "n_clicks"),
        State(IDs.Control.HEADER_KIND, "value"),
        State(IDs.Control.HEADER_TEXT, "value"),
        State(IDs.Control.HEADER_IMAGE, "contents"),
        State(IDs.Control.TEXT1, "value"),
        State(IDs.Control.TEXT2, "value"),
        State(IDs.Control.TEXT3, "value"),
        State(IDs.Store.TABLE_STATE, "data"),
        prevent_initial_call=True,
    )
    def submit_batch(n_clicks, header, header_text, image, text1, text2, text3, state_data):
        if not n_clicks:
            raise exceptions.PreventUpdate

        form = _form_from_inputs(header, header_text, image, text1, text2, text3)
        try:
            job = start_batch(ctx, form, state_data)
        except ValidationError as e:
            errors = html.Ul([html.Li(issue.message) for issue in e.issues], className="text-danger small mb-0")
            return errors, no_update, no_update, no_update, no_update

        if job is None:
            return (
                html.Div("Select at least one row to send to.", className="text-danger small"),
                no_update,
                no_update,
                no_update,
                no_update,
            )

        return None, job.job_id, False, True, False

    # ---------------------------------------------------------
    # Poll progress; finish with result + optional error report
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.PROGRESS_BAR, "value"),
        Output(IDs.Control.PROGRESS_BAR, "label"),
        Output(IDs.Control.PROGRESS_TEXT, "children"),
        Output(IDs.Control.PROGRESS_ERRORS, "children"),
        Output(IDs.Control.PROGRESS_MODAL, "is_open", allow_duplicate=True),
        Output(IDs.Control.PROGRESS_INTERVAL, "disabled", allow_duplicate=True),
        Output(IDs.Control.BATCH_RESULT, "children"),
        Output(IDs.Control.DOWNLOAD_ERRORS, "data"),
        Input(IDs.Control.PROGRESS_INTERVAL, "n_intervals"),
        State(IDs.Store.ACTIVE_JOB, "data"),
        prevent_initial_call=True,
    )
    def poll_progress(_n_intervals, job_id):
        return progress_outputs(ctx.job_runner.get(job_id))

    @app.callback(
        Output(IDs.Control.PROGRESS_CANCEL_BTN, "disabled"),
        Input(IDs.Control.PROGRESS_CANCEL_BTN, "n_clicks"),
        State(IDs.Store.ACTIVE_JOB, "data"),
        prevent_initial_call=True,
    )
    def cancel_batch(n_clicks, job_id):
        if not n_clicks:
            raise exceptions.PreventUpdate
        if ctx.job_runner.cancel(job_id):
            logger.info("Batch cancel requested", extra={"job_id": job_id})
        return True

    @app.callback(
        Output(IDs.Control.PROGRESS_CANCEL_BTN, "disabled", allow_duplicate=True),
        Input(IDs.Store.ACTIVE_JOB, "data"),
        prevent_initial_call=True,
    )
    def reset_cancel_button(_job_id):
        return False
