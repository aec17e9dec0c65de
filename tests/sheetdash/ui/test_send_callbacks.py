from __future__ import annotations

from pathlib import Path

import pytest
from dash import no_update

from sheetdash.config.model import AppSettings, Credentials, GlobalConfig
from sheetdash.core.columns import ColumnSpec
from sheetdash.core.dataset import RecordSet
from sheetdash.core.table_state import TableState
from sheetdash.services.dispatcher import CANCELLED, FINISHED, RUNNING, BatchJob
from sheetdash.services.error_report import ErrorRecord, ErrorReportExporter
from sheetdash.services.dataset_service import DatasetManager
from sheetdash.services.templates import MessageForm
from sheetdash.ui.callbacks.callbacks_send import progress_outputs, start_batch
from sheetdash.ui.config import AppConfig
from sheetdash.validation.errors import ValidationError

COLUMNS = [ColumnSpec("name", "Name"), ColumnSpec("number", "Number")]
FORM = MessageForm(header="text", header_text="Hello", text1="Body")


class FakeSheetClient:
    def load_records(self):
        return RecordSet.from_rows([["Asha", "900001"], ["Ben", "900002"], ["Chen", "900003"]], COLUMNS)


class RecordingJobRunner:
    def __init__(self):
        self.submitted = []

    def submit(self, job, run):
        self.submitted.append((job, run))
        return job


def _ctx() -> AppConfig:
    manager = DatasetManager(FakeSheetClient())
    manager.refresh()
    return AppConfig(
        settings=AppSettings(
            config_root=Path("config"),
            global_config=GlobalConfig(columns=COLUMNS),
            credentials=Credentials("sheet-123", "Leads", "api-key", "wa-token", "555000"),
        ),
        dataset_manager=manager,
        job_runner=RecordingJobRunner(),
        exporter=ErrorReportExporter(),
    )


def test_start_batch_snapshots_selected_numbers():
    ctx = _ctx()
    store = TableState(selection={"2", "0"}).to_dict()

    job = start_batch(ctx, FORM, store)

    assert job.targets == ("900001", "900003")
    assert ctx.job_runner.submitted[0][0] is job

    # later selection changes don't reach the submitted job
    store["selection"].append("1")
    assert job.targets == ("900001", "900003")


def test_start_batch_rejects_incomplete_form():
    ctx = _ctx()

    with pytest.raises(ValidationError):
        start_batch(ctx, MessageForm(header="text", text1="Body"), TableState(selection={"0"}).to_dict())

    assert ctx.job_runner.submitted == []


def test_start_batch_without_selection_submits_nothing():
    ctx = _ctx()

    assert start_batch(ctx, FORM, TableState().to_dict()) is None
    assert ctx.job_runner.submitted == []


def test_progress_outputs_while_running():
    job = BatchJob.for_targets(["A", "B", "C", "D"])
    job.status = RUNNING
    job.progress = 2
    job.errors = [ErrorRecord("B", {"message": "bad"})]

    value, label, text, errors, modal_open, interval_disabled, result, download = progress_outputs(job)

    assert (value, label) == (50, "50%")
    assert text == "Progress: 2 out of 4"
    assert errors == "Errors: 1"
    assert modal_open is True
    assert interval_disabled is False
    assert result is no_update
    assert download is no_update


def test_progress_outputs_finished_with_report_downloads_it():
    job = BatchJob.for_targets(["A", "B"])
    job.status = FINISHED
    job.attempted = 2
    job.errors = [ErrorRecord("B", {"message": "bad"})]
    job.report = '[\n  {"id": "B"}\n]'

    outputs = progress_outputs(job)

    assert outputs[4] is False
    assert outputs[5] is True
    assert outputs[7]["filename"] == "errors.json"
    assert outputs[7]["content"] == job.report
    assert "1 of 2 message(s) sent, 1 failed" in outputs[6].children


def test_progress_outputs_clean_or_cancelled_runs_have_no_download():
    job = BatchJob.for_targets(["A", "B"])
    job.status = CANCELLED
    job.attempted = 1

    outputs = progress_outputs(job)

    assert outputs[7] is no_update
    assert "Cancelled" in outputs[6].children


def test_progress_outputs_for_unknown_job_closes_overlay():
    outputs = progress_outputs(None)

    assert outputs[4] is False
    assert outputs[5] is True
