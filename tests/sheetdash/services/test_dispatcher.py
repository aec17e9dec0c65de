from __future__ import annotations

import asyncio
import base64
import json

import httpx

from sheetdash.config.model import Credentials, GlobalConfig
from sheetdash.core.exceptions import SendError
from sheetdash.services.dispatcher import (
    CANCELLED,
    FINISHED,
    BatchDispatcher,
    BatchJob,
    run_template_batch,
)
from sheetdash.services.error_report import ErrorReportExporter
from sheetdash.services.templates import MessageForm


def _failing_on(*bad):
    calls = []

    async def send(target: str):
        calls.append(target)
        if target in bad:
            raise SendError(f"Message to {target} failed: HTTP 400", status_code=400, response={"error": "bad"})
        return {"ok": True}

    return send, calls


def test_sends_in_order_and_continues_past_failures():
    send, calls = _failing_on("B")
    progress = []
    exported = []

    def export(job_id, errors):
        exported.append((job_id, errors))
        return "report"

    job = BatchJob.for_targets(["A", "B", "C"])
    dispatcher = BatchDispatcher(send, on_progress=lambda j: progress.append(j.progress), export=export)

    asyncio.run(dispatcher.run(job))

    assert calls == ["A", "B", "C"]
    assert progress == [1, 2, 3]
    assert job.progress == 0
    assert job.attempted == 3
    assert job.status == FINISHED
    assert [e.id for e in job.errors] == ["B"]
    assert job.errors[0].error["status_code"] == 400
    assert job.errors[0].error["phase"] == "send"
    assert len(exported) == 1
    assert exported[0][0] == job.job_id
    assert job.report == "report"


def test_no_export_without_errors():
    send, _ = _failing_on()
    exported = []

    job = BatchJob.for_targets(["A", "B"])
    asyncio.run(BatchDispatcher(send, export=lambda *a: exported.append(a)).run(job))

    assert exported == []
    assert job.report is None
    assert job.errors == []


def test_empty_target_list_finishes_immediately():
    send, calls = _failing_on()
    job = BatchJob.for_targets([])

    asyncio.run(BatchDispatcher(send).run(job))

    assert calls == []
    assert job.status == FINISHED
    assert job.progress == 0


def test_same_failures_give_identical_reports():
    exporter = ErrorReportExporter()
    reports = []
    for _ in range(2):
        send, _ = _failing_on("B", "C")
        job = BatchJob.for_targets(["A", "B", "C"])
        asyncio.run(BatchDispatcher(send, export=exporter.export).run(job))
        reports.append(job.report)

    assert reports[0] == reports[1]
    assert [r["id"] for r in json.loads(reports[0])] == ["B", "C"]


def test_observer_failure_does_not_stop_the_run():
    send, calls = _failing_on()

    def broken(job):
        raise RuntimeError("observer broke")

    job = BatchJob.for_targets(["A", "B"])
    asyncio.run(BatchDispatcher(send, on_progress=broken).run(job))

    assert calls == ["A", "B"]
    assert job.status == FINISHED


def test_cancel_stops_before_next_item():
    calls = []
    job = BatchJob.for_targets(["A", "B", "C"])

    async def send(target):
        calls.append(target)
        if target == "A":
            job.cancel()

    asyncio.run(BatchDispatcher(send).run(job))

    assert calls == ["A"]
    assert job.status == CANCELLED
    assert job.attempted == 1
    assert job.snapshot()["status"] == CANCELLED


def test_targets_are_a_snapshot():
    selected = ["A", "B"]
    job = BatchJob.for_targets(selected)

    selected.append("C")

    assert job.targets == ("A", "B")
    assert job.total == 2


CREDS = Credentials(
    spreadsheet_id="sheet-123",
    sheet_name="Leads",
    sheets_api_key="api-key",
    whatsapp_token="wa-token",
    phone_number_id="555000",
)


def test_image_batch_uploads_before_each_send():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.rsplit("/", 1)[-1]
        requests.append(path)
        if path == "media":
            return httpx.Response(200, json={"id": f"media-{len(requests)}"})
        body = json.loads(request.content)
        if body["to"] == "91900002":
            return httpx.Response(400, json={"error": {"message": "invalid number"}})
        assert body["template"]["components"][0]["parameters"][0]["type"] == "image"
        return httpx.Response(200, json={"messages": [{"id": "wamid"}]})

    image = "data:image/png;base64," + base64.b64encode(b"img").decode()
    form = MessageForm(header="image", image=image, text1="Hello")
    job = BatchJob.for_targets(["900001", "900002"])

    asyncio.run(
        run_template_batch(
            job,
            form,
            CREDS,
            GlobalConfig(),
            export=ErrorReportExporter().export,
            transport=httpx.MockTransport(handler),
        )
    )

    assert requests == ["media", "messages", "media", "messages"]
    assert job.status == FINISHED
    assert [e.id for e in job.errors] == ["900002"]
    assert json.loads(job.report)[0]["error"]["response"] == {"error": {"message": "invalid number"}}


def test_failed_upload_skips_the_send_for_that_target():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.rsplit("/", 1)[-1]
        requests.append(path)
        if path == "media":
            return httpx.Response(500, text="upload failed")
        return httpx.Response(200, json={})

    image = "data:image/png;base64," + base64.b64encode(b"img").decode()
    job = BatchJob.for_targets(["900001"])

    asyncio.run(
        run_template_batch(
            job,
            MessageForm(header="image", image=image, text1="Hello"),
            CREDS,
            GlobalConfig(),
            transport=httpx.MockTransport(handler),
        )
    )

    assert requests == ["media"]
    assert job.errors[0].error["phase"] == "upload"
    assert job.errors[0].error["status_code"] == 500
