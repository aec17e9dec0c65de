from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from sheetdash.config.model import Credentials, GlobalConfig
from sheetdash.services.error_report import ErrorRecord, serialize_error
from sheetdash.services.messaging_client import WhatsAppClient
from sheetdash.services.templates import HEADER_IMAGE, MessageForm, build_message

logger = logging.getLogger(__name__)

PENDING = "pending"
RUNNING = "running"
FINISHED = "finished"
CANCELLED = "cancelled"
FAILED = "failed"

SendFn = Callable[[str], Awaitable[Any]]
ProgressFn = Callable[["BatchJob"], None]
ExportFn = Callable[[str, List[ErrorRecord]], Optional[str]]


@dataclass
class BatchJob:
    """
    One run of the dispatcher over a fixed target list.

    targets is a tuple snapshot: changing the table selection after submit
    doesn't reach a running job. progress counts completed attempts and is
    reset to 0 once the run is over; `attempted` keeps the final count.
    """
    targets: Tuple[str, ...]
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    progress: int = 0
    attempted: int = 0
    errors: List[ErrorRecord] = field(default_factory=list)
    status: str = PENDING
    report: Optional[str] = None
    cancel_requested: bool = False

    @classmethod
    def for_targets(cls, targets: Sequence[str]) -> BatchJob:
        return cls(targets=tuple(str(t) for t in targets))

    @property
    def total(self) -> int:
        return len(self.targets)

    @property
    def is_done(self) -> bool:
        return self.status in (FINISHED, CANCELLED, FAILED)

    def cancel(self) -> None:
        """Ask the run to stop before its next item; the current item still completes."""
        self.cancel_requested = True

    def snapshot(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status,
            "total": self.total,
            "progress": self.progress,
            "attempted": self.attempted,
            "n_errors": len(self.errors),
            "has_report": self.report is not None,
        }


class BatchDispatcher:
    """
    Sends to each target strictly in order, one awaited call at a time.

    - exactly one attempt per target; a failure never stops the run
    - progress is published after every attempt, success or failure
    - errors are exported once at the end, only if there are any
    """

    def __init__(
        self,
        send: SendFn,
        on_progress: Optional[ProgressFn] = None,
        export: Optional[ExportFn] = None,
    ) -> None:
        self._send = send
        self._on_progress = on_progress
        self._export = export

    def _publish(self, job: BatchJob) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(job)
        except Exception:
            logger.exception("Progress observer failed for job %s", job.job_id)

    async def run(self, job: BatchJob) -> BatchJob:
        job.status = RUNNING
        job.progress = 0
        job.attempted = 0
        job.errors = []
        job.report = None

        logger.info("Batch started", extra={"job_id": job.job_id, "total": job.total})

        for target in job.targets:
            if job.cancel_requested:
                job.status = CANCELLED
                logger.info("Batch cancelled", extra={"job_id": job.job_id, "attempted": job.attempted})
                break

            try:
                await self._send(target)
            except Exception as e:
                job.errors.append(ErrorRecord(id=target, error=serialize_error(e)))
                logger.warning(
                    "Batch item failed",
                    extra={"job_id": job.job_id, "target": target, "error": str(e)},
                )

            job.progress += 1
            job.attempted = job.progress
            self._publish(job)

        if job.errors and self._export is not None:
            job.report = self._export(job.job_id, list(job.errors))

        if job.status != CANCELLED:
            job.status = FINISHED
        job.progress = 0

        logger.info(
            "Batch finished",
            extra={
                "job_id": job.job_id,
                "status": job.status,
                "attempted": job.attempted,
                "n_errors": len(job.errors),
            },
        )
        return job


def template_sender(client: WhatsAppClient, form: MessageForm) -> SendFn:
    """
    Per-target send: upload the header image first (when there is one), then send
    the template message built around the returned media id.
    """
    cfg = client.global_config

    async def send(number: str) -> Any:
        media_id = None
        if form.header == HEADER_IMAGE:
            media_id = await client.upload_media(form.image or "")
        message = build_message(
            form,
            media_id=media_id,
            language_code=cfg.language_code,
            messaging_product=cfg.messaging_product,
        )
        return await client.send_template(message, number)

    return send


async def run_template_batch(
    job: BatchJob,
    form: MessageForm,
    credentials: Credentials,
    global_config: GlobalConfig,
    *,
    on_progress: Optional[ProgressFn] = None,
    export: Optional[ExportFn] = None,
    transport: Any = None,
) -> BatchJob:
    """Open a messaging client for the duration of one batch and run it."""
    async with WhatsAppClient(credentials, global_config, transport=transport) as client:
        dispatcher = BatchDispatcher(template_sender(client, form), on_progress=on_progress, export=export)
        return await dispatcher.run(job)
