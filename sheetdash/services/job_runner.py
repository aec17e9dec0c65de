from __future__ import annotations

import asyncio
import logging
import threading
from typing import Awaitable, Callable, Dict, Optional

from sheetdash.services.dispatcher import FAILED, BatchJob

logger = logging.getLogger(__name__)

JobCoroutine = Callable[[BatchJob], Awaitable[BatchJob]]


class JobRunner:
    """
    Runs each batch coroutine on its own worker thread + event loop so the
    Dash request that submitted it returns immediately. The UI polls jobs by id.
    """

    def __init__(self, max_jobs: int = 20):
        self.max_jobs = max_jobs
        self._jobs: Dict[str, BatchJob] = {}
        self._threads: Dict[str, threading.Thread] = {}
        self._lock = threading.Lock()

    def submit(self, job: BatchJob, run: JobCoroutine) -> BatchJob:
        with self._lock:
            self._prune()
            self._jobs[job.job_id] = job
            thread = threading.Thread(
                target=self._run,
                args=(job, run),
                name=f"batch-{job.job_id}",
                daemon=True,
            )
            self._threads[job.job_id] = thread
        thread.start()
        return job

    def _run(self, job: BatchJob, run: JobCoroutine) -> None:
        try:
            asyncio.run(run(job))
        except Exception:
            logger.exception("Batch %s crashed", job.job_id)
            job.status = FAILED
            job.progress = 0

    def _prune(self) -> None:
        """Forget the oldest finished jobs once the registry is full."""
        if len(self._jobs) < self.max_jobs:
            return
        for job_id in [jid for jid, j in self._jobs.items() if j.is_done]:
            if len(self._jobs) < self.max_jobs:
                break
            self._jobs.pop(job_id, None)
            self._threads.pop(job_id, None)

    def get(self, job_id: Optional[str]) -> Optional[BatchJob]:
        if not job_id:
            return None
        return self._jobs.get(job_id)

    def cancel(self, job_id: Optional[str]) -> bool:
        job = self.get(job_id)
        if job is None or job.is_done:
            return False
        job.cancel()
        return True

    def join(self, job_id: str, timeout: Optional[float] = None) -> None:
        thread = self._threads.get(job_id)
        if thread is not None:
            thread.join(timeout)
