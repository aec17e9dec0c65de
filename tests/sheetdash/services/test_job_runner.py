from __future__ import annotations

from sheetdash.services.dispatcher import FAILED, FINISHED, BatchDispatcher, BatchJob
from sheetdash.services.job_runner import JobRunner


async def _noop(target):
    return None


def test_submit_runs_job_on_worker_thread():
    runner = JobRunner()
    job = BatchJob.for_targets(["A", "B"])

    runner.submit(job, lambda j: BatchDispatcher(_noop).run(j))
    runner.join(job.job_id, timeout=5)

    assert runner.get(job.job_id) is job
    assert job.status == FINISHED
    assert job.attempted == 2


def test_crashing_job_is_marked_failed():
    async def crash(job):
        raise RuntimeError("loop died")

    runner = JobRunner()
    job = BatchJob.for_targets(["A"])

    runner.submit(job, crash)
    runner.join(job.job_id, timeout=5)

    assert job.status == FAILED


def test_cancel_unknown_or_finished_job():
    runner = JobRunner()
    job = BatchJob.for_targets(["A"])
    runner.submit(job, lambda j: BatchDispatcher(_noop).run(j))
    runner.join(job.job_id, timeout=5)

    assert runner.cancel(job.job_id) is False
    assert runner.cancel("missing") is False
    assert runner.get(None) is None


def test_finished_jobs_are_pruned_when_full():
    runner = JobRunner(max_jobs=2)
    jobs = []
    for _ in range(3):
        job = BatchJob.for_targets([])
        runner.submit(job, lambda j: BatchDispatcher(_noop).run(j))
        runner.join(job.job_id, timeout=5)
        jobs.append(job)

    assert runner.get(jobs[0].job_id) is None
    assert runner.get(jobs[2].job_id) is jobs[2]
