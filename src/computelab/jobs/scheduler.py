"""
Lifecycle scheduler.

Drives every registered job through queued -> running -> completed on the
injected Clock. Each job gets one lightweight asyncio task; the scheduler
holds only the task handle keyed by job id and never owns the record.

Every timed step re-reads the job through ``JobStore.update`` and mutates
only if the job still exists and is in the expected status. A job that was
deleted, cancelled or failed in between makes the step a no-op and ends the
task, so a late timer can never resurrect or overwrite a job.
"""

from __future__ import annotations

import asyncio
import random

from ..clock import Clock
from ..config import SchedulerConfig
from ..errors import wrap_unexpected
from ..logging import StructuredLogger, TransitionLog, get_logger
from .results import ResultGeneratorRegistry
from .store import JobStore
from .types import MAX_PROGRESS, JobRecord, JobStatus


class LifecycleScheduler:
    """Per-job timelines for the simulated execution of compute jobs.

    The scheduler never raises to its caller: errors inside a timeline are
    logged and end that job's timeline as ``failed``.
    """

    def __init__(
        self,
        store: JobStore,
        clock: Clock,
        results: ResultGeneratorRegistry | None = None,
        config: SchedulerConfig | None = None,
        *,
        rng: random.Random | None = None,
        logger: StructuredLogger | None = None,
        log_transitions: bool = True,
    ):
        self._store = store
        self._clock = clock
        self._results = results or ResultGeneratorRegistry.with_builtins()
        self._config = config or SchedulerConfig()
        self._rng = rng or random.Random()
        self._logger = logger or get_logger()
        self._log_transitions = log_transitions
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._closed = False

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    def is_scheduled(self, job_id: str) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    def register(self, job_id: str) -> None:
        """Start the timeline for a newly created job.

        Must be called from a running event loop. Registering a job that
        already has a live timeline is a no-op.
        """
        if self._closed:
            self._logger.warning("Scheduler closed, job not scheduled", job_id=job_id)
            return
        if self.is_scheduled(job_id):
            return
        task = asyncio.get_running_loop().create_task(
            self._run(job_id),
            name=f"job-timeline:{job_id}",
        )
        self._tasks[job_id] = task
        task.add_done_callback(lambda t, job_id=job_id: self._forget(job_id, t))

    def cancel(self, job_id: str) -> bool:
        """Tear down a job's pending timer. Returns True if one was live."""
        task = self._tasks.pop(job_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def close(self) -> None:
        """Cancel every timeline and wait for them to finish."""
        self._closed = True
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _forget(self, job_id: str, task: asyncio.Task[None]) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]

    async def _run(self, job_id: str) -> None:
        try:
            await self._clock.sleep(self._config.start_delay)
            if not await self.start(job_id):
                return
            while True:
                await self._clock.sleep(self._config.tick_interval)
                if not await self.tick(job_id):
                    return
        except Exception as exc:
            await self._abort(job_id, exc)

    async def start(self, job_id: str) -> bool:
        """Move a queued job to running. Returns True if the timeline continues."""
        now = self._clock.now()
        previous: list[JobStatus] = []

        def begin(job: JobRecord) -> JobRecord | None:
            if job.status is not JobStatus.QUEUED:
                return None
            previous.append(job.status)
            return job.transition_to(JobStatus.RUNNING, now)

        job = await self._store.update(job_id, begin)
        if job is None:
            self._logger.debug("Job removed before start", job_id=job_id)
            return False
        if previous:
            self.log_transition(job, previous[0])
        return job.status is JobStatus.RUNNING

    async def tick(self, job_id: str) -> bool:
        """Advance a running job's progress once.

        Returns True while the job is still running and needs further ticks.
        """
        increment = self._rng.uniform(0, self._config.max_progress_increment)
        now = self._clock.now()
        completed: list[bool] = []

        def advance(job: JobRecord) -> JobRecord | None:
            if job.status is not JobStatus.RUNNING:
                return None
            job = job.with_progress(job.progress + increment, now)
            if job.progress >= MAX_PROGRESS:
                results = self._results.generate(job.toolkit, self._rng)
                job = job.transition_to(JobStatus.COMPLETED, now, results=results)
                completed.append(True)
            return job

        job = await self._store.update(job_id, advance)
        if job is None:
            self._logger.debug("Job removed while running", job_id=job_id)
            return False
        if completed:
            self.log_transition(job, JobStatus.RUNNING)
        return job.status is JobStatus.RUNNING

    async def _abort(self, job_id: str, exc: Exception) -> None:
        error = wrap_unexpected(exc, job_id=job_id, operation="timeline")
        self._logger.log_error(error, f"Timeline for job {job_id} aborted", job_id=job_id)

        now = self._clock.now()
        previous: list[JobStatus] = []

        def fail(job: JobRecord) -> JobRecord | None:
            if not job.can_transition_to(JobStatus.FAILED):
                return None
            previous.append(job.status)
            failed = job.transition_to(JobStatus.FAILED, now)
            return failed.with_error(error.message, error.code.value)

        try:
            job = await self._store.update(job_id, fail)
        except Exception as nested:
            self._logger.log_error(nested, f"Could not mark job {job_id} as failed", job_id=job_id)
            return
        if job is not None and previous:
            self.log_transition(job, previous[0], reason=error.message)

    def log_transition(
        self,
        job: JobRecord,
        from_status: JobStatus | None,
        reason: str | None = None,
    ) -> None:
        if not self._log_transitions:
            return
        self._logger.log_transition(TransitionLog(
            job_id=job.id,
            toolkit=job.toolkit,
            from_status=from_status.value if from_status else None,
            to_status=job.status.value,
            progress=job.progress,
            reason=reason,
        ))


__all__ = ["LifecycleScheduler"]
