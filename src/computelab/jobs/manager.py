"""
Job manager for lifecycle operations.

This module provides the JobManager that fronts the registry for external
callers: submission with validation, lookup, deletion/cancellation, listing
and explicit failure. It keeps the registry and the scheduler in step.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..clock import Clock
from ..config import SchedulerConfig
from ..errors import ErrorCode, ErrorContext, InvalidTransitionError, NotFoundError, ValidationError
from ..logging import StructuredLogger, get_logger
from .scheduler import LifecycleScheduler
from .store import JobFilter, JobStore
from .types import JobRecord, JobStatus

_ID_ATTEMPTS = 3


@dataclass
class JobSpec:
    """Specification for creating a new job.

    Fields are untyped on purpose: they arrive straight from callers and
    are checked by ``validate()``.
    """
    toolkit: Any = None
    config: Any = None
    input_files: Any = None
    priority: Any = 5

    def validate(self) -> None:
        """
        Raises:
            ValidationError: naming every missing or malformed field
        """
        missing = []
        if self.toolkit is None or self.toolkit == "":
            missing.append("toolkit")
        if self.config is None:
            missing.append("config")
        if missing:
            raise ValidationError.missing(missing)

        if not isinstance(self.toolkit, str):
            raise ValidationError(
                "toolkit must be a string",
                fields=["toolkit"],
                code=ErrorCode.INVALID_FIELD,
            )
        if self.input_files is not None and (
            isinstance(self.input_files, (str, bytes)) or not isinstance(self.input_files, Sequence)
        ):
            raise ValidationError(
                "input_files must be an array",
                fields=["input_files"],
                code=ErrorCode.INVALID_FIELD,
            )
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ValidationError(
                "priority must be an integer",
                fields=["priority"],
                code=ErrorCode.INVALID_FIELD,
            )


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of deleting a job."""
    message: str
    job: JobRecord | None = None

    @property
    def cancelled(self) -> bool:
        return self.message == "cancelled"

    def to_dict(self) -> dict[str, Any]:
        if self.job is None:
            return {"message": self.message}
        return {"message": self.message, "job": self.job.to_dict()}


def generate_job_id(now: float) -> str:
    """Job ids look like ``job_<epoch-millis>_<12 hex>``."""
    return f"job_{int(now * 1000)}_{uuid.uuid4().hex[:12]}"


class JobManager:
    """Manages job lifecycle operations.

    The JobManager is responsible for:
    - Validating and creating jobs
    - Registering new jobs with the scheduler
    - Cancelling running jobs and deleting the rest
    - Explicit failure of active jobs
    """

    def __init__(
        self,
        store: JobStore,
        scheduler: LifecycleScheduler,
        clock: Clock,
        config: SchedulerConfig | None = None,
        logger: StructuredLogger | None = None,
    ):
        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self._config = config or scheduler.config
        self._logger = logger or get_logger()

    @property
    def scheduler(self) -> LifecycleScheduler:
        return self._scheduler

    async def submit(
        self,
        toolkit: Any = None,
        config: Any = None,
        input_files: Any = None,
        priority: Any = None,
    ) -> JobRecord:
        """Create a queued job and start its timeline.

        Raises:
            ValidationError: If toolkit or config is missing or malformed
        """
        spec = JobSpec(
            toolkit=toolkit,
            config=config,
            input_files=input_files,
            priority=5 if priority is None else priority,
        )
        return await self.submit_spec(spec)

    async def submit_spec(self, spec: JobSpec) -> JobRecord:
        spec.validate()

        for _ in range(_ID_ATTEMPTS):
            now = self._clock.now()
            job = JobRecord(
                id=generate_job_id(now),
                toolkit=spec.toolkit,
                config=spec.config,
                input_files=list(spec.input_files or []),
                priority=spec.priority,
                status=JobStatus.QUEUED,
                progress=0.0,
                created_at=now,
                updated_at=now,
                estimated_completion=now + self._config.completion_horizon,
            )
            try:
                job = await self._store.create(job)
            except ValueError:
                self._logger.warning("Job id collision, drawing a new id", job_id=job.id)
                continue
            break
        else:
            raise RuntimeError("Could not allocate a unique job id")

        self._scheduler.register(job.id)
        self._scheduler.log_transition(job, None)
        return job

    async def get(self, job_id: str) -> JobRecord:
        """
        Raises:
            NotFoundError: If the job doesn't exist
        """
        job = await self._store.get(job_id)
        if job is None:
            raise NotFoundError(job_id=job_id)
        return job

    async def delete(self, job_id: str) -> DeleteResult:
        """Cancel a running job, or remove any other job.

        Raises:
            NotFoundError: If the job doesn't exist
        """
        outcome = await self._store.cancel_or_delete(job_id, self._clock.now())
        if outcome is None:
            raise NotFoundError(job_id=job_id)

        self._scheduler.cancel(job_id)

        if outcome.removed:
            self._logger.info("Job deleted", job_id=job_id, status=outcome.job.status.value)
            return DeleteResult(message="deleted")

        self._scheduler.log_transition(outcome.job, JobStatus.RUNNING)
        return DeleteResult(message="cancelled", job=outcome.job)

    async def list(self, filter: JobFilter | None = None) -> list[JobRecord]:
        """All jobs matching the filter, in creation order."""
        return await self._store.list(filter)

    async def mark_failed(
        self,
        job_id: str,
        reason: str,
        error_code: str | None = None,
    ) -> JobRecord:
        """Fail a running job with a recorded reason and stop its timeline.

        Raises:
            NotFoundError: If the job doesn't exist
            InvalidTransitionError: If the job is not running
        """
        now = self._clock.now()
        previous: list[JobStatus] = []

        def fail(job: JobRecord) -> JobRecord:
            if not job.can_transition_to(JobStatus.FAILED):
                raise InvalidTransitionError(
                    f"Cannot fail job in status: {job.status.value}",
                    context=ErrorContext(job_id=job_id, operation="mark_failed"),
                )
            previous.append(job.status)
            return job.transition_to(JobStatus.FAILED, now).with_error(reason, error_code)

        job = await self._store.update(job_id, fail)
        if job is None:
            raise NotFoundError(job_id=job_id)

        self._scheduler.cancel(job_id)
        self._scheduler.log_transition(job, previous[0], reason=reason)
        return job

    async def close(self) -> None:
        await self._scheduler.close()


__all__ = [
    "JobManager",
    "JobSpec",
    "DeleteResult",
    "generate_job_id",
]
