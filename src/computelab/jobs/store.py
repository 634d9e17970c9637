"""
Job store implementations.

This module provides the JobStore interface and the in-memory registry
that exclusively owns every job record.
"""

from __future__ import annotations

import asyncio
import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from .types import JobRecord, JobStatus

Mutator = Callable[[JobRecord], "JobRecord | None"]


@dataclass
class JobFilter:
    """Filter criteria for listing jobs.

    Absent fields match everything; present fields are AND-combined and
    compared for exact equality.
    """
    status: JobStatus | str | None = None
    toolkit: str | None = None

    def matches(self, job: JobRecord) -> bool:
        """Check if a job matches this filter."""
        if self.status is not None:
            wanted = self.status.value if isinstance(self.status, JobStatus) else str(self.status)
            if job.status.value != wanted:
                return False
        if self.toolkit is not None and job.toolkit != self.toolkit:
            return False
        return True


@dataclass(frozen=True)
class DeleteOutcome:
    """What ``cancel_or_delete`` did to a job."""
    removed: bool
    job: JobRecord


class JobStore(ABC):
    """Abstract interface for the job registry.

    Implementations must serialize every read-modify-write of a record and
    every structural change, and must return copies rather than the records
    they hold.
    """

    @abstractmethod
    async def create(self, job: JobRecord) -> JobRecord:
        """Insert a new job, assigning its queue position.

        Raises:
            ValueError: If the job id already exists
        """
        ...

    @abstractmethod
    async def get(self, job_id: str) -> JobRecord | None:
        """Get a job by ID."""
        ...

    @abstractmethod
    async def update(self, job_id: str, mutate: Mutator) -> JobRecord | None:
        """Atomically re-read and mutate a job.

        ``mutate`` receives the current record and returns its replacement,
        or None to leave it unchanged. Returns the resulting record, or None
        if the job does not exist (in which case ``mutate`` is not called).
        """
        ...

    @abstractmethod
    async def cancel_or_delete(self, job_id: str, now: float) -> DeleteOutcome | None:
        """Cancel a running job in place, or remove any other job.

        Returns None if the job does not exist.
        """
        ...

    @abstractmethod
    async def list(self, filter: JobFilter | None = None) -> list[JobRecord]:
        """List jobs matching the filter, in creation order."""
        ...

    @abstractmethod
    async def count(self, filter: JobFilter | None = None) -> int:
        """Count jobs matching the filter."""
        ...


class InMemoryJobStore(JobStore):
    """In-memory job registry.

    Suitable for single-process deployments and testing. A single
    asyncio.Lock serializes structural changes and record updates; dict
    insertion order is creation order.
    """

    def __init__(self):
        self._jobs: dict[str, JobRecord] = {}
        self._lock = asyncio.Lock()

    async def create(self, job: JobRecord) -> JobRecord:
        async with self._lock:
            if job.id in self._jobs:
                raise ValueError(f"Job {job.id} already exists")

            queued = sum(1 for j in self._jobs.values() if j.status is JobStatus.QUEUED)
            job = dataclasses.replace(job, queue_position=queued + 1)
            self._jobs[job.id] = job
            return job.copy()

    async def get(self, job_id: str) -> JobRecord | None:
        async with self._lock:
            job = self._jobs.get(job_id)
            return job.copy() if job else None

    async def update(self, job_id: str, mutate: Mutator) -> JobRecord | None:
        async with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None
            updated = mutate(current)
            if updated is not None:
                if updated.id != job_id:
                    raise ValueError(f"Mutation changed job id {job_id} -> {updated.id}")
                self._jobs[job_id] = updated
                current = updated
            return current.copy()

    async def cancel_or_delete(self, job_id: str, now: float) -> DeleteOutcome | None:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if job.status is JobStatus.RUNNING:
                job = job.transition_to(JobStatus.CANCELLED, now)
                self._jobs[job_id] = job
                return DeleteOutcome(removed=False, job=job.copy())
            del self._jobs[job_id]
            return DeleteOutcome(removed=True, job=job)

    async def list(self, filter: JobFilter | None = None) -> list[JobRecord]:
        async with self._lock:
            jobs = list(self._jobs.values())
            if filter:
                jobs = [j for j in jobs if filter.matches(j)]
            return [j.copy() for j in jobs]

    async def count(self, filter: JobFilter | None = None) -> int:
        async with self._lock:
            if filter:
                return sum(1 for j in self._jobs.values() if filter.matches(j))
            return len(self._jobs)


__all__ = [
    "JobStore",
    "InMemoryJobStore",
    "JobFilter",
    "DeleteOutcome",
]
