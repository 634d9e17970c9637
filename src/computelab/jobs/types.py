"""
Job types for the compute job service.

This module defines the JobStatus enum and JobRecord dataclass
that form the core of the job lifecycle system.
"""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..errors import ErrorContext, InvalidTransitionError

MAX_PROGRESS = 100.0


class JobStatus(str, Enum):
    """Job lifecycle states.

    State transitions:
    - QUEUED -> RUNNING (start delay elapsed)
    - RUNNING -> COMPLETED (progress reached 100, results attached)
    - RUNNING -> CANCELLED (deleted while running)
    - RUNNING -> FAILED (explicit failure or internal error)
    """
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in {
            JobStatus.COMPLETED,
            JobStatus.FAILED,
            JobStatus.CANCELLED,
        }

    @property
    def is_active(self) -> bool:
        """Check if the job is still schedulable."""
        return self in {JobStatus.QUEUED, JobStatus.RUNNING}


# Valid state transitions
VALID_TRANSITIONS: dict[JobStatus, set[JobStatus]] = {
    # Only a running job can fail or be cancelled
    JobStatus.QUEUED: {JobStatus.RUNNING},
    JobStatus.RUNNING: {
        JobStatus.COMPLETED,
        JobStatus.FAILED,
        JobStatus.CANCELLED,
    },
    # Terminal states have no valid transitions
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
    JobStatus.CANCELLED: set(),
}


def isoformat(timestamp: float | None) -> str | None:
    """Render epoch seconds as an ISO-8601 UTC string."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class JobRecord:
    """Snapshot of one submitted job.

    Records are immutable; every change produces a new record. The
    ``queue_position`` and ``estimated_completion`` fields are fixed at
    submission.
    """
    # Identity
    id: str
    toolkit: str

    # Submission
    config: Any = None
    input_files: list[Any] = field(default_factory=list)
    priority: int = 5

    # Status
    status: JobStatus = JobStatus.QUEUED
    progress: float = 0.0

    # Timestamps
    created_at: float = 0.0
    updated_at: float = 0.0
    started_at: float | None = None
    completed_at: float | None = None

    # Computed at submission
    queue_position: int = 1
    estimated_completion: float = 0.0

    # Outcome
    results: Any = None
    error: str | None = None
    error_code: str | None = None

    def can_transition_to(self, new_status: JobStatus) -> bool:
        """Check if transition to new_status is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def transition_to(
        self,
        new_status: JobStatus,
        now: float,
        *,
        results: Any = None,
    ) -> JobRecord:
        """Create a new JobRecord with updated status.

        Completing a job requires ``results``; they are attached in the same
        step so no snapshot ever shows a completed job without results.

        Raises:
            InvalidTransitionError: If the transition is invalid
        """
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Invalid transition: {self.status.value} -> {new_status.value}",
                context=ErrorContext(job_id=self.id, operation="transition"),
            )
        if new_status is JobStatus.COMPLETED and results is None:
            raise InvalidTransitionError(
                "A job cannot complete without results",
                context=ErrorContext(job_id=self.id, operation="transition"),
            )

        updates: dict[str, Any] = {
            "status": new_status,
            "updated_at": now,
        }

        if new_status is JobStatus.RUNNING and self.started_at is None:
            updates["started_at"] = now

        if new_status.is_terminal:
            updates["completed_at"] = now

        if new_status is JobStatus.COMPLETED:
            updates["results"] = results
            updates["progress"] = MAX_PROGRESS

        return dataclasses.replace(self, **updates)

    def with_progress(self, progress: float, now: float) -> JobRecord:
        """Create a new JobRecord with progress raised to ``progress``.

        Progress never decreases and is clamped to 100.
        """
        progress = max(self.progress, min(float(progress), MAX_PROGRESS))
        return dataclasses.replace(self, progress=progress, updated_at=now)

    def with_error(self, error: str, error_code: str | None = None) -> JobRecord:
        """Create a new JobRecord with error set."""
        return dataclasses.replace(self, error=error, error_code=error_code)

    def copy(self) -> JobRecord:
        """Deep copy, so callers never share mutable payloads with the registry."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "toolkit": self.toolkit,
            "config": copy.deepcopy(self.config),
            "input_files": list(self.input_files),
            "priority": self.priority,
            "status": self.status.value,
            "progress": self.progress,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "started_at": isoformat(self.started_at),
            "completed_at": isoformat(self.completed_at),
            "queue_position": self.queue_position,
            "estimated_completion": isoformat(self.estimated_completion),
            "results": copy.deepcopy(self.results),
            "error": self.error,
            "error_code": self.error_code,
        }


__all__ = [
    "JobStatus",
    "JobRecord",
    "VALID_TRANSITIONS",
    "MAX_PROGRESS",
    "isoformat",
]
