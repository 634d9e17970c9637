"""
Fleet statistics.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from ..clock import Clock
from .store import JobStore
from .types import JobStatus


@dataclass(frozen=True)
class FleetStats:
    """Aggregate counts over one registry snapshot."""
    total: int
    completed: int
    running: int
    queued: int
    failed: int
    cancelled: int
    success_rate: float
    uptime: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def success_rate(completed: int, total: int) -> float:
    """Percentage of jobs that completed, 100 for an empty registry."""
    if total == 0:
        return 100.0
    return round(completed / total * 100, 2)


class StatsAggregator:
    """Computes fleet statistics in a single pass over a registry snapshot."""

    def __init__(self, store: JobStore, clock: Clock):
        self._store = store
        self._clock = clock
        self._started = clock.monotonic()

    @property
    def uptime(self) -> float:
        return max(0.0, self._clock.monotonic() - self._started)

    async def stats(self) -> FleetStats:
        counts = dict.fromkeys(JobStatus, 0)
        jobs = await self._store.list()
        for job in jobs:
            counts[job.status] += 1
        total = len(jobs)

        return FleetStats(
            total=total,
            completed=counts[JobStatus.COMPLETED],
            running=counts[JobStatus.RUNNING],
            queued=counts[JobStatus.QUEUED],
            failed=counts[JobStatus.FAILED],
            cancelled=counts[JobStatus.CANCELLED],
            success_rate=success_rate(counts[JobStatus.COMPLETED], total),
            uptime=self.uptime,
        )


__all__ = ["StatsAggregator", "FleetStats", "success_rate"]
