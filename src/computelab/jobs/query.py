"""
Query engine for listing jobs.

Filtering and pagination over JobStore snapshots. Read-only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from ..config import QueryConfig
from .store import JobFilter, JobStore
from .types import JobRecord


def parse_limit(raw: Any, default: int) -> int:
    """Interpret a caller-supplied page size.

    Numeric strings and floats are truncated to an integer. Anything that
    is not a finite, non-negative number falls back to ``default``.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        value = raw
    else:
        try:
            number = float(str(raw).strip())
        except ValueError:
            return default
        if not math.isfinite(number):
            return default
        value = int(number)
    return value if value >= 0 else default


@dataclass
class JobPage:
    """One page of a job listing.

    ``total`` counts every match before truncation.
    """
    total: int
    jobs: list[JobRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "jobs": [job.to_dict() for job in self.jobs],
        }


class QueryEngine:
    """Exact-match filtering over the registry, in creation order."""

    def __init__(self, store: JobStore, config: QueryConfig | None = None):
        self._store = store
        self._config = config or QueryConfig()

    async def list(
        self,
        filter: JobFilter | None = None,
        limit: Any = None,
        offset: Any = None,
    ) -> JobPage:
        matches = await self._store.list(filter)
        size = parse_limit(limit, self._config.default_limit)
        start = parse_limit(offset, 0)
        return JobPage(total=len(matches), jobs=matches[start:start + size])


__all__ = ["QueryEngine", "JobPage", "parse_limit"]
