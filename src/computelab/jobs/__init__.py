"""
Job system for the compute job service.

This module provides the job lifecycle management:
- JobRecord: Job state snapshot
- JobStore: Registry interface with the in-memory implementation
- LifecycleScheduler: Timed queued -> running -> completed transitions
- JobManager: Submission, lookup, deletion and failure
- QueryEngine / StatsAggregator: Read-only views over the registry
"""

from .types import (
    JobStatus,
    JobRecord,
    VALID_TRANSITIONS,
)
from .store import (
    JobStore,
    InMemoryJobStore,
    JobFilter,
    DeleteOutcome,
)
from .results import (
    ResultGenerator,
    ResultGeneratorRegistry,
    DefaultResultGenerator,
    MolecularDynamicsResults,
    StructurePredictionResults,
    QuantumChemistryResults,
    MolecularDockingResults,
    RetrosynthesisResults,
)
from .scheduler import LifecycleScheduler
from .manager import (
    JobManager,
    JobSpec,
    DeleteResult,
)
from .query import (
    QueryEngine,
    JobPage,
    parse_limit,
)
from .stats import (
    StatsAggregator,
    FleetStats,
    success_rate,
)

__all__ = [
    "JobStatus",
    "JobRecord",
    "VALID_TRANSITIONS",
    "JobStore",
    "InMemoryJobStore",
    "JobFilter",
    "DeleteOutcome",
    "ResultGenerator",
    "ResultGeneratorRegistry",
    "DefaultResultGenerator",
    "MolecularDynamicsResults",
    "StructurePredictionResults",
    "QuantumChemistryResults",
    "MolecularDockingResults",
    "RetrosynthesisResults",
    "LifecycleScheduler",
    "JobManager",
    "JobSpec",
    "DeleteResult",
    "QueryEngine",
    "JobPage",
    "parse_limit",
    "StatsAggregator",
    "FleetStats",
    "success_rate",
]
