"""
computelab - in-memory lifecycle manager for simulated compute jobs.

Accepts job submissions, drives each job through queued -> running ->
completed on a Clock, and answers per-job and fleet-wide queries.
"""

from .clock import Clock, ManualClock, SystemClock
from .config import Settings, configure, get_settings, load_env
from .errors import (
    ComputeLabError,
    ErrorCode,
    InternalError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from .jobs import (
    DeleteResult,
    FleetStats,
    InMemoryJobStore,
    JobFilter,
    JobManager,
    JobPage,
    JobRecord,
    JobStatus,
    LifecycleScheduler,
    QueryEngine,
    ResultGenerator,
    ResultGeneratorRegistry,
    StatsAggregator,
)
from .service import JobService, build_service

__version__ = "0.1.2"

__all__ = [
    # Time
    "Clock",
    "SystemClock",
    "ManualClock",
    # Config
    "Settings",
    "get_settings",
    "configure",
    "load_env",
    # Errors
    "ComputeLabError",
    "ErrorCode",
    "ValidationError",
    "NotFoundError",
    "InvalidTransitionError",
    "InternalError",
    # Jobs
    "JobRecord",
    "JobStatus",
    "JobFilter",
    "InMemoryJobStore",
    "LifecycleScheduler",
    "JobManager",
    "DeleteResult",
    "QueryEngine",
    "JobPage",
    "StatsAggregator",
    "FleetStats",
    "ResultGenerator",
    "ResultGeneratorRegistry",
    # Wiring
    "JobService",
    "build_service",
]
