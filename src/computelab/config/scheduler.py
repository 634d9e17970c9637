"""
Lifecycle scheduling and query configuration.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SchedulerConfig:
    """Timing parameters for the simulated job lifecycle.

    All durations are in seconds of Clock time.
    """

    start_delay: float = 2.0
    tick_interval: float = 1.0
    max_progress_increment: float = 20.0
    completion_horizon: float = 2 * 60 * 60

    def __post_init__(self):
        if self.start_delay < 0:
            raise ValueError("start_delay cannot be negative")
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if self.max_progress_increment <= 0:
            raise ValueError("max_progress_increment must be positive")
        if self.completion_horizon < 0:
            raise ValueError("completion_horizon cannot be negative")


@dataclass
class QueryConfig:
    """Defaults for job listing."""

    default_limit: int = 50

    def __post_init__(self):
        if self.default_limit < 0:
            raise ValueError("default_limit cannot be negative")


__all__ = ["SchedulerConfig", "QueryConfig"]
