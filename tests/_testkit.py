"""Deterministic helpers shared by the scheduler, manager and API tests."""

from __future__ import annotations

import random

from computelab.config import LoggingConfig, SchedulerConfig, Settings

START = 1_700_000_000.0


class MaxRandom(random.Random):
    """Always draws the top of the range, so a job completes in 5 ticks."""

    def uniform(self, a: float, b: float) -> float:
        return b


class FixedRandom(random.Random):
    """Draws a fixed increment for every tick."""

    def __init__(self, step: float):
        super().__init__(0)
        self.step = step

    def uniform(self, a: float, b: float) -> float:
        return self.step


def make_settings(**scheduler) -> Settings:
    return Settings(
        scheduler=SchedulerConfig(**scheduler),
        logging=LoggingConfig(level="WARNING"),
    )
