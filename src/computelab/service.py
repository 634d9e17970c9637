"""
Service wiring.

``build_service`` assembles the registry, scheduler, manager and read-only
views around one Clock so every component sees the same time.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from .clock import Clock, SystemClock
from .config import Settings, get_settings
from .jobs import (
    InMemoryJobStore,
    JobManager,
    JobStore,
    LifecycleScheduler,
    QueryEngine,
    ResultGeneratorRegistry,
    StatsAggregator,
)
from .logging import StructuredLogger, configure_logging


@dataclass(frozen=True)
class JobService:
    settings: Settings
    clock: Clock
    store: JobStore
    scheduler: LifecycleScheduler
    manager: JobManager
    query: QueryEngine
    stats: StatsAggregator
    logger: StructuredLogger

    async def close(self) -> None:
        await self.manager.close()


def build_logger(settings: Settings) -> StructuredLogger:
    return configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.format == "json",
        log_file=settings.logging.log_file,
    )


def build_service(
    settings: Settings | None = None,
    *,
    clock: Clock | None = None,
    rng: random.Random | None = None,
    results: ResultGeneratorRegistry | None = None,
    logger: StructuredLogger | None = None,
) -> JobService:
    settings = settings or get_settings()
    clock = clock or SystemClock()
    logger = logger or build_logger(settings)

    store = InMemoryJobStore()
    scheduler = LifecycleScheduler(
        store,
        clock,
        results or ResultGeneratorRegistry.with_builtins(),
        settings.scheduler,
        rng=rng,
        logger=logger,
        log_transitions=settings.logging.log_transitions,
    )
    manager = JobManager(store, scheduler, clock, settings.scheduler, logger)

    return JobService(
        settings=settings,
        clock=clock,
        store=store,
        scheduler=scheduler,
        manager=manager,
        query=QueryEngine(store, settings.query),
        stats=StatsAggregator(store, clock),
        logger=logger,
    )


__all__ = ["JobService", "build_service", "build_logger"]
