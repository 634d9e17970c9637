"""
Shared test fixtures for computelab tests.

This module provides:
- A ManualClock so lifecycle tests never wait on the wall clock
- A quiet structured logger
- A fully wired JobService per test
"""

from __future__ import annotations

import pytest
import pytest_asyncio

from computelab.clock import ManualClock
from computelab.config import Settings
from computelab.logging import StructuredLogger
from computelab.service import build_service

from tests._testkit import START, MaxRandom, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=START)


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger("computelab.tests", level="WARNING")


@pytest_asyncio.fixture
async def service(settings, clock, logger):
    svc = build_service(settings, clock=clock, rng=MaxRandom(0), logger=logger)
    try:
        yield svc
    finally:
        await svc.close()


@pytest.fixture
def manager(service):
    return service.manager
