"""Tests for listing, filtering and pagination."""

from __future__ import annotations

import pytest
import pytest_asyncio

from computelab.config import QueryConfig
from computelab.jobs import JobFilter, QueryEngine, parse_limit


class TestParseLimit:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, 50),
            (10, 10),
            ("10", 10),
            (" 7 ", 7),
            ("2.9", 2),
            (3.7, 3),
            (0, 0),
            ("0", 0),
            ("abc", 50),
            ("", 50),
            ("-5", 50),
            (-1, 50),
            ("nan", 50),
            ("inf", 50),
            (True, 50),
            ([], 50),
        ],
    )
    def test_values(self, raw, expected):
        assert parse_limit(raw, 50) == expected


@pytest_asyncio.fixture
async def populated(service, clock):
    manager = service.manager
    md = await manager.submit("molecular_dynamics", {})
    failed = await manager.submit("retrosynthesis", {})
    await clock.advance(3.0)
    await manager.mark_failed(failed.id, "no route found")
    docking = await manager.submit("molecular_docking", {})
    md_queued = await manager.submit("molecular_dynamics", {})
    return {"md": md, "docking": docking, "md_queued": md_queued, "failed": failed}


class TestQueryEngine:

    @pytest.mark.asyncio
    async def test_unfiltered_in_creation_order(self, service, populated):
        page = await service.query.list()
        assert page.total == 4
        assert [j.id for j in page.jobs] == [
            populated["md"].id,
            populated["failed"].id,
            populated["docking"].id,
            populated["md_queued"].id,
        ]

    @pytest.mark.asyncio
    async def test_filter_by_status(self, service, populated):
        page = await service.query.list(JobFilter(status="queued"))
        assert [j.id for j in page.jobs] == [populated["docking"].id, populated["md_queued"].id]
        assert all(j.status.value == "queued" for j in page.jobs)

    @pytest.mark.asyncio
    async def test_filters_combine(self, service, populated):
        page = await service.query.list(JobFilter(status="running", toolkit="molecular_dynamics"))
        assert page.total == 1
        assert page.jobs[0].id == populated["md"].id

    @pytest.mark.asyncio
    async def test_unknown_status_matches_nothing(self, service, populated):
        page = await service.query.list(JobFilter(status="paused"))
        assert page.total == 0
        assert page.jobs == []

    @pytest.mark.asyncio
    async def test_total_is_counted_before_truncation(self, service, populated):
        page = await service.query.list(limit="2")
        assert page.total == 4
        assert len(page.jobs) == 2

    @pytest.mark.asyncio
    async def test_zero_limit(self, service, populated):
        page = await service.query.list(limit=0)
        assert page.total == 4
        assert page.jobs == []

    @pytest.mark.asyncio
    async def test_bad_limit_falls_back(self, service, populated):
        page = await service.query.list(limit="lots")
        assert len(page.jobs) == 4

    @pytest.mark.asyncio
    async def test_offset(self, service, populated):
        page = await service.query.list(limit=2, offset=3)
        assert page.total == 4
        assert [j.id for j in page.jobs] == [populated["md_queued"].id]

    @pytest.mark.asyncio
    async def test_default_limit_from_config(self, service, clock):
        for _ in range(5):
            await service.manager.submit("x", {})
        engine = QueryEngine(service.store, QueryConfig(default_limit=3))

        page = await engine.list()
        assert page.total == 5
        assert len(page.jobs) == 3

    @pytest.mark.asyncio
    async def test_to_dict(self, service, populated):
        d = (await service.query.list(limit=1)).to_dict()
        assert d["total"] == 4
        assert d["jobs"][0]["id"] == populated["md"].id
        assert d["jobs"][0]["status"] == "running"

    @pytest.mark.asyncio
    async def test_listing_does_not_mutate(self, service, populated):
        page = await service.query.list()
        page.jobs[0].config["tampered"] = True
        assert "tampered" not in (await service.manager.get(populated["md"].id)).config
