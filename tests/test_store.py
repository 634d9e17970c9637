"""Tests for the in-memory job registry."""

from __future__ import annotations

import pytest

from computelab.jobs.store import InMemoryJobStore, JobFilter
from computelab.jobs.types import JobRecord, JobStatus


def make_job(job_id: str, toolkit: str = "quantum_chemistry", **overrides) -> JobRecord:
    fields = {"config": {}, "created_at": 1.0, "updated_at": 1.0, **overrides}
    return JobRecord(id=job_id, toolkit=toolkit, **fields)


class TestCreate:

    @pytest.mark.asyncio
    async def test_assigns_queue_position_from_queued_count(self):
        store = InMemoryJobStore()
        first = await store.create(make_job("a"))
        second = await store.create(make_job("b"))
        assert first.queue_position == 1
        assert second.queue_position == 2

    @pytest.mark.asyncio
    async def test_running_jobs_do_not_count_towards_position(self):
        store = InMemoryJobStore()
        await store.create(make_job("a"))
        await store.update("a", lambda j: j.transition_to(JobStatus.RUNNING, 2.0))
        later = await store.create(make_job("b"))
        assert later.queue_position == 1

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self):
        store = InMemoryJobStore()
        await store.create(make_job("a"))
        with pytest.raises(ValueError, match="already exists"):
            await store.create(make_job("a"))
        assert await store.count() == 1


class TestReadsAreCopies:

    @pytest.mark.asyncio
    async def test_mutating_a_read_does_not_touch_the_registry(self):
        store = InMemoryJobStore()
        await store.create(make_job("a", config={"steps": 10}))
        job = await store.get("a")
        job.config["steps"] = 999
        assert (await store.get("a")).config == {"steps": 10}

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self):
        assert await InMemoryJobStore().get("nope") is None


class TestUpdate:

    @pytest.mark.asyncio
    async def test_missing_job_skips_mutator(self):
        store = InMemoryJobStore()
        calls = []
        result = await store.update("ghost", lambda j: calls.append(j))
        assert result is None
        assert calls == []

    @pytest.mark.asyncio
    async def test_none_from_mutator_leaves_record(self):
        store = InMemoryJobStore()
        await store.create(make_job("a"))
        result = await store.update("a", lambda j: None)
        assert result.status is JobStatus.QUEUED

    @pytest.mark.asyncio
    async def test_mutator_error_propagates_and_keeps_record(self):
        store = InMemoryJobStore()
        await store.create(make_job("a"))

        def boom(job):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await store.update("a", boom)
        assert (await store.get("a")).status is JobStatus.QUEUED
        # The lock was released
        assert await store.count() == 1


class TestCancelOrDelete:

    @pytest.mark.asyncio
    async def test_queued_job_is_removed(self):
        store = InMemoryJobStore()
        await store.create(make_job("a"))
        outcome = await store.cancel_or_delete("a", 5.0)
        assert outcome.removed
        assert await store.get("a") is None

    @pytest.mark.asyncio
    async def test_running_job_is_cancelled_in_place(self):
        store = InMemoryJobStore()
        await store.create(make_job("a"))
        await store.update("a", lambda j: j.transition_to(JobStatus.RUNNING, 2.0))
        outcome = await store.cancel_or_delete("a", 5.0)
        assert not outcome.removed
        assert outcome.job.status is JobStatus.CANCELLED
        assert (await store.get("a")).status is JobStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_missing_job(self):
        assert await InMemoryJobStore().cancel_or_delete("nope", 1.0) is None


class TestList:

    @pytest.mark.asyncio
    async def test_creation_order_and_filters(self):
        store = InMemoryJobStore()
        await store.create(make_job("a", toolkit="x"))
        await store.create(make_job("b", toolkit="y"))
        await store.create(make_job("c", toolkit="x"))
        await store.update("c", lambda j: j.transition_to(JobStatus.RUNNING, 2.0))

        assert [j.id for j in await store.list()] == ["a", "b", "c"]
        assert [j.id for j in await store.list(JobFilter(toolkit="x"))] == ["a", "c"]
        assert [j.id for j in await store.list(JobFilter(toolkit="x", status="running"))] == ["c"]
        assert [j.id for j in await store.list(JobFilter(status=JobStatus.QUEUED))] == ["a", "b"]
        assert await store.count(JobFilter(status="bogus")) == 0
