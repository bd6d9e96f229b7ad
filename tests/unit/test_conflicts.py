"""Tests for buffered conflict detection (interview_scheduling/services/conflicts.py)."""

from __future__ import annotations

from datetime import timedelta

import pytest

from interview_scheduling.models.interview import InterviewStatus
from interview_scheduling.services.conflicts import ConflictChecker, overlaps_with_buffer
from tests.fixtures.factories import at, create_interview
from tests.fixtures.memory import InMemoryDatabase


def test_overlaps_with_buffer_gap_exactly_buffer_is_free():
    """09:00-09:30 leaves 09:45 free with a 15 minute buffer."""
    assert not overlaps_with_buffer(at(0, 9), at(0, 9, 30), at(0, 9, 45), at(0, 10, 15), 15)


def test_overlaps_with_buffer_gap_below_buffer_conflicts():
    assert overlaps_with_buffer(at(0, 9), at(0, 9, 30), at(0, 9, 40), at(0, 10, 10), 15)


def test_overlaps_with_buffer_long_interview_started_before_window():
    """An interview starting before the padded window but still running conflicts."""
    assert overlaps_with_buffer(at(0, 8), at(0, 11), at(0, 9, 30), at(0, 10), 15)


def test_overlaps_with_buffer_zero_buffer_back_to_back():
    assert not overlaps_with_buffer(at(0, 9), at(0, 9, 30), at(0, 9, 30), at(0, 10), 0)


@pytest.mark.asyncio
async def test_has_conflict_only_counts_active_interviews():
    memory_db = InMemoryDatabase()
    memory_db.add(
        create_interview(status=InterviewStatus.CANCELLED),
        create_interview(status=InterviewStatus.COMPLETED),
        create_interview(status=InterviewStatus.NO_SHOW),
    )
    checker = ConflictChecker()

    async with memory_db() as store:
        assert not await checker.has_conflict(store, at(0, 9), at(0, 9, 30), 15)

        memory_db.add(create_interview(status=InterviewStatus.IN_PROGRESS))
        assert await checker.has_conflict(store, at(0, 9), at(0, 9, 30), 15)


@pytest.mark.asyncio
async def test_has_conflict_excludes_given_interview():
    memory_db = InMemoryDatabase()
    memory_db.add(create_interview(id="int_1"))
    checker = ConflictChecker()

    async with memory_db() as store:
        assert await checker.has_conflict(store, at(0, 9, 15), at(0, 9, 45), 15)
        assert not await checker.has_conflict(
            store, at(0, 9, 15), at(0, 9, 45), 15, exclude_interview_id="int_1"
        )


@pytest.mark.asyncio
async def test_find_conflicts_returns_colliding_interviews():
    memory_db = InMemoryDatabase()
    first = create_interview(id="int_1", scheduled_date=at(0, 9))
    far = create_interview(id="int_2", scheduled_date=at(0, 14))
    memory_db.add(first, far)

    async with memory_db() as store:
        conflicts = await ConflictChecker().find_conflicts(
            store, at(0, 9, 40), at(0, 10, 10), 15
        )

    assert [c.id for c in conflicts] == ["int_1"]


@pytest.mark.asyncio
async def test_global_scope_ignores_interviewers():
    memory_db = InMemoryDatabase()
    memory_db.add(create_interview(interviewer_ids=["iv_1"]))

    async with memory_db() as store:
        assert await ConflictChecker("global").has_conflict(
            store, at(0, 9), at(0, 9, 30), 15, interviewer_ids=["iv_2"]
        )


@pytest.mark.asyncio
async def test_interviewer_scope_only_shared_interviewers_conflict():
    memory_db = InMemoryDatabase()
    memory_db.add(create_interview(interviewer_ids=["iv_1"]))
    checker = ConflictChecker("interviewer")

    async with memory_db() as store:
        assert not await checker.has_conflict(
            store, at(0, 9), at(0, 9, 30), 15, interviewer_ids=["iv_2"]
        )
        assert await checker.has_conflict(
            store, at(0, 9), at(0, 9, 30), 15, interviewer_ids=["iv_2", "iv_1"]
        )


@pytest.mark.asyncio
async def test_interviewer_scope_unassigned_interviews_compete_with_everything():
    memory_db = InMemoryDatabase()
    memory_db.add(create_interview(interviewer_ids=[]))
    checker = ConflictChecker("interviewer")

    async with memory_db() as store:
        assert await checker.has_conflict(
            store, at(0, 9), at(0, 9, 30), 15, interviewer_ids=["iv_2"]
        )
        assert await checker.has_conflict(store, at(0, 9), at(0, 9, 30), 15)


@pytest.mark.asyncio
async def test_buffer_applies_after_existing_interview_end():
    """A 60 minute interview at 09:00 blocks 10:10 but not 10:15 with a 15 minute buffer."""
    memory_db = InMemoryDatabase()
    memory_db.add(create_interview(duration_minutes=60))
    checker = ConflictChecker()

    async with memory_db() as store:
        start = at(0, 10, 10)
        assert await checker.has_conflict(store, start, start + timedelta(minutes=30), 15)
        start = at(0, 10, 15)
        assert not await checker.has_conflict(store, start, start + timedelta(minutes=30), 15)
