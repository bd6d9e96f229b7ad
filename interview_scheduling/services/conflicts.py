"""Buffered double-booking detection."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Literal

from structlog import get_logger

from interview_scheduling.models.interview import Interview
from interview_scheduling.services.store import InterviewStore

logger = get_logger()

ConflictScope = Literal["global", "interviewer"]


def padded_window(
    start: datetime, end: datetime, buffer_minutes: int
) -> tuple[datetime, datetime]:
    """Expand [start, end) by the buffer on both sides."""
    pad = timedelta(minutes=buffer_minutes)
    return start - pad, end + pad


def overlaps_with_buffer(
    other_start: datetime,
    other_end: datetime,
    start: datetime,
    end: datetime,
    buffer_minutes: int,
) -> bool:
    """
    True when two intervals are closer than the buffer.

    An interview ending at 09:30 leaves 10:00 free with a 15 minute buffer
    (09:30 + 15 <= 10:00), but blocks 09:40.
    """
    window_start, window_end = padded_window(start, end, buffer_minutes)
    return other_start < window_end and other_end > window_start


class ConflictChecker:
    """
    Decides whether a proposed interview would double-book.

    With the "global" scope every active interview competes for the same
    calendar. With the "interviewer" scope only interviews sharing at least one
    interviewer compete; an interview with no assigned interviewers still
    competes with everything.
    """

    def __init__(self, scope: ConflictScope = "global"):
        self.scope = scope

    def _shares_pool(self, other: Interview, interviewer_ids: set[str]) -> bool:
        if self.scope == "global":
            return True
        if not interviewer_ids or not other.interviewer_ids:
            return True
        return bool(interviewer_ids.intersection(other.interviewer_ids))

    async def find_conflicts(
        self,
        store: InterviewStore,
        proposed_start: datetime,
        proposed_end: datetime,
        buffer_minutes: int,
        exclude_interview_id: str | None = None,
        interviewer_ids: Iterable[str] | None = None,
    ) -> list[Interview]:
        """Active interviews that collide with the proposed interval."""
        window_start, window_end = padded_window(proposed_start, proposed_end, buffer_minutes)
        candidates = await store.list_active_between(
            window_start, window_end, exclude_id=exclude_interview_id
        )
        pool = set(interviewer_ids or [])

        return [
            other
            for other in candidates
            if other.id != exclude_interview_id
            and other.is_active
            and self._shares_pool(other, pool)
            and overlaps_with_buffer(
                other.scheduled_date,
                other.end_date,
                proposed_start,
                proposed_end,
                buffer_minutes,
            )
        ]

    async def has_conflict(
        self,
        store: InterviewStore,
        proposed_start: datetime,
        proposed_end: datetime,
        buffer_minutes: int,
        exclude_interview_id: str | None = None,
        interviewer_ids: Iterable[str] | None = None,
    ) -> bool:
        conflicts = await self.find_conflicts(
            store,
            proposed_start,
            proposed_end,
            buffer_minutes,
            exclude_interview_id=exclude_interview_id,
            interviewer_ids=interviewer_ids,
        )
        if conflicts:
            logger.debug(
                "time_slot_conflict",
                proposed_start=proposed_start.isoformat(),
                conflicting_interview_ids=[c.id for c in conflicts],
            )
        return bool(conflicts)
