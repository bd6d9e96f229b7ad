"""First-fit slot search over a bounded window of working days."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from structlog import get_logger

from interview_scheduling.models.interview import InterviewConfiguration
from interview_scheduling.services.conflicts import ConflictChecker
from interview_scheduling.services.store import InterviewStore

logger = get_logger()


@dataclass(frozen=True)
class SlotCandidate:
    start: datetime
    interviewer_ids: list[str] = field(default_factory=list)
    is_fallback: bool = False


class SlotFinder:
    """
    Finds the earliest free configured slot for a stage.

    Days are walked from today for ``auto_schedule_window_days`` days, skipping
    non-working days; on each day the configured "HH:MM" slots are tried in
    list order. The first slot that is strictly in the future, not past the
    window end and free of conflicts wins.

    When the window is exhausted the search falls back to tomorrow at the
    fallback time without checking conflicts, so scheduling always succeeds
    even if that double-books.
    """

    def __init__(
        self,
        conflict_checker: ConflictChecker,
        tz: ZoneInfo | None = None,
        working_days: Iterable[int] = (0, 1, 2, 3, 4),
        fallback_time: time = time(9, 0),
    ):
        self.conflict_checker = conflict_checker
        self.tz = tz or ZoneInfo("UTC")
        self.working_days = frozenset(working_days)
        self.fallback_time = fallback_time

    async def find_slot(
        self, store: InterviewStore, config: InterviewConfiguration, now: datetime
    ) -> SlotCandidate:
        slot = await self._search_window(store, config, now)
        if slot:
            return slot

        fallback = self.fallback_slot(now)
        logger.warning(
            "slot_search_exhausted",
            stage_id=config.stage_id,
            window_days=config.auto_schedule_window_days,
            fallback_start=fallback.isoformat(),
        )
        return SlotCandidate(
            start=fallback,
            interviewer_ids=list(config.assigned_interviewer_ids),
            is_fallback=True,
        )

    async def _search_window(
        self, store: InterviewStore, config: InterviewConfiguration, now: datetime
    ) -> SlotCandidate | None:
        if not config.default_duration_minutes:
            raise ValueError("Slot search requires a positive default duration")

        duration = timedelta(minutes=config.default_duration_minutes)
        window_end = now + timedelta(days=config.auto_schedule_window_days)
        today = now.astimezone(self.tz).date()

        for day in range(config.auto_schedule_window_days):
            check_date = today + timedelta(days=day)
            if check_date.weekday() not in self.working_days:
                continue

            for slot_time in config.slot_times:
                slot_start = self._at(check_date, slot_time)

                if slot_start <= now:
                    continue
                if slot_start > window_end:
                    return None

                has_conflict = await self.conflict_checker.has_conflict(
                    store,
                    slot_start,
                    slot_start + duration,
                    config.buffer_time_minutes,
                    interviewer_ids=config.assigned_interviewer_ids,
                )
                if has_conflict:
                    continue

                return SlotCandidate(
                    start=slot_start,
                    interviewer_ids=list(config.assigned_interviewer_ids),
                )

        return None

    def fallback_slot(self, now: datetime) -> datetime:
        """Tomorrow at the fallback time, pushed a further day if not strictly future."""
        tomorrow = now.astimezone(self.tz).date() + timedelta(days=1)
        start = self._at(tomorrow, self.fallback_time)
        if start <= now:
            start = self._at(tomorrow + timedelta(days=1), self.fallback_time)
        return start

    def _at(self, day: date, slot_time: time) -> datetime:
        return datetime.combine(day, slot_time, tzinfo=self.tz).astimezone(UTC)
