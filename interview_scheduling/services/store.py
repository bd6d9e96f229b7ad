"""Transaction-scoped persistence for interviews, stage progress and feedback."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime
from typing import Any, Protocol, cast

import asyncpg
from structlog import get_logger

from interview_scheduling.core.database import Database, db
from interview_scheduling.models.interview import (
    ACTIVE_STATUSES,
    Interview,
    InterviewFeedback,
    InterviewStatus,
    StageProgress,
)
from interview_scheduling.types.database import (
    InterviewFeedbackRecordTD,
    InterviewRecordTD,
    StageProgressRecordTD,
)

logger = get_logger()

CALENDAR_LOCK_KEY = "interview-calendar"


class InterviewStore(Protocol):
    """Persistence handle bound to a single open transaction.

    Every read and write made through one handle commits or rolls back
    together, so a conflict check and the write that depends on it cannot
    interleave with another scheduling transaction.
    """

    async def lock_stage(self, application_id: str, stage_id: str | None) -> None: ...

    async def lock_calendar(self) -> None: ...

    async def get_interview(self, interview_id: str) -> Interview | None: ...

    async def find_active_for_stage(
        self, application_id: str, stage_id: str, exclude_id: str | None = None
    ) -> Interview | None: ...

    async def list_active_between(
        self, window_start: datetime, window_end: datetime, exclude_id: str | None = None
    ) -> list[Interview]: ...

    async def list_interviews(
        self,
        *,
        job_id: str | None = None,
        application_id: str | None = None,
        stage_id: str | None = None,
        status: InterviewStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[Interview]: ...

    async def insert_interview(self, interview: Interview) -> Interview: ...

    async def update_interview(self, interview: Interview) -> Interview: ...

    async def upsert_stage_progress(
        self, application_id: str, stage_id: str, interview_id: str
    ) -> None: ...

    async def complete_stage_progress(
        self, application_id: str, stage_id: str, completed_at: datetime
    ) -> None: ...

    async def get_stage_progress(
        self, application_id: str, stage_id: str
    ) -> StageProgress | None: ...

    async def insert_feedback(self, feedback: InterviewFeedback) -> InterviewFeedback: ...

    async def list_feedback(self, interview_id: str) -> list[InterviewFeedback]: ...


UnitOfWork = Callable[[], AbstractAsyncContextManager[InterviewStore]]

_ACTIVE = [status.value for status in ACTIVE_STATUSES]

_INTERVIEW_COLUMNS = """
    interview_id, application_id, candidate_id, job_id, stage_id,
    scheduled_date, duration_minutes, status, interview_type, interviewer_ids,
    is_auto_scheduled, rescheduled_from, rescheduled_at, rescheduled_by,
    cancellation_reason, no_show_reason, overall_score, recommendation,
    rating_criteria_scores, notes, meeting_link, calendar_event_id,
    created_at, updated_at
"""


def record_to_interview(row: Any) -> Interview:
    """Convert an interviews row (asyncpg.Record or dict) to an Interview."""
    data = cast(InterviewRecordTD, dict(row))
    scores = data.get("rating_criteria_scores")
    if isinstance(scores, str):
        scores = json.loads(scores)
    return Interview(
        id=data["interview_id"],
        application_id=data["application_id"],
        candidate_id=data["candidate_id"],
        job_id=data["job_id"],
        stage_id=data.get("stage_id"),
        scheduled_date=data["scheduled_date"],
        duration_minutes=data["duration_minutes"],
        status=data["status"],
        type=data["interview_type"],
        interviewer_ids=list(data.get("interviewer_ids") or []),
        is_auto_scheduled=data.get("is_auto_scheduled", False),
        rescheduled_from=data.get("rescheduled_from"),
        rescheduled_at=data.get("rescheduled_at"),
        rescheduled_by=data.get("rescheduled_by"),
        cancellation_reason=data.get("cancellation_reason"),
        no_show_reason=data.get("no_show_reason"),
        overall_score=data.get("overall_score"),
        recommendation=data.get("recommendation"),
        rating_criteria_scores=scores,
        notes=data.get("notes"),
        meeting_link=data.get("meeting_link"),
        calendar_event_id=data.get("calendar_event_id"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def record_to_feedback(row: Any) -> InterviewFeedback:
    data = cast(InterviewFeedbackRecordTD, dict(row))
    return InterviewFeedback(
        id=data["feedback_id"],
        interview_id=data["interview_id"],
        interviewer_id=data["interviewer_id"],
        interviewer_name=data["interviewer_name"],
        interviewer_email=data.get("interviewer_email"),
        rating=data["rating"],
        recommendation=data.get("recommendation"),
        notes=data.get("notes"),
        submitted_at=data["submitted_at"],
    )


class PostgresInterviewStore:
    """InterviewStore backed by an asyncpg connection inside a transaction."""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def lock_stage(self, application_id: str, stage_id: str | None) -> None:
        """Serialise scheduling for one (application, stage) pair until commit."""
        await self.conn.execute(
            "SELECT pg_advisory_xact_lock(hashtextextended($1, 0))",
            f"interview-stage:{application_id}:{stage_id or '-'}",
        )

    async def lock_calendar(self) -> None:
        """Serialise conflict-checked writes against the shared calendar until commit."""
        await self.conn.execute(
            "SELECT pg_advisory_xact_lock(hashtextextended($1, 0))",
            CALENDAR_LOCK_KEY,
        )

    async def get_interview(self, interview_id: str) -> Interview | None:
        row = await self.conn.fetchrow(
            f"SELECT {_INTERVIEW_COLUMNS} FROM interviews WHERE interview_id = $1 FOR UPDATE",
            interview_id,
        )
        return record_to_interview(row) if row else None

    async def find_active_for_stage(
        self, application_id: str, stage_id: str, exclude_id: str | None = None
    ) -> Interview | None:
        row = await self.conn.fetchrow(
            f"""
            SELECT {_INTERVIEW_COLUMNS}
            FROM interviews
            WHERE application_id = $1
              AND stage_id = $2
              AND status = ANY($3::text[])
              AND ($4::text IS NULL OR interview_id <> $4)
            ORDER BY created_at
            LIMIT 1
        """,
            application_id,
            stage_id,
            _ACTIVE,
            exclude_id,
        )
        return record_to_interview(row) if row else None

    async def list_active_between(
        self, window_start: datetime, window_end: datetime, exclude_id: str | None = None
    ) -> list[Interview]:
        """Active interviews whose [start, end) intersects [window_start, window_end)."""
        rows = await self.conn.fetch(
            f"""
            SELECT {_INTERVIEW_COLUMNS}
            FROM interviews
            WHERE status = ANY($1::text[])
              AND scheduled_date < $3
              AND scheduled_date + make_interval(mins => duration_minutes) > $2
              AND ($4::text IS NULL OR interview_id <> $4)
            ORDER BY scheduled_date
        """,
            _ACTIVE,
            window_start,
            window_end,
            exclude_id,
        )
        return [record_to_interview(row) for row in rows]

    async def list_interviews(
        self,
        *,
        job_id: str | None = None,
        application_id: str | None = None,
        stage_id: str | None = None,
        status: InterviewStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[Interview]:
        rows = await self.conn.fetch(
            f"""
            SELECT {_INTERVIEW_COLUMNS}
            FROM interviews
            WHERE ($1::text IS NULL OR job_id = $1)
              AND ($2::text IS NULL OR application_id = $2)
              AND ($3::text IS NULL OR stage_id = $3)
              AND ($4::text IS NULL OR status = $4)
              AND ($5::timestamptz IS NULL OR scheduled_date >= $5)
              AND ($6::timestamptz IS NULL OR scheduled_date <= $6)
            ORDER BY scheduled_date ASC
        """,
            job_id,
            application_id,
            stage_id,
            status.value if status else None,
            start_date,
            end_date,
        )
        return [record_to_interview(row) for row in rows]

    async def insert_interview(self, interview: Interview) -> Interview:
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO interviews
            (interview_id, application_id, candidate_id, job_id, stage_id,
             scheduled_date, duration_minutes, status, interview_type, interviewer_ids,
             is_auto_scheduled, notes, meeting_link, calendar_event_id,
             created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, NOW(), NOW())
            RETURNING {_INTERVIEW_COLUMNS}
        """,
            interview.id,
            interview.application_id,
            interview.candidate_id,
            interview.job_id,
            interview.stage_id,
            interview.scheduled_date,
            interview.duration_minutes,
            interview.status.value,
            interview.type.value,
            interview.interviewer_ids,
            interview.is_auto_scheduled,
            interview.notes,
            interview.meeting_link,
            interview.calendar_event_id,
        )
        logger.debug("interview_row_inserted", interview_id=interview.id)
        return record_to_interview(row)

    async def update_interview(self, interview: Interview) -> Interview:
        row = await self.conn.fetchrow(
            f"""
            UPDATE interviews SET
                scheduled_date = $2,
                status = $3,
                interviewer_ids = $4,
                is_auto_scheduled = $5,
                rescheduled_from = $6,
                rescheduled_at = $7,
                rescheduled_by = $8,
                cancellation_reason = $9,
                no_show_reason = $10,
                overall_score = $11,
                recommendation = $12,
                rating_criteria_scores = $13::jsonb,
                notes = $14,
                meeting_link = $15,
                calendar_event_id = $16,
                updated_at = NOW()
            WHERE interview_id = $1
            RETURNING {_INTERVIEW_COLUMNS}
        """,
            interview.id,
            interview.scheduled_date,
            interview.status.value,
            interview.interviewer_ids,
            interview.is_auto_scheduled,
            interview.rescheduled_from,
            interview.rescheduled_at,
            interview.rescheduled_by,
            interview.cancellation_reason,
            interview.no_show_reason,
            interview.overall_score,
            interview.recommendation,
            (
                json.dumps(interview.rating_criteria_scores)
                if interview.rating_criteria_scores is not None
                else None
            ),
            interview.notes,
            interview.meeting_link,
            interview.calendar_event_id,
        )
        return record_to_interview(row)

    async def upsert_stage_progress(
        self, application_id: str, stage_id: str, interview_id: str
    ) -> None:
        await self.conn.execute(
            """
            INSERT INTO application_stage_progress
            (application_id, stage_id, interview_id, completed, updated_at)
            VALUES ($1, $2, $3, FALSE, NOW())
            ON CONFLICT (application_id, stage_id) DO UPDATE SET
                interview_id = EXCLUDED.interview_id,
                updated_at = NOW()
        """,
            application_id,
            stage_id,
            interview_id,
        )

    async def complete_stage_progress(
        self, application_id: str, stage_id: str, completed_at: datetime
    ) -> None:
        await self.conn.execute(
            """
            UPDATE application_stage_progress
            SET completed = TRUE, completed_at = $3, updated_at = NOW()
            WHERE application_id = $1 AND stage_id = $2
        """,
            application_id,
            stage_id,
            completed_at,
        )

    async def get_stage_progress(self, application_id: str, stage_id: str) -> StageProgress | None:
        row = await self.conn.fetchrow(
            """
            SELECT application_id, stage_id, interview_id, completed, completed_at, updated_at
            FROM application_stage_progress
            WHERE application_id = $1 AND stage_id = $2
        """,
            application_id,
            stage_id,
        )
        if not row:
            return None
        progress = cast(StageProgressRecordTD, dict(row))
        return StageProgress(**progress)

    async def insert_feedback(self, feedback: InterviewFeedback) -> InterviewFeedback:
        row = await self.conn.fetchrow(
            """
            INSERT INTO interview_feedback
            (feedback_id, interview_id, interviewer_id, interviewer_name,
             interviewer_email, rating, recommendation, notes, submitted_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            RETURNING feedback_id, interview_id, interviewer_id, interviewer_name,
                      interviewer_email, rating, recommendation, notes, submitted_at
        """,
            feedback.id,
            feedback.interview_id,
            feedback.interviewer_id,
            feedback.interviewer_name,
            feedback.interviewer_email,
            feedback.rating,
            feedback.recommendation,
            feedback.notes,
            feedback.submitted_at,
        )
        return record_to_feedback(row)

    async def list_feedback(self, interview_id: str) -> list[InterviewFeedback]:
        rows = await self.conn.fetch(
            """
            SELECT feedback_id, interview_id, interviewer_id, interviewer_name,
                   interviewer_email, rating, recommendation, notes, submitted_at
            FROM interview_feedback
            WHERE interview_id = $1
            ORDER BY submitted_at
        """,
            interview_id,
        )
        return [record_to_feedback(row) for row in rows]


class PostgresUnitOfWork:
    """Opens a transaction per call and hands out a store bound to it."""

    def __init__(self, database: Database = db):
        self.database = database

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[PostgresInterviewStore]:
        async with self.database.transaction() as conn:
            yield PostgresInterviewStore(conn)
