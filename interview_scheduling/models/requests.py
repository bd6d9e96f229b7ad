"""Request models for scheduling operations."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from interview_scheduling.models.interview import InterviewStatus, InterviewType


def _assume_utc(value: datetime) -> datetime:
    """Timestamps sent without an offset are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class AutoScheduleRequest(BaseModel):
    application_id: str
    stage_id: str
    triggered_by: str


class ManualInterviewCreate(BaseModel):
    """Caller-chosen interview time, with or without a pipeline stage."""

    application_id: str
    stage_id: str | None = None  # None = manual interview outside the pipeline
    scheduled_date: UtcDatetime
    duration_minutes: int = Field(gt=0)
    type: InterviewType = InterviewType.VIDEO
    created_by: str
    meeting_link: str | None = None
    interviewer_ids: list[str] = Field(default_factory=list)
    notes: str | None = None


class RescheduleRequest(BaseModel):
    new_scheduled_date: UtcDatetime
    rescheduled_by: str
    reason: str | None = None


class CancelRequest(BaseModel):
    cancelled_by: str
    reason: str = Field(min_length=1)


class NoShowRequest(BaseModel):
    marked_by: str
    reason: str | None = None


class InterviewOutcome(BaseModel):
    """Outcome fields written when an interview is completed."""

    overall_score: float | None = None
    recommendation: str | None = None
    rating_criteria_scores: dict[str, float] | None = None
    notes: str | None = None


class StatusUpdateRequest(BaseModel):
    status: InterviewStatus  # IN_PROGRESS or COMPLETED
    updated_by: str
    outcome: InterviewOutcome | None = None


class FeedbackCreate(BaseModel):
    interviewer_id: str
    interviewer_name: str
    interviewer_email: str | None = None
    rating: float = Field(ge=1, le=5)
    recommendation: str | None = None
    notes: str | None = None


class BulkRescheduleRequest(BaseModel):
    interview_ids: list[str] = Field(min_length=1)
    new_scheduled_date: UtcDatetime
    rescheduled_by: str
    reason: str | None = None


class BulkCancelRequest(BaseModel):
    interview_ids: list[str] = Field(min_length=1)
    cancelled_by: str
    reason: str = Field(min_length=1)


class CalendarFilters(BaseModel):
    job_id: str | None = None
    stage_id: str | None = None
    status: InterviewStatus | None = None
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
