"""Database record type definitions.

NOTE: This file must track database/schema.sql manually.
Use NotRequired for nullable/optional columns.
"""

from datetime import datetime
from typing import NotRequired, TypedDict


class InterviewRecordTD(TypedDict):
    """Record from interviews table."""

    interview_id: str
    application_id: str
    candidate_id: str
    job_id: str
    stage_id: NotRequired[str | None]
    scheduled_date: datetime
    duration_minutes: int
    status: str
    interview_type: str
    interviewer_ids: list[str]
    is_auto_scheduled: bool
    rescheduled_from: NotRequired[str | None]
    rescheduled_at: NotRequired[datetime | None]
    rescheduled_by: NotRequired[str | None]
    cancellation_reason: NotRequired[str | None]
    no_show_reason: NotRequired[str | None]
    overall_score: NotRequired[float | None]
    recommendation: NotRequired[str | None]
    rating_criteria_scores: NotRequired[str | dict[str, float] | None]  # JSONB, may be pre-parsed
    notes: NotRequired[str | None]
    meeting_link: NotRequired[str | None]
    calendar_event_id: NotRequired[str | None]
    created_at: NotRequired[datetime | None]
    updated_at: NotRequired[datetime | None]


class InterviewConfigurationRecordTD(TypedDict):
    """Record from interview_configurations table."""

    stage_id: str
    job_id: NotRequired[str | None]
    enabled: bool
    auto_schedule: bool
    default_duration_minutes: NotRequired[int | None]
    buffer_time_minutes: NotRequired[int | None]
    available_time_slots: NotRequired[list[str] | None]
    auto_schedule_window_days: NotRequired[int | None]
    interview_format: str
    assigned_interviewer_ids: NotRequired[list[str] | None]
    calendar_integration: NotRequired[str | None]
    auto_reschedule_on_cancel: bool
    auto_reschedule_on_no_show: bool
    require_all_interviewers: bool
    require_before_progression: bool


class InterviewFeedbackRecordTD(TypedDict):
    """Record from interview_feedback table."""

    feedback_id: str
    interview_id: str
    interviewer_id: str
    interviewer_name: str
    interviewer_email: NotRequired[str | None]
    rating: float
    recommendation: NotRequired[str | None]
    notes: NotRequired[str | None]
    submitted_at: datetime


class StageProgressRecordTD(TypedDict):
    """Record from application_stage_progress table."""

    application_id: str
    stage_id: str
    interview_id: NotRequired[str | None]
    completed: bool
    completed_at: NotRequired[datetime | None]
    updated_at: NotRequired[datetime | None]
