"""Pydantic models for interviews, stage configuration and feedback."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

# ============================================
# Enums
# ============================================


class InterviewStatus(StrEnum):
    SCHEDULED = "SCHEDULED"
    RESCHEDULED = "RESCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


ACTIVE_STATUSES = frozenset(
    {InterviewStatus.SCHEDULED, InterviewStatus.RESCHEDULED, InterviewStatus.IN_PROGRESS}
)


class InterviewFormat(StrEnum):
    LIVE_VIDEO = "LIVE_VIDEO"
    PHONE = "PHONE"
    IN_PERSON = "IN_PERSON"
    PANEL = "PANEL"


class InterviewType(StrEnum):
    VIDEO = "VIDEO"
    PHONE = "PHONE"
    IN_PERSON = "IN_PERSON"
    PANEL = "PANEL"


FORMAT_TO_TYPE = {
    InterviewFormat.LIVE_VIDEO: InterviewType.VIDEO,
    InterviewFormat.PHONE: InterviewType.PHONE,
    InterviewFormat.IN_PERSON: InterviewType.IN_PERSON,
    InterviewFormat.PANEL: InterviewType.PANEL,
}


class CalendarIntegration(StrEnum):
    NONE = "NONE"
    GOOGLE = "GOOGLE"


def parse_slot_time(value: str) -> time:
    """Parse an "HH:MM" slot template into a time of day."""
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Time slot must be HH:MM, got {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Time slot out of range: {value!r}")
    return time(hours, minutes)


# ============================================
# Stage configuration
# ============================================


class InterviewConfiguration(BaseModel):
    """Per-stage scheduling configuration (read-only to the engine)."""

    stage_id: str
    job_id: str | None = None
    enabled: bool = False
    auto_schedule: bool = True
    default_duration_minutes: int | None = 60
    buffer_time_minutes: int = Field(default=15, ge=0)
    available_time_slots: list[str] = Field(
        default_factory=lambda: ["09:00", "10:00", "14:00", "15:00"]
    )
    auto_schedule_window_days: int = Field(default=7, ge=1)
    interview_format: InterviewFormat = InterviewFormat.LIVE_VIDEO
    assigned_interviewer_ids: list[str] = Field(default_factory=list)
    calendar_integration: CalendarIntegration = CalendarIntegration.NONE
    auto_reschedule_on_cancel: bool = False
    auto_reschedule_on_no_show: bool = False
    require_all_interviewers: bool = False
    require_before_progression: bool = False

    @field_validator("available_time_slots")
    @classmethod
    def validate_time_slots(cls, v: list[str]) -> list[str]:
        for slot in v:
            parse_slot_time(slot)
        return [slot.strip() for slot in v]

    @property
    def slot_times(self) -> list[time]:
        """Configured slot start times, in list order."""
        return [parse_slot_time(slot) for slot in self.available_time_slots]

    @property
    def interview_type(self) -> InterviewType:
        return FORMAT_TO_TYPE[self.interview_format]

    @property
    def uses_calendar(self) -> bool:
        return self.calendar_integration != CalendarIntegration.NONE


# ============================================
# Interview records
# ============================================


class Interview(BaseModel):
    """A scheduled interview."""

    id: str
    application_id: str
    candidate_id: str
    job_id: str
    stage_id: str | None = None

    scheduled_date: datetime
    duration_minutes: int = Field(gt=0)
    status: InterviewStatus = InterviewStatus.SCHEDULED
    type: InterviewType = InterviewType.VIDEO
    interviewer_ids: list[str] = Field(default_factory=list)
    is_auto_scheduled: bool = False

    # Reschedule lineage and audit
    rescheduled_from: str | None = None
    rescheduled_at: datetime | None = None
    rescheduled_by: str | None = None
    cancellation_reason: str | None = None
    no_show_reason: str | None = None

    # Outcome
    overall_score: float | None = None
    recommendation: str | None = None
    rating_criteria_scores: dict[str, float] | None = None
    notes: str | None = None

    meeting_link: str | None = None
    calendar_event_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def end_date(self) -> datetime:
        return self.scheduled_date + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class InterviewFeedback(BaseModel):
    """A single interviewer's feedback on an interview."""

    id: str
    interview_id: str
    interviewer_id: str
    interviewer_name: str
    interviewer_email: str | None = None
    rating: float = Field(ge=1, le=5)
    recommendation: str | None = None
    notes: str | None = None
    submitted_at: datetime


class StageProgress(BaseModel):
    """Links an application's progress through a stage to its interview."""

    application_id: str
    stage_id: str
    interview_id: str | None = None
    completed: bool = False
    completed_at: datetime | None = None
    updated_at: datetime | None = None


# ============================================
# External lookups
# ============================================


class ApplicationInfo(BaseModel):
    """Application linkage plus the candidate contact details needed for payloads."""

    id: str
    candidate_id: str
    job_id: str
    candidate_email: str
    candidate_first_name: str | None = None
    candidate_last_name: str | None = None

    @property
    def candidate_name(self) -> str:
        name = f"{self.candidate_first_name or ''} {self.candidate_last_name or ''}".strip()
        return name or self.candidate_email


class JobInfo(BaseModel):
    id: str
    title: str
    company_name: str | None = None


# ============================================
# Results
# ============================================


class ProgressionStatus(BaseModel):
    """Whether all required interviewers have submitted feedback."""

    can_progress: bool = True
    missing_interviewers: list[str] = Field(default_factory=list)
    submitted_count: int = 0
    total_count: int = 0
    requires_all_interviewers: bool = False
    stage_completed: bool = False


class BulkOperationFailure(BaseModel):
    interview_id: str
    error: str
    code: str


class BulkOperationResult(BaseModel):
    successful: list[str] = Field(default_factory=list)
    failed: list[BulkOperationFailure] = Field(default_factory=list)


class InterviewListResponse(BaseModel):
    interviews: list[Interview]
    count: int
