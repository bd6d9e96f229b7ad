"""Interview lifecycle state machine."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import StrEnum

from interview_scheduling.core.errors import (
    DateTooFarInFutureError,
    InvalidTransitionError,
    PastDateError,
)
from interview_scheduling.models.interview import Interview, InterviewStatus
from interview_scheduling.models.requests import InterviewOutcome


class LifecycleOperation(StrEnum):
    RESCHEDULE = "reschedule"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"
    MARK_NO_SHOW = "mark_no_show"


_PENDING = frozenset({InterviewStatus.SCHEDULED, InterviewStatus.RESCHEDULED})
_ACTIVE = _PENDING | {InterviewStatus.IN_PROGRESS}

# operation -> (statuses it may be applied from, resulting status)
TRANSITIONS: dict[LifecycleOperation, tuple[frozenset[InterviewStatus], InterviewStatus]] = {
    LifecycleOperation.RESCHEDULE: (_PENDING, InterviewStatus.SCHEDULED),
    LifecycleOperation.START: (_PENDING, InterviewStatus.IN_PROGRESS),
    LifecycleOperation.COMPLETE: (_ACTIVE, InterviewStatus.COMPLETED),
    LifecycleOperation.CANCEL: (_ACTIVE, InterviewStatus.CANCELLED),
    LifecycleOperation.MARK_NO_SHOW: (_PENDING, InterviewStatus.NO_SHOW),
}


def can_apply(status: InterviewStatus, operation: LifecycleOperation) -> bool:
    allowed_from, _ = TRANSITIONS[operation]
    return status in allowed_from


def allowed_operations(status: InterviewStatus) -> list[LifecycleOperation]:
    """Operations legal from a status; empty for terminal statuses."""
    return [op for op in LifecycleOperation if can_apply(status, op)]


def next_status(status: InterviewStatus, operation: LifecycleOperation) -> InterviewStatus:
    """
    Resulting status of applying an operation.

    Raises:
        InvalidTransitionError: If the operation is not legal from ``status``
    """
    allowed_from, target = TRANSITIONS[operation]
    if status not in allowed_from:
        raise InvalidTransitionError(status.value, operation.value)
    return target


def validate_schedule_window(
    scheduled_date: datetime, now: datetime, max_days_ahead: int = 365
) -> None:
    """
    Require a scheduled time inside (now, now + max_days_ahead].

    Raises:
        PastDateError: If the time is not strictly in the future
        DateTooFarInFutureError: If the time is past the horizon
    """
    if scheduled_date <= now:
        raise PastDateError(
            "Cannot schedule interview at a past date/time",
            {"scheduled_date": scheduled_date.isoformat()},
        )
    if scheduled_date > now + timedelta(days=max_days_ahead):
        raise DateTooFarInFutureError(
            f"Cannot schedule interview more than {max_days_ahead} days in the future",
            {"scheduled_date": scheduled_date.isoformat()},
        )


def append_note(notes: str | None, label: str, text: str | None) -> str | None:
    if not text:
        return notes
    return f"{notes or ''}\n{label}: {text}".strip()


def reschedule(
    interview: Interview,
    new_scheduled_date: datetime,
    rescheduled_by: str,
    now: datetime,
    reason: str | None = None,
) -> Interview:
    """
    Move an interview to a new time.

    Lineage always points at the first interview of the chain; interviewers
    are carried over unchanged.
    """
    status = next_status(interview.status, LifecycleOperation.RESCHEDULE)
    return interview.model_copy(
        update={
            "scheduled_date": new_scheduled_date,
            "status": status,
            "rescheduled_from": interview.rescheduled_from or interview.id,
            "rescheduled_at": now,
            "rescheduled_by": rescheduled_by,
            "is_auto_scheduled": False,
            "interviewer_ids": list(interview.interviewer_ids),
            "notes": append_note(interview.notes, "Rescheduled", reason),
        }
    )


def start(interview: Interview, notes: str | None = None) -> Interview:
    status = next_status(interview.status, LifecycleOperation.START)
    return interview.model_copy(
        update={"status": status, "notes": append_note(interview.notes, status.value, notes)}
    )


def complete(interview: Interview, outcome: InterviewOutcome | None = None) -> Interview:
    status = next_status(interview.status, LifecycleOperation.COMPLETE)
    update: dict[str, object] = {"status": status}

    if outcome:
        if outcome.overall_score is not None:
            update["overall_score"] = outcome.overall_score
        if outcome.recommendation:
            update["recommendation"] = outcome.recommendation
        if outcome.rating_criteria_scores:
            update["rating_criteria_scores"] = dict(outcome.rating_criteria_scores)
        update["notes"] = append_note(interview.notes, status.value, outcome.notes)

    return interview.model_copy(update=update)


def cancel(interview: Interview, reason: str) -> Interview:
    status = next_status(interview.status, LifecycleOperation.CANCEL)
    return interview.model_copy(
        update={
            "status": status,
            "cancellation_reason": reason,
            "notes": append_note(interview.notes, "Cancelled", reason),
        }
    )


def mark_no_show(interview: Interview, reason: str | None = None) -> Interview:
    status = next_status(interview.status, LifecycleOperation.MARK_NO_SHOW)
    return interview.model_copy(
        update={
            "status": status,
            "no_show_reason": reason,
            "notes": append_note(interview.notes, "No Show", reason),
        }
    )
