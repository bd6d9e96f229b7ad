"""Interview scheduling endpoints."""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from structlog import get_logger

from interview_scheduling.models.interview import (
    BulkOperationResult,
    Interview,
    InterviewListResponse,
    InterviewStatus,
    ProgressionStatus,
)
from interview_scheduling.models.requests import (
    AutoScheduleRequest,
    BulkCancelRequest,
    BulkRescheduleRequest,
    CalendarFilters,
    CancelRequest,
    FeedbackCreate,
    ManualInterviewCreate,
    NoShowRequest,
    RescheduleRequest,
    StatusUpdateRequest,
)
from interview_scheduling.services.scheduling import SchedulingService, build_scheduling_service

logger = get_logger()
router = APIRouter(prefix="/interviews", tags=["interviews"])


@lru_cache
def get_scheduling_service() -> SchedulingService:
    return build_scheduling_service()


Service = Annotated[SchedulingService, Depends(get_scheduling_service)]


def _list_response(interviews: list[Interview]) -> InterviewListResponse:
    return InterviewListResponse(interviews=interviews, count=len(interviews))


@router.post("/auto-schedule")
async def auto_schedule_interview(body: AutoScheduleRequest, service: Service) -> Interview:
    """
    Schedule an interview in the first free configured slot.

    Returns the existing active interview when the application already has one
    for the stage.
    """
    return await service.auto_schedule(body.application_id, body.stage_id, body.triggered_by)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_interview(body: ManualInterviewCreate, service: Service) -> Interview:
    """Create an interview at a caller-chosen time."""
    return await service.create_manual(body)


@router.get("/calendar")
async def list_calendar(
    service: Service,
    job_id: str | None = None,
    stage_id: str | None = None,
    interview_status: Annotated[InterviewStatus | None, Query(alias="status")] = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> InterviewListResponse:
    """List interviews for calendar views, filtered by job, stage, status and date range."""
    filters = CalendarFilters(
        job_id=job_id,
        stage_id=stage_id,
        status=interview_status,
        start_date=start_date,
        end_date=end_date,
    )
    return _list_response(await service.list_calendar(filters))


@router.get("/job/{job_id}")
async def list_job_interviews(job_id: str, service: Service) -> InterviewListResponse:
    return _list_response(await service.list_by_job(job_id))


@router.get("/application/{application_id}")
async def list_application_interviews(
    application_id: str, service: Service
) -> InterviewListResponse:
    return _list_response(await service.list_by_application(application_id))


@router.post("/bulk/reschedule")
async def bulk_reschedule(body: BulkRescheduleRequest, service: Service) -> BulkOperationResult:
    logger.info("bulk_reschedule_requested", count=len(body.interview_ids))
    return await service.bulk_reschedule(
        body.interview_ids, body.new_scheduled_date, body.rescheduled_by, body.reason
    )


@router.post("/bulk/cancel")
async def bulk_cancel(body: BulkCancelRequest, service: Service) -> BulkOperationResult:
    logger.info("bulk_cancel_requested", count=len(body.interview_ids))
    return await service.bulk_cancel(body.interview_ids, body.cancelled_by, body.reason)


@router.get("/{interview_id}")
async def get_interview(interview_id: str, service: Service) -> Interview:
    return await service.get_by_id(interview_id)


@router.put("/{interview_id}/reschedule")
async def reschedule_interview(
    interview_id: str, body: RescheduleRequest, service: Service
) -> Interview:
    return await service.reschedule(
        interview_id, body.new_scheduled_date, body.rescheduled_by, body.reason
    )


@router.put("/{interview_id}/cancel")
async def cancel_interview(interview_id: str, body: CancelRequest, service: Service) -> Interview:
    """Cancel an interview; the stage may auto-schedule a replacement."""
    return await service.cancel(interview_id, body.cancelled_by, body.reason)


@router.put("/{interview_id}/no-show")
async def mark_no_show(interview_id: str, body: NoShowRequest, service: Service) -> Interview:
    """Mark the candidate as a no-show; the stage may auto-schedule a replacement."""
    return await service.mark_no_show(interview_id, body.marked_by, body.reason)


@router.patch("/{interview_id}/status")
async def update_interview_status(
    interview_id: str, body: StatusUpdateRequest, service: Service
) -> Interview:
    return await service.update_status(interview_id, body.status, body.updated_by, body.outcome)


@router.post("/{interview_id}/feedback", status_code=status.HTTP_201_CREATED)
async def submit_feedback(interview_id: str, body: FeedbackCreate, service: Service) -> Interview:
    """Record interviewer feedback and return the interview with its recomputed score."""
    return await service.record_feedback(interview_id, body)


@router.get("/{interview_id}/progression-status")
async def get_progression_status(interview_id: str, service: Service) -> ProgressionStatus:
    return await service.get_progression_status(interview_id)
