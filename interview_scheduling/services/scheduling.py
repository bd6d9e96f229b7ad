"""Interview scheduling orchestration.

SchedulingService is the only writer of interviews and stage progress. Every
operation that checks for conflicts or for an existing active interview does
the check and the write through the same transaction-scoped store, after
taking the stage and calendar locks in that order.

Calendar and notification gateways are called outside transactions and are
best-effort: their failures are logged and never undo a committed change.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from statistics import fmean
from typing import Any
from uuid import uuid4

from structlog import get_logger

from interview_scheduling.clients.calendar import (
    CalendarAttendee,
    CalendarEvent,
    CalendarEventRequest,
    CalendarGateway,
    GoogleCalendarClient,
)
from interview_scheduling.clients.notifications import (
    EmailNotificationClient,
    NotificationContext,
    NotificationDispatcher,
    NotificationGateway,
    SlackNotificationClient,
)
from interview_scheduling.core.config import settings
from interview_scheduling.core.errors import (
    ActiveInterviewExistsError,
    ConfigurationError,
    ConflictError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    service_boundary,
)
from interview_scheduling.models.interview import (
    ApplicationInfo,
    BulkOperationFailure,
    BulkOperationResult,
    CalendarIntegration,
    Interview,
    InterviewConfiguration,
    InterviewFeedback,
    InterviewFormat,
    InterviewStatus,
    JobInfo,
    ProgressionStatus,
)
from interview_scheduling.models.requests import (
    CalendarFilters,
    FeedbackCreate,
    InterviewOutcome,
    ManualInterviewCreate,
)
from interview_scheduling.services import lifecycle
from interview_scheduling.services.configuration import (
    ConfigurationProvider,
    PostgresConfigurationProvider,
)
from interview_scheduling.services.conflicts import ConflictChecker
from interview_scheduling.services.directory import (
    ApplicationRepository,
    JobRepository,
    PostgresApplicationRepository,
    PostgresJobRepository,
)
from interview_scheduling.services.slots import SlotFinder
from interview_scheduling.services.store import InterviewStore, PostgresUnitOfWork, UnitOfWork

logger = get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SchedulingService:
    """Entry point for creating and changing interviews."""

    def __init__(
        self,
        uow: UnitOfWork,
        config_provider: ConfigurationProvider,
        applications: ApplicationRepository,
        jobs: JobRepository,
        calendar: CalendarGateway | None,
        notifier: NotificationGateway,
        slot_finder: SlotFinder | None = None,
        conflict_checker: ConflictChecker | None = None,
        now: Callable[[], datetime] = _utcnow,
        default_buffer_minutes: int | None = None,
        max_schedule_ahead_days: int | None = None,
    ):
        self.uow = uow
        self.config_provider = config_provider
        self.applications = applications
        self.jobs = jobs
        self.calendar = calendar
        self.notifier = notifier
        self.conflict_checker = conflict_checker or ConflictChecker()
        self.slot_finder = slot_finder or SlotFinder(self.conflict_checker)
        self.now = now
        self.default_buffer_minutes = (
            default_buffer_minutes
            if default_buffer_minutes is not None
            else settings.default_buffer_minutes
        )
        self.max_schedule_ahead_days = max_schedule_ahead_days or settings.max_schedule_ahead_days

    # ============================================
    # Creation
    # ============================================

    @service_boundary
    async def auto_schedule(
        self, application_id: str, stage_id: str, triggered_by: str
    ) -> Interview:
        """
        Schedule an interview for an application entering a stage.

        Returns the existing active interview for the (application, stage) pair
        when there is one, so repeated calls are idempotent.

        Raises:
            ConfigurationError: If auto-scheduling is disabled for the stage or
                it has no positive default duration
            NotFoundError: If the application or its job does not exist
        """
        async with self.uow() as store:
            existing = await store.find_active_for_stage(application_id, stage_id)
        if existing:
            logger.info(
                "auto_schedule_existing_interview",
                interview_id=existing.id,
                application_id=application_id,
                stage_id=stage_id,
            )
            return existing

        config = await self._require_auto_schedule_config(stage_id)
        application, job = await self._require_linkage(application_id)

        async with self.uow() as store:
            slot = await self.slot_finder.find_slot(store, config, self.now())

        duration = timedelta(minutes=config.default_duration_minutes or 0)

        event: CalendarEvent | None = None
        if config.interview_format == InterviewFormat.LIVE_VIDEO:
            event = await self._create_calendar_event(
                application, job, slot.start, slot.start + duration, f"Interview for {job.title}"
            )

        stale_event: CalendarEvent | None = None
        created = False

        async with self.uow() as store:
            await store.lock_stage(application_id, stage_id)

            interview = await store.find_active_for_stage(application_id, stage_id)
            if interview:
                # Lost the race to a concurrent auto-schedule
                stale_event = event
            else:
                await store.lock_calendar()

                if not slot.is_fallback and await self.conflict_checker.has_conflict(
                    store,
                    slot.start,
                    slot.start + duration,
                    config.buffer_time_minutes,
                    interviewer_ids=slot.interviewer_ids,
                ):
                    logger.info(
                        "auto_schedule_slot_taken",
                        application_id=application_id,
                        stage_id=stage_id,
                        slot_start=slot.start.isoformat(),
                    )
                    slot = await self.slot_finder.find_slot(store, config, self.now())
                    stale_event, event = event, None

                interview = await store.insert_interview(
                    Interview(
                        id=str(uuid4()),
                        application_id=application_id,
                        candidate_id=application.candidate_id,
                        job_id=application.job_id,
                        stage_id=stage_id,
                        scheduled_date=slot.start,
                        duration_minutes=config.default_duration_minutes or 0,
                        status=InterviewStatus.SCHEDULED,
                        type=config.interview_type,
                        interviewer_ids=slot.interviewer_ids,
                        is_auto_scheduled=True,
                        meeting_link=event.meeting_link if event else None,
                        calendar_event_id=event.event_id if event else None,
                    )
                )
                await store.upsert_stage_progress(application_id, stage_id, interview.id)
                created = True

        if stale_event:
            await self._cancel_calendar_event(stale_event.event_id)

        if not created:
            return interview

        logger.info(
            "interview_scheduled",
            interview_id=interview.id,
            application_id=application_id,
            stage_id=stage_id,
            scheduled_date=interview.scheduled_date.isoformat(),
            is_fallback=slot.is_fallback,
            triggered_by=triggered_by,
        )

        await self._notify("interview_scheduled", interview)
        return interview

    @service_boundary
    async def create_manual(self, request: ManualInterviewCreate) -> Interview:
        """
        Create an interview at a caller-chosen time.

        Raises:
            PastDateError / DateTooFarInFutureError: If the time is outside the window
            NotFoundError: If the application or its job does not exist
            ActiveInterviewExistsError: If the stage already has an active interview
            ConflictError: If the time collides with another active interview
        """
        lifecycle.validate_schedule_window(
            request.scheduled_date, self.now(), self.max_schedule_ahead_days
        )
        application, job = await self._require_linkage(request.application_id)

        config = await self._stage_config(request.stage_id)
        buffer_minutes = self._buffer_for(config)
        interviewer_ids = request.interviewer_ids or (
            list(config.assigned_interviewer_ids) if config else []
        )
        end = request.scheduled_date + timedelta(minutes=request.duration_minutes)

        async with self.uow() as store:
            if request.stage_id:
                await store.lock_stage(request.application_id, request.stage_id)
                existing = await store.find_active_for_stage(
                    request.application_id, request.stage_id
                )
                if existing:
                    raise ActiveInterviewExistsError(
                        "An active interview already exists for this application and stage",
                        {"interview_id": existing.id, "stage_id": request.stage_id},
                    )

            await store.lock_calendar()
            conflicts = await self.conflict_checker.find_conflicts(
                store,
                request.scheduled_date,
                end,
                buffer_minutes,
                interviewer_ids=interviewer_ids,
            )
            if conflicts:
                raise ConflictError(
                    "Time slot conflicts with existing interview",
                    {"conflicting_interview_ids": [c.id for c in conflicts]},
                )

            interview = await store.insert_interview(
                Interview(
                    id=str(uuid4()),
                    application_id=request.application_id,
                    candidate_id=application.candidate_id,
                    job_id=application.job_id,
                    stage_id=request.stage_id,
                    scheduled_date=request.scheduled_date,
                    duration_minutes=request.duration_minutes,
                    status=InterviewStatus.SCHEDULED,
                    type=request.type,
                    interviewer_ids=interviewer_ids,
                    is_auto_scheduled=False,
                    notes=request.notes,
                    meeting_link=request.meeting_link,
                )
            )
            if request.stage_id:
                await store.upsert_stage_progress(
                    request.application_id, request.stage_id, interview.id
                )

        logger.info(
            "interview_created",
            interview_id=interview.id,
            application_id=request.application_id,
            stage_id=request.stage_id,
            scheduled_date=interview.scheduled_date.isoformat(),
            created_by=request.created_by,
        )

        if not interview.meeting_link and config and config.uses_calendar:
            interview = await self._attach_calendar_event(
                interview, application, job, f"Interview for {job.title}"
            )

        await self._notify("interview_scheduled", interview)
        return interview

    # ============================================
    # Lifecycle operations
    # ============================================

    @service_boundary
    async def reschedule(
        self,
        interview_id: str,
        new_scheduled_date: datetime,
        rescheduled_by: str,
        reason: str | None = None,
    ) -> Interview:
        """
        Move an interview to a new time, keeping its interviewers and lineage.

        Raises:
            NotFoundError: If the interview does not exist
            InvalidTransitionError: If the interview is not SCHEDULED or RESCHEDULED
            PastDateError / DateTooFarInFutureError: If the time is outside the window
            ConflictError: If the time collides with another active interview
        """
        now = self.now()

        async with self.uow() as store:
            previous = await self._get_for_update(store, interview_id)
            if not lifecycle.can_apply(previous.status, lifecycle.LifecycleOperation.RESCHEDULE):
                raise InvalidTransitionError(
                    previous.status.value, lifecycle.LifecycleOperation.RESCHEDULE.value
                )
            lifecycle.validate_schedule_window(
                new_scheduled_date, now, self.max_schedule_ahead_days
            )

            config = await self._stage_config(previous.stage_id)

            await store.lock_calendar()
            conflicts = await self.conflict_checker.find_conflicts(
                store,
                new_scheduled_date,
                new_scheduled_date + timedelta(minutes=previous.duration_minutes),
                self._buffer_for(config),
                exclude_interview_id=previous.id,
                interviewer_ids=previous.interviewer_ids,
            )
            if conflicts:
                raise ConflictError(
                    "Time slot conflicts with existing interview",
                    {"conflicting_interview_ids": [c.id for c in conflicts]},
                )

            interview = await store.update_interview(
                lifecycle.reschedule(previous, new_scheduled_date, rescheduled_by, now, reason)
            )
            if interview.stage_id:
                await store.upsert_stage_progress(
                    interview.application_id, interview.stage_id, interview.id
                )

        logger.info(
            "interview_rescheduled",
            interview_id=interview.id,
            previous_date=previous.scheduled_date.isoformat(),
            scheduled_date=interview.scheduled_date.isoformat(),
            rescheduled_from=interview.rescheduled_from,
            rescheduled_by=rescheduled_by,
        )

        if (
            previous.meeting_link
            and config
            and config.calendar_integration == CalendarIntegration.GOOGLE
        ):
            interview = await self._regenerate_calendar_event(interview)

        await self._notify(
            "interview_rescheduled",
            interview,
            reason=reason,
            previous_scheduled_date=previous.scheduled_date,
        )
        return interview

    @service_boundary
    async def cancel(self, interview_id: str, cancelled_by: str, reason: str) -> Interview:
        """
        Cancel an interview, then auto-schedule a replacement if the stage asks for it.

        Raises:
            NotFoundError: If the interview does not exist
            InvalidTransitionError: If the interview is already in a terminal status
        """
        async with self.uow() as store:
            interview = await self._get_for_update(store, interview_id)
            interview = await store.update_interview(lifecycle.cancel(interview, reason))

        logger.info(
            "interview_cancelled",
            interview_id=interview.id,
            cancelled_by=cancelled_by,
        )

        config = await self._stage_config(interview.stage_id)
        auto_reschedule = bool(
            interview.stage_id and config and config.auto_reschedule_on_cancel
        )

        if interview.calendar_event_id:
            await self._cancel_calendar_event(interview.calendar_event_id)

        await self._notify(
            "interview_cancelled",
            interview,
            reason=reason,
            auto_reschedule_enabled=auto_reschedule,
        )

        if auto_reschedule:
            await self._schedule_replacement(interview, cancelled_by)

        return interview

    @service_boundary
    async def mark_no_show(
        self, interview_id: str, marked_by: str, reason: str | None = None
    ) -> Interview:
        """
        Mark an interview as a no-show, then auto-schedule a replacement if the
        stage asks for it. Reschedule lineage is left untouched.

        Raises:
            NotFoundError: If the interview does not exist
            InvalidTransitionError: If the interview is not SCHEDULED or RESCHEDULED
        """
        async with self.uow() as store:
            interview = await self._get_for_update(store, interview_id)
            interview = await store.update_interview(lifecycle.mark_no_show(interview, reason))

        logger.info("interview_no_show", interview_id=interview.id, marked_by=marked_by)

        config = await self._stage_config(interview.stage_id)
        auto_reschedule = bool(
            interview.stage_id and config and config.auto_reschedule_on_no_show
        )

        if interview.calendar_event_id:
            await self._cancel_calendar_event(interview.calendar_event_id)

        await self._notify(
            "interview_no_show",
            interview,
            reason=reason,
            auto_reschedule_enabled=auto_reschedule,
        )

        if auto_reschedule:
            await self._schedule_replacement(interview, marked_by)

        return interview

    @service_boundary
    async def update_status(
        self,
        interview_id: str,
        status: InterviewStatus,
        updated_by: str,
        outcome: InterviewOutcome | None = None,
    ) -> Interview:
        """
        Start or complete an interview.

        Completing an interview also marks its stage progress complete.

        Raises:
            ValidationError: If ``status`` is not IN_PROGRESS or COMPLETED
            NotFoundError: If the interview does not exist
            InvalidTransitionError: If the transition is not legal
        """
        if status not in (InterviewStatus.IN_PROGRESS, InterviewStatus.COMPLETED):
            raise ValidationError(
                "Status can only be updated to IN_PROGRESS or COMPLETED",
                {"status": status.value},
            )

        async with self.uow() as store:
            interview = await self._get_for_update(store, interview_id)

            if status == InterviewStatus.IN_PROGRESS:
                updated = lifecycle.start(interview, outcome.notes if outcome else None)
            else:
                updated = lifecycle.complete(interview, outcome)

            updated = await store.update_interview(updated)

            if updated.status == InterviewStatus.COMPLETED and updated.stage_id:
                await store.complete_stage_progress(
                    updated.application_id, updated.stage_id, self.now()
                )

        logger.info(
            "interview_status_updated",
            interview_id=updated.id,
            previous_status=interview.status.value,
            status=updated.status.value,
            updated_by=updated_by,
        )
        return updated

    @service_boundary
    async def record_feedback(self, interview_id: str, feedback: FeedbackCreate) -> Interview:
        """
        Store one interviewer's feedback and recompute the overall score as the
        mean of all ratings for the interview.

        Raises:
            NotFoundError: If the interview does not exist
        """
        async with self.uow() as store:
            interview = await self._get_for_update(store, interview_id)

            await store.insert_feedback(
                InterviewFeedback(
                    id=str(uuid4()),
                    interview_id=interview.id,
                    interviewer_id=feedback.interviewer_id,
                    interviewer_name=feedback.interviewer_name,
                    interviewer_email=feedback.interviewer_email,
                    rating=feedback.rating,
                    recommendation=feedback.recommendation,
                    notes=feedback.notes,
                    submitted_at=self.now(),
                )
            )
            ratings = [f.rating for f in await store.list_feedback(interview.id)]
            interview = await store.update_interview(
                interview.model_copy(update={"overall_score": fmean(ratings)})
            )

        logger.info(
            "interview_feedback_recorded",
            interview_id=interview.id,
            interviewer_id=feedback.interviewer_id,
            feedback_count=len(ratings),
            overall_score=interview.overall_score,
        )
        return interview

    # ============================================
    # Queries
    # ============================================

    @service_boundary
    async def get_by_id(self, interview_id: str) -> Interview:
        async with self.uow() as store:
            interview = await store.get_interview(interview_id)
        if not interview:
            raise NotFoundError("Interview not found", {"interview_id": interview_id})
        return interview

    @service_boundary
    async def list_by_job(self, job_id: str) -> list[Interview]:
        async with self.uow() as store:
            return await store.list_interviews(job_id=job_id)

    @service_boundary
    async def list_by_application(self, application_id: str) -> list[Interview]:
        async with self.uow() as store:
            return await store.list_interviews(application_id=application_id)

    @service_boundary
    async def list_calendar(self, filters: CalendarFilters) -> list[Interview]:
        """Interviews matching every given filter, ordered by scheduled date."""
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise ValidationError(
                "start_date must not be after end_date",
                {
                    "start_date": filters.start_date.isoformat(),
                    "end_date": filters.end_date.isoformat(),
                },
            )
        async with self.uow() as store:
            return await store.list_interviews(**filters.model_dump())

    @service_boundary
    async def get_progression_status(self, interview_id: str) -> ProgressionStatus:
        """
        Whether every assigned interviewer has submitted feedback.

        Interviews outside a stage, or in stages that do not require all
        interviewers, can always progress.
        """
        async with self.uow() as store:
            interview = await store.get_interview(interview_id)
            if not interview:
                raise NotFoundError("Interview not found", {"interview_id": interview_id})
            feedback = await store.list_feedback(interview_id)
            progress = (
                await store.get_stage_progress(interview.application_id, interview.stage_id)
                if interview.stage_id
                else None
            )
        stage_completed = bool(progress and progress.completed)

        config = await self._stage_config(interview.stage_id)
        if not interview.stage_id or not config or not config.require_all_interviewers:
            return ProgressionStatus(stage_completed=stage_completed)

        assigned = list(dict.fromkeys(interview.interviewer_ids))
        if not assigned:
            return ProgressionStatus(
                requires_all_interviewers=True, stage_completed=stage_completed
            )

        submitted = {f.interviewer_id for f in feedback}
        missing = [interviewer for interviewer in assigned if interviewer not in submitted]

        return ProgressionStatus(
            can_progress=not missing,
            missing_interviewers=missing,
            submitted_count=len(assigned) - len(missing),
            total_count=len(assigned),
            requires_all_interviewers=True,
            stage_completed=stage_completed,
        )

    # ============================================
    # Bulk operations
    # ============================================

    @service_boundary
    async def bulk_reschedule(
        self,
        interview_ids: list[str],
        new_scheduled_date: datetime,
        rescheduled_by: str,
        reason: str | None = None,
    ) -> BulkOperationResult:
        """Reschedule each interview independently; one failure never affects the rest."""
        result = BulkOperationResult()
        for interview_id in dict.fromkeys(interview_ids):
            try:
                await self.reschedule(interview_id, new_scheduled_date, rescheduled_by, reason)
            except DomainError as e:
                result.failed.append(
                    BulkOperationFailure(interview_id=interview_id, error=e.message, code=e.code)
                )
            else:
                result.successful.append(interview_id)

        logger.info(
            "bulk_reschedule_completed",
            successful=len(result.successful),
            failed=len(result.failed),
        )
        return result

    @service_boundary
    async def bulk_cancel(
        self, interview_ids: list[str], cancelled_by: str, reason: str
    ) -> BulkOperationResult:
        """Cancel each interview independently; one failure never affects the rest."""
        result = BulkOperationResult()
        for interview_id in dict.fromkeys(interview_ids):
            try:
                await self.cancel(interview_id, cancelled_by, reason)
            except DomainError as e:
                result.failed.append(
                    BulkOperationFailure(interview_id=interview_id, error=e.message, code=e.code)
                )
            else:
                result.successful.append(interview_id)

        logger.info(
            "bulk_cancel_completed",
            successful=len(result.successful),
            failed=len(result.failed),
        )
        return result

    # ============================================
    # Helpers
    # ============================================

    async def _get_for_update(self, store: InterviewStore, interview_id: str) -> Interview:
        interview = await store.get_interview(interview_id)
        if not interview:
            raise NotFoundError("Interview not found", {"interview_id": interview_id})
        return interview

    async def _stage_config(self, stage_id: str | None) -> InterviewConfiguration | None:
        if not stage_id:
            return None
        return await self.config_provider.get(stage_id)

    def _buffer_for(self, config: InterviewConfiguration | None) -> int:
        return config.buffer_time_minutes if config else self.default_buffer_minutes

    async def _require_auto_schedule_config(self, stage_id: str) -> InterviewConfiguration:
        config = await self.config_provider.get(stage_id)
        if not config or not config.enabled or not config.auto_schedule:
            raise ConfigurationError(
                "Interview auto-scheduling is not enabled for this stage",
                {"stage_id": stage_id},
            )
        if not config.default_duration_minutes or config.default_duration_minutes <= 0:
            raise ConfigurationError(
                "Interview configuration must have a valid default duration (greater than 0)",
                {"stage_id": stage_id},
            )
        return config

    async def _require_linkage(self, application_id: str) -> tuple[ApplicationInfo, JobInfo]:
        application = await self.applications.get(application_id)
        if not application:
            raise NotFoundError("Application not found", {"application_id": application_id})

        job = await self.jobs.get(application.job_id)
        if not job:
            raise NotFoundError("Job not found", {"job_id": application.job_id})

        return application, job

    async def _schedule_replacement(self, interview: Interview, triggered_by: str) -> None:
        """Auto-schedule a new interview for the stage unless another one is already active."""
        if not interview.stage_id:
            return

        try:
            async with self.uow() as store:
                other = await store.find_active_for_stage(
                    interview.application_id, interview.stage_id, exclude_id=interview.id
                )
            if other:
                logger.info(
                    "auto_reschedule_skipped",
                    interview_id=interview.id,
                    active_interview_id=other.id,
                )
                return

            replacement = await self.auto_schedule(
                interview.application_id, interview.stage_id, triggered_by
            )
        except DomainError as e:
            logger.warning(
                "auto_reschedule_failed",
                interview_id=interview.id,
                error=e.message,
                code=e.code,
            )
            return

        logger.info(
            "auto_reschedule_triggered",
            interview_id=interview.id,
            replacement_interview_id=replacement.id,
            scheduled_date=replacement.scheduled_date.isoformat(),
        )

    async def _create_calendar_event(
        self,
        application: ApplicationInfo,
        job: JobInfo,
        start: datetime,
        end: datetime,
        description: str,
    ) -> CalendarEvent | None:
        if not self.calendar:
            return None

        request = CalendarEventRequest(
            summary=f"{job.title} - Interview with {application.candidate_name}",
            description=description,
            start=start,
            end=end,
            attendees=[
                CalendarAttendee(
                    email=application.candidate_email, name=application.candidate_name
                )
            ],
        )
        try:
            return await self.calendar.create_event(request)
        except Exception as e:
            logger.warning(
                "calendar_event_failed",
                application_id=application.id,
                start=start.isoformat(),
                error=str(e),
            )
            return None

    async def _cancel_calendar_event(self, event_id: str) -> None:
        if not self.calendar:
            return
        try:
            await self.calendar.cancel_event(event_id)
        except Exception as e:
            logger.warning("calendar_event_cancel_failed", event_id=event_id, error=str(e))

    async def _attach_calendar_event(
        self,
        interview: Interview,
        application: ApplicationInfo,
        job: JobInfo,
        description: str,
    ) -> Interview:
        """Create a calendar event for a stored interview and persist its link."""
        event = await self._create_calendar_event(
            application, job, interview.scheduled_date, interview.end_date, description
        )
        if not event:
            return interview

        async with self.uow() as store:
            current = await store.get_interview(interview.id)
            if (
                not current
                or not current.is_active
                or current.scheduled_date != interview.scheduled_date
            ):
                # Moved, cancelled or removed while the calendar call was in flight
                stale = True
            else:
                stale = False
                interview = await store.update_interview(
                    current.model_copy(
                        update={
                            "meeting_link": event.meeting_link or current.meeting_link,
                            "calendar_event_id": event.event_id,
                        }
                    )
                )

        if stale:
            await self._cancel_calendar_event(event.event_id)
        return interview

    async def _regenerate_calendar_event(self, interview: Interview) -> Interview:
        previous_event_id = interview.calendar_event_id

        linkage = await self._lookup_linkage(interview)
        if not linkage:
            return interview
        application, job = linkage

        updated = await self._attach_calendar_event(
            interview, application, job, f"Interview for {job.title} (Rescheduled)"
        )
        if previous_event_id and updated.calendar_event_id != previous_event_id:
            await self._cancel_calendar_event(previous_event_id)
        return updated

    async def _lookup_linkage(self, interview: Interview) -> tuple[ApplicationInfo, JobInfo] | None:
        application = await self.applications.get(interview.application_id)
        job = await self.jobs.get(interview.job_id)
        if not application or not job:
            logger.warning(
                "interview_linkage_missing",
                interview_id=interview.id,
                application_found=application is not None,
                job_found=job is not None,
            )
            return None
        return application, job

    async def _notify(self, event: str, interview: Interview, **details: Any) -> None:
        try:
            linkage = await self._lookup_linkage(interview)
            if not linkage:
                return
            application, job = linkage

            context = NotificationContext(
                candidate_name=application.candidate_name,
                candidate_email=application.candidate_email,
                job_title=job.title,
                company_name=job.company_name,
                **details,
            )
            await getattr(self.notifier, event)(interview, context)
        except Exception as e:
            logger.warning(
                "notification_failed",
                notification=event,
                interview_id=interview.id,
                error=str(e),
            )


def build_scheduling_service() -> SchedulingService:
    """Wire the service to PostgreSQL and the configured gateways."""
    conflict_checker = ConflictChecker(scope=settings.conflict_scope)
    return SchedulingService(
        uow=PostgresUnitOfWork(),
        config_provider=PostgresConfigurationProvider(),
        applications=PostgresApplicationRepository(),
        jobs=PostgresJobRepository(),
        calendar=GoogleCalendarClient() if settings.google_calendar_api_token else None,
        notifier=NotificationDispatcher([EmailNotificationClient(), SlackNotificationClient()]),
        slot_finder=SlotFinder(
            conflict_checker,
            tz=settings.tz,
            working_days=settings.working_days,
            fallback_time=settings.fallback_time,
        ),
        conflict_checker=conflict_checker,
    )
