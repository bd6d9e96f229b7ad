"""Stage interview configuration lookup."""

from __future__ import annotations

from typing import Any, Protocol, cast

from structlog import get_logger

from interview_scheduling.core.database import Database, db
from interview_scheduling.models.interview import InterviewConfiguration
from interview_scheduling.types.database import InterviewConfigurationRecordTD

logger = get_logger()


class ConfigurationProvider(Protocol):
    async def get(self, stage_id: str) -> InterviewConfiguration | None: ...


def record_to_configuration(row: Any) -> InterviewConfiguration:
    """
    Build a configuration from an interview_configurations row.

    NULL scheduling columns fall back to the model defaults.
    """
    record = cast(InterviewConfigurationRecordTD, dict(row))
    data = {key: value for key, value in record.items() if value is not None}
    if "default_duration_minutes" not in data:
        data["default_duration_minutes"] = None
    return InterviewConfiguration(**data)


class PostgresConfigurationProvider:
    """Reads stage configuration records owned by the pipeline configuration flows."""

    def __init__(self, database: Database = db):
        self.database = database

    async def get(self, stage_id: str) -> InterviewConfiguration | None:
        row = await self.database.fetchrow(
            """
            SELECT
                stage_id, job_id, enabled, auto_schedule, default_duration_minutes,
                buffer_time_minutes, available_time_slots, auto_schedule_window_days,
                interview_format, assigned_interviewer_ids, calendar_integration,
                auto_reschedule_on_cancel, auto_reschedule_on_no_show,
                require_all_interviewers, require_before_progression
            FROM interview_configurations
            WHERE stage_id = $1
        """,
            stage_id,
        )

        if not row:
            logger.debug("interview_configuration_missing", stage_id=stage_id)
            return None

        return record_to_configuration(row)
