"""Type definitions for database records."""

from interview_scheduling.types.database import (
    InterviewConfigurationRecordTD,
    InterviewFeedbackRecordTD,
    InterviewRecordTD,
    StageProgressRecordTD,
)

__all__ = [
    "InterviewConfigurationRecordTD",
    "InterviewFeedbackRecordTD",
    "InterviewRecordTD",
    "StageProgressRecordTD",
]
