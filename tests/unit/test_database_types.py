"""Verify database record TypedDicts match schema.sql."""

import re
from datetime import UTC, datetime
from pathlib import Path

from interview_scheduling.types.database import (
    InterviewConfigurationRecordTD,
    InterviewFeedbackRecordTD,
    InterviewRecordTD,
    StageProgressRecordTD,
)

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def table_columns(table: str) -> set[str]:
    """Column names declared in a CREATE TABLE statement of schema.sql."""
    match = re.search(
        rf"CREATE TABLE IF NOT EXISTS {table} \((.*?)\n\);", SCHEMA.read_text(), re.S
    )
    assert match, f"{table} missing from schema.sql"
    columns = set()
    for line in match.group(1).splitlines():
        line = line.strip()
        if not line or line.startswith(("--", ")", "PRIMARY", "UNIQUE", "CONSTRAINT", "CHECK")):
            continue
        columns.add(line.split()[0])
    return columns


def test_interview_record_matches_table():
    assert set(InterviewRecordTD.__annotations__) == table_columns("interviews")


def test_configuration_record_matches_table():
    columns = table_columns("interview_configurations")

    assert set(InterviewConfigurationRecordTD.__annotations__) <= columns


def test_feedback_record_matches_table():
    assert set(InterviewFeedbackRecordTD.__annotations__) == table_columns("interview_feedback")


def test_stage_progress_record_matches_table():
    assert set(StageProgressRecordTD.__annotations__) == table_columns(
        "application_stage_progress"
    )


def test_interview_record_has_required_fields():
    """Keys returned for an interview row."""
    record: InterviewRecordTD = {
        "interview_id": "int_1",
        "application_id": "app_1",
        "candidate_id": "cand_1",
        "job_id": "job_1",
        "scheduled_date": datetime(2025, 1, 6, 9, tzinfo=UTC),
        "duration_minutes": 30,
        "status": "SCHEDULED",
        "interview_type": "VIDEO",
        "interviewer_ids": [],
        "is_auto_scheduled": False,
    }

    assert record["status"] == "SCHEDULED"
