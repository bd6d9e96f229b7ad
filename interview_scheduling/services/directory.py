"""Read-only lookups of applications and jobs owned by the wider platform."""

from __future__ import annotations

from typing import Protocol

from interview_scheduling.core.database import Database, db
from interview_scheduling.models.interview import ApplicationInfo, JobInfo


class ApplicationRepository(Protocol):
    async def get(self, application_id: str) -> ApplicationInfo | None: ...


class JobRepository(Protocol):
    async def get(self, job_id: str) -> JobInfo | None: ...


class PostgresApplicationRepository:
    def __init__(self, database: Database = db):
        self.database = database

    async def get(self, application_id: str) -> ApplicationInfo | None:
        row = await self.database.fetchrow(
            """
            SELECT
                a.application_id AS id,
                a.candidate_id,
                a.job_id,
                c.email AS candidate_email,
                c.first_name AS candidate_first_name,
                c.last_name AS candidate_last_name
            FROM applications a
            INNER JOIN candidates c ON c.candidate_id = a.candidate_id
            WHERE a.application_id = $1
        """,
            application_id,
        )
        return ApplicationInfo(**dict(row)) if row else None


class PostgresJobRepository:
    def __init__(self, database: Database = db):
        self.database = database

    async def get(self, job_id: str) -> JobInfo | None:
        row = await self.database.fetchrow(
            "SELECT job_id AS id, title, company_name FROM jobs WHERE job_id = $1",
            job_id,
        )
        return JobInfo(**dict(row)) if row else None
