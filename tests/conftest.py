"""Pytest configuration for tests."""

import os
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv

# Load .env.test file if it exists
env_test_path = Path(__file__).parent.parent / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path)

# Set test environment variables before any imports (only if not already set)
os.environ.setdefault("DATABASE_URL", "postgresql://localhost:5432/interview_scheduling_test")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("SCHEDULING_TIMEZONE", "UTC")
os.environ.setdefault("CONFLICT_SCOPE", "global")

from interview_scheduling.clients.calendar import CalendarEvent  # noqa: E402
from interview_scheduling.services.conflicts import ConflictChecker  # noqa: E402
from interview_scheduling.services.scheduling import SchedulingService  # noqa: E402
from interview_scheduling.services.slots import SlotFinder  # noqa: E402
from tests.fixtures.factories import (  # noqa: E402
    at,
    create_application,
    create_config,
    create_job,
)
from tests.fixtures.memory import (  # noqa: E402
    FakeApplicationRepository,
    FakeConfigurationProvider,
    FakeJobRepository,
    FrozenClock,
    InMemoryDatabase,
)


@pytest.fixture
def clock():
    """Monday 08:00 UTC, before the first configured slot."""
    return FrozenClock(at(0, 8))


@pytest.fixture
def memory_db():
    return InMemoryDatabase()


@pytest.fixture
def configs():
    return FakeConfigurationProvider(create_config())


@pytest.fixture
def applications():
    return FakeApplicationRepository(create_application())


@pytest.fixture
def jobs():
    return FakeJobRepository(create_job())


@pytest.fixture
def calendar():
    gateway = AsyncMock()
    gateway.create_event.return_value = CalendarEvent(
        event_id="evt_1", meeting_link="https://meet.google.com/abc-defg-hij"
    )
    return gateway


@pytest.fixture
def notifier():
    return AsyncMock()


@pytest.fixture
def service(memory_db, configs, applications, jobs, calendar, notifier, clock):
    """SchedulingService wired to in-memory persistence and mocked gateways."""
    checker = ConflictChecker()
    return SchedulingService(
        uow=memory_db,
        config_provider=configs,
        applications=applications,
        jobs=jobs,
        calendar=calendar,
        notifier=notifier,
        slot_finder=SlotFinder(checker),
        conflict_checker=checker,
        now=clock,
        default_buffer_minutes=15,
        max_schedule_ahead_days=365,
    )
