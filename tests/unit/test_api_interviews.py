"""Tests for the interview endpoints (interview_scheduling/api/interviews.py)."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from interview_scheduling.api.interviews import get_scheduling_service
from interview_scheduling.main import app
from interview_scheduling.models.interview import InterviewStatus
from tests.fixtures.factories import at, create_config, create_interview


@pytest_asyncio.fixture
async def http_client(service):
    """HTTP client with the scheduling service bound to in-memory persistence."""
    app.dependency_overrides[get_scheduling_service] = lambda: service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_auto_schedule_endpoint(http_client, notifier):
    response = await http_client.post(
        "/interviews/auto-schedule",
        json={"application_id": "app_1", "stage_id": "stage_1", "triggered_by": "pipeline"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["scheduled_date"] == "2025-01-06T09:00:00Z"
    assert data["is_auto_scheduled"] is True
    assert data["meeting_link"] == "https://meet.google.com/abc-defg-hij"
    notifier.interview_scheduled.assert_awaited_once()


@pytest.mark.asyncio
async def test_auto_schedule_disabled_stage_returns_500(http_client, configs):
    configs.set(create_config(enabled=False))

    response = await http_client.post(
        "/interviews/auto-schedule",
        json={"application_id": "app_1", "stage_id": "stage_1", "triggered_by": "pipeline"},
    )

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"


@pytest.mark.asyncio
async def test_create_interview_returns_201(http_client, memory_db):
    response = await http_client.post(
        "/interviews",
        json={
            "application_id": "app_1",
            "stage_id": "stage_1",
            "scheduled_date": "2025-01-07T14:00:00Z",
            "duration_minutes": 45,
            "type": "PHONE",
            "created_by": "recruiter_1",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["type"] == "PHONE"
    assert data["is_auto_scheduled"] is False
    assert data["id"] in memory_db.interviews


@pytest.mark.asyncio
async def test_create_interview_conflict_returns_409(http_client, memory_db):
    memory_db.add(create_interview(id="int_1", stage_id=None))

    response = await http_client.post(
        "/interviews",
        json={
            "application_id": "app_1",
            "scheduled_date": "2025-01-06T09:15:00Z",
            "duration_minutes": 30,
            "created_by": "recruiter_1",
        },
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_create_interview_in_past_returns_422(http_client):
    response = await http_client.post(
        "/interviews",
        json={
            "application_id": "app_1",
            "scheduled_date": "2025-01-06T07:00:00Z",
            "duration_minutes": 30,
            "created_by": "recruiter_1",
        },
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "PAST_DATE"


@pytest.mark.asyncio
async def test_create_interview_without_offset_is_read_as_utc(http_client, memory_db):
    response = await http_client.post(
        "/interviews",
        json={
            "application_id": "app_1",
            "stage_id": "stage_1",
            "scheduled_date": "2025-01-07T14:00:00",
            "duration_minutes": 45,
            "created_by": "recruiter_1",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["scheduled_date"] == "2025-01-07T14:00:00Z"
    assert memory_db.interviews[data["id"]].scheduled_date == at(1, 14)


@pytest.mark.asyncio
async def test_create_interview_in_past_without_offset_returns_422(http_client):
    response = await http_client.post(
        "/interviews",
        json={
            "application_id": "app_1",
            "scheduled_date": "2025-01-06T07:00:00",
            "duration_minutes": 30,
            "created_by": "recruiter_1",
        },
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "PAST_DATE"


@pytest.mark.asyncio
async def test_reschedule_without_offset_is_read_as_utc(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.put(
        "/interviews/int_1/reschedule",
        json={"new_scheduled_date": "2025-01-08T10:00:00", "rescheduled_by": "recruiter_1"},
    )

    assert response.status_code == 200
    assert response.json()["scheduled_date"] == "2025-01-08T10:00:00Z"


@pytest.mark.asyncio
async def test_create_interview_invalid_body_returns_422(http_client):
    response = await http_client.post(
        "/interviews",
        json={"application_id": "app_1", "duration_minutes": 0, "created_by": "recruiter_1"},
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_get_interview_not_found(http_client):
    response = await http_client.get("/interviews/missing")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_reschedule_endpoint(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.put(
        "/interviews/int_1/reschedule",
        json={"new_scheduled_date": "2025-01-08T10:00:00Z", "rescheduled_by": "recruiter_1"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "SCHEDULED"
    assert data["rescheduled_from"] == "int_1"


@pytest.mark.asyncio
async def test_reschedule_completed_returns_409(http_client, memory_db):
    memory_db.add(create_interview(id="int_1", status=InterviewStatus.COMPLETED))

    response = await http_client.put(
        "/interviews/int_1/reschedule",
        json={"new_scheduled_date": "2025-01-08T10:00:00Z", "rescheduled_by": "recruiter_1"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"


@pytest.mark.asyncio
async def test_cancel_requires_reason(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.put(
        "/interviews/int_1/cancel", json={"cancelled_by": "recruiter_1", "reason": ""}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_cancel_endpoint(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.put(
        "/interviews/int_1/cancel",
        json={"cancelled_by": "recruiter_1", "reason": "Candidate withdrew"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"
    assert response.json()["cancellation_reason"] == "Candidate withdrew"


@pytest.mark.asyncio
async def test_no_show_endpoint(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.put("/interviews/int_1/no-show", json={"marked_by": "iv_1"})

    assert response.status_code == 200
    assert response.json()["status"] == "NO_SHOW"


@pytest.mark.asyncio
async def test_status_update_endpoint(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.patch(
        "/interviews/int_1/status", json={"status": "IN_PROGRESS", "updated_by": "iv_1"}
    )

    assert response.status_code == 200
    assert response.json()["status"] == "IN_PROGRESS"


@pytest.mark.asyncio
async def test_feedback_endpoint_returns_201(http_client, memory_db):
    memory_db.add(create_interview(id="int_1", status=InterviewStatus.COMPLETED))

    response = await http_client.post(
        "/interviews/int_1/feedback",
        json={"interviewer_id": "iv_1", "interviewer_name": "Ada", "rating": 4},
    )

    assert response.status_code == 201
    assert response.json()["overall_score"] == 4


@pytest.mark.asyncio
async def test_feedback_rating_out_of_range_returns_422(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.post(
        "/interviews/int_1/feedback",
        json={"interviewer_id": "iv_1", "interviewer_name": "Ada", "rating": 6},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_progression_status_endpoint(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"))

    response = await http_client.get("/interviews/int_1/progression-status")

    assert response.status_code == 200
    assert response.json()["can_progress"] is True


@pytest.mark.asyncio
async def test_calendar_filters(http_client, memory_db):
    memory_db.add(
        create_interview(id="int_1", scheduled_date=at(0, 9)),
        create_interview(id="int_2", application_id="app_2", scheduled_date=at(2, 9)),
        create_interview(
            id="int_3",
            application_id="app_3",
            scheduled_date=at(1, 9),
            status=InterviewStatus.CANCELLED,
        ),
    )

    response = await http_client.get(
        "/interviews/calendar",
        params={"job_id": "job_1", "start_date": "2025-01-06T00:00:00Z", "status": "SCHEDULED"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert [i["id"] for i in data["interviews"]] == ["int_1", "int_2"]


@pytest.mark.asyncio
async def test_calendar_inverted_range_returns_422(http_client):
    response = await http_client.get(
        "/interviews/calendar",
        params={"start_date": "2025-01-08T00:00:00Z", "end_date": "2025-01-06T00:00:00Z"},
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_list_by_application(http_client, memory_db):
    memory_db.add(
        create_interview(id="int_1"),
        create_interview(id="int_2", application_id="app_2", scheduled_date=at(1, 9)),
    )

    response = await http_client.get("/interviews/application/app_1")

    assert response.json()["count"] == 1
    assert response.json()["interviews"][0]["id"] == "int_1"


@pytest.mark.asyncio
async def test_list_by_job(http_client, memory_db):
    memory_db.add(create_interview(id="int_1"), create_interview(id="int_2", job_id="job_2"))

    response = await http_client.get("/interviews/job/job_2")

    assert [i["id"] for i in response.json()["interviews"]] == ["int_2"]


@pytest.mark.asyncio
async def test_bulk_cancel_reports_partial_failure(http_client, memory_db):
    memory_db.add(
        create_interview(id="int_1"),
        create_interview(
            id="int_2", application_id="app_2", status=InterviewStatus.COMPLETED
        ),
    )

    response = await http_client.post(
        "/interviews/bulk/cancel",
        json={
            "interview_ids": ["int_1", "int_2", "missing"],
            "cancelled_by": "recruiter_1",
            "reason": "Role closed",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["successful"] == ["int_1"]
    assert {f["interview_id"]: f["code"] for f in data["failed"]} == {
        "int_2": "INVALID_TRANSITION",
        "missing": "NOT_FOUND",
    }


@pytest.mark.asyncio
async def test_bulk_reschedule_requires_ids(http_client):
    response = await http_client.post(
        "/interviews/bulk/reschedule",
        json={
            "interview_ids": [],
            "new_scheduled_date": "2025-01-08T10:00:00Z",
            "rescheduled_by": "recruiter_1",
        },
    )

    assert response.status_code == 422
