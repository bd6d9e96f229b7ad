"""Tests for API error handling (interview_scheduling/api/errors.py)."""

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from interview_scheduling.api.errors import (
    ERROR_STATUS_MAP,
    general_exception_handler,
    setup_exception_handlers,
)
from interview_scheduling.core.errors import (
    ActiveInterviewExistsError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    DateTooFarInFutureError,
    ExternalServiceError,
    InvalidTransitionError,
    NotFoundError,
    PastDateError,
)
from interview_scheduling.middleware.request_id import RequestIDMiddleware


class SampleInput(BaseModel):
    name: str
    duration_minutes: int


def make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    setup_exception_handlers(app)
    return app


async def get(app: FastAPI, path: str):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(path)


@pytest.mark.asyncio
async def test_http_exception_standardized():
    """HTTPException returns standardized error format."""
    app = make_app()

    @app.get("/test")
    async def test_route():
        raise HTTPException(status_code=404, detail="Not found")

    response = await get(app, "/test")

    assert response.status_code == 404
    data = response.json()
    assert data["error"]["code"] == "HTTP_404"
    assert data["error"]["message"] == "Not found"
    assert "request_id" in data["error"]


@pytest.mark.asyncio
async def test_validation_error_standardized():
    """Pydantic validation errors return standardized format with field locations."""
    app = make_app()

    @app.post("/test")
    async def test_route(data: SampleInput):
        return {"status": "ok"}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/test", json={"name": "screen"})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["loc"] == ["body", "duration_minutes"]
    assert error["details"][0]["type"] == "missing"


@pytest.mark.asyncio
async def test_error_request_id_matches_header():
    app = make_app()

    @app.get("/test")
    async def test_route():
        raise NotFoundError("Interview not found")

    response = await get(app, "/test")

    assert response.headers["X-Request-ID"] == response.json()["error"]["request_id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (NotFoundError("Interview not found"), 404, "NOT_FOUND"),
        (PastDateError("Interview date must be in the future"), 422, "PAST_DATE"),
        (DateTooFarInFutureError("Too far ahead"), 422, "DATE_TOO_FAR_IN_FUTURE"),
        (ConflictError("Time slot conflicts"), 409, "CONFLICT"),
        (ActiveInterviewExistsError("Already scheduled"), 409, "ACTIVE_INTERVIEW_EXISTS"),
        (InvalidTransitionError("COMPLETED", "reschedule"), 409, "INVALID_TRANSITION"),
        (
            ExternalServiceError("Calendar down", service="google_calendar"),
            502,
            "EXTERNAL_SERVICE_ERROR",
        ),
        (DatabaseError("Connection failed"), 500, "DATABASE_ERROR"),
        (ConfigurationError("Auto-scheduling disabled"), 500, "CONFIGURATION_ERROR"),
    ],
)
async def test_domain_error_status_mapping(error, status_code, code):
    app = make_app()

    @app.get("/test")
    async def test_route():
        raise error

    response = await get(app, "/test")

    assert response.status_code == status_code
    assert response.json()["error"]["code"] == code
    assert response.json()["error"]["message"] == error.message


def test_every_domain_code_is_mapped():
    assert set(ERROR_STATUS_MAP) >= {
        "NOT_FOUND",
        "VALIDATION_ERROR",
        "CONFLICT",
        "INVALID_TRANSITION",
        "DATABASE_ERROR",
    }


@pytest.mark.asyncio
async def test_error_details_exposed_when_configured(monkeypatch):
    """Error context included when expose_error_details=True."""
    from interview_scheduling.core import config

    monkeypatch.setattr(config.settings, "expose_error_details", True)
    app = make_app()

    @app.get("/test")
    async def test_route():
        raise ConflictError(
            "Time slot conflicts", context={"conflicting_interview_ids": ["int_1"]}
        )

    response = await get(app, "/test")

    assert response.json()["error"]["details"] == {"conflicting_interview_ids": ["int_1"]}


@pytest.mark.asyncio
async def test_error_details_hidden_when_configured(monkeypatch):
    from interview_scheduling.core import config

    monkeypatch.setattr(config.settings, "expose_error_details", False)
    app = make_app()

    @app.get("/test")
    async def test_route():
        raise NotFoundError("Interview not found", context={"interview_id": "int_1"})

    response = await get(app, "/test")

    assert response.status_code == 404
    assert "details" not in response.json()["error"]


def test_general_exception_handler_registered():
    app = make_app()

    assert app.exception_handlers[Exception] is general_exception_handler


@pytest.mark.asyncio
async def test_general_exception_handler_hides_message():
    from fastapi import Request

    request = Request({"type": "http", "method": "GET", "path": "/test", "headers": []})
    request.state.request_id = "req-1"

    response = await general_exception_handler(request, RuntimeError("secret detail"))

    assert response.status_code == 500
    assert b"secret detail" not in response.body
    assert b"INTERNAL_ERROR" in response.body
    assert b"req-1" in response.body
