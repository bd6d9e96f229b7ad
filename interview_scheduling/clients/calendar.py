"""Google Calendar client for interview meeting links."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from urllib.parse import quote
from uuid import uuid4

import aiohttp
from pydantic import BaseModel, Field
from structlog import get_logger

from interview_scheduling.core.config import settings
from interview_scheduling.core.errors import ExternalServiceError

logger = get_logger()


class CalendarAttendee(BaseModel):
    email: str
    name: str | None = None


class CalendarEventRequest(BaseModel):
    summary: str
    description: str | None = None
    start: datetime
    end: datetime
    attendees: list[CalendarAttendee] = Field(default_factory=list)


class CalendarEvent(BaseModel):
    event_id: str
    meeting_link: str | None = None


class CalendarGateway(Protocol):
    async def create_event(self, request: CalendarEventRequest) -> CalendarEvent: ...

    async def cancel_event(self, event_id: str) -> None: ...


class GoogleCalendarClient:
    """HTTP client for the Google Calendar v3 events API with bearer auth."""

    def __init__(self, api_token: str | None = None, calendar_id: str | None = None) -> None:
        self.api_token = api_token if api_token is not None else settings.google_calendar_api_token
        self.calendar_id = calendar_id or settings.google_calendar_id
        self.base_url = "https://www.googleapis.com/calendar/v3"
        self.timeout = aiohttp.ClientTimeout(total=30)

    @property
    def events_url(self) -> str:
        return f"{self.base_url}/calendars/{quote(self.calendar_id, safe='')}/events"

    def _headers(self) -> dict[str, str]:
        if not self.api_token:
            raise ExternalServiceError(
                "Google Calendar API token not configured", service="google_calendar"
            )
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

    async def create_event(self, request: CalendarEventRequest) -> CalendarEvent:
        """
        Create an event with a Google Meet conference attached.

        Raises:
            ExternalServiceError: If no API token is configured
            aiohttp.ClientError: On request failure
        """
        body: dict[str, Any] = {
            "summary": request.summary,
            "description": request.description or "",
            "start": {"dateTime": request.start.isoformat()},
            "end": {"dateTime": request.end.isoformat()},
            "attendees": [
                {"email": a.email, "displayName": a.name} if a.name else {"email": a.email}
                for a in request.attendees
            ],
            "conferenceData": {
                "createRequest": {
                    "requestId": str(uuid4()),
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            },
        }

        logger.info("calendar_event_create_request", start=request.start.isoformat())

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(
                self.events_url,
                params={"conferenceDataVersion": "1", "sendUpdates": "all"},
                json=body,
                headers=self._headers(),
            ) as response:
                response.raise_for_status()
                result: dict[str, Any] = await response.json()

        meeting_link = result.get("hangoutLink")
        if not meeting_link:
            for entry in result.get("conferenceData", {}).get("entryPoints", []):
                if entry.get("entryPointType") == "video":
                    meeting_link = entry.get("uri")
                    break

        return CalendarEvent(
            event_id=result["id"],
            meeting_link=meeting_link,
        )

    async def cancel_event(self, event_id: str) -> None:
        """Delete an event and notify its attendees."""
        logger.info("calendar_event_cancel_request", event_id=event_id)

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.delete(
                f"{self.events_url}/{quote(event_id, safe='')}",
                params={"sendUpdates": "all"},
                headers=self._headers(),
            ) as response:
                # Already deleted upstream
                if response.status == 410:
                    return
                response.raise_for_status()
