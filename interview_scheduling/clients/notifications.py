"""Candidate and recruiting-team notifications for scheduling events."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol

import aiohttp
from pydantic import BaseModel
from structlog import get_logger

from interview_scheduling.clients.slack import slack_client
from interview_scheduling.clients.slack_views import build_interview_event_blocks
from interview_scheduling.core.config import settings
from interview_scheduling.models.interview import Interview

logger = get_logger()


class NotificationEvent(StrEnum):
    SCHEDULED = "interview_scheduled"
    RESCHEDULED = "interview_rescheduled"
    CANCELLED = "interview_cancelled"
    NO_SHOW = "interview_no_show"


class NotificationContext(BaseModel):
    """Payload details that are not on the interview record itself."""

    candidate_name: str
    candidate_email: str
    job_title: str
    company_name: str | None = None
    reason: str | None = None
    previous_scheduled_date: datetime | None = None
    auto_reschedule_enabled: bool = False


class NotificationGateway(Protocol):
    async def interview_scheduled(
        self, interview: Interview, context: NotificationContext
    ) -> None: ...

    async def interview_rescheduled(
        self, interview: Interview, context: NotificationContext
    ) -> None: ...

    async def interview_cancelled(
        self, interview: Interview, context: NotificationContext
    ) -> None: ...

    async def interview_no_show(
        self, interview: Interview, context: NotificationContext
    ) -> None: ...


class _EventChannel:
    """Routes the four gateway methods to a single ``send``."""

    async def send(
        self, event: NotificationEvent, interview: Interview, context: NotificationContext
    ) -> None:
        raise NotImplementedError

    async def interview_scheduled(self, interview: Interview, context: NotificationContext) -> None:
        await self.send(NotificationEvent.SCHEDULED, interview, context)

    async def interview_rescheduled(
        self, interview: Interview, context: NotificationContext
    ) -> None:
        await self.send(NotificationEvent.RESCHEDULED, interview, context)

    async def interview_cancelled(self, interview: Interview, context: NotificationContext) -> None:
        await self.send(NotificationEvent.CANCELLED, interview, context)

    async def interview_no_show(self, interview: Interview, context: NotificationContext) -> None:
        await self.send(NotificationEvent.NO_SHOW, interview, context)


def build_email_variables(
    interview: Interview, context: NotificationContext
) -> dict[str, Any]:
    """Template variables for the transactional mail API; copy lives in the templates."""
    variables: dict[str, Any] = {
        "interview_id": interview.id,
        "candidate_name": context.candidate_name,
        "job_title": context.job_title,
        "company_name": context.company_name,
        "scheduled_date": interview.scheduled_date.isoformat(),
        "duration_minutes": interview.duration_minutes,
        "interview_type": interview.type.value,
        "meeting_link": interview.meeting_link,
    }
    if context.reason:
        variables["reason"] = context.reason
    if context.previous_scheduled_date:
        variables["previous_scheduled_date"] = context.previous_scheduled_date.isoformat()
    if context.auto_reschedule_enabled:
        variables["auto_reschedule_enabled"] = True
    return variables


class EmailNotificationClient(_EventChannel):
    """Sends candidate emails through a transactional mail HTTP API."""

    def __init__(self, api_url: str | None = None, api_key: str | None = None) -> None:
        self.api_url = api_url if api_url is not None else settings.notification_api_url
        self.api_key = api_key if api_key is not None else settings.notification_api_key
        self.timeout = aiohttp.ClientTimeout(total=15)

    async def send(
        self, event: NotificationEvent, interview: Interview, context: NotificationContext
    ) -> None:
        if not self.api_url:
            logger.debug("notification_email_skipped", notification=event.value)
            return

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "template": event.value,
            "to": context.candidate_email,
            "variables": build_email_variables(interview, context),
        }

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.api_url, json=payload, headers=headers) as response:
                response.raise_for_status()

        logger.info(
            "notification_email_sent",
            notification=event.value,
            interview_id=interview.id,
        )


class SlackNotificationClient(_EventChannel):
    """Posts scheduling events to the recruiting team's Slack channel."""

    def __init__(self, client: Any | None = None, channel_id: str | None = None) -> None:
        self.client = client if client is not None else slack_client
        self.channel_id = (
            channel_id if channel_id is not None else settings.recruiting_slack_channel_id
        )

    async def send(
        self, event: NotificationEvent, interview: Interview, context: NotificationContext
    ) -> None:
        if not self.channel_id or not getattr(self.client, "enabled", True):
            logger.debug("notification_slack_skipped", notification=event.value)
            return

        blocks = build_interview_event_blocks(event.value, interview, context)
        await self.client.chat_postMessage(
            channel=self.channel_id,
            text=f"{context.candidate_name} - {context.job_title}: {event.value}",
            blocks=blocks,
        )

        logger.info(
            "notification_slack_sent",
            notification=event.value,
            interview_id=interview.id,
        )


class NotificationDispatcher(_EventChannel):
    """Fans an event out to every channel; one failing channel never blocks the rest."""

    def __init__(self, channels: list[NotificationGateway]) -> None:
        self.channels = channels

    async def send(
        self, event: NotificationEvent, interview: Interview, context: NotificationContext
    ) -> None:
        for channel in self.channels:
            try:
                await getattr(channel, event.value)(interview, context)
            except Exception as e:
                logger.warning(
                    "notification_channel_failed",
                    notification=event.value,
                    channel=type(channel).__name__,
                    interview_id=interview.id,
                    error=str(e),
                )
