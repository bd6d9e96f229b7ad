"""Slack Web API client wrapper."""

from __future__ import annotations

from typing import Any

from slack_sdk.web.async_client import AsyncWebClient
from structlog import get_logger

from interview_scheduling.core.config import settings

logger = get_logger()


class SlackClient:
    """Thin wrapper over AsyncWebClient that knows whether Slack is configured."""

    def __init__(self, token: str | None = None) -> None:
        token = token if token is not None else settings.slack_bot_token
        self.enabled = bool(token)
        self.client = AsyncWebClient(token=token)

    async def chat_postMessage(self, **kwargs: Any) -> Any:  # noqa: N802
        response = await self.client.chat_postMessage(**kwargs)
        return response.data


slack_client = SlackClient()
