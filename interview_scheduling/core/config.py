"""Application configuration."""

from datetime import time
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(env_file=".env")

    # Database
    database_url: str

    # Application
    log_level: str = "INFO"
    expose_error_details: bool = False

    # Frontend (for CORS)
    frontend_url: str = "http://localhost:5173"

    # Scheduling
    scheduling_timezone: str = "UTC"
    working_days: list[int] = [0, 1, 2, 3, 4]  # Monday=0
    default_buffer_minutes: int = 15
    max_schedule_ahead_days: int = 365
    conflict_scope: Literal["global", "interviewer"] = "global"
    fallback_slot_time: str = "09:00"

    # Google Calendar
    google_calendar_api_token: str | None = None
    google_calendar_id: str = "primary"

    # Notifications
    notification_api_url: str | None = None
    notification_api_key: str | None = None
    slack_bot_token: str | None = None
    recruiting_slack_channel_id: str | None = None

    @property
    def frontend_urls(self) -> list[str]:
        """Parse frontend URLs from comma-separated env var."""
        return [url.strip() for url in self.frontend_url.split(",")]

    @property
    def tz(self) -> ZoneInfo:
        """Timezone used to interpret slot templates and working days."""
        return ZoneInfo(self.scheduling_timezone)

    @property
    def fallback_time(self) -> time:
        hours, minutes = self.fallback_slot_time.split(":")
        return time(int(hours), int(minutes))

    @field_validator("scheduling_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"SCHEDULING_TIMEZONE is not a known timezone: {v}") from e
        return v

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, v: list[int]) -> list[int]:
        """Validate working days are weekday numbers (Monday=0 ... Sunday=6)."""
        if not v:
            raise ValueError("WORKING_DAYS must contain at least one day")
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("WORKING_DAYS entries must be between 0 (Monday) and 6 (Sunday)")
        return sorted(set(v))

    @field_validator("fallback_slot_time")
    @classmethod
    def validate_fallback_slot_time(cls, v: str) -> str:
        """Validate fallback slot is an HH:MM string."""
        parts = v.strip().split(":")
        if (
            len(parts) != 2
            or not all(p.isdigit() for p in parts)
            or not (0 <= int(parts[0]) <= 23 and 0 <= int(parts[1]) <= 59)
        ):
            raise ValueError(f"FALLBACK_SLOT_TIME must be HH:MM, got {v!r}")
        return v.strip()


settings = Settings()
