"""Application configuration."""

import logging
import os
from datetime import time

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    owner_user_id: str
    timezone: str = "UTC"
    expo_push_url: str = "https://exp.host/--/api/v2/push/send"
    expo_access_token: str | None = None
    warning_notify_time: str = "09:00"
    soon_notify_time: str = "10:00"
    critical_follow_up_hours: int = 4
    critical_follow_up_count: int = 3
    extend_expiry_days: int = 3
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_time_of_day(raw: str | None, default: time) -> time:
    """Parse an "HH:MM" string, falling back to the default when malformed."""
    if raw is None:
        return default
    hour_text, sep, minute_text = raw.strip().partition(":")
    if not sep or not hour_text.isdigit() or not minute_text.isdigit():
        _logger.warning("Invalid time of day %r, using %s", raw, default)
        return default
    hour, minute = int(hour_text), int(minute_text)
    if not (0 <= hour < 24 and 0 <= minute < 60):  # noqa: PLR2004
        _logger.warning("Out of range time of day %r, using %s", raw, default)
        return default
    return time(hour=hour, minute=minute)
