"""Supabase repository for user notification settings."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TypeVar

from pydantic import BaseModel, ValidationError
from supabase import Client

from expiry_tracker.domain.errors import InvalidSettingsError
from expiry_tracker.domain.notifications import (
    NotificationSettings,
    UserNotificationPattern,
)
from expiry_tracker.services.user_settings import UserSettingsRepository

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_notification_settings(self, user_id: str) -> NotificationSettings | None:
        """Return stored notification settings."""
        raw = self._get_column(user_id, "notification_settings")
        return _validate(NotificationSettings, raw)

    def set_notification_settings(
        self, user_id: str, settings: NotificationSettings
    ) -> None:
        """Store notification settings."""
        self._upsert(
            user_id, {"notification_settings": settings.model_dump(mode="json")}
        )

    def get_notification_pattern(self, user_id: str) -> UserNotificationPattern | None:
        """Return the stored notification pattern."""
        raw = self._get_column(user_id, "notification_pattern")
        return _validate(UserNotificationPattern, raw)

    def set_notification_pattern(
        self, user_id: str, pattern: UserNotificationPattern
    ) -> None:
        """Store the notification pattern."""
        self._upsert(
            user_id, {"notification_pattern": pattern.model_dump(mode="json")}
        )

    def get_push_token(self, user_id: str) -> str | None:
        """Return the device push token registered for a user."""
        token = self._get_column(user_id, "expo_push_token")
        return token if isinstance(token, str) and token else None

    def _get_column(self, user_id: str, column: str) -> object:
        response = (
            self.client.table("user_settings")
            .select(column)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get(column)

    def _upsert(self, user_id: str, payload: dict[str, object]) -> None:
        self.client.table("user_settings").upsert(
            {
                "user_id": user_id,
                **payload,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()


def _validate(model: type[ModelT], raw: object) -> ModelT | None:
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise InvalidSettingsError(f"Malformed {model.__name__}") from exc
