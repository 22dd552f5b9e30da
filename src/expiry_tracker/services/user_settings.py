"""User notification settings service."""

import logging
from dataclasses import dataclass
from typing import Protocol

from expiry_tracker.domain.errors import InvalidSettingsError
from expiry_tracker.domain.notifications import (
    NotificationSettings,
    UserNotificationPattern,
)

_logger = logging.getLogger(__name__)


class UserSettingsRepository(Protocol):
    """Persistence interface for notification settings."""

    def get_notification_settings(self, user_id: str) -> NotificationSettings | None:
        """Return stored settings, raising InvalidSettingsError when malformed."""

    def set_notification_settings(
        self, user_id: str, settings: NotificationSettings
    ) -> None:
        """Persist notification settings."""

    def get_notification_pattern(self, user_id: str) -> UserNotificationPattern | None:
        """Return the stored notification pattern, if any."""

    def set_notification_pattern(
        self, user_id: str, pattern: UserNotificationPattern
    ) -> None:
        """Persist the notification pattern."""


@dataclass
class UserSettingsService:
    """Service for notification settings with default fallbacks."""

    repository: UserSettingsRepository

    def get_settings(self, user_id: str) -> NotificationSettings:
        """Return stored settings or the defaults."""
        try:
            settings = self.repository.get_notification_settings(user_id)
        except InvalidSettingsError:
            _logger.warning("Invalid notification settings: user_id=%s", user_id)
            return NotificationSettings()
        return settings or NotificationSettings()

    def save_settings(self, user_id: str, settings: NotificationSettings) -> None:
        """Persist settings."""
        self.repository.set_notification_settings(user_id, settings)

    def get_pattern(self, user_id: str) -> UserNotificationPattern | None:
        """Return the learned pattern, ignoring malformed data."""
        try:
            return self.repository.get_notification_pattern(user_id)
        except InvalidSettingsError:
            _logger.warning("Invalid notification pattern: user_id=%s", user_id)
            return None

    def save_pattern(self, user_id: str, pattern: UserNotificationPattern) -> None:
        """Persist the learned pattern."""
        self.repository.set_notification_pattern(user_id, pattern)
