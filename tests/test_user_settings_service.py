"""Tests for user settings service."""

from expiry_tracker.domain.notifications import (
    NotificationSettings,
    UserNotificationPattern,
)
from expiry_tracker.services.user_settings import UserSettingsService
from tests.conftest import OWNER_ID, InMemoryUserSettingsRepository


def test_get_settings_defaults_when_missing() -> None:
    service = UserSettingsService(InMemoryUserSettingsRepository())

    settings = service.get_settings(OWNER_ID)

    assert settings == NotificationSettings()
    assert settings.quiet_hours.start == "22:00"
    assert settings.soon_items is False


def test_get_settings_defaults_when_malformed() -> None:
    service = UserSettingsService(InMemoryUserSettingsRepository(malformed=True))

    assert service.get_settings(OWNER_ID) == NotificationSettings()
    assert service.get_pattern(OWNER_ID) is None


def test_save_and_load_roundtrip() -> None:
    repository = InMemoryUserSettingsRepository()
    service = UserSettingsService(repository)
    settings = NotificationSettings(evening_planning=True)
    pattern = UserNotificationPattern(best_time_to_notify="07:45")

    service.save_settings(OWNER_ID, settings)
    service.save_pattern(OWNER_ID, pattern)

    assert service.get_settings(OWNER_ID).evening_planning is True
    assert service.get_pattern(OWNER_ID) == pattern
