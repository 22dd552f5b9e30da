"""Domain models for notification scheduling."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class QuietHours(BaseModel):
    """Time-of-day window during which urgent alerts are suppressed."""

    enabled: bool = True
    start: str = "22:00"
    end: str = "07:00"


class NotificationSettings(BaseModel):
    """User-scoped notification preferences."""

    enabled: bool = True
    critical_items: bool = True
    warning_items: bool = True
    soon_items: bool = False
    meal_suggestions: bool = True
    morning_reminder: bool = True
    evening_planning: bool = False
    quiet_hours: QuietHours = Field(default_factory=QuietHours)
    frequency: Literal["realtime", "daily", "twice-daily", "custom"] = "daily"


class UserNotificationPattern(BaseModel):
    """Soft heuristic learned from notification responses."""

    best_time_to_notify: str = "09:00"
    avg_response_minutes: float = 15.0
    preferred_notification_types: list[str] = Field(default_factory=list)
    action_taken_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    dismissal_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class NotificationAction(StrEnum):
    """Action identifiers offered on notifications."""

    MARK_USED = "MARK_USED"
    EXTEND_EXPIRY = "EXTEND_EXPIRY"
    VIEW_RECIPES = "VIEW_RECIPES"
    VIEW_RECIPE = "VIEW_RECIPE"
    DISMISS = "DISMISS"
    OPEN_CALENDAR = "OPEN_CALENDAR"
    VIEW_EXPIRING = "VIEW_EXPIRING"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, identifier: str | None) -> "NotificationAction":
        """Return the action for an identifier, or UNKNOWN."""
        try:
            action = cls((identifier or "").strip().upper())
        except ValueError:
            return cls.UNKNOWN
        return action


class MealSlot(StrEnum):
    """Meal times that receive a suggestion."""

    MORNING = "morning"
    MIDDAY = "midday"
    EVENING = "evening"


@dataclass(frozen=True)
class ActionButton:
    """Button shown on a notification category."""

    id: NotificationAction
    title: str
    foreground: bool = True
    destructive: bool = False


@dataclass(frozen=True)
class NotificationCategory:
    """Routing category with its action buttons."""

    id: str
    actions: list[ActionButton]


@dataclass(frozen=True)
class NotificationContent:
    """Payload handed to the notification platform."""

    title: str
    body: str
    category: str | None = None
    data: dict[str, object] = field(default_factory=dict)
    badge: int | None = None


@dataclass(frozen=True)
class NotificationTrigger:
    """When a notification fires.

    Exactly one of ``fire_at``, ``delay_seconds`` or ``hour``/``minute`` is set.
    A ``delay_seconds`` of zero means deliver immediately.
    """

    fire_at: datetime | None = None
    delay_seconds: int | None = None
    hour: int | None = None
    minute: int | None = None
    repeats: bool = False

    @classmethod
    def immediate(cls) -> "NotificationTrigger":
        return cls(delay_seconds=0)

    @classmethod
    def after(cls, seconds: int) -> "NotificationTrigger":
        return cls(delay_seconds=seconds)

    @classmethod
    def daily(
        cls, hour: int, minute: int, *, repeats: bool = True
    ) -> "NotificationTrigger":
        return cls(hour=hour, minute=minute, repeats=repeats)

    @property
    def is_immediate(self) -> bool:
        return self.fire_at is None and self.delay_seconds == 0


@dataclass(frozen=True)
class ActionOutcome:
    """Result of handling a notification action."""

    action: NotificationAction
    handled: bool
    route: str | None = None


@dataclass(frozen=True)
class ScheduleSummary:
    """Counts from one scheduling run."""

    scheduled: int = 0
    failed: int = 0
    skipped: bool = False


@dataclass(frozen=True)
class ScheduledNotification:
    """Pending notification stored for later delivery."""

    id: str
    user_id: str
    content: NotificationContent
    fire_at: datetime
    repeats_daily: bool = False
