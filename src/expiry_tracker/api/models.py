"""Pydantic models for API payloads."""

from pydantic import BaseModel, Field


class NotificationActionRequest(BaseModel):
    """Action chosen on a delivered notification."""

    action_id: str
    payload: dict[str, object] = Field(default_factory=dict)


class QuietHoursUpdate(BaseModel):
    """Partial quiet-hours update."""

    enabled: bool | None = None
    start: str | None = None
    end: str | None = None


class NotificationSettingsUpdate(BaseModel):
    """Partial notification settings update."""

    enabled: bool | None = None
    critical_items: bool | None = None
    warning_items: bool | None = None
    soon_items: bool | None = None
    meal_suggestions: bool | None = None
    morning_reminder: bool | None = None
    evening_planning: bool | None = None
    quiet_hours: QuietHoursUpdate | None = None
    frequency: str | None = None

    def changes(self) -> dict[str, object]:
        """Return only the fields the client sent."""
        return self.model_dump(exclude_unset=True, exclude_none=True)
