"""Push-based notification platform with stored schedules."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from expiry_tracker.domain.errors import PermissionDeniedError, SchedulingFailureError
from expiry_tracker.domain.notifications import (
    NotificationCategory,
    NotificationContent,
    NotificationTrigger,
    ScheduledNotification,
)

_logger = logging.getLogger(__name__)


class PushClient(Protocol):
    """Interface for a push delivery service."""

    async def send(self, messages: list[dict[str, object]]) -> list[dict[str, object]]:
        """Send push messages and return one ticket per message."""


class PushTokenRepository(Protocol):
    """Lookup of a user's device push token."""

    def get_push_token(self, user_id: str) -> str | None:
        """Return the registered push token, if any."""


class ScheduledNotificationRepository(Protocol):
    """Persistence interface for pending notifications."""

    def create(
        self,
        user_id: str,
        content: NotificationContent,
        fire_at: datetime,
        repeats_daily: bool,
    ) -> ScheduledNotification:
        """Store a pending notification."""

    def list_due(self, user_id: str, now: datetime) -> list[ScheduledNotification]:
        """Return pending notifications whose fire time has passed."""

    def reschedule(self, notification_id: str, fire_at: datetime) -> None:
        """Move a pending notification to a new fire time."""

    def delete(self, notification_id: str) -> None:
        """Remove a pending notification."""

    def delete_pending(self, user_id: str) -> None:
        """Remove all pending notifications for a user."""


@dataclass
class PushNotificationPlatform:
    """Delivers immediate notifications by push and stores the rest."""

    push_client: PushClient
    token_repository: PushTokenRepository
    schedule_repository: ScheduledNotificationRepository
    user_id: str
    timezone_name: str = "UTC"
    categories: dict[str, NotificationCategory] = field(default_factory=dict)
    _token: str | None = None

    async def request_permission(self) -> bool:
        """Return True when the user has a registered push token."""
        self._token = self.token_repository.get_push_token(self.user_id)
        return bool(self._token)

    async def register_category(self, category: NotificationCategory) -> None:
        """Remember a category so messages can reference it."""
        self.categories[category.id] = category

    async def schedule(
        self,
        content: NotificationContent,
        trigger: NotificationTrigger,
        now: datetime | None = None,
    ) -> None:
        """Send now or store for later according to the trigger."""
        if not self._token:
            raise PermissionDeniedError("No push token registered")
        if trigger.is_immediate:
            await self._send([content])
            return
        fire_at = resolve_fire_at(trigger, self._now(now))
        self.schedule_repository.create(
            user_id=self.user_id,
            content=content,
            fire_at=fire_at,
            repeats_daily=trigger.repeats,
        )

    async def cancel_all(self) -> None:
        """Drop every pending notification for the user."""
        self.schedule_repository.delete_pending(self.user_id)

    async def deliver_due(self, now: datetime | None = None) -> int:
        """Send stored notifications that are due and return how many were sent."""
        if not self._token and not await self.request_permission():
            return 0
        current = self._now(now)
        delivered = 0
        for pending in self.schedule_repository.list_due(self.user_id, current):
            try:
                await self._send([pending.content])
            except Exception:
                _logger.exception("Failed to deliver notification %s", pending.id)
                continue
            delivered += 1
            try:
                self._advance(pending, current)
            except Exception:
                _logger.exception(
                    "Failed to update delivered notification %s", pending.id
                )
        return delivered

    def _advance(self, pending: ScheduledNotification, current: datetime) -> None:
        if not pending.repeats_daily:
            self.schedule_repository.delete(pending.id)
            return
        next_fire = pending.fire_at
        while next_fire <= current:
            next_fire += timedelta(days=1)
        self.schedule_repository.reschedule(pending.id, next_fire)

    async def _send(self, contents: list[NotificationContent]) -> None:
        messages = [self._message(content) for content in contents]
        tickets = await self.push_client.send(messages)
        for ticket in tickets:
            if ticket.get("status") == "error":
                raise SchedulingFailureError(str(ticket.get("message", "push failed")))

    def _message(self, content: NotificationContent) -> dict[str, object]:
        message: dict[str, object] = {
            "to": self._token,
            "title": content.title,
            "body": content.body,
            "data": content.data,
            "sound": "default",
        }
        if content.category and content.category in self.categories:
            message["categoryId"] = content.category
        if content.badge is not None:
            message["badge"] = content.badge
        return message

    def _now(self, now: datetime | None) -> datetime:
        tz = ZoneInfo(self.timezone_name)
        if now is None:
            return datetime.now(tz=UTC).astimezone(tz)
        if now.tzinfo is None:
            return now.replace(tzinfo=tz)
        return now.astimezone(tz)


def resolve_fire_at(trigger: NotificationTrigger, now: datetime) -> datetime:
    """Return the first fire time of a trigger relative to ``now``."""
    if trigger.fire_at is not None:
        return trigger.fire_at
    if trigger.delay_seconds is not None:
        return now + timedelta(seconds=trigger.delay_seconds)
    if trigger.hour is None:
        raise SchedulingFailureError("Trigger has no fire time")
    candidate = now.replace(
        hour=trigger.hour, minute=trigger.minute or 0, second=0, microsecond=0
    )
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate
