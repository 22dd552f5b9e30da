"""Supabase repository for pending notifications."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from expiry_tracker.domain.notifications import (
    NotificationContent,
    ScheduledNotification,
)
from expiry_tracker.services.delivery import ScheduledNotificationRepository


@dataclass
class SupabaseScheduledNotificationRepository(ScheduledNotificationRepository):
    """Stores notifications in the ``scheduled_notifications`` table."""

    client: Client

    def create(
        self,
        user_id: str,
        content: NotificationContent,
        fire_at: datetime,
        repeats_daily: bool,
    ) -> ScheduledNotification:
        """Insert a pending notification and return it."""
        response = (
            self.client.table("scheduled_notifications")
            .insert(
                {
                    "user_id": user_id,
                    "title": content.title,
                    "body": content.body,
                    "category": content.category,
                    "data": content.data,
                    "badge": content.badge,
                    "fire_at": fire_at.isoformat(),
                    "repeats_daily": repeats_daily,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store scheduled notification")
        return _parse_notification(response.data[0])

    def list_due(self, user_id: str, now: datetime) -> list[ScheduledNotification]:
        """Return notifications with a fire time at or before ``now``."""
        response = (
            self.client.table("scheduled_notifications")
            .select("*")
            .eq("user_id", user_id)
            .lte("fire_at", now.isoformat())
            .order("fire_at")
            .execute()
        )
        return [_parse_notification(row) for row in response.data or []]

    def reschedule(self, notification_id: str, fire_at: datetime) -> None:
        """Move a notification to a new fire time."""
        self.client.table("scheduled_notifications").update(
            {"fire_at": fire_at.isoformat()}
        ).eq("id", notification_id).execute()

    def delete(self, notification_id: str) -> None:
        """Delete one notification."""
        self.client.table("scheduled_notifications").delete().eq(
            "id", notification_id
        ).execute()

    def delete_pending(self, user_id: str) -> None:
        """Delete every pending notification for a user."""
        self.client.table("scheduled_notifications").delete().eq(
            "user_id", user_id
        ).execute()


def _parse_notification(row: dict[str, object]) -> ScheduledNotification:
    data = row.get("data")
    badge = row.get("badge")
    return ScheduledNotification(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        content=NotificationContent(
            title=str(row.get("title") or ""),
            body=str(row.get("body") or ""),
            category=row.get("category"),
            data=data if isinstance(data, dict) else {},
            badge=badge if isinstance(badge, int) else None,
        ),
        fire_at=datetime.fromisoformat(str(row["fire_at"])),
        repeats_daily=bool(row.get("repeats_daily")),
    )
