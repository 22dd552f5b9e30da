"""Smart notification scheduling for expiring inventory items."""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from enum import StrEnum
from typing import Protocol
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from expiry_tracker.config import parse_time_of_day
from expiry_tracker.domain.notifications import (
    ActionOutcome,
    MealSlot,
    NotificationAction,
    NotificationCategory,
    NotificationContent,
    NotificationSettings,
    NotificationTrigger,
    ScheduleSummary,
    UserNotificationPattern,
)
from expiry_tracker.domain.urgency import ClassifiedItem, UrgencyLevel
from expiry_tracker.services.inventory import InventoryService
from expiry_tracker.services.meal_planning import MealSuggester
from expiry_tracker.services.notification_content import (
    DEFAULT_BADGE_COUNTS,
    NOTIFICATION_CATEGORIES,
    build_critical_alert,
    build_evening_planning,
    build_expiry_notification,
    build_follow_up_notification,
    build_meal_suggestion_notification,
    build_morning_reminder,
)
from expiry_tracker.services.urgency import with_urgency
from expiry_tracker.services.user_settings import UserSettingsService

_logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600
MINUTES_PER_DAY = 24 * 60
PATTERN_STEP = 0.1

QUIET_START_DEFAULT = time(22, 0)
QUIET_END_DEFAULT = time(7, 0)
MORNING_REMINDER_TIME = time(8, 0)
EVENING_PLANNING_TIME = time(19, 0)
MEAL_SLOT_TIMES: tuple[tuple[MealSlot, time], ...] = (
    (MealSlot.MORNING, time(7, 30)),
    (MealSlot.MIDDAY, time(11, 30)),
    (MealSlot.EVENING, time(17, 0)),
)


class NotificationPlatform(Protocol):
    """Notification delivery facility."""

    async def request_permission(self) -> bool:
        """Return True when notifications may be delivered."""

    async def register_category(self, category: NotificationCategory) -> None:
        """Register a category and its action buttons."""

    async def schedule(
        self, content: NotificationContent, trigger: NotificationTrigger
    ) -> None:
        """Schedule a notification."""

    async def cancel_all(self) -> None:
        """Cancel every pending notification."""


class SchedulerState(StrEnum):
    """Lifecycle of the notification scheduler."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    SCHEDULING = "scheduling"
    IDLE = "idle"


@dataclass
class _RunTally:
    scheduled: int = 0
    failed: int = 0


ActionHandler = Callable[[Mapping[str, object], datetime], ActionOutcome]


@dataclass
class SmartNotificationService:
    """Decides which reminders to schedule and when."""

    platform: NotificationPlatform
    settings_service: UserSettingsService
    inventory_service: InventoryService
    meal_suggester: MealSuggester
    user_id: str
    timezone_name: str = "UTC"
    warning_time: time = time(9, 0)
    preferred_time: time = time(10, 0)
    follow_up_hours: int = 4
    follow_up_count: int = 3
    extend_expiry_days: int = 3
    max_meal_suggestions: int = 3
    badge_counts: dict[UrgencyLevel, int] = field(
        default_factory=lambda: dict(DEFAULT_BADGE_COUNTS)
    )
    settings: NotificationSettings = field(default_factory=NotificationSettings)
    pattern: UserNotificationPattern | None = None
    state: SchedulerState = SchedulerState.UNINITIALIZED
    permission_granted: bool = False
    last_run: ScheduleSummary = field(default_factory=ScheduleSummary)

    async def initialize(self) -> bool:
        """Load preferences, request permission and register categories."""
        self.state = SchedulerState.INITIALIZING
        try:
            self.settings = self.settings_service.get_settings(self.user_id)
            self.pattern = self.settings_service.get_pattern(self.user_id)
        except Exception:
            _logger.exception("Failed to load notification preferences")

        try:
            granted = await self.platform.request_permission()
        except Exception:
            _logger.exception("Failed to request notification permission")
            granted = False

        if not granted:
            _logger.warning(
                "Notification permission not granted: user_id=%s", self.user_id
            )
            self.permission_granted = False
            self.state = SchedulerState.READY
            return False

        for category in NOTIFICATION_CATEGORIES:
            try:
                await self.platform.register_category(category)
            except Exception:
                _logger.exception("Failed to register category %s", category.id)
        self.permission_granted = True
        self.state = SchedulerState.READY
        return True

    async def schedule_for_inventory(
        self, now: datetime | None = None
    ) -> ScheduleSummary:
        """Classify the user's active items and run a scheduling pass."""
        local_now = self.local_now(now)
        items = self.inventory_service.list_active_items(self.user_id)
        return await self.schedule_smart_notifications(
            with_urgency(items, local_now), local_now
        )

    async def schedule_smart_notifications(
        self, items: Sequence[ClassifiedItem], now: datetime | None = None
    ) -> ScheduleSummary:
        """Replace all pending reminders with ones for the current items."""
        if items is None:
            raise TypeError("items must be a sequence of classified items")
        if not self.permission_granted or not self.settings.enabled:
            self.last_run = ScheduleSummary(skipped=True)
            return self.last_run

        local_now = self.local_now(now)
        self.state = SchedulerState.SCHEDULING
        tally = _RunTally()
        try:
            await self._cancel_all()
            active = [entry for entry in items if entry.item.is_active]
            tiers = {
                level: [entry for entry in active if entry.urgency.level == level]
                for level in UrgencyLevel
            }
            if self.settings.critical_items:
                await self._schedule_critical(
                    tiers[UrgencyLevel.CRITICAL], local_now, tally
                )
            if self.settings.warning_items:
                await self._schedule_at(
                    tiers[UrgencyLevel.WARNING],
                    UrgencyLevel.WARNING,
                    self.optimal_notification_time(),
                    tally,
                )
            if self.settings.soon_items:
                await self._schedule_at(
                    tiers[UrgencyLevel.SOON],
                    UrgencyLevel.SOON,
                    self.preferred_time,
                    tally,
                )
            if self.settings.meal_suggestions:
                await self._schedule_meal_suggestions(active, tally)
            if self.settings.morning_reminder:
                await self._schedule_morning_reminder(
                    len(tiers[UrgencyLevel.CRITICAL]),
                    len(tiers[UrgencyLevel.WARNING]),
                    tally,
                )
            if self.settings.evening_planning:
                await self._schedule_evening_planning(active, tally)
        finally:
            self.state = SchedulerState.IDLE

        self.last_run = ScheduleSummary(scheduled=tally.scheduled, failed=tally.failed)
        _logger.info(
            "Scheduled notifications: user_id=%s scheduled=%s failed=%s at=%s",
            self.user_id,
            tally.scheduled,
            tally.failed,
            local_now.isoformat(),
        )
        return self.last_run

    async def send_critical_alert(
        self, entry: ClassifiedItem, now: datetime | None = None
    ) -> bool:
        """Send an immediate alert unless quiet hours are active."""
        if not self.permission_granted or self.is_quiet_hours(now):
            return False
        content = build_critical_alert(entry, self.badge_counts)
        trigger = NotificationTrigger.immediate()
        return await self._schedule(content, trigger, _RunTally())

    def is_quiet_hours(self, now: datetime | None = None) -> bool:
        """Return True when ``now`` falls inside the quiet-hours window."""
        quiet = self.settings.quiet_hours
        if not quiet.enabled:
            return False
        local_now = self.local_now(now)
        start = _minute_of_day(parse_time_of_day(quiet.start, QUIET_START_DEFAULT))
        end = _minute_of_day(parse_time_of_day(quiet.end, QUIET_END_DEFAULT))
        current = (local_now.hour * 60 + local_now.minute) % MINUTES_PER_DAY
        if start <= end:
            return start <= current <= end
        return current >= start or current <= end

    def optimal_notification_time(self) -> time:
        """Return the learned best time, or the default warning time."""
        if self.pattern is None:
            return self.warning_time
        return parse_time_of_day(self.pattern.best_time_to_notify, self.warning_time)

    def handle_notification_action(
        self,
        action_id: str,
        payload: Mapping[str, object] | None = None,
        now: datetime | None = None,
    ) -> ActionOutcome:
        """Dispatch a notification action and update the response pattern."""
        action = NotificationAction.parse(action_id)
        local_now = self.local_now(now)
        data = payload or {}
        handler = self._action_handlers().get(action)
        if handler is None:
            _logger.info("Unknown notification action: %s", action_id)
            return ActionOutcome(action=NotificationAction.UNKNOWN, handled=False)

        try:
            outcome = handler(data, local_now)
        except Exception:
            _logger.exception("Failed to handle notification action: %s", action_id)
            return ActionOutcome(action=action, handled=False)
        if outcome.handled:
            self._record_response(action, local_now)
        return outcome

    def update_settings(self, changes: Mapping[str, object]) -> NotificationSettings:
        """Merge and persist settings, keeping the current ones when invalid."""
        merged = self.settings.model_dump()
        for key, value in changes.items():
            if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
        try:
            updated = NotificationSettings.model_validate(merged)
        except ValidationError:
            _logger.warning("Rejected invalid notification settings: %s", dict(changes))
            return self.get_settings()

        self.settings = updated
        try:
            self.settings_service.save_settings(self.user_id, updated)
        except Exception:
            _logger.exception("Failed to persist notification settings")
        return self.get_settings()

    def get_settings(self) -> NotificationSettings:
        """Return a copy of the current settings."""
        return self.settings.model_copy(deep=True)

    def get_notification_stats(self) -> dict[str, object]:
        """Return the last run counts, pattern and settings."""
        return {
            "state": self.state.value,
            "permission_granted": self.permission_granted,
            "total_scheduled": self.last_run.scheduled,
            "failed": self.last_run.failed,
            "user_pattern": (
                self.pattern.model_dump(mode="json") if self.pattern else None
            ),
            "settings": self.settings.model_dump(mode="json"),
        }

    async def _schedule_critical(
        self,
        entries: Sequence[ClassifiedItem],
        now: datetime,
        tally: _RunTally,
    ) -> None:
        for entry in entries:
            content = build_expiry_notification(
                entry, UrgencyLevel.CRITICAL, self.badge_counts
            )
            await self._schedule(content, NotificationTrigger.immediate(), tally)
            follow_up = build_follow_up_notification(entry, self.badge_counts)
            for index in range(1, self.follow_up_count + 1):
                delay = index * self.follow_up_hours * SECONDS_PER_HOUR
                trigger = NotificationTrigger(fire_at=now + timedelta(seconds=delay))
                await self._schedule(follow_up, trigger, tally)

    async def _schedule_at(
        self,
        entries: Sequence[ClassifiedItem],
        level: UrgencyLevel,
        at: time,
        tally: _RunTally,
    ) -> None:
        for entry in entries:
            content = build_expiry_notification(entry, level, self.badge_counts)
            trigger = NotificationTrigger.daily(at.hour, at.minute, repeats=False)
            await self._schedule(content, trigger, tally)

    async def _schedule_meal_suggestions(
        self, entries: Sequence[ClassifiedItem], tally: _RunTally
    ) -> None:
        if not self.meal_suggester.suggest_meals(entries, self.max_meal_suggestions):
            return
        for slot, at in MEAL_SLOT_TIMES:
            suggestion = self.meal_suggester.best_meal_for_time_of_day(entries, slot)
            if suggestion is None:
                continue
            content = build_meal_suggestion_notification(suggestion, slot)
            await self._schedule(
                content, NotificationTrigger.daily(at.hour, at.minute), tally
            )

    async def _schedule_morning_reminder(
        self, critical_count: int, warning_count: int, tally: _RunTally
    ) -> None:
        if critical_count == 0 and warning_count == 0:
            return
        at = MORNING_REMINDER_TIME
        await self._schedule(
            build_morning_reminder(critical_count, warning_count),
            NotificationTrigger.daily(at.hour, at.minute),
            tally,
        )

    async def _schedule_evening_planning(
        self, entries: Sequence[ClassifiedItem], tally: _RunTally
    ) -> None:
        tomorrow = [entry for entry in entries if entry.urgency.days_until_expiry == 1]
        if not tomorrow:
            return
        at = EVENING_PLANNING_TIME
        await self._schedule(
            build_evening_planning(tomorrow),
            NotificationTrigger.daily(at.hour, at.minute),
            tally,
        )

    async def _schedule(
        self,
        content: NotificationContent,
        trigger: NotificationTrigger,
        tally: _RunTally,
    ) -> bool:
        try:
            await self.platform.schedule(content, trigger)
        except Exception:
            _logger.exception("Failed to schedule notification: %s", content.title)
            tally.failed += 1
            return False
        tally.scheduled += 1
        return True

    async def _cancel_all(self) -> None:
        try:
            await self.platform.cancel_all()
        except Exception:
            _logger.exception("Failed to cancel scheduled notifications")

    def _action_handlers(self) -> dict[NotificationAction, ActionHandler]:
        return {
            NotificationAction.MARK_USED: self._handle_mark_used,
            NotificationAction.EXTEND_EXPIRY: self._handle_extend_expiry,
            NotificationAction.VIEW_RECIPES: self._handle_view_recipes,
            NotificationAction.VIEW_RECIPE: self._handle_view_recipe,
            NotificationAction.DISMISS: self._handle_dismiss,
            NotificationAction.OPEN_CALENDAR: self._handle_open_calendar,
            NotificationAction.VIEW_EXPIRING: self._handle_view_expiring,
        }

    def _handle_mark_used(
        self, payload: Mapping[str, object], now: datetime
    ) -> ActionOutcome:
        item_id = _item_id(payload)
        handled = item_id is not None and self.inventory_service.mark_used(item_id)
        return ActionOutcome(action=NotificationAction.MARK_USED, handled=handled)

    def _handle_extend_expiry(
        self, payload: Mapping[str, object], now: datetime
    ) -> ActionOutcome:
        item_id = _item_id(payload)
        days = payload.get("days", self.extend_expiry_days)
        if (
            item_id is None
            or isinstance(days, bool)
            or not isinstance(days, int)
            or days <= 0
        ):
            return ActionOutcome(action=NotificationAction.EXTEND_EXPIRY, handled=False)
        new_expiry = self.inventory_service.extend_expiry(item_id, days, now.date())
        return ActionOutcome(
            action=NotificationAction.EXTEND_EXPIRY,
            handled=new_expiry is not None,
            route=f"/item-details?id={item_id}",
        )

    def _handle_view_recipes(
        self, payload: Mapping[str, object], now: datetime
    ) -> ActionOutcome:
        item_id = _item_id(payload)
        route = f"/menu?item_id={item_id}" if item_id else "/menu"
        return ActionOutcome(
            action=NotificationAction.VIEW_RECIPES, handled=True, route=route
        )

    def _handle_view_recipe(
        self, payload: Mapping[str, object], now: datetime
    ) -> ActionOutcome:
        suggestion = payload.get("suggestion")
        recipe_id = suggestion.get("id") if isinstance(suggestion, Mapping) else None
        route = f"/menu?recipe_id={recipe_id}" if recipe_id else "/menu"
        return ActionOutcome(
            action=NotificationAction.VIEW_RECIPE, handled=True, route=route
        )

    def _handle_dismiss(
        self, payload: Mapping[str, object], now: datetime
    ) -> ActionOutcome:
        return ActionOutcome(action=NotificationAction.DISMISS, handled=True)

    def _handle_open_calendar(
        self, payload: Mapping[str, object], now: datetime
    ) -> ActionOutcome:
        return ActionOutcome(
            action=NotificationAction.OPEN_CALENDAR, handled=True, route="/calendar"
        )

    def _handle_view_expiring(
        self, payload: Mapping[str, object], now: datetime
    ) -> ActionOutcome:
        return ActionOutcome(
            action=NotificationAction.VIEW_EXPIRING,
            handled=True,
            route="/calendar?view=expiring",
        )

    def _record_response(self, action: NotificationAction, now: datetime) -> None:
        pattern = self.pattern or UserNotificationPattern(
            best_time_to_notify=self.warning_time.strftime("%H:%M"),
            last_updated=now,
        )
        if action == NotificationAction.DISMISS:
            update = {"dismissal_rate": _nudge(pattern.dismissal_rate)}
        else:
            update = {"action_taken_rate": _nudge(pattern.action_taken_rate)}
        self.pattern = pattern.model_copy(update={**update, "last_updated": now})
        try:
            self.settings_service.save_pattern(self.user_id, self.pattern)
        except Exception:
            _logger.exception("Failed to persist notification pattern")

    def local_now(self, now: datetime | None = None) -> datetime:
        """Return ``now`` in the configured timezone."""
        tz = ZoneInfo(self.timezone_name)
        if now is None:
            return datetime.now(tz=tz)
        if now.tzinfo is None:
            return now.replace(tzinfo=tz)
        return now.astimezone(tz)


def _minute_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def _nudge(rate: float) -> float:
    return min(round(rate + PATTERN_STEP, 4), 1.0)


def _item_id(payload: Mapping[str, object]) -> str | None:
    item_id = payload.get("item_id")
    if isinstance(item_id, str) and item_id:
        return item_id
    return None

