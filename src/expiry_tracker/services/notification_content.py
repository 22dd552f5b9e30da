"""Builders for notification titles, bodies and routing data."""

from collections.abc import Mapping, Sequence

from expiry_tracker.domain.meals import MealSuggestion
from expiry_tracker.domain.notifications import (
    ActionButton,
    MealSlot,
    NotificationAction,
    NotificationCategory,
    NotificationContent,
)
from expiry_tracker.domain.urgency import ClassifiedItem, UrgencyLevel

EXPIRY_CATEGORY = "EXPIRY_WARNING"
MEAL_CATEGORY = "MEAL_SUGGESTION"
PLANNING_CATEGORY = "PLANNING_REMINDER"

NOTIFICATION_CATEGORIES: tuple[NotificationCategory, ...] = (
    NotificationCategory(
        id=EXPIRY_CATEGORY,
        actions=[
            ActionButton(
                NotificationAction.MARK_USED, "Mark as Used", foreground=False
            ),
            ActionButton(NotificationAction.EXTEND_EXPIRY, "Extend Date"),
            ActionButton(NotificationAction.VIEW_RECIPES, "See Recipes"),
        ],
    ),
    NotificationCategory(
        id=MEAL_CATEGORY,
        actions=[
            ActionButton(NotificationAction.VIEW_RECIPE, "View Recipe"),
            ActionButton(
                NotificationAction.DISMISS,
                "Not Now",
                foreground=False,
                destructive=True,
            ),
        ],
    ),
    NotificationCategory(
        id=PLANNING_CATEGORY,
        actions=[
            ActionButton(NotificationAction.OPEN_CALENDAR, "Open Calendar"),
            ActionButton(NotificationAction.VIEW_EXPIRING, "Expiring Soon"),
        ],
    ),
)

DEFAULT_BADGE_COUNTS: dict[UrgencyLevel, int] = {
    UrgencyLevel.CRITICAL: 3,
    UrgencyLevel.WARNING: 2,
    UrgencyLevel.SOON: 1,
    UrgencyLevel.SAFE: 0,
}

_EMOJI = {
    UrgencyLevel.CRITICAL: "🚨",
    UrgencyLevel.WARNING: "⚠️",
    UrgencyLevel.SOON: "📅",
    UrgencyLevel.SAFE: "ℹ️",
}

_PHRASES = {
    UrgencyLevel.CRITICAL: "expires today or has expired",
    UrgencyLevel.WARNING: "expires in 1-2 days",
    UrgencyLevel.SOON: "expires this week",
    UrgencyLevel.SAFE: "expires later",
}

MEAL_ITEMS_IN_BODY = 3


def badge_count(
    level: UrgencyLevel, badge_counts: Mapping[UrgencyLevel, int] | None = None
) -> int:
    """Return the severity-weighted badge number for a tier."""
    return (badge_counts or DEFAULT_BADGE_COUNTS).get(level, 0)


def build_expiry_notification(
    entry: ClassifiedItem,
    level: UrgencyLevel,
    badge_counts: Mapping[UrgencyLevel, int] | None = None,
) -> NotificationContent:
    """Build the expiry reminder for an item at the given tier."""
    item = entry.item
    return NotificationContent(
        title=f"{_EMOJI[level]} {item.name} {_PHRASES[level]}",
        body=f"{_quantity_text(entry)} in {item.location.value}. "
        f"{entry.urgency.description}",
        category=EXPIRY_CATEGORY,
        data={"item_id": item.id, "urgency_level": level.value, "type": "expiry"},
        badge=badge_count(level, badge_counts),
    )


def build_follow_up_notification(
    entry: ClassifiedItem, badge_counts: Mapping[UrgencyLevel, int] | None = None
) -> NotificationContent:
    """Build a repeated reminder for a critical item."""
    base = build_expiry_notification(entry, UrgencyLevel.CRITICAL, badge_counts)
    name = entry.item.name
    return NotificationContent(
        title=f"⚠️ Still Expiring: {name}",
        body=f"{name} expired or expires today. Take action now!",
        category=base.category,
        data={**base.data, "follow_up": True},
        badge=base.badge,
    )


def build_critical_alert(
    entry: ClassifiedItem, badge_counts: Mapping[UrgencyLevel, int] | None = None
) -> NotificationContent:
    """Build the urgent one-off alert for a critical item."""
    base = build_expiry_notification(entry, UrgencyLevel.CRITICAL, badge_counts)
    name = entry.item.name
    return NotificationContent(
        title=f"🚨 URGENT: {name}",
        body=f"{name} has expired or expires today! Take immediate action.",
        category=base.category,
        data=base.data,
        badge=base.badge,
    )


def build_meal_suggestion_notification(
    suggestion: MealSuggestion, slot: MealSlot
) -> NotificationContent:
    """Build the recipe suggestion for a meal slot."""
    shown = suggestion.items[:MEAL_ITEMS_IN_BODY]
    names = ", ".join(entry.item.name for entry in shown)
    return NotificationContent(
        title=f"🍽️ Recipe Suggestion: {suggestion.title}",
        body=f"Perfect for {slot.value}! Uses: {names}",
        category=MEAL_CATEGORY,
        data={
            "type": "meal-suggestion",
            "time_of_day": slot.value,
            "suggestion": suggestion.to_payload(),
        },
    )


def build_morning_reminder(
    critical_count: int, warning_count: int
) -> NotificationContent:
    """Build the daily summary of items needing attention."""
    return NotificationContent(
        title="🌅 Good Morning! Food Check",
        body=f"You have {critical_count} critical and {warning_count} warning "
        "items to review today.",
        category=PLANNING_CATEGORY,
        data={
            "type": "morning-reminder",
            "critical_count": critical_count,
            "warning_count": warning_count,
        },
    )


def build_evening_planning(
    expiring_tomorrow: Sequence[ClassifiedItem],
) -> NotificationContent:
    """Build the evening reminder for items expiring tomorrow."""
    count = len(expiring_tomorrow)
    return NotificationContent(
        title="🌙 Plan Tomorrow's Meals",
        body=f"{count} {'item' if count == 1 else 'items'} expire tomorrow. "
        "Plan your meals now!",
        category=PLANNING_CATEGORY,
        data={
            "type": "evening-planning",
            "item_ids": [entry.item.id for entry in expiring_tomorrow],
        },
    )


def _quantity_text(entry: ClassifiedItem) -> str:
    quantity = entry.item.quantity
    amount = f"{quantity:g}"
    if entry.item.unit:
        return f"{amount} {entry.item.unit}"
    return amount
