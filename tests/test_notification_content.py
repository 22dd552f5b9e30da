"""Tests for notification content builders."""

from datetime import date, timedelta

from expiry_tracker.domain.notifications import MealSlot, NotificationAction
from expiry_tracker.domain.urgency import UrgencyLevel
from expiry_tracker.services.meal_planning import MealPlanner
from expiry_tracker.services.notification_content import (
    EXPIRY_CATEGORY,
    MEAL_CATEGORY,
    NOTIFICATION_CATEGORIES,
    PLANNING_CATEGORY,
    badge_count,
    build_critical_alert,
    build_evening_planning,
    build_expiry_notification,
    build_follow_up_notification,
    build_meal_suggestion_notification,
    build_morning_reminder,
)
from expiry_tracker.services.urgency import classify_item, with_urgency
from tests.conftest import make_item

TODAY = date(2026, 10, 19)


def test_build_expiry_notification_for_critical_item() -> None:
    item = make_item("Milk", TODAY, quantity=2, unit="L", item_id="milk-1")
    entry = classify_item(item, TODAY)

    content = build_expiry_notification(entry, UrgencyLevel.CRITICAL)

    assert content.title == "🚨 Milk expires today or has expired"
    assert content.body == "2 L in fridge. Expires today"
    assert content.category == EXPIRY_CATEGORY
    assert content.data == {
        "item_id": "milk-1",
        "urgency_level": "critical",
        "type": "expiry",
    }
    assert content.badge == 3


def test_build_expiry_notification_without_unit() -> None:
    item = make_item("Eggs", TODAY + timedelta(days=2), quantity=1.5)
    entry = classify_item(item, TODAY)

    content = build_expiry_notification(entry, UrgencyLevel.WARNING)

    assert content.title == "⚠️ Eggs expires in 1-2 days"
    assert content.body == "1.5 in fridge. Expires in 2 days"
    assert content.badge == 2


def test_badge_counts_are_configurable() -> None:
    custom = {UrgencyLevel.SOON: 7}

    assert badge_count(UrgencyLevel.SOON) == 1
    assert badge_count(UrgencyLevel.SAFE) == 0
    assert badge_count(UrgencyLevel.SOON, custom) == 7
    assert badge_count(UrgencyLevel.CRITICAL, custom) == 0


def test_follow_up_and_critical_alert() -> None:
    entry = classify_item(make_item("Fish", TODAY, item_id="fish-1"), TODAY)

    follow_up = build_follow_up_notification(entry)
    alert = build_critical_alert(entry)

    assert follow_up.title == "⚠️ Still Expiring: Fish"
    assert follow_up.data["follow_up"] is True
    assert follow_up.data["item_id"] == "fish-1"
    assert alert.title == "🚨 URGENT: Fish"
    assert alert.category == EXPIRY_CATEGORY
    assert alert.badge == 3


def test_build_meal_suggestion_notification() -> None:
    entries = with_urgency(
        [make_item("Eggs", TODAY), make_item("Milk", TODAY + timedelta(days=1))],
        TODAY,
    )
    suggestion = MealPlanner().best_meal_for_time_of_day(entries, MealSlot.MORNING)
    assert suggestion is not None

    content = build_meal_suggestion_notification(suggestion, MealSlot.MORNING)

    assert content.title == "🍽️ Recipe Suggestion: Scrambled Eggs"
    assert content.body == "Perfect for morning! Uses: Eggs, Milk"
    assert content.category == MEAL_CATEGORY
    assert content.data["type"] == "meal-suggestion"
    assert content.data["suggestion"]["id"] == "scrambled-eggs"


def test_planning_reminders() -> None:
    morning = build_morning_reminder(2, 1)
    entries = with_urgency([make_item("Yogurt", TODAY + timedelta(days=1))], TODAY)
    evening = build_evening_planning(entries)

    assert morning.category == PLANNING_CATEGORY
    assert morning.body == "You have 2 critical and 1 warning items to review today."
    assert evening.category == PLANNING_CATEGORY
    assert evening.body.startswith("1 item expire tomorrow")
    assert evening.data["item_ids"] == [entries[0].item.id]


def test_notification_categories() -> None:
    actions = {
        category.id: [button.id for button in category.actions]
        for category in NOTIFICATION_CATEGORIES
    }

    assert actions == {
        EXPIRY_CATEGORY: [
            NotificationAction.MARK_USED,
            NotificationAction.EXTEND_EXPIRY,
            NotificationAction.VIEW_RECIPES,
        ],
        MEAL_CATEGORY: [NotificationAction.VIEW_RECIPE, NotificationAction.DISMISS],
        PLANNING_CATEGORY: [
            NotificationAction.OPEN_CALENDAR,
            NotificationAction.VIEW_EXPIRING,
        ],
    }
