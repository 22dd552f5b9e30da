"""Urgency classification of inventory items by expiry date."""

import math
from collections.abc import Iterable
from datetime import date, datetime

from expiry_tracker.domain.inventory import InventoryItem
from expiry_tracker.domain.urgency import (
    ClassifiedItem,
    UrgencyInfo,
    UrgencyLevel,
    UrgencyPalette,
)

WARNING_MAX_DAYS = 2
SOON_MAX_DAYS = 7
SAFE_COUNTDOWN_MAX_DAYS = 30

NO_EXPIRY_PALETTE = UrgencyPalette(
    color="#6B7280",
    dot_color="#9CA3AF",
    background_color="#F9FAFB",
    border_color="#E5E7EB",
)

PALETTES: dict[UrgencyLevel, UrgencyPalette] = {
    UrgencyLevel.CRITICAL: UrgencyPalette(
        color="#DC2626",
        dot_color="#EF4444",
        background_color="#FEF2F2",
        border_color="#FCA5A5",
    ),
    UrgencyLevel.WARNING: UrgencyPalette(
        color="#EA580C",
        dot_color="#F97316",
        background_color="#FFF7ED",
        border_color="#FED7AA",
    ),
    UrgencyLevel.SOON: UrgencyPalette(
        color="#FACC15",
        dot_color="#EAB308",
        background_color="#FEFCE8",
        border_color="#FEF08A",
    ),
    UrgencyLevel.SAFE: UrgencyPalette(
        color="#16A34A",
        dot_color="#22C55E",
        background_color="#F0FDF4",
        border_color="#BBF7D0",
    ),
}


def to_day(value: date | datetime) -> date:
    """Truncate a datetime to its calendar date in its own timezone."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(expiry_date: date, now: date | datetime) -> int:
    """Return whole calendar days from today until the expiry date."""
    return (expiry_date - to_day(now)).days


def classify_urgency(expiry_date: date | None, now: date | datetime) -> UrgencyInfo:
    """Map an expiry date to its urgency tier relative to ``now``."""
    if expiry_date is None:
        return UrgencyInfo(
            level=UrgencyLevel.SAFE,
            days_until_expiry=None,
            palette=NO_EXPIRY_PALETTE,
            description="No expiry date set",
        )

    days = days_until(expiry_date, now)
    if days < 0:
        ago = abs(days)
        return _info(UrgencyLevel.CRITICAL, days, f"Expired {ago} {_days(ago)} ago")
    if days == 0:
        return _info(UrgencyLevel.CRITICAL, days, "Expires today")
    if days <= WARNING_MAX_DAYS:
        return _info(UrgencyLevel.WARNING, days, f"Expires in {days} {_days(days)}")
    if days <= SOON_MAX_DAYS:
        return _info(UrgencyLevel.SOON, days, f"Expires in {days} days")
    description = (
        f"Expires in {days} days" if days <= SAFE_COUNTDOWN_MAX_DAYS else "Fresh"
    )
    return _info(UrgencyLevel.SAFE, days, description)


def classify_item(item: InventoryItem, now: date | datetime) -> ClassifiedItem:
    """Pair an item with its urgency."""
    return ClassifiedItem(item=item, urgency=classify_urgency(item.expiry_date, now))


def with_urgency(
    items: Iterable[InventoryItem], now: date | datetime
) -> list[ClassifiedItem]:
    """Classify every item."""
    return [classify_item(item, now) for item in items]


def filter_by_urgency(
    items: Iterable[InventoryItem], level: UrgencyLevel, now: date | datetime
) -> list[InventoryItem]:
    """Return the items whose tier equals ``level``."""
    return [
        item
        for item in items
        if classify_urgency(item.expiry_date, now).level == level
    ]


def sort_by_urgency(
    items: Iterable[InventoryItem], now: date | datetime
) -> list[InventoryItem]:
    """Return items ordered most urgent first, then by days left."""

    def sort_key(item: InventoryItem) -> tuple[int, float]:
        urgency = classify_urgency(item.expiry_date, now)
        days = urgency.days_until_expiry
        return urgency.level.rank, math.inf if days is None else days

    return sorted(items, key=sort_key)


def dominant_urgency_dot(
    items: Iterable[InventoryItem], now: date | datetime
) -> tuple[UrgencyLevel, str] | None:
    """Return the single calendar dot (tier and color) for a day's items."""
    levels = {classify_urgency(item.expiry_date, now).level for item in items}
    for level in UrgencyLevel:
        if level in levels:
            return level, PALETTES[level].dot_color
    return None


def format_expiry(expiry_date: date | None, today: date | datetime) -> str:
    """Return a compact relative expiry label."""
    if expiry_date is None:
        return ""
    days = days_until(expiry_date, today)
    if days < 0:
        return "Expired"
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days <= 6:  # noqa: PLR2004
        return f"{days} days"
    if days <= 28:  # noqa: PLR2004
        weeks = round(days / 7)
        return f"{weeks} week{'s' if weeks > 1 else ''}"
    if days < 365:  # noqa: PLR2004
        months = round(days / 30.44)
        if months >= 12:  # noqa: PLR2004
            return "1 year"
        return f"{months} month{'s' if months > 1 else ''}"
    years = round(days / 365.25)
    return f"{years} year{'s' if years > 1 else ''}"


def _info(level: UrgencyLevel, days: int, description: str) -> UrgencyInfo:
    return UrgencyInfo(
        level=level,
        days_until_expiry=days,
        palette=PALETTES[level],
        description=description,
    )


def _days(count: int) -> str:
    return "day" if count == 1 else "days"
