"""Waste report bucketing over inventory items."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from expiry_tracker.domain.inventory import InventoryItem
from expiry_tracker.domain.waste import (
    ALL_LOCATIONS,
    Bucket,
    DateRange,
    Granularity,
    WastedItemGroup,
    WasteFilters,
    WasteReport,
)
from expiry_tracker.services.inventory import InventoryRepository
from expiry_tracker.services.urgency import to_day

DECEMBER = 12
TOP_ITEMS_LIMIT = 5


@dataclass(frozen=True)
class _NormalizedFilters:
    location: str | None
    search: str
    categories: set[str] | None


def is_wasted(item: InventoryItem, today: date | datetime) -> bool:
    """Return True when an active item expired before today."""
    if item.expiry_date is None:
        return False
    return item.expiry_date < to_day(today) and item.is_active


def apply_filters(
    items: Iterable[InventoryItem], filters: WasteFilters | None = None
) -> list[InventoryItem]:
    """Filter items by location, name search and category whitelist."""
    normalized = _normalize_filters(filters)
    result = []
    for item in items:
        if normalized.location and item.location.value != normalized.location:
            continue
        if normalized.search and normalized.search not in item.name.lower():
            continue
        if normalized.categories is not None:
            category = (item.category or "").strip().lower()
            if category not in normalized.categories:
                continue
        result.append(item)
    return result


def get_period_range(granularity: Granularity, now: date | datetime) -> DateRange:
    """Return the half-open range of the current period."""
    today = to_day(now)
    if granularity == Granularity.WEEK:
        start = today - timedelta(days=today.weekday())
        return DateRange(start=start, end=start + timedelta(days=7))
    if granularity == Granularity.MONTH:
        start = today.replace(day=1)
        return DateRange(start=start, end=_next_month(start))
    start = date(today.year, 1, 1)
    return DateRange(start=start, end=date(today.year + 1, 1, 1))


def get_previous_range(date_range: DateRange, granularity: Granularity) -> DateRange:
    """Return the period immediately before ``date_range``."""
    if granularity == Granularity.WEEK:
        return DateRange(
            start=date_range.start - timedelta(days=7),
            end=date_range.end - timedelta(days=7),
        )
    if granularity == Granularity.MONTH:
        end = date_range.start.replace(day=1)
        start = (end - timedelta(days=1)).replace(day=1)
        return DateRange(start=start, end=end)
    year = date_range.start.year
    return DateRange(start=date(year - 1, 1, 1), end=date(year, 1, 1))


def get_buckets(granularity: Granularity, now: date | datetime) -> list[Bucket]:
    """Split the current period into daily or monthly buckets."""
    period = get_period_range(granularity, now)
    buckets: list[Bucket] = []
    if granularity in {Granularity.WEEK, Granularity.MONTH}:
        day = period.start
        while day < period.end:
            buckets.append(
                Bucket(
                    label=f"{day:%b} {day.day}",
                    start=day,
                    end=day + timedelta(days=1),
                )
            )
            day += timedelta(days=1)
        return buckets

    month = period.start
    while month < period.end:
        buckets.append(Bucket(label=f"{month:%b}", start=month, end=_next_month(month)))
        month = _next_month(month)
    return buckets


def bucketize_waste(
    items: Iterable[InventoryItem],
    granularity: Granularity,
    filters: WasteFilters | None,
    now: date | datetime,
) -> list[Bucket]:
    """Count wasted items per bucket of the current period."""
    today = to_day(now)
    buckets = get_buckets(granularity, today)
    period = get_period_range(granularity, today)
    for item in apply_filters(items, filters):
        if not is_wasted(item, today) or item.expiry_date is None:
            continue
        if not period.contains(item.expiry_date):
            continue
        for bucket in buckets:
            if bucket.start <= item.expiry_date < bucket.end:
                bucket.count += 1
                break
    return buckets


def count_wasted(
    items: Iterable[InventoryItem],
    date_range: DateRange,
    filters: WasteFilters | None,
    now: date | datetime,
) -> int:
    """Count wasted items whose expiry falls inside ``date_range``."""
    today = to_day(now)
    return sum(
        1
        for item in apply_filters(items, filters)
        if is_wasted(item, today)
        and item.expiry_date is not None
        and date_range.contains(item.expiry_date)
    )


def group_wasted_items_by_name(
    items: Iterable[InventoryItem],
    date_range: DateRange,
    filters: WasteFilters | None,
    now: date | datetime,
) -> list[WastedItemGroup]:
    """Aggregate wasted items in ``date_range`` by trimmed name."""
    today = to_day(now)
    groups: dict[str, WastedItemGroup] = {}
    for item in apply_filters(items, filters):
        if not is_wasted(item, today) or item.expiry_date is None:
            continue
        if not date_range.contains(item.expiry_date):
            continue
        name = item.name.strip()
        group = groups.setdefault(name, WastedItemGroup(name=name))
        group.total_qty += max(0.0, item.quantity or 0.0)
        group.occurrences += 1
        group.instance_ids.append(item.id)
    return sorted(
        groups.values(),
        key=lambda group: (-group.total_qty, -group.occurrences, group.name),
    )


def change_percent(current: int, previous: int) -> int:
    """Return the rounded percentage change against ``max(previous, 1)``."""
    denominator = max(previous, 1)
    return math.floor((current - previous) / denominator * 100 + 0.5)


@dataclass
class WasteReportService:
    """Service building waste reports in the user's timezone."""

    repository: InventoryRepository
    timezone_name: str = "UTC"

    def build_report(
        self,
        user_id: str,
        granularity: Granularity,
        filters: WasteFilters | None = None,
        now: datetime | None = None,
    ) -> WasteReport:
        """Return current buckets, previous-period total and top wasted items."""
        tz = ZoneInfo(self.timezone_name)
        local_now = (now or datetime.now(tz=tz)).astimezone(tz)
        today = local_now.date()
        items = self.repository.list_items(user_id)

        current_range = get_period_range(granularity, today)
        previous_range = get_previous_range(current_range, granularity)
        buckets = bucketize_waste(items, granularity, filters, today)
        total = sum(bucket.count for bucket in buckets)
        previous_total = count_wasted(items, previous_range, filters, today)
        top_items = group_wasted_items_by_name(items, current_range, filters, today)
        return WasteReport(
            granularity=granularity,
            range=current_range,
            buckets=buckets,
            total=total,
            previous_total=previous_total,
            change_percent=change_percent(total, previous_total),
            top_items=top_items[:TOP_ITEMS_LIMIT],
        )


def _normalize_filters(filters: WasteFilters | None) -> _NormalizedFilters:
    if filters is None:
        return _NormalizedFilters(location=None, search="", categories=None)
    location = str(filters.location or "").strip().lower()
    if location in {"", ALL_LOCATIONS.lower()}:
        location = None
    categories = None
    if filters.categories:
        categories = {category.strip().lower() for category in filters.categories}
    return _NormalizedFilters(
        location=location,
        search=(filters.search or "").strip().lower(),
        categories=categories,
    )


def _next_month(day: date) -> date:
    if day.month == DECEMBER:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)
