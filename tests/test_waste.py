"""Tests for waste bucketing and reports."""

from datetime import UTC, date, datetime, timedelta

from expiry_tracker.domain.inventory import StorageLocation
from expiry_tracker.domain.waste import DateRange, Granularity, WasteFilters
from expiry_tracker.services.waste import (
    WasteReportService,
    apply_filters,
    bucketize_waste,
    change_percent,
    count_wasted,
    get_buckets,
    get_period_range,
    get_previous_range,
    group_wasted_items_by_name,
    is_wasted,
)
from tests.conftest import OWNER_ID, InMemoryInventoryRepository, make_item

MONDAY = date(2026, 10, 19)
FRIDAY = date(2026, 10, 23)


def test_is_wasted_requires_expiry_date() -> None:
    item = make_item("Rice", None)

    assert not is_wasted(item, date(2100, 1, 1))


def test_is_wasted_ignores_consumed_items() -> None:
    expired = make_item("Milk", MONDAY)
    consumed = make_item("Milk", MONDAY, consumed=True)

    assert is_wasted(expired, FRIDAY)
    assert not is_wasted(consumed, FRIDAY)
    assert not is_wasted(expired, MONDAY)


def test_week_range_starts_on_monday() -> None:
    period = get_period_range(Granularity.WEEK, FRIDAY)

    assert period == DateRange(start=MONDAY, end=date(2026, 10, 26))
    assert get_previous_range(period, Granularity.WEEK) == DateRange(
        start=date(2026, 10, 12), end=MONDAY
    )


def test_month_and_year_ranges() -> None:
    month = get_period_range(Granularity.MONTH, FRIDAY)
    year = get_period_range(Granularity.YEAR, FRIDAY)

    assert month == DateRange(start=date(2026, 10, 1), end=date(2026, 11, 1))
    assert get_previous_range(month, Granularity.MONTH) == DateRange(
        start=date(2026, 9, 1), end=date(2026, 10, 1)
    )
    assert year == DateRange(start=date(2026, 1, 1), end=date(2027, 1, 1))
    assert get_previous_range(year, Granularity.YEAR) == DateRange(
        start=date(2025, 1, 1), end=date(2026, 1, 1)
    )


def test_december_month_range_rolls_over() -> None:
    period = get_period_range(Granularity.MONTH, date(2026, 12, 15))

    assert period.end == date(2027, 1, 1)


def test_bucket_labels() -> None:
    week = get_buckets(Granularity.WEEK, FRIDAY)
    month = get_buckets(Granularity.MONTH, FRIDAY)
    year = get_buckets(Granularity.YEAR, FRIDAY)

    assert [bucket.label for bucket in week] == [
        "Oct 19",
        "Oct 20",
        "Oct 21",
        "Oct 22",
        "Oct 23",
        "Oct 24",
        "Oct 25",
    ]
    assert len(month) == 31
    assert month[0].label == "Oct 1"
    assert [bucket.label for bucket in year][:3] == ["Jan", "Feb", "Mar"]
    assert len(year) == 12


def test_wednesday_item_lands_in_wednesday_bucket() -> None:
    wednesday = MONDAY + timedelta(days=2)
    items = [make_item("Spinach", wednesday)]

    buckets = bucketize_waste(items, Granularity.WEEK, None, FRIDAY)

    assert [bucket.count for bucket in buckets] == [0, 0, 1, 0, 0, 0, 0]


def test_bucketize_never_double_counts() -> None:
    items = [
        make_item("Milk", MONDAY),
        make_item("Milk", MONDAY),
        make_item("Eggs", MONDAY + timedelta(days=3)),
        make_item("Old", MONDAY - timedelta(days=3)),
        make_item("Fresh", FRIDAY + timedelta(days=1)),
        make_item("Rice", None),
        make_item("Used", MONDAY, consumed=True),
    ]

    buckets = bucketize_waste(items, Granularity.WEEK, None, FRIDAY)
    period = get_period_range(Granularity.WEEK, FRIDAY)

    assert sum(bucket.count for bucket in buckets) == 3
    assert sum(bucket.count for bucket in buckets) == count_wasted(
        items, period, None, FRIDAY
    )


def test_bucketize_empty_list() -> None:
    buckets = bucketize_waste([], Granularity.YEAR, None, FRIDAY)

    assert len(buckets) == 12
    assert all(bucket.count == 0 for bucket in buckets)


def test_search_matching_nothing_gives_empty_buckets() -> None:
    items = [make_item("Milk", MONDAY), make_item("Eggs", MONDAY)]

    filters = WasteFilters(search="zzz")

    buckets = bucketize_waste(items, Granularity.WEEK, filters, FRIDAY)

    assert len(buckets) == 7
    assert all(bucket.count == 0 for bucket in buckets)


def test_apply_filters() -> None:
    milk = make_item("Whole Milk", MONDAY, category="dairy")
    peas = make_item(
        "Peas", MONDAY, location=StorageLocation.FREEZER, category="Vegetables"
    )
    items = [milk, peas]

    assert apply_filters(items, WasteFilters(location="All")) == items
    assert apply_filters(items, WasteFilters(location="Freezer")) == [peas]
    assert apply_filters(items, WasteFilters(search="  MILK ")) == [milk]
    assert apply_filters(items, WasteFilters(categories=[" Dairy "])) == [milk]
    assert apply_filters(items, None) == items


def test_change_percent() -> None:
    assert change_percent(0, 0) == 0
    assert change_percent(10, 0) == 1000
    assert change_percent(5, 10) == -50
    assert change_percent(3, 2) == 50


def test_group_wasted_items_sorting() -> None:
    period = get_period_range(Granularity.WEEK, FRIDAY)
    items = [
        make_item("Banana", MONDAY, item_id="b1"),
        make_item("Apple", MONDAY, item_id="a1"),
        make_item(" Milk ", MONDAY, quantity=2, item_id="m1"),
        make_item("Milk", MONDAY + timedelta(days=1), quantity=1, item_id="m2"),
    ]

    groups = group_wasted_items_by_name(items, period, None, FRIDAY)

    assert [group.name for group in groups] == ["Milk", "Apple", "Banana"]
    assert groups[0].total_qty == 3
    assert groups[0].occurrences == 2
    assert groups[0].instance_ids == ["m1", "m2"]


def test_waste_report_service() -> None:
    repository = InMemoryInventoryRepository()
    repository.add(make_item("Milk", MONDAY + timedelta(days=1)))
    repository.add(make_item("Spinach", MONDAY + timedelta(days=2)))
    repository.add(make_item("Bread", MONDAY - timedelta(days=5)))
    repository.add(make_item("Other", MONDAY, quantity=1), user_id="someone-else")
    service = WasteReportService(repository, timezone_name="UTC")

    report = service.build_report(
        OWNER_ID,
        Granularity.WEEK,
        now=datetime(2026, 10, 23, 12, 0, tzinfo=UTC),
    )

    assert report.range.start == MONDAY
    assert report.total == 2
    assert report.previous_total == 1
    assert report.change_percent == 100
    assert [group.name for group in report.top_items] == ["Milk", "Spinach"]


def test_waste_report_uses_configured_timezone() -> None:
    repository = InMemoryInventoryRepository()
    service = WasteReportService(repository, timezone_name="Pacific/Auckland")

    # Sunday evening UTC is already Monday in Auckland.
    report = service.build_report(
        OWNER_ID,
        Granularity.WEEK,
        now=datetime(2026, 10, 18, 20, 0, tzinfo=UTC),
    )

    assert report.range.start == MONDAY
