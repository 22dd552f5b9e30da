"""Domain models for waste reporting."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from expiry_tracker.domain.inventory import StorageLocation

ALL_LOCATIONS = "All"


class Granularity(StrEnum):
    """Reporting period size."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class DateRange:
    """Half-open calendar interval ``[start, end)``."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        """Return True when the day falls inside the range."""
        return self.start <= day < self.end


@dataclass
class Bucket:
    """One time slice of a waste chart."""

    label: str
    start: date
    end: date
    count: int = 0


@dataclass(frozen=True)
class WasteFilters:
    """Filters applied before bucketing."""

    location: StorageLocation | str | None = None
    search: str | None = None
    categories: list[str] | None = None


@dataclass
class WastedItemGroup:
    """Wasted items aggregated by name."""

    name: str
    total_qty: float = 0.0
    occurrences: int = 0
    instance_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WasteReport:
    """Waste chart data for the current period with comparison."""

    granularity: Granularity
    range: DateRange
    buckets: list[Bucket]
    total: int
    previous_total: int
    change_percent: int
    top_items: list[WastedItemGroup]
