"""Domain models for inventory items."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class StorageLocation(StrEnum):
    """Where an item is stored."""

    FRIDGE = "fridge"
    FREEZER = "freezer"
    SHELF = "shelf"
    PANTRY = "pantry"


@dataclass(frozen=True)
class InventoryItem:
    """One physical entry of a food item in storage."""

    id: str
    name: str
    quantity: float
    location: StorageLocation
    created_at: datetime
    unit: str | None = None
    category: str | None = None
    expiry_date: date | None = None
    archived: bool = False
    consumed: bool = False

    @property
    def is_active(self) -> bool:
        """Return True when the item still counts toward urgency checks."""
        return not (self.archived or self.consumed)


def parse_expiry_date(raw: object) -> date | None:
    """Parse a stored expiry value into a calendar date.

    Accepts plain ``YYYY-MM-DD`` strings and full ISO timestamps; the calendar
    date is taken as written so no timezone shift is applied.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_location(raw: object) -> StorageLocation:
    """Parse a stored location, defaulting unknown values to the fridge."""
    try:
        return StorageLocation(str(raw).strip().lower())
    except ValueError:
        return StorageLocation.FRIDGE
