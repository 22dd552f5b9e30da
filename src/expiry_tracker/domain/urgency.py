"""Domain models for expiry urgency."""

from dataclasses import dataclass
from enum import StrEnum

from expiry_tracker.domain.inventory import InventoryItem


class UrgencyLevel(StrEnum):
    """Discrete urgency tiers, most urgent first."""

    CRITICAL = "critical"
    WARNING = "warning"
    SOON = "soon"
    SAFE = "safe"

    @property
    def rank(self) -> int:
        """Return the sort rank of the tier (0 is most urgent)."""
        return list(UrgencyLevel).index(self)


@dataclass(frozen=True)
class UrgencyPalette:
    """Presentation colors attached to a tier."""

    color: str
    dot_color: str
    background_color: str
    border_color: str


@dataclass(frozen=True)
class UrgencyInfo:
    """Derived urgency of an item at one evaluation instant."""

    level: UrgencyLevel
    days_until_expiry: int | None
    palette: UrgencyPalette
    description: str


@dataclass(frozen=True)
class ClassifiedItem:
    """Inventory item paired with its urgency."""

    item: InventoryItem
    urgency: UrgencyInfo
