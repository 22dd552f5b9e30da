"""Inventory item access used by reports and notification actions."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from expiry_tracker.domain.inventory import InventoryItem

_logger = logging.getLogger(__name__)


class InventoryRepository(Protocol):
    """Persistence interface for inventory items."""

    def list_items(self, user_id: str) -> list[InventoryItem]:
        """Return all inventory items for a user."""

    def get_item(self, item_id: str) -> InventoryItem | None:
        """Return an item by id, if present."""

    def update_quantity(self, item_id: str, quantity: float) -> None:
        """Set the remaining quantity of an item."""

    def update_expiry(self, item_id: str, expiry_date: date) -> None:
        """Set a new expiry date for an item."""

    def mark_used(self, item_id: str) -> None:
        """Flag an item as consumed."""

    def delete_item(self, item_id: str) -> None:
        """Remove an item."""


@dataclass
class InventoryService:
    """Application service for inventory mutations."""

    repository: InventoryRepository

    def list_items(self, user_id: str) -> list[InventoryItem]:
        """Return the user's items."""
        return self.repository.list_items(user_id)

    def list_active_items(self, user_id: str) -> list[InventoryItem]:
        """Return items that are neither archived nor consumed."""
        return [item for item in self.repository.list_items(user_id) if item.is_active]

    def mark_used(self, item_id: str) -> bool:
        """Mark an item as consumed. Returns False when the item is missing."""
        if self.repository.get_item(item_id) is None:
            _logger.warning("Mark used on missing item: item_id=%s", item_id)
            return False
        self.repository.mark_used(item_id)
        return True

    def use_quantity(self, item_id: str, quantity: float) -> InventoryItem | None:
        """Consume part of an item, marking it used when nothing remains."""
        item = self.repository.get_item(item_id)
        if item is None:
            return None
        remaining = max(item.quantity - quantity, 0.0)
        if remaining <= 0:
            self.repository.mark_used(item_id)
        else:
            self.repository.update_quantity(item_id, remaining)
        return self.repository.get_item(item_id)

    def extend_expiry(self, item_id: str, days: int, today: date) -> date | None:
        """Push an item's expiry back by ``days``.

        Items without an expiry date are extended from ``today``.
        """
        item = self.repository.get_item(item_id)
        if item is None:
            _logger.warning("Extend expiry on missing item: item_id=%s", item_id)
            return None
        base = item.expiry_date or today
        new_expiry = base + timedelta(days=days)
        self.repository.update_expiry(item_id, new_expiry)
        return new_expiry

    def delete_item(self, item_id: str) -> None:
        """Remove an item."""
        self.repository.delete_item(item_id)
