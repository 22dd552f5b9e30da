"""Supabase repository for inventory items."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from supabase import Client

from expiry_tracker.domain.inventory import (
    InventoryItem,
    parse_expiry_date,
    parse_location,
)
from expiry_tracker.services.inventory import InventoryRepository

_COLUMNS = (
    "id, name, quantity, unit, location, category, expiry_date, "
    "created_at, archived, consumed"
)


@dataclass
class SupabaseInventoryRepository(InventoryRepository):
    """Supabase-backed inventory repository."""

    client: Client

    def list_items(self, user_id: str) -> list[InventoryItem]:
        """Return all items for a user, newest first."""
        response = (
            self.client.table("food_items")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    def get_item(self, item_id: str) -> InventoryItem | None:
        """Return an item by id."""
        response = (
            self.client.table("food_items")
            .select(_COLUMNS)
            .eq("id", item_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def update_quantity(self, item_id: str, quantity: float) -> None:
        """Set the remaining quantity."""
        self._update(item_id, {"quantity": quantity})

    def update_expiry(self, item_id: str, expiry_date: date) -> None:
        """Set a new expiry date."""
        self._update(item_id, {"expiry_date": expiry_date.isoformat()})

    def mark_used(self, item_id: str) -> None:
        """Flag an item as consumed."""
        self._update(item_id, {"consumed": True})

    def delete_item(self, item_id: str) -> None:
        """Delete an item row."""
        self.client.table("food_items").delete().eq("id", item_id).execute()

    def _update(self, item_id: str, payload: dict[str, object]) -> None:
        response = (
            self.client.table("food_items")
            .update({**payload, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", item_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update food item")


def _parse_item(row: dict[str, object]) -> InventoryItem:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else datetime.now(tz=UTC)
    )
    return InventoryItem(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        quantity=float(row.get("quantity") or 0),
        unit=row.get("unit"),
        location=parse_location(row.get("location")),
        category=row.get("category"),
        expiry_date=parse_expiry_date(row.get("expiry_date")),
        created_at=created_at,
        archived=bool(row.get("archived")),
        consumed=bool(row.get("consumed")),
    )
