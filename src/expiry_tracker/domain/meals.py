"""Domain models for meal suggestions."""

from dataclasses import dataclass, field
from enum import StrEnum

from expiry_tracker.domain.urgency import ClassifiedItem


class MealType(StrEnum):
    """Kind of meal a recipe is suited for."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class RecipeTemplate:
    """Recipe matched against inventory items."""

    id: str
    name: str
    meal_type: MealType
    required_ingredients: tuple[str, ...]
    optional_ingredients: tuple[str, ...]
    prep_minutes: int
    difficulty: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class MealSuggestion:
    """A recipe the current inventory can make."""

    id: str
    meal_type: MealType
    title: str
    items: list[ClassifiedItem]
    urgency_score: int
    prep_minutes: int
    nutrition_score: int
    waste_reduction: int
    tags: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-safe summary for notification data."""
        return {
            "id": self.id,
            "meal_type": self.meal_type.value,
            "title": self.title,
            "item_ids": [entry.item.id for entry in self.items],
            "urgency_score": self.urgency_score,
            "prep_minutes": self.prep_minutes,
        }
