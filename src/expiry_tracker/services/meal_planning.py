"""Recipe-template matching that turns expiring items into meal suggestions."""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from expiry_tracker.domain.meals import MealSuggestion, MealType, RecipeTemplate
from expiry_tracker.domain.notifications import MealSlot
from expiry_tracker.domain.urgency import ClassifiedItem, UrgencyLevel

MIN_MATCH_SCORE = 30.0

RECIPE_TEMPLATES: tuple[RecipeTemplate, ...] = (
    RecipeTemplate(
        id="scrambled-eggs",
        name="Scrambled Eggs",
        meal_type=MealType.BREAKFAST,
        required_ingredients=("eggs",),
        optional_ingredients=("milk", "butter", "cheese", "herbs"),
        prep_minutes=10,
        difficulty="easy",
        tags=("protein", "quick", "vegetarian"),
    ),
    RecipeTemplate(
        id="fruit-yogurt-bowl",
        name="Fruit & Yogurt Bowl",
        meal_type=MealType.BREAKFAST,
        required_ingredients=("yogurt",),
        optional_ingredients=("fruit", "honey", "nuts", "granola"),
        prep_minutes=5,
        difficulty="easy",
        tags=("healthy", "quick", "light"),
    ),
    RecipeTemplate(
        id="toast-avocado",
        name="Avocado Toast",
        meal_type=MealType.BREAKFAST,
        required_ingredients=("bread", "avocado"),
        optional_ingredients=("lemon", "tomato", "herbs"),
        prep_minutes=8,
        difficulty="easy",
        tags=("healthy", "vegetarian"),
    ),
    RecipeTemplate(
        id="sandwich-classic",
        name="Classic Sandwich",
        meal_type=MealType.LUNCH,
        required_ingredients=("bread",),
        optional_ingredients=("meat", "cheese", "lettuce", "tomato", "mayo"),
        prep_minutes=5,
        difficulty="easy",
        tags=("quick", "portable", "filling"),
    ),
    RecipeTemplate(
        id="salad-mixed",
        name="Mixed Green Salad",
        meal_type=MealType.LUNCH,
        required_ingredients=("lettuce",),
        optional_ingredients=("tomato", "cucumber", "carrots", "cheese", "nuts"),
        prep_minutes=10,
        difficulty="easy",
        tags=("healthy", "light", "vegetarian"),
    ),
    RecipeTemplate(
        id="pasta-simple",
        name="Simple Pasta",
        meal_type=MealType.LUNCH,
        required_ingredients=("pasta",),
        optional_ingredients=("tomato", "cheese", "herbs", "vegetables"),
        prep_minutes=15,
        difficulty="easy",
        tags=("filling", "vegetarian", "comfort"),
    ),
    RecipeTemplate(
        id="stir-fry-vegetable",
        name="Vegetable Stir Fry",
        meal_type=MealType.DINNER,
        required_ingredients=("vegetables",),
        optional_ingredients=("rice", "meat", "tofu", "ginger", "sesame"),
        prep_minutes=20,
        difficulty="medium",
        tags=("healthy", "versatile", "one-pan"),
    ),
    RecipeTemplate(
        id="chicken-rice",
        name="Chicken & Rice",
        meal_type=MealType.DINNER,
        required_ingredients=("chicken", "rice"),
        optional_ingredients=("vegetables", "broth", "herbs"),
        prep_minutes=30,
        difficulty="medium",
        tags=("protein", "filling", "comfort"),
    ),
    RecipeTemplate(
        id="soup-vegetable",
        name="Vegetable Soup",
        meal_type=MealType.DINNER,
        required_ingredients=("vegetables",),
        optional_ingredients=("broth", "beans", "pasta", "meat"),
        prep_minutes=25,
        difficulty="medium",
        tags=("healthy", "warming", "batch-cook"),
    ),
    RecipeTemplate(
        id="fruit-snack",
        name="Fresh Fruit",
        meal_type=MealType.SNACK,
        required_ingredients=("fruit",),
        optional_ingredients=("nuts", "yogurt", "honey"),
        prep_minutes=2,
        difficulty="easy",
        tags=("healthy", "quick", "natural"),
    ),
    RecipeTemplate(
        id="cheese-crackers",
        name="Cheese & Crackers",
        meal_type=MealType.SNACK,
        required_ingredients=("cheese",),
        optional_ingredients=("crackers", "fruit", "nuts"),
        prep_minutes=3,
        difficulty="easy",
        tags=("protein", "quick"),
    ),
)

FOOD_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "eggs": ("eggs", "egg"),
    "meat": ("chicken", "beef", "pork", "turkey", "ham", "bacon"),
    "fish": ("fish", "salmon", "tuna", "cod"),
    "cheese": ("cheese", "cheddar", "mozzarella", "parmesan"),
    "yogurt": ("yogurt", "greek yogurt"),
    "milk": ("milk", "dairy"),
    "tofu": ("tofu", "tempeh"),
    "beans": ("beans", "lentils", "chickpeas"),
    "vegetables": (
        "lettuce",
        "spinach",
        "kale",
        "broccoli",
        "carrots",
        "tomato",
        "cucumber",
        "bell pepper",
        "onion",
        "garlic",
        "mushroom",
    ),
    "lettuce": ("lettuce", "greens", "spinach", "arugula"),
    "tomato": ("tomato", "tomatoes"),
    "carrots": ("carrots", "carrot"),
    "cucumber": ("cucumber",),
    "fruit": (
        "apple",
        "banana",
        "orange",
        "berry",
        "strawberry",
        "blueberry",
        "grape",
        "avocado",
    ),
    "avocado": ("avocado",),
    "bread": ("bread", "toast", "baguette", "rolls"),
    "pasta": ("pasta", "noodles", "spaghetti", "macaroni"),
    "rice": ("rice", "brown rice", "wild rice"),
    "oil": ("oil", "olive oil", "vegetable oil"),
    "herbs": ("herbs", "basil", "parsley", "cilantro", "oregano"),
    "spices": ("spices", "salt", "pepper", "paprika"),
    "nuts": ("nuts", "almonds", "walnuts", "peanuts"),
    "honey": ("honey", "maple syrup"),
    "butter": ("butter", "margarine"),
}

_URGENCY_WEIGHTS = {
    UrgencyLevel.CRITICAL: 4,
    UrgencyLevel.WARNING: 3,
    UrgencyLevel.SOON: 2,
    UrgencyLevel.SAFE: 1,
}

_NUTRITION_GROUPS: tuple[tuple[frozenset[str], int], ...] = (
    (frozenset({"eggs", "meat", "fish", "cheese", "yogurt", "tofu", "beans"}), 25),
    (frozenset({"vegetables", "lettuce", "tomato", "carrots"}), 25),
    (frozenset({"fruit", "avocado"}), 20),
    (frozenset({"bread", "pasta", "rice"}), 20),
    (frozenset({"herbs", "spices"}), 10),
)

SLOT_MEAL_TYPES: dict[MealSlot, MealType] = {
    MealSlot.MORNING: MealType.BREAKFAST,
    MealSlot.MIDDAY: MealType.LUNCH,
    MealSlot.EVENING: MealType.DINNER,
}


class MealSuggester(Protocol):
    """Source of meal suggestions for notifications."""

    def suggest_meals(
        self, items: Sequence[ClassifiedItem], max_results: int
    ) -> list[MealSuggestion]:
        """Return up to ``max_results`` suggestions, best first."""

    def best_meal_for_time_of_day(
        self, items: Sequence[ClassifiedItem], slot: MealSlot
    ) -> MealSuggestion | None:
        """Return the best suggestion for a meal slot, if any."""


@dataclass
class MealPlanner:
    """Matches classified items against recipe templates."""

    templates: Sequence[RecipeTemplate] = field(
        default_factory=lambda: RECIPE_TEMPLATES
    )

    def generate(self, items: Sequence[ClassifiedItem]) -> list[MealSuggestion]:
        """Return every suggestion the items support, most urgent first."""
        suggestions = []
        for recipe in self.templates:
            matched, score, has_required = _match_recipe(recipe, items)
            if not has_required or score < MIN_MATCH_SCORE:
                continue
            suggestions.append(
                MealSuggestion(
                    id=recipe.id,
                    meal_type=recipe.meal_type,
                    title=recipe.name,
                    items=matched,
                    urgency_score=_urgency_score(matched),
                    prep_minutes=recipe.prep_minutes,
                    nutrition_score=_nutrition_score(matched),
                    waste_reduction=_waste_reduction(matched, items),
                    tags=list(recipe.tags),
                )
            )
        return _rank(suggestions)

    def suggest_meals(
        self, items: Sequence[ClassifiedItem], max_results: int
    ) -> list[MealSuggestion]:
        """Return the top suggestions."""
        return self.generate(items)[:max_results]

    def best_meal_for_time_of_day(
        self, items: Sequence[ClassifiedItem], slot: MealSlot
    ) -> MealSuggestion | None:
        """Return the top suggestion matching the slot's meal type."""
        meal_type = SLOT_MEAL_TYPES[slot]
        for suggestion in self.generate(items):
            if suggestion.meal_type == meal_type:
                return suggestion
        return None


def normalize_ingredient_name(name: str) -> str:
    """Lower-case and strip punctuation for ingredient matching."""
    cleaned = re.sub(r"[^a-z0-9\s]", "", name.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def matches_ingredient(item_name: str, ingredient: str) -> bool:
    """Return True when an item name satisfies a recipe ingredient."""
    food = normalize_ingredient_name(item_name)
    wanted = normalize_ingredient_name(ingredient)
    if not food or not wanted:
        return False
    if wanted in food or food in wanted:
        return True
    return any(
        normalize_ingredient_name(variant) in food
        for variant in FOOD_CATEGORY_MAP.get(wanted, ())
    )


def _match_recipe(
    recipe: RecipeTemplate, items: Sequence[ClassifiedItem]
) -> tuple[list[ClassifiedItem], float, bool]:
    matched: list[ClassifiedItem] = []
    required_matches = 0
    for ingredient in recipe.required_ingredients:
        found = _find(items, ingredient, matched)
        if found is not None:
            matched.append(found)
            required_matches += 1
    for ingredient in recipe.optional_ingredients:
        found = _find(items, ingredient, matched)
        if found is not None:
            matched.append(found)

    possible = len(recipe.required_ingredients) + len(recipe.optional_ingredients)
    score = len(matched) / possible * 100 if possible else 0.0
    return matched, score, required_matches == len(recipe.required_ingredients)


def _find(
    items: Sequence[ClassifiedItem], ingredient: str, taken: list[ClassifiedItem]
) -> ClassifiedItem | None:
    for entry in items:
        if any(entry is other for other in taken):
            continue
        if matches_ingredient(entry.item.name, ingredient):
            return entry
    return None


def _urgency_score(items: Sequence[ClassifiedItem]) -> int:
    if not items:
        return 0
    total = sum(_URGENCY_WEIGHTS[entry.urgency.level] for entry in items)
    return round(total / len(items) * 25)


def _nutrition_score(items: Sequence[ClassifiedItem]) -> int:
    categories = set()
    for entry in items:
        name = normalize_ingredient_name(entry.item.name)
        for category, variants in FOOD_CATEGORY_MAP.items():
            if any(variant in name for variant in variants):
                categories.add(category)
    score = sum(points for group, points in _NUTRITION_GROUPS if group & categories)
    return min(score, 100)


def _waste_reduction(
    used: Sequence[ClassifiedItem], all_items: Sequence[ClassifiedItem]
) -> int:
    urgent = {UrgencyLevel.CRITICAL, UrgencyLevel.WARNING}
    urgent_total = sum(1 for entry in all_items if entry.urgency.level in urgent)
    if urgent_total == 0:
        return 0
    urgent_used = sum(1 for entry in used if entry.urgency.level in urgent)
    return round(urgent_used / urgent_total * 100)


def _rank(suggestions: list[MealSuggestion]) -> list[MealSuggestion]:
    return sorted(
        suggestions, key=lambda s: (-s.urgency_score, -s.waste_reduction, s.title)
    )
