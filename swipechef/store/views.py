"""Pure derivations over the session store's collections."""

from dataclasses import dataclass
from typing import Iterable, Optional
import enum

from swipechef.models.entities import MealType, Recipe


class RecipeTab(str, enum.Enum):
    ALL = "all"
    MINE = "mine"
    HOUSEHOLD = "household"
    FAVORITES = "favorites"


@dataclass
class SwipeDeck:
    """Remaining swipe candidates; the UI shows `current` on top of `next`."""
    candidates: list[Recipe]

    @property
    def current(self) -> Optional[Recipe]:
        return self.candidates[0] if self.candidates else None

    @property
    def next(self) -> Optional[Recipe]:
        return self.candidates[1] if len(self.candidates) > 1 else None

    @property
    def remaining(self) -> int:
        return len(self.candidates)


def swipe_deck(
    recipes: Iterable[Recipe],
    swiped_ids: set[str],
    viewer_id: Optional[str],
    meal_type: MealType = MealType.ALL,
) -> SwipeDeck:
    """
    Recipes not swiped yet, not the viewer's own, matching the meal type filter.

    The deck only holds what `recipes` holds. Fed the session store's own
    recipes it is empty outside sample mode; callers wanting a discovery
    deck must pass other users' recipes in.
    """
    meal_type = MealType(meal_type)
    return SwipeDeck(candidates=[
        recipe for recipe in recipes
        if recipe.id not in swiped_ids
        and (viewer_id is None or recipe.owner_id != viewer_id)
        and (meal_type == MealType.ALL or recipe.meal_type == meal_type)
    ])


def unique_recipes(*collections: Iterable[Recipe]) -> list[Recipe]:
    """Concatenate, keeping the first recipe seen for each id."""
    seen = set()
    result = []
    for collection in collections:
        for recipe in collection:
            if recipe.id not in seen:
                seen.add(recipe.id)
                result.append(recipe)
    return result


def household_recipes(
    recipes: Iterable[Recipe],
    liked: Iterable[Recipe],
    viewer_id: Optional[str],
    tab: RecipeTab = RecipeTab.ALL,
) -> list[Recipe]:
    liked = list(liked)
    union = unique_recipes(recipes, liked)
    tab = RecipeTab(tab)
    if tab == RecipeTab.MINE:
        return [r for r in union if r.owner_id == viewer_id]
    if tab == RecipeTab.HOUSEHOLD:
        return [r for r in union if r.owner_id != viewer_id]
    if tab == RecipeTab.FAVORITES:
        return unique_recipes(liked)
    return union


def search_recipes(recipes: Iterable[Recipe], query: str, include_ingredients: bool = True) -> list[Recipe]:
    """Case-insensitive substring search on title, description and ingredient names."""
    recipes = list(recipes)
    needle = query.strip().lower()
    if not needle:
        return recipes

    def matches(recipe: Recipe) -> bool:
        if needle in recipe.title.lower() or needle in recipe.description.lower():
            return True
        return include_ingredients and any(needle in ing.name.lower() for ing in recipe.ingredients)

    return [r for r in recipes if matches(r)]
