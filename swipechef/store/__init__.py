"""Per-session client state: the store, its meal-plan index and derived views."""

from .meal_plan_index import DayPlan, MealPlanIndex, week_bounds
from .recipe_store import RecipeStore
from .views import RecipeTab, SwipeDeck, household_recipes, search_recipes, swipe_deck

__all__ = [
    "DayPlan",
    "MealPlanIndex",
    "week_bounds",
    "RecipeStore",
    "RecipeTab",
    "SwipeDeck",
    "household_recipes",
    "search_recipes",
    "swipe_deck",
]
