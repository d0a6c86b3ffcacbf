from datetime import datetime, timezone

from swipechef.models.entities import Ingredient, MealType, Recipe
from swipechef.store import RecipeTab, household_recipes, search_recipes, swipe_deck


def make_recipe(recipe_id: str, owner_id: str, title: str, meal_type: MealType = MealType.DINNER, **extra) -> Recipe:
    return Recipe(
        id=recipe_id,
        owner_id=owner_id,
        title=title,
        meal_type=meal_type,
        is_simple=True,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        **extra,
    )


MINE = make_recipe("m1", "me", "My Lasagne")
THEIRS_DINNER = make_recipe("t1", "them", "Their Curry")
THEIRS_BREAKFAST = make_recipe("t2", "them", "Their Oats", MealType.BREAKFAST)
THEIRS_LUNCH = make_recipe(
    "t3", "them", "Soup", MealType.LUNCH,
    description="Warming bowl",
    ingredients=[Ingredient(name="Butternut squash")],
)


def test_deck_skips_own_swiped_and_other_meal_types() -> None:
    recipes = [MINE, THEIRS_DINNER, THEIRS_BREAKFAST, THEIRS_LUNCH]

    assert swipe_deck(recipes, set(), "me").candidates == [THEIRS_DINNER, THEIRS_BREAKFAST, THEIRS_LUNCH]
    assert swipe_deck(recipes, {"t1"}, "me", MealType.DINNER).candidates == []
    assert swipe_deck(recipes, set(), "me", MealType.BREAKFAST).candidates == [THEIRS_BREAKFAST]


def test_deck_current_and_next() -> None:
    deck = swipe_deck([THEIRS_DINNER, THEIRS_BREAKFAST, THEIRS_LUNCH], {"t1"}, "me")
    assert deck.current == THEIRS_BREAKFAST
    assert deck.next == THEIRS_LUNCH
    assert deck.remaining == 2

    empty = swipe_deck([], set(), "me")
    assert empty.current is None and empty.next is None


def test_household_tabs() -> None:
    mine = [MINE, THEIRS_DINNER]
    liked = [THEIRS_DINNER, THEIRS_BREAKFAST]

    assert household_recipes(mine, liked, "me") == [MINE, THEIRS_DINNER, THEIRS_BREAKFAST]
    assert household_recipes(mine, liked, "me", RecipeTab.MINE) == [MINE]
    assert household_recipes(mine, liked, "me", RecipeTab.HOUSEHOLD) == [THEIRS_DINNER, THEIRS_BREAKFAST]
    assert household_recipes(mine, liked, "me", "favorites") == liked


def test_search_title_description_and_ingredients() -> None:
    recipes = [MINE, THEIRS_DINNER, THEIRS_LUNCH]

    assert search_recipes(recipes, "CURRY") == [THEIRS_DINNER]
    assert search_recipes(recipes, "warming") == [THEIRS_LUNCH]
    assert search_recipes(recipes, "squash") == [THEIRS_LUNCH]
    assert search_recipes(recipes, "squash", include_ingredients=False) == []
    assert search_recipes(recipes, "   ") == recipes
