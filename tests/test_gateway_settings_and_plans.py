from datetime import date

import pytest

from swipechef.errors import NotFound, ValidationFailed
from swipechef.models.entities import MealSlot, UserSettingsUpdate


# ============================================================
# Settings
# ============================================================

@pytest.mark.asyncio
async def test_settings_are_created_on_first_read(alice_gw) -> None:
    first = (await alice_gw.settings.get_user_settings()).data
    second = (await alice_gw.settings.get_user_settings()).data

    assert first.visible_slots == list(MealSlot)
    assert first.id == second.id


def test_update_only_carries_given_settings() -> None:
    assert UserSettingsUpdate(show_snack=False).changes() == {"show_snack": False}
    assert UserSettingsUpdate().changes() == {}


@pytest.mark.asyncio
async def test_last_visible_slot_cannot_be_hidden(alice_gw) -> None:
    hidden = await alice_gw.settings.update_user_settings(
        UserSettingsUpdate(show_breakfast=False, show_lunch=False, show_snack=False)
    )
    assert hidden.data.visible_slots == [MealSlot.DINNER]

    toggled = await alice_gw.settings.toggle_meal_slot(MealSlot.DINNER)
    updated = await alice_gw.settings.update_user_settings(UserSettingsUpdate(show_dinner=False))

    assert isinstance(toggled.error, ValidationFailed)
    assert isinstance(updated.error, ValidationFailed)
    current = (await alice_gw.settings.get_user_settings()).data
    assert (current.show_breakfast, current.show_lunch, current.show_dinner, current.show_snack) == (
        False, False, True, False,
    )


@pytest.mark.asyncio
async def test_toggle_flips_one_slot(alice_gw) -> None:
    result = await alice_gw.settings.toggle_meal_slot(MealSlot.SNACK)
    assert result.data.show_snack is False
    assert result.data.show_dinner is True


# ============================================================
# Meal plans
# ============================================================

@pytest.mark.asyncio
async def test_upsert_replaces_slot(alice_gw, make_form) -> None:
    r1 = (await alice_gw.recipes.create_recipe(make_form("Oats"))).data
    r2 = (await alice_gw.recipes.create_recipe(make_form("Pancakes"))).data
    day = date(2024, 6, 1)

    await alice_gw.meal_plans.upsert_meal_plan(day, MealSlot.BREAKFAST, r1.id)
    second = await alice_gw.meal_plans.upsert_meal_plan(day, MealSlot.BREAKFAST, r2.id)

    plans = (await alice_gw.meal_plans.list_meal_plans()).data
    assert second.ok
    assert [(p.date, p.meal_slot, p.recipe.id) for p in plans] == [(day, MealSlot.BREAKFAST, r2.id)]
    assert plans[0].plan_id == second.data.plan_id


@pytest.mark.asyncio
async def test_upsert_unknown_recipe(alice_gw) -> None:
    result = await alice_gw.meal_plans.upsert_meal_plan(
        date(2024, 6, 1), MealSlot.LUNCH, "00000000-0000-0000-0000-000000000000"
    )
    assert isinstance(result.error, NotFound)


@pytest.mark.asyncio
async def test_plans_are_per_user_and_filterable(alice_gw, bob_gw, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form())).data
    await alice_gw.meal_plans.upsert_meal_plan(date(2024, 6, 1), MealSlot.DINNER, recipe.id)
    await alice_gw.meal_plans.upsert_meal_plan(date(2024, 6, 9), MealSlot.DINNER, recipe.id)

    june_first_week = await alice_gw.meal_plans.list_meal_plans(date(2024, 5, 27), date(2024, 6, 2))

    assert [p.date for p in june_first_week.data] == [date(2024, 6, 1)]
    assert (await bob_gw.meal_plans.list_meal_plans()).data == []


@pytest.mark.asyncio
async def test_delete_plans(alice_gw, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form())).data
    day = date(2024, 6, 1)
    for slot in (MealSlot.BREAKFAST, MealSlot.LUNCH, MealSlot.DINNER):
        await alice_gw.meal_plans.upsert_meal_plan(day, slot, recipe.id)

    assert (await alice_gw.meal_plans.delete_meal_plan(day, MealSlot.LUNCH)).data == 1
    assert (await alice_gw.meal_plans.delete_meal_plan(day, MealSlot.LUNCH)).data == 0
    assert (await alice_gw.meal_plans.delete_meal_plans_for_date(day)).data == 2
    assert (await alice_gw.meal_plans.list_meal_plans()).data == []
