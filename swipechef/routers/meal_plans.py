"""Meal planning API endpoints."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from swipechef.models.entities import MealSlot, PlannedMeal
from swipechef.models.schemas import DayMeals, PlannedMealCreate, WeekPlanResponse
from swipechef.routers.deps import get_store, store_failure
from swipechef.store import RecipeStore, week_bounds

router = APIRouter(prefix="/api/meal-plans", tags=["meal-plans"])


# ============================================================
# Read
# ============================================================

@router.get("/week", response_model=WeekPlanResponse)
async def get_week_plan(
    week_of: Optional[date] = Query(default=None, description="Any date in the target week (defaults to current week)"),
    store: RecipeStore = Depends(get_store),
):
    """
    Get the meal plan for a week.

    Returns Monday through Sunday with one entry per meal slot, plus the slots
    the user has chosen to show.
    """
    target = week_of or date.today()
    week_start, week_end = week_bounds(target)

    days = [
        DayMeals(
            date=day.date,
            breakfast=day.meals[MealSlot.BREAKFAST],
            lunch=day.meals[MealSlot.LUNCH],
            dinner=day.meals[MealSlot.DINNER],
            snack=day.meals[MealSlot.SNACK],
        )
        for day in store.get_planned_week(target)
    ]
    return WeekPlanResponse(
        week_start=week_start,
        week_end=week_end,
        visible_slots=store.visible_slots,
        days=days,
    )


@router.get("/day/{target_date}", response_model=List[PlannedMeal])
async def get_day_plan(target_date: date, store: RecipeStore = Depends(get_store)):
    return store.get_planned_meals_for_date(target_date)


# ============================================================
# Write
# ============================================================

@router.post("", response_model=PlannedMeal, status_code=201)
async def plan_meal(entry: PlannedMealCreate, store: RecipeStore = Depends(get_store)):
    """Put a recipe in a slot. Whatever was planned there is replaced."""
    if not await store.add_planned_meal(entry.date, entry.meal_slot, entry.recipe_id):
        raise store_failure(store)
    return store.meal_plan.get(entry.date, entry.meal_slot)


@router.delete("/day/{target_date}")
async def clear_day(target_date: date, store: RecipeStore = Depends(get_store)):
    """Remove every planned meal of a day."""
    if not await store.remove_planned_day(target_date):
        raise store_failure(store)
    return {"message": "Day cleared", "date": target_date.isoformat()}


@router.delete("/{target_date}/{meal_slot}")
async def remove_planned_meal(target_date: date, meal_slot: MealSlot, store: RecipeStore = Depends(get_store)):
    if not await store.remove_planned_meal(target_date, meal_slot):
        raise store_failure(store)
    return {"message": "Meal removed", "date": target_date.isoformat(), "mealSlot": meal_slot.value}
