"""In-memory index of planned meals, keyed by (date, meal slot)."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from swipechef.models.entities import MealSlot, PlannedMeal, Recipe


def to_date(value: date | str) -> date:
    """Accept either a date or its ISO string ("2024-06-01")."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def week_bounds(target_date: date) -> tuple[date, date]:
    """Get the Monday and Sunday of the week containing target_date."""
    week_start = target_date - timedelta(days=target_date.weekday())
    return week_start, week_start + timedelta(days=6)


@dataclass
class DayPlan:
    """All meals of one day, one optional entry per slot."""
    date: date
    meals: dict[MealSlot, Optional[PlannedMeal]] = field(default_factory=dict)


class MealPlanIndex:
    """
    Planned meals of the session.

    At most one meal occupies a (date, slot) pair: upsert removes the
    current occupant before appending. Queries are linear scans, which is
    plenty for one household's planner.
    """

    def __init__(self, meals: Iterable[PlannedMeal] = ()):
        self._meals: list[PlannedMeal] = []
        for meal in meals:
            self._upsert(meal)

    def __len__(self) -> int:
        return len(self._meals)

    def __iter__(self):
        return iter(list(self._meals))

    def _upsert(self, meal: PlannedMeal) -> PlannedMeal:
        self._meals = [
            m for m in self._meals
            if not (m.date == meal.date and m.meal_slot == meal.meal_slot)
        ]
        self._meals.append(meal)
        return meal

    def upsert(self, planned_date: date | str, slot: MealSlot, recipe: Recipe, plan_id: Optional[str] = None) -> PlannedMeal:
        return self._upsert(PlannedMeal(
            date=to_date(planned_date),
            meal_slot=MealSlot(slot),
            recipe=recipe,
            plan_id=plan_id,
        ))

    def add(self, meal: PlannedMeal) -> PlannedMeal:
        return self._upsert(meal)

    def remove_by_key(self, planned_date: date | str, slot: MealSlot) -> Optional[PlannedMeal]:
        key_date, key_slot = to_date(planned_date), MealSlot(slot)
        removed = self.get(key_date, key_slot)
        if removed is not None:
            self._meals = [m for m in self._meals if m is not removed]
        return removed

    def remove_recipe(self, recipe_id: str) -> int:
        """Drop every meal that points at a recipe; returns how many."""
        before = len(self._meals)
        self._meals = [m for m in self._meals if m.recipe.id != recipe_id]
        return before - len(self._meals)

    def get(self, planned_date: date | str, slot: MealSlot) -> Optional[PlannedMeal]:
        key_date, key_slot = to_date(planned_date), MealSlot(slot)
        for meal in self._meals:
            if meal.date == key_date and meal.meal_slot == key_slot:
                return meal
        return None

    def query_by_date(self, planned_date: date | str) -> list[PlannedMeal]:
        key_date = to_date(planned_date)
        return [m for m in self._meals if m.date == key_date]

    def query_week(self, week_of: date | str) -> list[DayPlan]:
        """Monday to Sunday of the week containing `week_of`, every slot listed."""
        week_start, _ = week_bounds(to_date(week_of))
        days = []
        for offset in range(7):
            day = week_start + timedelta(days=offset)
            meals = {slot: None for slot in MealSlot}
            for meal in self.query_by_date(day):
                meals[meal.meal_slot] = meal
            days.append(DayPlan(date=day, meals=meals))
        return days

    def clear(self) -> None:
        self._meals = []
