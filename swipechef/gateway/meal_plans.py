"""Meal plan requests. One recipe per (date, meal slot) per user."""

from datetime import date
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload

from swipechef.errors import NotFound
from swipechef.gateway.base import BaseGateway, parse_id
from swipechef.gateway.mapping import planned_meal_from_row, recipe_from_row
from swipechef.gateway.results import gateway_call
from swipechef.models.entities import MealSlot, PlannedMeal
from swipechef.models.meal_plan import MealPlanRecord
from swipechef.models.recipe import RecipeRecord


class MealPlanGateway(BaseGateway):

    @gateway_call
    async def list_meal_plans(self, start: Optional[date] = None, end: Optional[date] = None) -> list[PlannedMeal]:
        """Planned meals in date order; rows whose recipe is gone are skipped."""
        user = self.require_user()
        query = (
            select(MealPlanRecord)
            .where(MealPlanRecord.user_id == user.id)
            .options(selectinload(MealPlanRecord.recipe))
            .order_by(MealPlanRecord.planned_date, MealPlanRecord.meal_type)
        )
        if start is not None:
            query = query.where(MealPlanRecord.planned_date >= start)
        if end is not None:
            query = query.where(MealPlanRecord.planned_date <= end)

        async with self.session_factory() as session:
            result = await session.execute(query)
            rows = result.scalars().all()
        return [planned_meal_from_row(row, recipe_from_row(row.recipe)) for row in rows if row.recipe is not None]

    @gateway_call
    async def upsert_meal_plan(self, planned_date: date, slot: MealSlot, recipe_id: str) -> PlannedMeal:
        """Assign a recipe to a slot, replacing whatever was planned there."""
        user = self.require_user()
        slot = MealSlot(slot)
        rid = parse_id(recipe_id, "Recipe")

        async with self.session_factory() as session:
            recipe = await session.get(RecipeRecord, rid)
            if recipe is None:
                raise NotFound("Recipe not found")

            await session.execute(
                delete(MealPlanRecord).where(
                    MealPlanRecord.user_id == user.id,
                    MealPlanRecord.planned_date == planned_date,
                    MealPlanRecord.meal_type == slot.value,
                )
            )
            row = MealPlanRecord(
                user_id=user.id,
                recipe_id=rid,
                planned_date=planned_date,
                meal_type=slot.value,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)

        return planned_meal_from_row(row, recipe_from_row(recipe))

    @gateway_call
    async def delete_meal_plan(self, planned_date: date, slot: MealSlot) -> int:
        """Clear one slot. Returns how many rows were removed (0 or 1)."""
        user = self.require_user()
        async with self.session_factory() as session:
            result = await session.execute(
                delete(MealPlanRecord).where(
                    MealPlanRecord.user_id == user.id,
                    MealPlanRecord.planned_date == planned_date,
                    MealPlanRecord.meal_type == MealSlot(slot).value,
                )
            )
            await session.commit()
        return result.rowcount

    @gateway_call
    async def delete_meal_plans_for_date(self, planned_date: date) -> int:
        user = self.require_user()
        async with self.session_factory() as session:
            result = await session.execute(
                delete(MealPlanRecord).where(
                    MealPlanRecord.user_id == user.id,
                    MealPlanRecord.planned_date == planned_date,
                )
            )
            await session.commit()
        return result.rowcount
