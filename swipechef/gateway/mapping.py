"""
Conversion between storage rows and application entities.

Rows use the snake_case column names of the relational store; entities are the
camelCase-serialised models from ``swipechef.models.entities``. Nothing outside
the gateway should touch a row.
"""

from typing import Any, Optional

from swipechef.db.database import as_utc
from swipechef.models.entities import (
    Household,
    HouseholdInvitation,
    HouseholdMember,
    Ingredient,
    PlannedMeal,
    Recipe,
    RecipeForm,
    UserSettings,
    UserSettingsUpdate,
)
from swipechef.models.household import HouseholdInvitationRecord, HouseholdMemberRecord, HouseholdRecord
from swipechef.models.meal_plan import MealPlanRecord
from swipechef.models.recipe import RecipeRecord
from swipechef.models.user_settings import UserSettingsRecord


# ============================================================
# Recipes
# ============================================================

def recipe_from_row(row: RecipeRecord) -> Recipe:
    return Recipe(
        id=str(row.id),
        owner_id=row.user_id,
        title=row.title,
        description=row.description or "",
        meal_type=row.meal_type,
        is_simple=bool(row.is_simple),
        notes=row.notes,
        image_url=row.image_url,
        ingredients=[Ingredient(**ing) for ing in (row.ingredients or [])],
        equipment=row.equipment or None,
        steps=list(row.steps or []),
        prep_time=row.prep_time or 0,
        cook_time=row.cook_time or 0,
        servings=row.servings or 1,
        difficulty=row.difficulty,
        category=row.category or "",
        created_at=as_utc(row.created_at),
    )


def recipe_to_row_values(form: RecipeForm, user_id: str, image_url: Optional[str] = None) -> dict[str, Any]:
    """Column values for an insert/update. `image_url` overrides the form's."""
    return {
        "user_id": user_id,
        "title": form.title,
        "description": form.description,
        "meal_type": form.meal_type.value,
        "is_simple": form.is_simple,
        "notes": form.notes,
        "image_url": image_url if image_url is not None else form.image_url,
        "prep_time": form.prep_time,
        "cook_time": form.cook_time,
        "servings": form.servings,
        "difficulty": form.difficulty.value,
        "category": form.category,
        "ingredients": [
            {"id": ing.id, "name": ing.name, "quantity": ing.quantity, "unit": ing.unit}
            for ing in form.ingredients
        ],
        "equipment": list(form.equipment or []),
        "steps": list(form.steps),
    }


# ============================================================
# Households
# ============================================================

def household_from_row(row: HouseholdRecord) -> Household:
    return Household(
        id=str(row.id),
        name=row.name,
        code=row.code,
        created_by=row.created_by,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def member_from_row(row: HouseholdMemberRecord) -> HouseholdMember:
    return HouseholdMember(
        household_id=str(row.household_id),
        user_id=row.user_id,
        role=row.role,
        joined_at=as_utc(row.joined_at),
        user_email=row.user_email,
    )


def invitation_from_row(row: HouseholdInvitationRecord, household_name: Optional[str] = None) -> HouseholdInvitation:
    return HouseholdInvitation(
        id=str(row.id),
        household_id=str(row.household_id),
        invited_by=row.invited_by,
        invited_email=row.invited_email,
        status=row.status,
        created_at=as_utc(row.created_at),
        expires_at=as_utc(row.expires_at),
        household_name=household_name,
    )


# ============================================================
# Settings and meal plans
# ============================================================

def settings_from_row(row: UserSettingsRecord) -> UserSettings:
    return UserSettings(
        id=str(row.id),
        user_id=row.user_id,
        show_breakfast=row.show_breakfast,
        show_lunch=row.show_lunch,
        show_dinner=row.show_dinner,
        show_snack=row.show_snack,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def settings_update_to_row_values(update: UserSettingsUpdate) -> dict[str, bool]:
    # Entity field names and column names coincide for the recognised keys
    return update.changes()


def planned_meal_from_row(row: MealPlanRecord, recipe: Recipe) -> PlannedMeal:
    return PlannedMeal(
        date=row.planned_date,
        meal_slot=row.meal_type,
        recipe=recipe,
        plan_id=str(row.id),
    )
