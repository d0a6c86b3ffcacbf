"""Pydantic request/response schemas for the HTTP API."""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from swipechef.models.entities import (
    CamelModel,
    HouseholdRole,
    MealSlot,
    PlannedMeal,
    Recipe,
    UserSettings,
)


# ============================================================
# Session
# ============================================================

class SessionResponse(CamelModel):
    """What the session store knows right after sign-in."""
    user_id: str
    loading: bool
    using_sample_data: bool = False
    recipe_count: int = 0
    liked_count: int = 0
    planned_meal_count: int = 0
    settings: Optional[UserSettings] = None


# ============================================================
# Recipes
# ============================================================

class SwipeRequest(CamelModel):
    direction: Literal["left", "right"]


class SwipeDeckResponse(CamelModel):
    """Top of the swipe deck."""
    current: Optional[Recipe] = None
    next: Optional[Recipe] = None
    remaining: int = 0


class LikeStatusResponse(CamelModel):
    recipe_id: str
    liked: bool


# ============================================================
# Meal plans
# ============================================================

class PlannedMealCreate(CamelModel):
    """Request to put a recipe in a planner slot."""
    date: date
    meal_slot: MealSlot
    recipe_id: str


class DayMeals(CamelModel):
    """All meals for a single day."""
    date: date
    breakfast: Optional[PlannedMeal] = None
    lunch: Optional[PlannedMeal] = None
    dinner: Optional[PlannedMeal] = None
    snack: Optional[PlannedMeal] = None


class WeekPlanResponse(CamelModel):
    """A full week's meal plan."""
    week_start: date
    week_end: date
    visible_slots: List[MealSlot]
    days: List[DayMeals]


# ============================================================
# Households
# ============================================================

class HouseholdCreate(CamelModel):
    name: str = Field(..., max_length=100)


class HouseholdRename(CamelModel):
    name: str = Field(..., max_length=100)


class HouseholdJoin(CamelModel):
    code: str


class MemberRoleUpdate(CamelModel):
    role: HouseholdRole


class InvitationCreate(CamelModel):
    email: str


# ============================================================
# Misc
# ============================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    environment: str
    database: str = "connected"
