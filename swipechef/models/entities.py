"""Application entities.

These are the shapes the session store and the HTTP clients work with. JSON
uses camelCase (``mealType``, ``isSimple``...); the storage rows in the sibling
modules use snake_case columns, and only the gateway translates between them.
"""

from datetime import date, datetime
from typing import Optional
from uuid import uuid4
import enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from swipechef.errors import ValidationFailed


# ============================================================
# Enums
# ============================================================

class MealType(str, enum.Enum):
    """Meal type of a recipe. ALL is only meaningful as a filter."""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    FULL_MEAL = "full-meal"
    ALL = "all"


class MealSlot(str, enum.Enum):
    """The four recurring planner slots of a day."""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class HouseholdRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"


class CamelModel(BaseModel):
    """Base for entities: snake_case attributes, camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ============================================================
# Recipes
# ============================================================

class Ingredient(CamelModel):
    """Single ingredient. Quantity and unit are free-form text."""
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = ""
    quantity: str = ""
    unit: str = ""


class RecipeForm(CamelModel):
    """What the user submits when creating or editing a recipe."""
    title: str
    description: str = ""
    meal_type: MealType = MealType.DINNER
    is_simple: bool = False
    notes: Optional[str] = None
    ingredients: list[Ingredient] = []
    equipment: Optional[list[str]] = None
    steps: list[str] = []
    prep_time: int = Field(default=0, ge=0)
    cook_time: int = Field(default=0, ge=0)
    servings: int = Field(default=1, gt=0)
    difficulty: Difficulty = Difficulty.EASY
    category: str = ""
    image_url: Optional[str] = None

    def cleaned(self) -> "RecipeForm":
        """Trim text and drop blank ingredients, steps and equipment."""
        equipment = [item.strip() for item in (self.equipment or []) if item.strip()]
        return self.model_copy(update={
            "title": self.title.strip(),
            "description": self.description.strip(),
            "notes": (self.notes or "").strip() or None,
            "ingredients": [
                ing.model_copy(update={"name": ing.name.strip()})
                for ing in self.ingredients
                if ing.name.strip()
            ],
            "steps": [step.strip() for step in self.steps if step.strip()],
            "equipment": equipment or None,
        })

    def validate_for_submission(self) -> "RecipeForm":
        """
        Return the cleaned form, or raise ValidationFailed.

        A simple recipe only needs a title; any other recipe also needs at
        least one named ingredient and one step.
        """
        form = self.cleaned()
        if not form.title:
            raise ValidationFailed("Title is required")
        if form.meal_type == MealType.ALL:
            raise ValidationFailed("Pick a meal type for the recipe")
        if not form.is_simple:
            if not form.ingredients:
                raise ValidationFailed("Add at least one ingredient")
            if not form.steps:
                raise ValidationFailed("Add at least one step")
        return form


class Recipe(RecipeForm):
    """A saved recipe."""
    id: str
    owner_id: str
    created_at: datetime


# ============================================================
# Households
# ============================================================

class Household(CamelModel):
    id: str
    name: str
    code: str  # e.g. "EYN5S2"
    created_by: str
    created_at: datetime
    updated_at: datetime


class HouseholdMember(CamelModel):
    household_id: str
    user_id: str
    role: HouseholdRole
    joined_at: datetime
    user_email: Optional[str] = None


class HouseholdInvitation(CamelModel):
    id: str
    household_id: str
    invited_by: str
    invited_email: str
    status: InvitationStatus
    created_at: datetime
    expires_at: datetime
    household_name: Optional[str] = None


# ============================================================
# Planning
# ============================================================

class PlannedMeal(CamelModel):
    """One recipe assigned to one (date, slot) pair."""
    date: date
    meal_slot: MealSlot
    recipe: Recipe
    plan_id: Optional[str] = None


SLOT_FIELDS = {
    MealSlot.BREAKFAST: "show_breakfast",
    MealSlot.LUNCH: "show_lunch",
    MealSlot.DINNER: "show_dinner",
    MealSlot.SNACK: "show_snack",
}


class UserSettings(CamelModel):
    """Which meal slots the planner shows. At least one stays on."""
    id: str
    user_id: str
    show_breakfast: bool = True
    show_lunch: bool = True
    show_dinner: bool = True
    show_snack: bool = True
    created_at: datetime
    updated_at: datetime

    def shows(self, slot: MealSlot) -> bool:
        return getattr(self, SLOT_FIELDS[slot])

    @property
    def visible_slots(self) -> list[MealSlot]:
        return [slot for slot in MealSlot if self.shows(slot)]

    def with_update(self, update: "UserSettingsUpdate") -> "UserSettings":
        return self.model_copy(update=update.changes())


class UserSettingsUpdate(CamelModel):
    """Partial settings change; one optional field per known setting."""
    show_breakfast: Optional[bool] = None
    show_lunch: Optional[bool] = None
    show_dinner: Optional[bool] = None
    show_snack: Optional[bool] = None

    @classmethod
    def toggle(cls, current: UserSettings, slot: MealSlot) -> "UserSettingsUpdate":
        return cls(**{SLOT_FIELDS[slot]: not current.shows(slot)})

    def changes(self) -> dict[str, bool]:
        """Only the settings that were actually given."""
        return {
            field: value
            for field, value in (
                ("show_breakfast", self.show_breakfast),
                ("show_lunch", self.show_lunch),
                ("show_dinner", self.show_dinner),
                ("show_snack", self.show_snack),
            )
            if value is not None
        }

    def check_against(self, current: UserSettings) -> None:
        """Raise ValidationFailed if applying this would hide every slot."""
        merged = current.with_update(self)
        if not merged.visible_slots:
            raise ValidationFailed("Keep at least one meal type visible in your planner")
