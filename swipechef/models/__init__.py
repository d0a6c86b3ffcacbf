from .recipe import RecipeRecord, LikedRecipeRecord
from .meal_plan import MealPlanRecord
from .household import HouseholdRecord, HouseholdMemberRecord, HouseholdInvitationRecord
from .user_settings import UserSettingsRecord

__all__ = [
    "RecipeRecord",
    "LikedRecipeRecord",
    "MealPlanRecord",
    "HouseholdRecord",
    "HouseholdMemberRecord",
    "HouseholdInvitationRecord",
    "UserSettingsRecord",
]
