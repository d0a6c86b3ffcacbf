"""Remote data gateway: stateless requests against the database and object store."""

from dataclasses import dataclass

from .results import Result, gateway_call
from .recipes import RecipeGateway
from .households import HouseholdGateway, generate_household_code
from .meal_plans import MealPlanGateway
from .user_settings import UserSettingsGateway


@dataclass
class Gateways:
    """Every gateway for one user, handed to that user's session store."""
    recipes: RecipeGateway
    households: HouseholdGateway
    meal_plans: MealPlanGateway
    settings: UserSettingsGateway


def build_gateways(user, session_factory=None, storage=None) -> Gateways:
    return Gateways(
        recipes=RecipeGateway(user, session_factory, storage=storage),
        households=HouseholdGateway(user, session_factory),
        meal_plans=MealPlanGateway(user, session_factory),
        settings=UserSettingsGateway(user, session_factory),
    )


__all__ = [
    "Result",
    "gateway_call",
    "Gateways",
    "build_gateways",
    "RecipeGateway",
    "HouseholdGateway",
    "MealPlanGateway",
    "UserSettingsGateway",
    "generate_household_code",
]
