from .health import router as health_router
from .session import router as session_router
from .recipes import router as recipes_router
from .meal_plans import router as meal_plans_router
from .households import router as households_router
from .settings import router as settings_router

__all__ = [
    "health_router",
    "session_router",
    "recipes_router",
    "meal_plans_router",
    "households_router",
    "settings_router",
]
