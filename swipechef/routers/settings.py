"""Planner settings endpoints."""

from fastapi import APIRouter, Depends

from swipechef.gateway import Gateways
from swipechef.models.entities import MealSlot, UserSettings, UserSettingsUpdate
from swipechef.routers.deps import get_gateways, get_store, store_failure, unwrap
from swipechef.store import RecipeStore

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=UserSettings)
async def read_settings(
    store: RecipeStore = Depends(get_store),
    gateways: Gateways = Depends(get_gateways),
):
    if store.settings is not None:
        return store.settings
    return unwrap(await gateways.settings.get_user_settings())


@router.patch("", response_model=UserSettings)
async def update_settings(update: UserSettingsUpdate, store: RecipeStore = Depends(get_store)):
    """Change which meal slots the planner shows. At least one must stay visible."""
    if not await store.update_settings(update):
        raise store_failure(store)
    return store.settings


@router.post("/toggle/{meal_slot}", response_model=UserSettings)
async def toggle_meal_slot(meal_slot: MealSlot, store: RecipeStore = Depends(get_store)):
    if not await store.toggle_meal_slot(meal_slot):
        raise store_failure(store)
    return store.settings
