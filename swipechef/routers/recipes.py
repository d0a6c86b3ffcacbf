"""Recipe API endpoints: CRUD, likes, swipes and the derived views."""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, Form
from pydantic import ValidationError

from swipechef.gateway import Gateways
from swipechef.models.entities import MealType, Recipe, RecipeForm
from swipechef.models.schemas import LikeStatusResponse, SwipeDeckResponse, SwipeRequest
from swipechef.routers.deps import get_gateways, get_store, store_failure, unwrap
from swipechef.services.storage import LOCAL_URI_PREFIX
from swipechef.store import RecipeStore, RecipeTab

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


# ============================================================
# Helper Functions
# ============================================================

def _find_or_404(store: RecipeStore, recipe_id: str) -> Recipe:
    recipe = store.find_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


def _write_temp_file(content: bytes, suffix: str) -> Path:
    fd, name = tempfile.mkstemp(prefix="swipechef-", suffix=suffix)
    with os.fdopen(fd, "wb") as f:
        f.write(content)
    return Path(name)


async def _save_upload(image: UploadFile) -> Path:
    """Write an uploaded image to a temp file the storage service can read."""
    suffix = Path(image.filename or "").suffix or ".jpg"
    content = await image.read()
    return await asyncio.to_thread(_write_temp_file, content, suffix)


# ============================================================
# Collections and views
# ============================================================

@router.get("", response_model=List[Recipe])
async def list_recipes(
    tab: RecipeTab = Query(default=RecipeTab.MINE, description="all, mine, household or favorites"),
    store: RecipeStore = Depends(get_store),
):
    """The caller's recipes, or one of the household tabs."""
    if tab == RecipeTab.MINE:
        return store.recipes
    return store.household_recipes(tab)


@router.get("/liked", response_model=List[Recipe])
async def list_liked_recipes(store: RecipeStore = Depends(get_store)):
    return store.liked_recipes


@router.get("/deck", response_model=SwipeDeckResponse)
async def get_swipe_deck(
    meal_type: MealType = Query(default=MealType.ALL, alias="mealType"),
    store: RecipeStore = Depends(get_store),
):
    """Top two cards of the swipe deck for a meal type."""
    deck = store.swipe_deck(meal_type)
    return SwipeDeckResponse(current=deck.current, next=deck.next, remaining=deck.remaining)


@router.get("/search", response_model=List[Recipe])
async def search_recipes(
    q: str = Query(default="", description="Matches title, description and ingredient names"),
    store: RecipeStore = Depends(get_store),
):
    return store.search(q)


# ============================================================
# Create
# ============================================================

@router.post("", response_model=Recipe, status_code=201)
async def create_recipe(form: RecipeForm, store: RecipeStore = Depends(get_store)):
    """Create a recipe. `imageUrl` may already be a durable URL."""
    if not await store.add_recipe(form):
        raise store_failure(store)
    return store.recipes[0]


@router.post("/with-image", response_model=Recipe, status_code=201)
async def create_recipe_with_image(
    recipe_data: str = Form(..., description="JSON string of the recipe form"),
    image: Optional[UploadFile] = File(None, description="Optional recipe image"),
    store: RecipeStore = Depends(get_store),
):
    """
    Create a recipe from multipart form data.

    Accepts:
    - recipe_data: JSON string of the recipe details
    - image: optional image file, uploaded to storage before the recipe is saved
    """
    try:
        form = RecipeForm(**json.loads(recipe_data))
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON in recipe_data: {e}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid recipe data: {e}")

    local_path = None
    if image is not None:
        local_path = await _save_upload(image)
        form = form.model_copy(update={"image_url": f"{LOCAL_URI_PREFIX}{local_path}"})

    try:
        created = await store.add_recipe(form)
    finally:
        if local_path is not None:
            await asyncio.to_thread(local_path.unlink, missing_ok=True)

    if not created:
        raise store_failure(store)
    return store.recipes[0]


# ============================================================
# Single recipe
# ============================================================

@router.get("/{recipe_id}", response_model=Recipe)
async def get_recipe(
    recipe_id: str,
    store: RecipeStore = Depends(get_store),
    gateways: Gateways = Depends(get_gateways),
):
    """A recipe the session knows about, else looked up remotely."""
    recipe = store.find_recipe(recipe_id)
    if recipe is not None:
        return recipe
    return unwrap(await gateways.recipes.get_recipe_by_id(recipe_id))


@router.put("/{recipe_id}", response_model=Recipe)
async def update_recipe(recipe_id: str, form: RecipeForm, store: RecipeStore = Depends(get_store)):
    """Replace a recipe's content. Only the owner can update it."""
    if not await store.update_recipe(recipe_id, form):
        raise store_failure(store)
    return _find_or_404(store, recipe_id)


@router.delete("/{recipe_id}")
async def delete_recipe(recipe_id: str, store: RecipeStore = Depends(get_store)):
    """Delete a recipe, its image, likes and planned meals. Only the owner can delete it."""
    if not await store.delete_recipe(recipe_id):
        raise store_failure(store)
    return {"message": "Recipe deleted successfully", "id": recipe_id}


# ============================================================
# Likes and swipes
# ============================================================

@router.get("/{recipe_id}/like", response_model=LikeStatusResponse)
async def get_like_status(recipe_id: str, gateways: Gateways = Depends(get_gateways)):
    liked = unwrap(await gateways.recipes.is_recipe_liked(recipe_id))
    return LikeStatusResponse(recipe_id=recipe_id, liked=liked)


@router.post("/{recipe_id}/like", response_model=LikeStatusResponse)
async def like_recipe(recipe_id: str, store: RecipeStore = Depends(get_store)):
    if not await store.like_recipe(recipe_id):
        raise store_failure(store)
    return LikeStatusResponse(recipe_id=recipe_id, liked=True)


@router.delete("/{recipe_id}/like", response_model=LikeStatusResponse)
async def unlike_recipe(recipe_id: str, store: RecipeStore = Depends(get_store)):
    if not await store.unlike_recipe(recipe_id):
        raise store_failure(store)
    return LikeStatusResponse(recipe_id=recipe_id, liked=False)


@router.post("/{recipe_id}/reject")
async def reject_recipe(recipe_id: str, store: RecipeStore = Depends(get_store)):
    """Hide a recipe from the deck for this session only."""
    store.reject_recipe(recipe_id)
    return {"message": "Recipe hidden", "id": recipe_id}


@router.post("/{recipe_id}/swipe", response_model=SwipeDeckResponse)
async def swipe_recipe(
    recipe_id: str,
    request: SwipeRequest,
    meal_type: MealType = Query(default=MealType.ALL, alias="mealType"),
    store: RecipeStore = Depends(get_store),
):
    """Swipe right to like, left to pass. Returns the deck after the swipe."""
    if request.direction == "right":
        if not await store.swipe_right(recipe_id):
            raise store_failure(store)
    else:
        store.swipe_left(recipe_id)

    deck = store.swipe_deck(meal_type)
    return SwipeDeckResponse(current=deck.current, next=deck.next, remaining=deck.remaining)
