"""Session lifecycle: start the caller's store on sign-in, tear it down on sign-out."""

from fastapi import APIRouter, Depends

from swipechef.auth import ClerkUser, get_current_user
from swipechef.models.schemas import SessionResponse
from swipechef.sessions import SessionRegistry, get_session_registry

router = APIRouter(prefix="/api/session", tags=["session"])


@router.post("", response_model=SessionResponse)
async def start_session(
    user: ClerkUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Load the caller's session, reloading it if one is already live, and summarise it."""
    store = await registry.get_or_start(user, refresh=True)
    return SessionResponse(
        user_id=user.id,
        loading=store.loading,
        using_sample_data=store.using_sample_data,
        recipe_count=len(store.recipes),
        liked_count=len(store.liked_recipes),
        planned_meal_count=len(store.meal_plan),
        settings=store.settings,
    )


@router.delete("")
async def end_session(
    user: ClerkUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
):
    ended = await registry.end(user.id)
    return {"message": "Signed out" if ended else "No active session"}
