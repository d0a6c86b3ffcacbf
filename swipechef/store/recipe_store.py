"""
Per-session state store.

One RecipeStore holds what a signed-in session knows: the user's recipes,
liked recipes, rejected ids, planner settings and planned meals. Every
mutation goes through the gateway first and is applied locally only after
the gateway confirms it, so a failure leaves the store exactly as it was.
"""

from datetime import date
from typing import Awaitable, Callable, Optional
import asyncio
import logging

from swipechef.auth import ClerkUser
from swipechef.errors import Conflict, GatewayError, RemoteFailure, ValidationFailed
from swipechef.gateway import Gateways, Result
from swipechef.models.entities import (
    MealSlot,
    MealType,
    PlannedMeal,
    Recipe,
    RecipeForm,
    UserSettings,
    UserSettingsUpdate,
)
from swipechef.store.meal_plan_index import DayPlan, MealPlanIndex, to_date
from swipechef.store.sample_data import SAMPLE_RECIPES
from swipechef.store.views import (
    RecipeTab,
    SwipeDeck,
    household_recipes,
    search_recipes,
    swipe_deck,
    unique_recipes,
)

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[GatewayError], None]
Subscriber = Callable[["RecipeStore"], None]


class RecipeStore:
    """State of one signed-in session, backed by that user's gateways."""

    def __init__(
        self,
        user: ClerkUser,
        gateways: Gateways,
        on_error: Optional[ErrorReporter] = None,
        use_sample_fallback: bool = True,
    ):
        self.user = user
        self.gateways = gateways
        self.on_error = on_error
        self.use_sample_fallback = use_sample_fallback

        self.recipes: list[Recipe] = []
        self.liked_recipes: list[Recipe] = []
        self.rejected_ids: set[str] = set()
        self.swiped_ids: set[str] = set()
        self.meal_plan = MealPlanIndex()
        self.settings: Optional[UserSettings] = None

        self.loading = False
        self.started = False
        self.using_sample_data = False
        self.last_error: Optional[GatewayError] = None

        self._in_flight: set[str] = set()
        self._subscribers: list[Subscriber] = []

    # ============================================================
    # Plumbing
    # ============================================================

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback(store)` after every change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    def _report(self, action: str, error: GatewayError) -> None:
        self.last_error = error
        logger.warning("%s failed for user %s: %s", action, self.user.id, error.message)
        if self.on_error is not None:
            self.on_error(error)

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._in_flight)

    async def _call(self, action: str, request: Awaitable[Result]) -> Result:
        """Await a gateway request; anything it raises becomes a RemoteFailure."""
        try:
            return await request
        except Exception as e:
            logger.exception("Unexpected error during %s", action)
            return Result.failure(RemoteFailure(str(e) or e.__class__.__name__))

    async def _mutate(
        self,
        key: str,
        request: Callable[[], Awaitable[Result]],
        apply: Callable[[object], None],
    ) -> bool:
        """
        Run one remote mutation under the in-flight key.

        A second call with a key that is still in flight is refused without
        touching the gateway. `apply` only runs on success.
        """
        if key in self._in_flight:
            logger.info("Ignoring %s: already in flight", key)
            self.last_error = Conflict("That change is already in progress")
            return False

        self.last_error = None
        self._in_flight.add(key)
        try:
            result = await self._call(key, request())
        finally:
            self._in_flight.discard(key)

        if not result.ok:
            self._report(key, result.error)
            return False

        apply(result.data)
        self._notify()
        return True

    # ============================================================
    # Loading
    # ============================================================

    async def start(self) -> None:
        """
        Load recipes, liked recipes, settings and meal plans in parallel.

        Safe to call again to reload. If the recipe load fails on a reload,
        previously loaded recipes are kept rather than replaced by samples.
        """
        self.loading = True
        self.last_error = None
        self._notify()

        recipes, liked, settings, plans = await asyncio.gather(
            self._call("load recipes", self.gateways.recipes.get_user_recipes()),
            self._call("load liked recipes", self.gateways.recipes.get_liked_recipes()),
            self._call("load settings", self.gateways.settings.get_user_settings()),
            self._call("load meal plans", self.gateways.meal_plans.list_meal_plans()),
        )

        if recipes.ok:
            self.recipes = list(recipes.data)
            self.using_sample_data = False
        else:
            self._report("load recipes", recipes.error)
            had_real_recipes = self.started and not self.using_sample_data
            if self.use_sample_fallback and not had_real_recipes:
                logger.info("Falling back to %d sample recipes", len(SAMPLE_RECIPES))
                self.recipes = list(SAMPLE_RECIPES)
                self.using_sample_data = True

        if liked.ok:
            self.liked_recipes = list(liked.data)
        else:
            self._report("load liked recipes", liked.error)

        if settings.ok:
            self.settings = settings.data
        else:
            self._report("load settings", settings.error)

        if plans.ok:
            self.meal_plan = MealPlanIndex(plans.data)
        else:
            self._report("load meal plans", plans.error)

        self.loading = False
        self.started = True
        self._notify()

    def teardown(self) -> None:
        """Forget everything (sign-out)."""
        self.recipes = []
        self.liked_recipes = []
        self.rejected_ids = set()
        self.swiped_ids = set()
        self.meal_plan.clear()
        self.settings = None
        self.last_error = None
        self.started = False
        self.using_sample_data = False
        self._in_flight.clear()
        self._notify()
        self._subscribers.clear()

    # ============================================================
    # Lookups
    # ============================================================

    def find_recipe(self, recipe_id: str) -> Optional[Recipe]:
        for recipe in unique_recipes(self.recipes, self.liked_recipes):
            if recipe.id == recipe_id:
                return recipe
        return None

    def is_liked(self, recipe_id: str) -> bool:
        return any(r.id == recipe_id for r in self.liked_recipes)

    # ============================================================
    # Recipes
    # ============================================================

    async def add_recipe(self, form: RecipeForm) -> bool:
        def apply(recipe: Recipe) -> None:
            self.recipes.insert(0, recipe)

        return await self._mutate(
            "create",
            lambda: self.gateways.recipes.create_recipe(form),
            apply,
        )

    async def update_recipe(self, recipe_id: str, form: RecipeForm) -> bool:
        current = self.find_recipe(recipe_id)
        old_image_url = current.image_url if current else None

        def apply(recipe: Recipe) -> None:
            self.recipes = [recipe if r.id == recipe.id else r for r in self.recipes]
            self.liked_recipes = [recipe if r.id == recipe.id else r for r in self.liked_recipes]
            for meal in self.meal_plan:
                if meal.recipe.id == recipe.id:
                    self.meal_plan.add(meal.model_copy(update={"recipe": recipe}))

        return await self._mutate(
            f"update:{recipe_id}",
            lambda: self.gateways.recipes.update_recipe(recipe_id, form, old_image_url),
            apply,
        )

    async def delete_recipe(self, recipe_id: str) -> bool:
        current = self.find_recipe(recipe_id)
        image_url = current.image_url if current else None

        def apply(_) -> None:
            self.recipes = [r for r in self.recipes if r.id != recipe_id]
            self.liked_recipes = [r for r in self.liked_recipes if r.id != recipe_id]
            self.meal_plan.remove_recipe(recipe_id)

        return await self._mutate(
            f"delete:{recipe_id}",
            lambda: self.gateways.recipes.delete_recipe(recipe_id, image_url),
            apply,
        )

    # ============================================================
    # Likes and swipes
    # ============================================================

    async def like_recipe(self, recipe_id: str) -> bool:
        if self.is_liked(recipe_id):
            return True

        async def request() -> Result:
            liked = await self.gateways.recipes.like_recipe(recipe_id)
            if not liked.ok:
                return liked
            recipe = self.find_recipe(recipe_id)
            if recipe is not None:
                return Result.success(recipe)
            return await self.gateways.recipes.get_recipe_by_id(recipe_id)

        def apply(recipe: Recipe) -> None:
            if not self.is_liked(recipe.id):
                self.liked_recipes.insert(0, recipe)

        return await self._mutate(f"like:{recipe_id}", request, apply)

    async def unlike_recipe(self, recipe_id: str) -> bool:
        if not self.is_liked(recipe_id):
            return True

        def apply(_) -> None:
            self.liked_recipes = [r for r in self.liked_recipes if r.id != recipe_id]

        return await self._mutate(
            f"unlike:{recipe_id}",
            lambda: self.gateways.recipes.unlike_recipe(recipe_id),
            apply,
        )

    def reject_recipe(self, recipe_id: str) -> None:
        """Hide a recipe from the swipe deck for the rest of this session."""
        self.rejected_ids.add(recipe_id)
        self._notify()

    async def swipe_right(self, recipe_id: str) -> bool:
        liked = await self.like_recipe(recipe_id)
        if liked:
            self.swiped_ids.add(recipe_id)
            self._notify()
        return liked

    def swipe_left(self, recipe_id: str) -> None:
        self.swiped_ids.add(recipe_id)
        self.reject_recipe(recipe_id)

    # ============================================================
    # Views
    # ============================================================

    def swipe_deck(self, meal_type: MealType = MealType.ALL) -> SwipeDeck:
        # Drawn from self.recipes, which only holds other owners' recipes in sample mode.
        return swipe_deck(
            self.recipes,
            self.swiped_ids | self.rejected_ids,
            self.user.id,
            meal_type,
        )

    def household_recipes(self, tab: RecipeTab = RecipeTab.ALL) -> list[Recipe]:
        return household_recipes(self.recipes, self.liked_recipes, self.user.id, tab)

    def search(self, query: str) -> list[Recipe]:
        return search_recipes(unique_recipes(self.recipes, self.liked_recipes), query)

    # ============================================================
    # Planner
    # ============================================================

    async def add_planned_meal(self, planned_date: date | str, slot: MealSlot, recipe: Recipe | str) -> bool:
        """Put a recipe in a (date, slot), replacing the meal that was there."""
        planned_date, slot = to_date(planned_date), MealSlot(slot)
        recipe_id = recipe if isinstance(recipe, str) else recipe.id

        return await self._mutate(
            f"plan:{planned_date.isoformat()}:{slot.value}",
            lambda: self.gateways.meal_plans.upsert_meal_plan(planned_date, slot, recipe_id),
            self.meal_plan.add,
        )

    async def remove_planned_meal(self, planned_date: date | str, slot: MealSlot) -> bool:
        planned_date, slot = to_date(planned_date), MealSlot(slot)

        def apply(_) -> None:
            self.meal_plan.remove_by_key(planned_date, slot)

        return await self._mutate(
            f"plan:{planned_date.isoformat()}:{slot.value}",
            lambda: self.gateways.meal_plans.delete_meal_plan(planned_date, slot),
            apply,
        )

    async def remove_planned_day(self, planned_date: date | str) -> bool:
        planned_date = to_date(planned_date)

        def apply(_) -> None:
            for meal in self.meal_plan.query_by_date(planned_date):
                self.meal_plan.remove_by_key(meal.date, meal.meal_slot)

        return await self._mutate(
            f"plan:{planned_date.isoformat()}",
            lambda: self.gateways.meal_plans.delete_meal_plans_for_date(planned_date),
            apply,
        )

    def get_planned_meals_for_date(self, planned_date: date | str) -> list[PlannedMeal]:
        return self.meal_plan.query_by_date(planned_date)

    def get_planned_week(self, week_of: date | str) -> list[DayPlan]:
        return self.meal_plan.query_week(week_of)

    # ============================================================
    # Settings
    # ============================================================

    @property
    def visible_slots(self) -> list[MealSlot]:
        if self.settings is None:
            return list(MealSlot)
        return self.settings.visible_slots

    async def update_settings(self, update: UserSettingsUpdate) -> bool:
        """Apply a settings change; one that would hide every slot never leaves the store."""
        if self.settings is not None:
            try:
                update.check_against(self.settings)
            except ValidationFailed as e:
                self._report("update settings", e)
                return False

        def apply(settings: UserSettings) -> None:
            self.settings = settings

        return await self._mutate(
            "settings",
            lambda: self.gateways.settings.update_user_settings(update),
            apply,
        )

    async def toggle_meal_slot(self, slot: MealSlot) -> bool:
        slot = MealSlot(slot)
        if self.settings is None:
            def apply(settings: UserSettings) -> None:
                self.settings = settings

            return await self._mutate(
                "settings",
                lambda: self.gateways.settings.toggle_meal_slot(slot),
                apply,
            )
        return await self.update_settings(UserSettingsUpdate.toggle(self.settings, slot))
