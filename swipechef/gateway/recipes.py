"""Recipe requests: CRUD, image upload and likes."""

from typing import Optional
from uuid import uuid4
import logging

from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload

from swipechef.errors import NotFound
from swipechef.gateway.base import BaseGateway, parse_id
from swipechef.gateway.mapping import recipe_from_row, recipe_to_row_values
from swipechef.gateway.results import gateway_call
from swipechef.models.entities import Recipe, RecipeForm
from swipechef.models.meal_plan import MealPlanRecord
from swipechef.models.recipe import LikedRecipeRecord, RecipeRecord
from swipechef.services.storage import StorageService, is_local_uri, storage_service

logger = logging.getLogger(__name__)


class RecipeGateway(BaseGateway):
    """Recipes of the current user, plus the recipes they liked."""

    def __init__(self, user, session_factory=None, storage: Optional[StorageService] = None):
        super().__init__(user, session_factory)
        self.storage = storage or storage_service

    # ============================================================
    # CRUD
    # ============================================================

    @gateway_call
    async def create_recipe(self, form: RecipeForm) -> Recipe:
        """
        Create a recipe.

        A local image is uploaded before the row is inserted. If the insert
        fails the upload is deleted again, so no orphaned image is left behind.
        """
        user = self.require_user()
        form = form.validate_for_submission()

        image_url = None
        if is_local_uri(form.image_url):
            image_url = await self.storage.upload_recipe_image(form.image_url, f"new-{uuid4().hex[:12]}", user.id)

        try:
            async with self.session_factory() as session:
                row = await self._insert_recipe(session, recipe_to_row_values(form, user.id, image_url))
        except Exception:
            if image_url:
                logger.warning("Recipe insert failed, removing uploaded image %s", image_url)
                await self.storage.delete_recipe_image(image_url)
            raise

        logger.info("Recipe created: %s (%s)", row.title, row.id)
        return recipe_from_row(row)

    async def _insert_recipe(self, session, values: dict) -> RecipeRecord:
        row = RecipeRecord(**values)
        session.add(row)
        await session.commit()
        await session.refresh(row)
        return row

    @gateway_call
    async def update_recipe(self, recipe_id: str, form: RecipeForm, old_image_url: Optional[str] = None) -> Recipe:
        """
        Update one of the user's recipes.

        A new local image is uploaded first; the old one is deleted only once
        the row points at the new URL.
        """
        user = self.require_user()
        form = form.validate_for_submission()
        rid = parse_id(recipe_id, "Recipe")

        new_image_url = None
        if is_local_uri(form.image_url):
            new_image_url = await self.storage.upload_recipe_image(form.image_url, str(rid), user.id)

        try:
            async with self.session_factory() as session:
                row = await self._owned_recipe(session, rid, user.id)
                previous_image_url = row.image_url
                for column, value in recipe_to_row_values(form, user.id, new_image_url).items():
                    setattr(row, column, value)
                await session.commit()
                await session.refresh(row)
        except Exception:
            if new_image_url:
                await self.storage.delete_recipe_image(new_image_url)
            raise

        old_image_url = old_image_url or previous_image_url
        if old_image_url and old_image_url != row.image_url:
            await self.storage.delete_recipe_image(old_image_url)

        return recipe_from_row(row)

    @gateway_call
    async def delete_recipe(self, recipe_id: str, image_url: Optional[str] = None) -> None:
        """Delete one of the user's recipes and its image (best effort)."""
        user = self.require_user()
        rid = parse_id(recipe_id, "Recipe")

        async with self.session_factory() as session:
            row = await self._owned_recipe(session, rid, user.id)
            image_url = image_url or row.image_url
            if image_url:
                await self.storage.delete_recipe_image(image_url)

            # Likes and planned meals go with the recipe
            await session.execute(delete(LikedRecipeRecord).where(LikedRecipeRecord.recipe_id == rid))
            await session.execute(delete(MealPlanRecord).where(MealPlanRecord.recipe_id == rid))
            await session.execute(
                delete(RecipeRecord).where(RecipeRecord.id == rid, RecipeRecord.user_id == user.id)
            )
            await session.commit()

        logger.info("Recipe deleted: %s", rid)

    async def _owned_recipe(self, session, rid, user_id: str) -> RecipeRecord:
        result = await session.execute(
            select(RecipeRecord).where(RecipeRecord.id == rid, RecipeRecord.user_id == user_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFound("Recipe not found")
        return row

    # ============================================================
    # Reads
    # ============================================================

    @gateway_call
    async def get_user_recipes(self) -> list[Recipe]:
        """All recipes of the current user, newest first."""
        user = self.require_user()
        async with self.session_factory() as session:
            result = await session.execute(
                select(RecipeRecord)
                .where(RecipeRecord.user_id == user.id)
                .order_by(RecipeRecord.created_at.desc())
            )
            return [recipe_from_row(row) for row in result.scalars().all()]

    @gateway_call
    async def get_recipe_by_id(self, recipe_id: str) -> Recipe:
        self.require_user()
        rid = parse_id(recipe_id, "Recipe")
        async with self.session_factory() as session:
            row = await session.get(RecipeRecord, rid)
        if row is None:
            raise NotFound("Recipe not found")
        return recipe_from_row(row)

    @gateway_call
    async def get_liked_recipes(self) -> list[Recipe]:
        """Recipes the user liked, most recent first. Likes of deleted recipes are skipped."""
        user = self.require_user()
        async with self.session_factory() as session:
            result = await session.execute(
                select(LikedRecipeRecord)
                .where(LikedRecipeRecord.user_id == user.id)
                .options(selectinload(LikedRecipeRecord.recipe))
                .order_by(LikedRecipeRecord.created_at.desc())
            )
            likes = result.scalars().all()
        return [recipe_from_row(like.recipe) for like in likes if like.recipe is not None]

    # ============================================================
    # Likes
    # ============================================================

    @gateway_call
    async def like_recipe(self, recipe_id: str) -> None:
        """Like a recipe. Liking twice is a Conflict; the store guards against it."""
        user = self.require_user()
        rid = parse_id(recipe_id, "Recipe")
        async with self.session_factory() as session:
            if await session.get(RecipeRecord, rid) is None:
                raise NotFound("Recipe not found")
            session.add(LikedRecipeRecord(user_id=user.id, recipe_id=rid))
            await session.commit()

    @gateway_call
    async def unlike_recipe(self, recipe_id: str) -> None:
        user = self.require_user()
        rid = parse_id(recipe_id, "Recipe")
        async with self.session_factory() as session:
            await session.execute(
                delete(LikedRecipeRecord).where(
                    LikedRecipeRecord.user_id == user.id,
                    LikedRecipeRecord.recipe_id == rid,
                )
            )
            await session.commit()

    @gateway_call
    async def is_recipe_liked(self, recipe_id: str) -> bool:
        user = self.require_user()
        rid = parse_id(recipe_id, "Recipe")
        async with self.session_factory() as session:
            result = await session.execute(
                select(LikedRecipeRecord.id).where(
                    LikedRecipeRecord.user_id == user.id,
                    LikedRecipeRecord.recipe_id == rid,
                )
            )
            return result.scalar_one_or_none() is not None
