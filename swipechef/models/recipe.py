"""SQLAlchemy models for recipes and the like relation."""

from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid

from swipechef.db.database import Base, JSONType, utcnow


class RecipeRecord(Base):
    """
    Recipe row - the 'recipes' table.

    Ingredients, equipment and steps are stored as JSON arrays on the row;
    ingredients have no lifecycle of their own.
    """
    __tablename__ = "recipes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    meal_type = Column(String(20), nullable=False)  # breakfast|lunch|dinner|snack|full-meal|all
    is_simple = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    prep_time = Column(Integer, nullable=False, default=0)  # minutes
    cook_time = Column(Integer, nullable=False, default=0)  # minutes
    servings = Column(Integer, nullable=False, default=1)
    difficulty = Column(String(16), nullable=False, default="easy")  # easy|medium|hard
    category = Column(String(100), nullable=False, default="")
    ingredients = Column(JSONType, nullable=False, default=list)
    equipment = Column(JSONType, nullable=True)
    steps = Column(JSONType, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<RecipeRecord {self.id}: {self.title}>"


class LikedRecipeRecord(Base):
    """
    LikedRecipeRecord - which recipes a user swiped right on.

    One row per (user, recipe).
    """
    __tablename__ = "liked_recipes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    recipe_id = Column(Uuid(as_uuid=True), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "recipe_id", name="uq_liked_recipes_user_recipe"),
    )

    # Relationship to recipe
    recipe = relationship("RecipeRecord")

    def __repr__(self):
        return f"<LikedRecipeRecord user={self.user_id} recipe={self.recipe_id}>"
