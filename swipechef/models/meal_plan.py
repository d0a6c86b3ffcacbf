"""SQLAlchemy models for meal planning."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Date, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid

from swipechef.db.database import Base, utcnow


class MealPlanRecord(Base):
    """A single meal in a meal plan (e.g., Monday's dinner)."""

    __tablename__ = "meal_plans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    recipe_id = Column(Uuid(as_uuid=True), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    planned_date = Column(Date, nullable=False, index=True)
    meal_type = Column(String(20), nullable=False)  # breakfast, lunch, dinner, snack
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # One recipe per meal slot per day per user
    __table_args__ = (
        UniqueConstraint("user_id", "planned_date", "meal_type", name="uq_meal_plans_slot"),
    )

    recipe = relationship("RecipeRecord")

    def __repr__(self):
        return f"<MealPlanRecord {self.planned_date} {self.meal_type}: {self.recipe_id}>"
