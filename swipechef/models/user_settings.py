"""SQLAlchemy model for per-user planner preferences."""

from sqlalchemy import Column, String, Boolean, DateTime, Uuid
import uuid

from swipechef.db.database import Base, utcnow


class UserSettingsRecord(Base):
    """One row per user; which meal slots the planner shows."""

    __tablename__ = "user_settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    show_breakfast = Column(Boolean, nullable=False, default=True)
    show_lunch = Column(Boolean, nullable=False, default=True)
    show_dinner = Column(Boolean, nullable=False, default=True)
    show_snack = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<UserSettingsRecord user={self.user_id}>"
