"""SQLAlchemy models for households and their invitations."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid

from swipechef.db.database import Base, utcnow


class HouseholdRecord(Base):
    """Household that members share recipes and meal plans with."""

    __tablename__ = "households"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    code = Column(String(12), unique=True, nullable=False, index=True)
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    members = relationship("HouseholdMemberRecord", back_populates="household", cascade="all, delete-orphan")
    invitations = relationship("HouseholdInvitationRecord", back_populates="household", cascade="all, delete-orphan")


class HouseholdMemberRecord(Base):
    """Membership of a user in a household.

    user_id is unique: a user belongs to at most one household.
    """

    __tablename__ = "household_members"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    household_id = Column(Uuid(as_uuid=True), ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    user_email = Column(String(255), nullable=True)
    role = Column(String(16), nullable=False, default="member")  # owner|admin|member
    joined_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    household = relationship("HouseholdRecord", back_populates="members")


class HouseholdInvitationRecord(Base):
    """Invite for an email address to join a household."""

    __tablename__ = "household_invitations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    household_id = Column(Uuid(as_uuid=True), ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by = Column(String(64), nullable=False)
    invited_email = Column(String(255), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="pending")  # pending|accepted|declined|cancelled
    created_at = Column(DateTime(timezone=True), default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    household = relationship("HouseholdRecord", back_populates="invitations")
