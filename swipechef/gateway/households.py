"""Household requests: create/join/leave, members and invitations."""

from datetime import timedelta
from typing import Optional
import logging
import re
import secrets
import string

from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload

from swipechef.config import get_settings
from swipechef.db.database import as_utc, utcnow
from swipechef.errors import Conflict, InvalidCode, NotFound, ValidationFailed
from swipechef.gateway.base import BaseGateway, parse_id
from swipechef.gateway.mapping import household_from_row, invitation_from_row, member_from_row
from swipechef.gateway.results import gateway_call
from swipechef.models.entities import (
    Household,
    HouseholdInvitation,
    HouseholdMember,
    HouseholdRole,
    InvitationStatus,
)
from swipechef.models.household import HouseholdInvitationRecord, HouseholdMemberRecord, HouseholdRecord

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

ROLE_ORDER = {HouseholdRole.OWNER.value: 0, HouseholdRole.ADMIN.value: 1, HouseholdRole.MEMBER.value: 2}
MANAGER_ROLES = (HouseholdRole.OWNER.value, HouseholdRole.ADMIN.value)


# ============================================================
# Helper Functions
# ============================================================

def generate_household_code(length: int = 6) -> str:
    """Generate a random household code like 'EYN5S2'."""
    chars = string.ascii_uppercase + string.digits
    return ''.join(secrets.choice(chars) for _ in range(length))


def normalize_code(code: str) -> str:
    return code.strip().upper()


def is_expired(invitation: HouseholdInvitationRecord) -> bool:
    return as_utc(invitation.expires_at) <= utcnow()


class HouseholdGateway(BaseGateway):
    """Households the current user owns, joins or is invited to."""

    async def _membership(self, session, user_id: str) -> Optional[HouseholdMemberRecord]:
        result = await session.execute(
            select(HouseholdMemberRecord).where(HouseholdMemberRecord.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def _manager_membership(self, session, user_id: str, household_id=None) -> HouseholdMemberRecord:
        """The caller's membership, which must be owner or admin (of `household_id` if given)."""
        membership = await self._membership(session, user_id)
        if membership is None or (household_id is not None and membership.household_id != household_id):
            raise NotFound("Household not found")
        if membership.role not in MANAGER_ROLES:
            raise Conflict("Only the owner or an admin can do this")
        return membership

    async def _attach_member(self, session, household_id, user, role: HouseholdRole) -> HouseholdMemberRecord:
        member = HouseholdMemberRecord(
            household_id=household_id,
            user_id=user.id,
            user_email=(user.email or "").lower() or None,
            role=role.value,
        )
        session.add(member)
        await session.commit()
        return member

    async def _unique_code(self, session) -> str:
        """Draw codes until one isn't taken."""
        settings = get_settings()
        for _ in range(settings.household_code_attempts):
            code = generate_household_code(settings.household_code_length)
            taken = await session.execute(select(HouseholdRecord.id).where(HouseholdRecord.code == code))
            if taken.scalar_one_or_none() is None:
                return code
        raise Conflict("Could not generate a unique household code")

    async def _delete_household(self, household_id) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(HouseholdInvitationRecord).where(HouseholdInvitationRecord.household_id == household_id))
            await session.execute(delete(HouseholdMemberRecord).where(HouseholdMemberRecord.household_id == household_id))
            await session.execute(delete(HouseholdRecord).where(HouseholdRecord.id == household_id))
            await session.commit()

    # ============================================================
    # Households
    # ============================================================

    @gateway_call
    async def get_user_household(self) -> Optional[Household]:
        """The household the user belongs to, or None."""
        user = self.require_user()
        async with self.session_factory() as session:
            membership = await self._membership(session, user.id)
            if membership is None:
                return None
            household = await session.get(HouseholdRecord, membership.household_id)
        return household_from_row(household) if household else None

    @gateway_call
    async def create_household(self, name: str) -> Household:
        """
        Create a household owned by the current user.

        The household row and the owner membership are written separately;
        if the membership can't be written, the household is deleted again.
        """
        user = self.require_user()
        name = name.strip()
        if not name:
            raise ValidationFailed("Household name is required")

        async with self.session_factory() as session:
            if await self._membership(session, user.id) is not None:
                raise Conflict("User already belongs to a household")
            household = HouseholdRecord(name=name, code=await self._unique_code(session), created_by=user.id)
            session.add(household)
            await session.commit()
            await session.refresh(household)

        try:
            async with self.session_factory() as session:
                await self._attach_member(session, household.id, user, HouseholdRole.OWNER)
        except Exception:
            logger.warning("Could not attach owner, deleting household %s", household.id)
            await self._delete_household(household.id)
            raise

        logger.info("Household created: %s (%s)", household.name, household.code)
        return household_from_row(household)

    @gateway_call
    async def join_household_by_code(self, code: str) -> Household:
        """Join a household by its code; case and surrounding spaces don't matter."""
        user = self.require_user()
        search_code = normalize_code(code)
        if not search_code:
            raise ValidationFailed("Enter a household code")

        async with self.session_factory() as session:
            if await self._membership(session, user.id) is not None:
                raise Conflict("You must leave your current household first")

            result = await session.execute(select(HouseholdRecord).where(HouseholdRecord.code == search_code))
            household = result.scalar_one_or_none()
            if household is None:
                raise InvalidCode()

            await self._attach_member(session, household.id, user, HouseholdRole.MEMBER)

        return household_from_row(household)

    @gateway_call
    async def leave_household(self) -> None:
        """
        Leave the current household.

        An owner can only leave once they are the last member, in which case
        the household is deleted.
        """
        user = self.require_user()
        async with self.session_factory() as session:
            membership = await self._membership(session, user.id)
            if membership is None:
                raise NotFound("You're not in a household")

            if membership.role == HouseholdRole.OWNER.value:
                others = await session.execute(
                    select(func.count(HouseholdMemberRecord.id)).where(
                        HouseholdMemberRecord.household_id == membership.household_id,
                        HouseholdMemberRecord.user_id != user.id,
                    )
                )
                if others.scalar():
                    raise Conflict("Transfer ownership before leaving the household")
                household_id = membership.household_id
            else:
                household_id = None
                await session.delete(membership)
                await session.commit()

        if household_id is not None:
            await self._delete_household(household_id)

    @gateway_call
    async def update_household_name(self, household_id: str, name: str) -> Household:
        user = self.require_user()
        hid = parse_id(household_id, "Household")
        name = name.strip()
        if not name:
            raise ValidationFailed("Household name is required")

        async with self.session_factory() as session:
            await self._manager_membership(session, user.id, hid)
            household = await session.get(HouseholdRecord, hid)
            household.name = name
            await session.commit()
            await session.refresh(household)
        return household_from_row(household)

    # ============================================================
    # Members
    # ============================================================

    @gateway_call
    async def get_household_members(self, household_id: str) -> list[HouseholdMember]:
        """Members of a household the caller belongs to, owner first."""
        user = self.require_user()
        hid = parse_id(household_id, "Household")
        async with self.session_factory() as session:
            membership = await self._membership(session, user.id)
            if membership is None or membership.household_id != hid:
                raise NotFound("Household not found")
            result = await session.execute(
                select(HouseholdMemberRecord)
                .where(HouseholdMemberRecord.household_id == hid)
                .order_by(HouseholdMemberRecord.joined_at)
            )
            members = result.scalars().all()
        return [member_from_row(m) for m in sorted(members, key=lambda m: ROLE_ORDER.get(m.role, 99))]

    @gateway_call
    async def remove_member(self, user_id: str) -> None:
        """Remove someone else from the caller's household."""
        user = self.require_user()
        if user_id == user.id:
            raise Conflict("Use leave to remove yourself")
        async with self.session_factory() as session:
            manager = await self._manager_membership(session, user.id)
            target = await self._membership(session, user_id)
            if target is None or target.household_id != manager.household_id:
                raise NotFound("Member not found")
            if target.role == HouseholdRole.OWNER.value:
                raise Conflict("The owner can't be removed")
            await session.delete(target)
            await session.commit()

    @gateway_call
    async def update_member_role(self, user_id: str, role: HouseholdRole) -> HouseholdMember:
        """Owner only. Ownership itself can't be handed out this way."""
        user = self.require_user()
        role = HouseholdRole(role)
        if role == HouseholdRole.OWNER:
            raise ValidationFailed("A household has exactly one owner")
        async with self.session_factory() as session:
            manager = await self._manager_membership(session, user.id)
            if manager.role != HouseholdRole.OWNER.value:
                raise Conflict("Only the owner can change roles")
            target = await self._membership(session, user_id)
            if target is None or target.household_id != manager.household_id:
                raise NotFound("Member not found")
            if target.role == HouseholdRole.OWNER.value:
                raise Conflict("The owner's role can't be changed")
            target.role = role.value
            await session.commit()
            await session.refresh(target)
        return member_from_row(target)

    # ============================================================
    # Invitations
    # ============================================================

    @gateway_call
    async def invite_to_household(self, household_id: str, email: str) -> HouseholdInvitation:
        user = self.require_user()
        hid = parse_id(household_id, "Household")
        email = email.strip().lower()
        if not EMAIL_RE.match(email):
            raise ValidationFailed("Enter a valid email address")

        async with self.session_factory() as session:
            await self._manager_membership(session, user.id, hid)
            household = await session.get(HouseholdRecord, hid)

            already_member = await session.execute(
                select(HouseholdMemberRecord.id).where(
                    HouseholdMemberRecord.household_id == hid,
                    HouseholdMemberRecord.user_email == email,
                )
            )
            if already_member.scalar_one_or_none() is not None:
                raise Conflict(f"{email} is already a member")

            pending = await session.execute(
                select(HouseholdInvitationRecord).where(
                    HouseholdInvitationRecord.household_id == hid,
                    HouseholdInvitationRecord.invited_email == email,
                    HouseholdInvitationRecord.status == InvitationStatus.PENDING.value,
                )
            )
            if any(not is_expired(inv) for inv in pending.scalars().all()):
                raise Conflict(f"An invitation is already pending for {email}")

            invitation = HouseholdInvitationRecord(
                household_id=hid,
                invited_by=user.id,
                invited_email=email,
                status=InvitationStatus.PENDING.value,
                expires_at=utcnow() + timedelta(days=get_settings().invitation_ttl_days),
            )
            session.add(invitation)
            await session.commit()
            await session.refresh(invitation)

        logger.info("Invitation sent to %s for household %s", email, hid)
        return invitation_from_row(invitation, household.name)

    @gateway_call
    async def get_pending_invitations(self) -> list[HouseholdInvitation]:
        """Unexpired pending invitations addressed to the current user's email."""
        user = self.require_user()
        if not user.email:
            return []
        async with self.session_factory() as session:
            result = await session.execute(
                select(HouseholdInvitationRecord)
                .where(
                    HouseholdInvitationRecord.invited_email == user.email.lower(),
                    HouseholdInvitationRecord.status == InvitationStatus.PENDING.value,
                )
                .options(selectinload(HouseholdInvitationRecord.household))
                .order_by(HouseholdInvitationRecord.created_at.desc())
            )
            invitations = result.scalars().all()
        return [
            invitation_from_row(inv, inv.household.name if inv.household else None)
            for inv in invitations
            if not is_expired(inv)
        ]

    async def _pending_invitation(self, session, invitation_id: str) -> HouseholdInvitationRecord:
        iid = parse_id(invitation_id, "Invitation")
        result = await session.execute(
            select(HouseholdInvitationRecord)
            .where(HouseholdInvitationRecord.id == iid)
            .options(selectinload(HouseholdInvitationRecord.household))
        )
        invitation = result.scalar_one_or_none()
        if invitation is None:
            raise NotFound("Invitation not found")
        if invitation.status != InvitationStatus.PENDING.value:
            raise Conflict(f"Invitation was already {invitation.status}")
        return invitation

    def _check_addressee(self, invitation: HouseholdInvitationRecord, user) -> None:
        if (user.email or "").lower() != invitation.invited_email:
            raise NotFound("Invitation not found")

    @gateway_call
    async def accept_invitation(self, invitation_id: str) -> Household:
        """Accept a pending invitation; the user joins as a member."""
        user = self.require_user()
        async with self.session_factory() as session:
            invitation = await self._pending_invitation(session, invitation_id)
            self._check_addressee(invitation, user)
            if is_expired(invitation):
                raise Conflict("Invitation has expired")
            if await self._membership(session, user.id) is not None:
                raise Conflict("You must leave your current household first")

            invitation.status = InvitationStatus.ACCEPTED.value
            household = invitation.household
            await self._attach_member(session, household.id, user, HouseholdRole.MEMBER)

        return household_from_row(household)

    @gateway_call
    async def decline_invitation(self, invitation_id: str) -> None:
        user = self.require_user()
        async with self.session_factory() as session:
            invitation = await self._pending_invitation(session, invitation_id)
            self._check_addressee(invitation, user)
            invitation.status = InvitationStatus.DECLINED.value
            await session.commit()

    @gateway_call
    async def cancel_invitation(self, invitation_id: str) -> None:
        """Withdraw an invitation (the inviter, or an owner/admin of the household)."""
        user = self.require_user()
        async with self.session_factory() as session:
            invitation = await self._pending_invitation(session, invitation_id)
            if invitation.invited_by != user.id:
                await self._manager_membership(session, user.id, invitation.household_id)
            invitation.status = InvitationStatus.CANCELLED.value
            await session.commit()
