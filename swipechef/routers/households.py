"""Household API endpoints: membership, roles and invitations."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from swipechef.gateway import Gateways
from swipechef.models.entities import Household, HouseholdInvitation, HouseholdMember
from swipechef.models.schemas import (
    HouseholdCreate,
    HouseholdJoin,
    HouseholdRename,
    InvitationCreate,
    MemberRoleUpdate,
)
from swipechef.routers.deps import get_gateways, unwrap

router = APIRouter(prefix="/api/households", tags=["households"])


# ============================================================
# Household
# ============================================================

@router.get("/me", response_model=Optional[Household])
async def get_my_household(gateways: Gateways = Depends(get_gateways)):
    """The caller's household, or null."""
    return unwrap(await gateways.households.get_user_household())


@router.post("", response_model=Household, status_code=201)
async def create_household(request: HouseholdCreate, gateways: Gateways = Depends(get_gateways)):
    """Create a household; the caller becomes its owner."""
    return unwrap(await gateways.households.create_household(request.name))


@router.post("/join", response_model=Household)
async def join_household(request: HouseholdJoin, gateways: Gateways = Depends(get_gateways)):
    return unwrap(await gateways.households.join_household_by_code(request.code))


@router.post("/leave")
async def leave_household(gateways: Gateways = Depends(get_gateways)):
    unwrap(await gateways.households.leave_household())
    return {"message": "Left household"}


@router.patch("/{household_id}", response_model=Household)
async def rename_household(household_id: str, request: HouseholdRename, gateways: Gateways = Depends(get_gateways)):
    return unwrap(await gateways.households.update_household_name(household_id, request.name))


# ============================================================
# Members
# ============================================================

@router.get("/{household_id}/members", response_model=List[HouseholdMember])
async def list_members(household_id: str, gateways: Gateways = Depends(get_gateways)):
    return unwrap(await gateways.households.get_household_members(household_id))


@router.delete("/members/{user_id}")
async def remove_member(user_id: str, gateways: Gateways = Depends(get_gateways)):
    """Owner/admin only."""
    unwrap(await gateways.households.remove_member(user_id))
    return {"message": "Member removed", "userId": user_id}


@router.patch("/members/{user_id}", response_model=HouseholdMember)
async def update_member_role(user_id: str, request: MemberRoleUpdate, gateways: Gateways = Depends(get_gateways)):
    """Owner only."""
    return unwrap(await gateways.households.update_member_role(user_id, request.role))


# ============================================================
# Invitations
# ============================================================

@router.get("/invitations/pending", response_model=List[HouseholdInvitation])
async def list_pending_invitations(gateways: Gateways = Depends(get_gateways)):
    """Invitations waiting for the caller's email."""
    return unwrap(await gateways.households.get_pending_invitations())


@router.post("/{household_id}/invitations", response_model=HouseholdInvitation, status_code=201)
async def invite(household_id: str, request: InvitationCreate, gateways: Gateways = Depends(get_gateways)):
    return unwrap(await gateways.households.invite_to_household(household_id, request.email))


@router.post("/invitations/{invitation_id}/accept", response_model=Household)
async def accept_invitation(invitation_id: str, gateways: Gateways = Depends(get_gateways)):
    return unwrap(await gateways.households.accept_invitation(invitation_id))


@router.post("/invitations/{invitation_id}/decline")
async def decline_invitation(invitation_id: str, gateways: Gateways = Depends(get_gateways)):
    unwrap(await gateways.households.decline_invitation(invitation_id))
    return {"message": "Invitation declined", "id": invitation_id}


@router.delete("/invitations/{invitation_id}")
async def cancel_invitation(invitation_id: str, gateways: Gateways = Depends(get_gateways)):
    unwrap(await gateways.households.cancel_invitation(invitation_id))
    return {"message": "Invitation cancelled", "id": invitation_id}
