from typing import List
import uuid
from fastapi import APIRouter, Query

from app.api import deps
from app.core.errors import NotFound
from app.models.enums import UserRole
from app.schemas.member import MemberCreate, MemberRead, MemberSlotsInfo, MemberUpdate
from app.schemas.payment import PaymentRead
from app.schemas.response import APIResponse
from app.services import members as member_service
from app.services import payments as payment_service

router = APIRouter()

@router.get("/", response_model=APIResponse[List[MemberRead]])
async def list_members(
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
    q: str | None = Query(None, description="Search first/last name, e-mail or phone"),
):
    """
    List members, newest first.
    """
    members = await member_service.list_members(session, q)
    return APIResponse(message="Members retrieved", data=members)

@router.post("/", response_model=APIResponse[MemberRead])
async def create_member(member_in: MemberCreate, admin: deps.CurrentAdmin, session: deps.SessionDep):
    member = await member_service.create_member(session, member_in)
    return APIResponse(message="Member created successfully", data=member)

@router.get("/{member_id}", response_model=APIResponse[MemberRead])
async def get_member(member_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    """
    Members can read their own record; admins can read any.
    """
    _check_access(current_user, member_id)
    member = await member_service.get_member_or_404(session, member_id)
    return APIResponse(message="Member details retrieved", data=member)

@router.put("/{member_id}", response_model=APIResponse[MemberRead])
async def update_member(member_id: uuid.UUID, member_in: MemberUpdate, admin: deps.CurrentAdmin, session: deps.SessionDep):
    member = await member_service.update_member(session, member_id, member_in)
    return APIResponse(message="Member updated successfully", data=member)

@router.delete("/{member_id}", response_model=APIResponse[dict])
async def delete_member(member_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Delete a member together with their slots and payments.
    """
    await member_service.delete_member(session, member_id)
    return APIResponse(message="Member deleted successfully", data={"member_id": member_id})

@router.get("/{member_id}/slots", response_model=APIResponse[MemberSlotsInfo])
async def get_member_slots(member_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    _check_access(current_user, member_id)
    info = await member_service.get_member_slots_info(session, member_id)
    return APIResponse(message="Member slots retrieved", data=info)

@router.get("/{member_id}/payments", response_model=APIResponse[List[PaymentRead]])
async def get_member_payments(member_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    _check_access(current_user, member_id)
    payments = await payment_service.get_member_payment_history(session, member_id)
    return APIResponse(message="Payment history retrieved", data=payments)

def _check_access(user, member_id: uuid.UUID) -> None:
    if user.role != UserRole.ADMIN and user.member_id != member_id:
        raise NotFound("Member", member_id)
