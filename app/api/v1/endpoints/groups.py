from typing import List
import uuid
from fastapi import APIRouter, Query
from sqlmodel import select

from app.api import deps
from app.models.group import Group
from app.schemas.group import (
    GroupCreate, GroupMemberRead, GroupRead, GroupSummary, GroupUpdate,
    MonthSlot, SlotAssign, SlotRead,
)
from app.schemas.response import APIResponse
from app.services import groups as group_service
from app.services import slots as slot_service

router = APIRouter()

@router.get("/", response_model=APIResponse[List[GroupRead]])
async def list_groups(current_user: deps.CurrentUser, session: deps.SessionDep):
    """
    List all groups ordered by name.
    """
    result = await session.execute(select(Group).order_by(Group.name))
    return APIResponse(message="Groups retrieved", data=result.scalars().all())

@router.post("/", response_model=APIResponse[GroupRead])
async def create_group(group_in: GroupCreate, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Create a new group.
    """
    group = await group_service.create_group(session, group_in)
    return APIResponse(message="Group created successfully", data=group)

@router.get("/{group_id}", response_model=APIResponse[GroupRead])
async def get_group(group_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    group = await slot_service.get_group_or_404(session, group_id)
    return APIResponse(message="Group details retrieved", data=group)

@router.put("/{group_id}", response_model=APIResponse[GroupRead])
async def update_group(
    group_id: uuid.UUID,
    group_in: GroupUpdate,
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
    purge_orphans: bool = Query(False, description="Delete slots that fall outside the new month range"),
):
    """
    Replace every field of a group.

    Fails with 400 and the list of orphaned months when the new range would
    leave assigned slots outside it, unless `purge_orphans` is set.
    """
    group = await group_service.update_group(session, group_id, group_in, purge_orphans=purge_orphans)
    return APIResponse(message="Group updated successfully", data=group)

@router.delete("/{group_id}", response_model=APIResponse[dict])
async def delete_group(group_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Delete a group together with its slots and payments.
    """
    await group_service.delete_group(session, group_id)
    return APIResponse(message="Group deleted successfully", data={"group_id": group_id})

@router.get("/{group_id}/summary", response_model=APIResponse[GroupSummary])
async def get_group_summary(group_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    summary = await group_service.get_group_summary(session, group_id)
    return APIResponse(message="Group summary retrieved", data=summary)

@router.get("/{group_id}/months", response_model=APIResponse[List[MonthSlot]])
async def get_group_months(group_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    """
    Every month of the group's range, marked reserved (with the claimant) or available.
    """
    months = await slot_service.get_all_months(session, group_id)
    return APIResponse(message="Group months retrieved", data=months)

@router.get("/{group_id}/members", response_model=APIResponse[List[GroupMemberRead]])
async def get_group_members(group_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    """
    Slots of the group with member names, ordered by month.
    """
    members = await slot_service.get_group_members(session, group_id)
    return APIResponse(message="Members retrieved", data=members)

@router.post("/{group_id}/members", response_model=APIResponse[SlotRead])
async def assign_member(group_id: uuid.UUID, slot_in: SlotAssign, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Assign a month of the group to a member. A member may hold several months.
    """
    slot = await slot_service.assign(session, group_id, slot_in.member_id, slot_in.assigned_month)
    return APIResponse(message="Member assigned successfully", data=slot)

@router.delete("/{group_id}/members/{member_id}", response_model=APIResponse[dict])
async def remove_member(
    group_id: uuid.UUID,
    member_id: uuid.UUID,
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
    month: str | None = Query(None, description="Only remove this month (YYYY-MM); all months of the member otherwise"),
):
    removed = await slot_service.unassign(session, group_id, member_id, month)
    return APIResponse(
        message="Member removed successfully" if removed else "No matching slots",
        data={"member_id": member_id, "removed": removed},
    )

@router.get("/{group_id}/orphans", response_model=APIResponse[List[SlotRead]])
async def get_orphaned_slots(group_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Slots whose month lies outside the group's current range.
    """
    group = await slot_service.get_group_or_404(session, group_id)
    orphans = await slot_service.find_orphans(session, group_id, group.start_date, group.end_date)
    return APIResponse(message="Orphaned slots retrieved", data=orphans)
