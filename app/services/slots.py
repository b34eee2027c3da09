"""
Monthly slot allocation for savings groups.

A group runs from `start_date` to `end_date`; each month in that range can be
claimed by at most one member (enforced by the `uq_groupslot_group_month`
constraint), while one member may claim several months.
"""
import logging
import uuid

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import DuplicateMonthClaim, NotFound, ValidationError
from app.db.session import storage_errors
from app.models.group import Group, GroupSlot
from app.models.member import Member
from app.models.payment import Payment
from app.schemas.group import Claimant, GroupMemberRead, MonthSlot
from app.services.cache import cache
from app.utils.months import expand_months, month_in_range, parse_month

logger = logging.getLogger(__name__)


async def get_group_or_404(session: AsyncSession, group_id: uuid.UUID) -> Group:
    async with storage_errors():
        group = await session.get(Group, group_id)
    if not group:
        raise NotFound("Group", group_id)
    return group


async def _load_registry(session: AsyncSession, group_id: uuid.UUID) -> dict[str, Claimant]:
    query = (
        select(GroupSlot.assigned_month, Member.id, Member.first_name, Member.last_name)
        .join(Member, Member.id == GroupSlot.member_id)
        .where(GroupSlot.group_id == group_id)
        .order_by(GroupSlot.assigned_month)
    )
    async with storage_errors():
        result = await session.execute(query)
    return {
        month: Claimant(member_id=member_id, name=f"{first_name} {last_name}")
        for month, member_id, first_name, last_name in result.all()
    }


async def get_registry(session: AsyncSession, group_id: uuid.UUID) -> dict[str, Claimant]:
    """
    Current claims of a group as month -> claimant, months ascending.
    """
    registry = await cache.get_or_load(
        "slots",
        {"group_id": group_id},
        lambda: _load_registry(session, group_id),
    )
    return dict(registry)


async def get_all_months(session: AsyncSession, group_id: uuid.UUID) -> list[MonthSlot]:
    """
    Every month of the group's range tagged as reserved or available.

    Claims outside the range are not listed here; see `find_orphans`.
    """
    group = await get_group_or_404(session, group_id)
    registry = await get_registry(session, group_id)

    months = []
    for month in expand_months(group.start_date, group.end_date):
        claimant = registry.get(month)
        months.append(MonthSlot(
            month=month,
            reserved=claimant is not None,
            reserved_by=claimant.name if claimant else None,
            member_id=claimant.member_id if claimant else None,
        ))
    return months


async def get_group_members(session: AsyncSession, group_id: uuid.UUID) -> list[GroupMemberRead]:
    await get_group_or_404(session, group_id)
    query = (
        select(GroupSlot, Member.first_name, Member.last_name)
        .join(Member, Member.id == GroupSlot.member_id)
        .where(GroupSlot.group_id == group_id)
        .order_by(GroupSlot.assigned_month)
    )
    async with storage_errors():
        result = await session.execute(query)
    return [
        GroupMemberRead(
            id=slot.id,
            group_id=slot.group_id,
            member_id=slot.member_id,
            assigned_month=slot.assigned_month,
            created_at=slot.created_at,
            member_name=f"{first_name} {last_name}",
        )
        for slot, first_name, last_name in result.all()
    ]


async def assign(session: AsyncSession, group_id: uuid.UUID, member_id: uuid.UUID, month: str) -> GroupSlot:
    """
    Give `month` of the group to the member.

    Raises:
        ValidationError: malformed month, month outside the group range, or
            the group already has `max_members` slots.
        NotFound: unknown group or member.
        DuplicateMonthClaim: the month is already held, by anyone.
    """
    parse_month(month)
    group = await get_group_or_404(session, group_id)

    if not month_in_range(month, group.start_date, group.end_date):
        raise ValidationError(
            f"Month {month} is outside the group range {group.start_date} to {group.end_date}",
            {"month": month, "start_date": group.start_date, "end_date": group.end_date},
        )

    async with storage_errors():
        member = await session.get(Member, member_id)
    if not member:
        raise NotFound("Member", member_id)

    async with storage_errors():
        result = await session.execute(
            select(GroupSlot).where(GroupSlot.group_id == group_id, GroupSlot.assigned_month == month)
        )
        existing = result.scalars().first()
    if existing:
        raise DuplicateMonthClaim(group_id, month, await _claimant_name(session, group_id, month))

    async with storage_errors():
        result = await session.execute(
            select(func.count()).select_from(GroupSlot).where(GroupSlot.group_id == group_id)
        )
        slot_count = result.scalar_one()
    if slot_count >= group.max_members:
        raise ValidationError(
            f"Group {group.name} has no available slots ({slot_count}/{group.max_members})",
            {"max_members": group.max_members},
        )

    slot = GroupSlot(group_id=group_id, member_id=member_id, assigned_month=month)
    session.add(slot)
    try:
        async with storage_errors():
            await session.commit()
    except IntegrityError:
        # lost a race against a concurrent claim for the same month
        await session.rollback()
        cache.invalidate("slots", group_id=group_id)
        raise DuplicateMonthClaim(group_id, month, await _claimant_name(session, group_id, month))

    await session.refresh(slot)
    _invalidate_group(group_id)
    logger.info(f"Assigned {month} of group {group_id} to member {member_id}")
    return slot


async def unassign(session: AsyncSession, group_id: uuid.UUID, member_id: uuid.UUID, month: str | None = None) -> int:
    """
    Remove one claim, or every claim of the member in the group when no
    month is given. Payments of removed slots are kept with `slot_id` cleared.

    Returns the number of slots removed.
    """
    if month is not None:
        parse_month(month)
    await get_group_or_404(session, group_id)

    query = select(GroupSlot).where(GroupSlot.group_id == group_id, GroupSlot.member_id == member_id)
    if month is not None:
        query = query.where(GroupSlot.assigned_month == month)

    async with storage_errors():
        result = await session.execute(query)
        slots = result.scalars().all()
        if not slots:
            return 0

        slot_ids = [slot.id for slot in slots]
        await session.execute(
            update(Payment).where(Payment.slot_id.in_(slot_ids)).values(slot_id=None)
        )
        for slot in slots:
            await session.delete(slot)
        await session.commit()

    _invalidate_group(group_id)
    logger.info(f"Removed {len(slot_ids)} slot(s) of member {member_id} from group {group_id}")
    return len(slot_ids)


async def find_orphans(session: AsyncSession, group_id: uuid.UUID, start: str, end: str) -> list[GroupSlot]:
    """
    Slots of the group that fall outside [start, end].
    """
    async with storage_errors():
        result = await session.execute(
            select(GroupSlot)
            .where(GroupSlot.group_id == group_id)
            .where((GroupSlot.assigned_month < start) | (GroupSlot.assigned_month > end))
            .order_by(GroupSlot.assigned_month)
        )
    return list(result.scalars().all())


async def _claimant_name(session: AsyncSession, group_id: uuid.UUID, month: str) -> str | None:
    async with storage_errors():
        result = await session.execute(
            select(Member.first_name, Member.last_name)
            .join(GroupSlot, GroupSlot.member_id == Member.id)
            .where(GroupSlot.group_id == group_id, GroupSlot.assigned_month == month)
        )
        row = result.first()
    return f"{row[0]} {row[1]}" if row else None


def _invalidate_group(group_id: uuid.UUID) -> None:
    cache.invalidate("slots", group_id=group_id)
    cache.invalidate("groups")
    cache.invalidate("members")
    cache.invalidate("dashboard")
