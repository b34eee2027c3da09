import logging
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import delete, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFound
from app.db.session import storage_errors
from app.models.group import Group, GroupSlot
from app.models.member import Member
from app.models.payment import Payment
from app.models.user import User
from app.schemas.member import MemberCreate, MemberRead, MemberSlot, MemberSlotsInfo, MemberUpdate
from app.services.cache import cache
from app.utils.months import month_of

logger = logging.getLogger(__name__)


async def get_member_or_404(session: AsyncSession, member_id: uuid.UUID) -> Member:
    async with storage_errors():
        member = await session.get(Member, member_id)
    if not member:
        raise NotFound("Member", member_id)
    return member


async def list_members(session: AsyncSession, search: str | None = None) -> list[MemberRead]:
    """
    Members newest first, optionally filtered by name, e-mail or phone.
    """
    async def load() -> list[MemberRead]:
        query = select(Member).order_by(Member.created_at.desc())
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                Member.first_name.ilike(pattern),
                Member.last_name.ilike(pattern),
                Member.email.ilike(pattern),
                Member.phone.ilike(pattern),
            ))
        async with storage_errors():
            result = await session.execute(query)
        return [MemberRead.model_validate(m) for m in result.scalars().all()]

    return await cache.get_or_load("members", {"search": search or None}, load)


async def create_member(session: AsyncSession, member_in: MemberCreate) -> Member:
    member = Member.model_validate(member_in)
    session.add(member)
    async with storage_errors():
        await session.commit()
    await session.refresh(member)
    cache.invalidate("members")
    cache.invalidate("dashboard")
    logger.info(f"Registered member {member.id}")
    return member


async def update_member(session: AsyncSession, member_id: uuid.UUID, member_in: MemberUpdate) -> Member:
    member = await get_member_or_404(session, member_id)
    member_data = member_in.model_dump(exclude_none=True)
    for key, value in member_data.items():
        setattr(member, key, value)
    member.updated_at = datetime.utcnow()
    session.add(member)
    async with storage_errors():
        await session.commit()
    await session.refresh(member)
    # names show up in slot registries
    cache.invalidate("members")
    cache.invalidate("slots")
    cache.invalidate("dashboard")
    return member


async def delete_member(session: AsyncSession, member_id: uuid.UUID) -> None:
    """
    Delete the member with all of their slots and payments.
    Linked user accounts are kept but unlinked.
    """
    member = await get_member_or_404(session, member_id)
    async with storage_errors():
        await session.execute(delete(Payment).where(Payment.member_id == member_id))
        await session.execute(delete(GroupSlot).where(GroupSlot.member_id == member_id))
        await session.execute(update(User).where(User.member_id == member_id).values(member_id=None))
        await session.delete(member)
        await session.commit()
    cache.invalidate("members")
    cache.invalidate("slots")
    cache.invalidate("groups")
    cache.invalidate("dashboard")
    logger.info(f"Deleted member {member_id}")


async def get_member_slots_info(session: AsyncSession, member_id: uuid.UUID, today: date | None = None) -> MemberSlotsInfo:
    """
    Slots of the member across every group.

    `next_receive_month` is the earliest assigned month not before the
    current month.
    """
    await get_member_or_404(session, member_id)
    current_month = month_of(today or date.today())

    async with storage_errors():
        result = await session.execute(
            select(GroupSlot.group_id, Group.name, GroupSlot.assigned_month, Group.monthly_amount)
            .join(Group, Group.id == GroupSlot.group_id)
            .where(GroupSlot.member_id == member_id)
            .order_by(GroupSlot.assigned_month)
        )
    slots = [
        MemberSlot(group_id=group_id, group_name=name, assigned_month=month, monthly_amount=amount)
        for group_id, name, month, amount in result.all()
    ]

    upcoming = [slot.assigned_month for slot in slots if slot.assigned_month >= current_month]
    return MemberSlotsInfo(
        total_slots=len(slots),
        total_monthly_amount=sum((Decimal(slot.monthly_amount) for slot in slots), Decimal("0")),
        next_receive_month=upcoming[0] if upcoming else None,
        is_active=bool(upcoming),
        slots=slots,
    )
