import logging
import uuid
from datetime import datetime
from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ValidationError
from app.db.session import storage_errors
from app.models.enums import PaymentStatus
from app.models.group import Group, GroupSlot
from app.models.payment import Payment
from app.schemas.group import GroupCreate, GroupSummary, GroupUpdate
from app.services.cache import cache
from app.services.slots import find_orphans, get_group_or_404
from app.utils.financials import as_money
from app.utils.months import months_between

logger = logging.getLogger(__name__)

PAID_STATUSES = (PaymentStatus.RECEIVED, PaymentStatus.SETTLED)


async def create_group(session: AsyncSession, group_in: GroupCreate) -> Group:
    group = Group.model_validate(
        group_in,
        update={"duration": months_between(group_in.start_date, group_in.end_date) + 1},
    )
    session.add(group)
    await _commit_unique_name(session, group_in.name)
    await session.refresh(group)
    _invalidate()
    logger.info(f"Created group {group.name} ({group.start_date} to {group.end_date})")
    return group


async def update_group(session: AsyncSession, group_id: uuid.UUID, group_in: GroupUpdate, purge_orphans: bool = False) -> Group:
    """
    Replace every field of the group.

    Narrowing the month range would leave slots outside it. Such an update is
    refused unless `purge_orphans` is set, in which case those slots are
    deleted in the same transaction.
    """
    group = await get_group_or_404(session, group_id)

    orphans = await find_orphans(session, group_id, group_in.start_date, group_in.end_date)
    if orphans and not purge_orphans:
        raise ValidationError(
            "The new range leaves assigned months outside the group",
            {"orphaned_months": [slot.assigned_month for slot in orphans]},
        )

    for key, value in group_in.model_dump().items():
        setattr(group, key, value)
    group.duration = months_between(group.start_date, group.end_date) + 1
    group.updated_at = datetime.utcnow()
    session.add(group)

    if orphans:
        slot_ids = [slot.id for slot in orphans]
        async with storage_errors():
            await session.execute(
                update(Payment).where(Payment.slot_id.in_(slot_ids)).values(slot_id=None)
            )
            await session.execute(delete(GroupSlot).where(GroupSlot.id.in_(slot_ids)))
        logger.warning(f"Purged {len(slot_ids)} orphaned slot(s) from group {group_id}")

    await _commit_unique_name(session, group_in.name)
    await session.refresh(group)
    _invalidate(group_id)
    return group


async def delete_group(session: AsyncSession, group_id: uuid.UUID) -> None:
    """
    Delete the group along with its slots and payments.
    """
    group = await get_group_or_404(session, group_id)
    async with storage_errors():
        await session.execute(delete(Payment).where(Payment.group_id == group_id))
        await session.execute(delete(GroupSlot).where(GroupSlot.group_id == group_id))
        await session.delete(group)
        await session.commit()
    _invalidate(group_id)
    logger.info(f"Deleted group {group_id}")


async def get_group_summary(session: AsyncSession, group_id: uuid.UUID) -> GroupSummary:
    group = await get_group_or_404(session, group_id)

    async with storage_errors():
        result = await session.execute(
            select(func.count(GroupSlot.id), func.count(func.distinct(GroupSlot.member_id)))
            .where(GroupSlot.group_id == group_id)
        )
        total_slots, unique_members = result.one()

        result = await session.execute(
            select(func.count(func.distinct(Payment.slot_id)), func.coalesce(func.sum(Payment.amount), 0))
            .where(Payment.group_id == group_id, Payment.status.in_(PAID_STATUSES))
        )
        paid_slots, collected = result.one()

    return GroupSummary(
        group_id=group.id,
        name=group.name,
        total_months=group.duration,
        total_slots=total_slots,
        available_slots=max(group.max_members - total_slots, 0),
        unique_members=unique_members,
        paid_slots=paid_slots,
        collected_amount=as_money(collected),
    )


async def _commit_unique_name(session: AsyncSession, name: str) -> None:
    try:
        async with storage_errors():
            await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationError(f"A group named '{name}' already exists", {"name": name})


def _invalidate(group_id: uuid.UUID | None = None) -> None:
    if group_id is not None:
        cache.invalidate("slots", group_id=group_id)
    cache.invalidate("groups")
    cache.invalidate("dashboard")
