"""
Payment recording.

The amount of a payment always equals the group's monthly amount at the
time it is recorded; deadline and late fine come from the group settings.
"""
import logging
import uuid
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFound, ValidationError
from app.db.session import storage_errors
from app.models.bank import Bank
from app.models.enums import PaymentMethod, PaymentStatus
from app.models.group import Group, GroupSlot
from app.models.payment import Payment
from app.schemas.payment import PaymentCreate, PaymentStats, PaymentUpdate
from app.services.cache import cache
from app.services.members import get_member_or_404
from app.services.messaging import notify_payment
from app.services.slots import get_group_or_404
from app.utils.financials import as_money, calculate_late_fine

logger = logging.getLogger(__name__)


async def get_payment_or_404(session: AsyncSession, payment_id: uuid.UUID) -> Payment:
    async with storage_errors():
        payment = await session.get(Payment, payment_id)
    if not payment:
        raise NotFound("Payment", payment_id)
    return payment


async def list_payments(
    session: AsyncSession,
    *,
    status: PaymentStatus | None = None,
    payment_method: PaymentMethod | None = None,
    group_id: uuid.UUID | None = None,
    member_id: uuid.UUID | None = None,
    payment_month: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> list[Payment]:
    query = select(Payment)
    if status is not None:
        query = query.where(Payment.status == status)
    if payment_method is not None:
        query = query.where(Payment.payment_method == payment_method)
    if group_id is not None:
        query = query.where(Payment.group_id == group_id)
    if member_id is not None:
        query = query.where(Payment.member_id == member_id)
    if payment_month is not None:
        query = query.where(Payment.payment_month == payment_month)
    if start_date is not None:
        query = query.where(Payment.payment_date >= start_date)
    if end_date is not None:
        query = query.where(Payment.payment_date <= end_date)
    query = query.order_by(Payment.payment_date.desc(), Payment.created_at.desc()).offset(offset).limit(limit)

    async with storage_errors():
        result = await session.execute(query)
    return list(result.scalars().all())


async def create_payment(session: AsyncSession, payment_in: PaymentCreate) -> Payment:
    group = await get_group_or_404(session, payment_in.group_id)
    member = await get_member_or_404(session, payment_in.member_id)

    async with storage_errors():
        slot = await session.get(GroupSlot, payment_in.slot_id)
    if not slot:
        raise NotFound("Slot", payment_in.slot_id)
    if slot.group_id != group.id or slot.member_id != member.id:
        raise ValidationError(
            "Slot does not belong to this member and group",
            {"slot_id": str(slot.id)},
        )
    await _check_banks(session, payment_in.sender_bank_id, payment_in.receiver_bank_id)

    amount = group.monthly_amount
    is_late, fine, deadline = calculate_late_fine(group, payment_in.payment_date, amount)

    payment = Payment.model_validate(
        payment_in,
        update={
            "amount": amount,
            "fine_amount": fine,
            "is_late_payment": is_late,
            "payment_deadline": deadline,
        },
    )
    session.add(payment)
    if payment.status in (PaymentStatus.RECEIVED, PaymentStatus.SETTLED):
        _touch_last_payment(member, payment.payment_date)
        session.add(member)

    async with storage_errors():
        await session.commit()
    await session.refresh(payment)
    _invalidate()
    logger.info(f"Recorded payment {payment.id} of {amount} for group {group.id}, member {member.id} ({payment.payment_month})")

    await notify_payment(session, payment, member, group.name)
    return payment


async def update_payment(session: AsyncSession, payment_id: uuid.UUID, payment_in: PaymentUpdate) -> Payment:
    payment = await get_payment_or_404(session, payment_id)
    payment_data = payment_in.model_dump(exclude_unset=True)
    await _check_banks(session, payment_data.get("sender_bank_id"), payment_data.get("receiver_bank_id"))

    for key, value in payment_data.items():
        setattr(payment, key, value)

    if "payment_date" in payment_data:
        group = await get_group_or_404(session, payment.group_id)
        payment.is_late_payment, payment.fine_amount, payment.payment_deadline = calculate_late_fine(
            group, payment.payment_date, payment.amount
        )

    if payment.status in (PaymentStatus.RECEIVED, PaymentStatus.SETTLED):
        member = await get_member_or_404(session, payment.member_id)
        _touch_last_payment(member, payment.payment_date)
        session.add(member)

    payment.updated_at = datetime.utcnow()
    session.add(payment)
    async with storage_errors():
        await session.commit()
    await session.refresh(payment)
    _invalidate()
    return payment


async def delete_payment(session: AsyncSession, payment_id: uuid.UUID) -> None:
    payment = await get_payment_or_404(session, payment_id)
    async with storage_errors():
        await session.delete(payment)
        await session.commit()
    _invalidate()


async def get_payment_stats(session: AsyncSession) -> PaymentStats:
    async def load() -> PaymentStats:
        async with storage_errors():
            result = await session.execute(
                select(Payment.amount, Payment.status, Payment.payment_method, Payment.fine_amount)
            )
        return summarize(result.all())

    return await cache.get_or_load("payments", {"view": "stats"}, load)


def summarize(rows) -> PaymentStats:
    """
    Fold (amount, status, method, fine) rows into totals.
    """
    stats = PaymentStats()
    for amount, status, method, fine in rows:
        amount = as_money(amount)
        stats.total_payments += 1
        stats.total_amount += amount
        stats.total_fines += as_money(fine)
        if status == PaymentStatus.RECEIVED:
            stats.received_amount += amount
            stats.received_count += 1
        elif status == PaymentStatus.PENDING:
            stats.pending_amount += amount
            stats.pending_count += 1
        elif status == PaymentStatus.NOT_PAID:
            stats.not_paid_amount += amount
            stats.not_paid_count += 1
        elif status == PaymentStatus.SETTLED:
            stats.settled_amount += amount
            stats.settled_count += 1

        if method == PaymentMethod.CASH:
            stats.cash_payments += 1
        elif method == PaymentMethod.BANK_TRANSFER:
            stats.bank_transfer_payments += 1
    return stats


async def get_member_payment_history(session: AsyncSession, member_id: uuid.UUID) -> list[Payment]:
    await get_member_or_404(session, member_id)
    async with storage_errors():
        result = await session.execute(
            select(Payment)
            .where(Payment.member_id == member_id)
            .order_by(Payment.payment_month.desc(), Payment.payment_date.desc())
        )
    return list(result.scalars().all())


async def _check_banks(session: AsyncSession, *bank_ids: uuid.UUID | None) -> None:
    for bank_id in bank_ids:
        if bank_id is None:
            continue
        async with storage_errors():
            bank = await session.get(Bank, bank_id)
        if not bank:
            raise NotFound("Bank", bank_id)


def _touch_last_payment(member, payment_date: date) -> None:
    if member.last_payment is None or payment_date > member.last_payment:
        member.last_payment = payment_date


def _invalidate() -> None:
    cache.invalidate("payments")
    cache.invalidate("groups")
    cache.invalidate("dashboard")
