from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.db.session import storage_errors
from app.models.enums import MemberStatus, PaymentStatus
from app.models.group import Group, GroupSlot
from app.models.member import Member
from app.models.payment import Payment
from app.schemas.dashboard import DashboardData, GroupFill, MonthlyCollection, RecentItem
from app.services.cache import cache
from app.services.payments import summarize
from app.utils.financials import as_money


async def get_dashboard(session: AsyncSession, recent: int = 5) -> DashboardData:
    return await cache.get_or_load("dashboard", {"recent": recent}, lambda: _load_dashboard(session, recent))


async def _load_dashboard(session: AsyncSession, recent: int) -> DashboardData:
    async with storage_errors():
        total_members = (await session.execute(select(func.count()).select_from(Member))).scalar_one()
        active_members = (await session.execute(
            select(func.count()).select_from(Member).where(Member.status == MemberStatus.ACTIVE)
        )).scalar_one()

        result = await session.execute(
            select(Group.id, Group.name, Group.max_members, func.count(GroupSlot.id))
            .outerjoin(GroupSlot, GroupSlot.group_id == Group.id)
            .group_by(Group.id, Group.name, Group.max_members)
            .order_by(Group.name)
        )
        groups = [
            GroupFill(
                group_id=group_id,
                name=name,
                max_members=max_members,
                total_slots=slots,
                fill_rate=round(slots / max_members, 4) if max_members else 0.0,
            )
            for group_id, name, max_members, slots in result.all()
        ]

        result = await session.execute(
            select(Payment.amount, Payment.status, Payment.payment_method, Payment.fine_amount)
        )
        payment_stats = summarize(result.all())

        result = await session.execute(
            select(Payment.payment_month, func.sum(Payment.amount), func.count(Payment.id))
            .where(Payment.status.in_((PaymentStatus.RECEIVED, PaymentStatus.SETTLED)))
            .group_by(Payment.payment_month)
            .order_by(Payment.payment_month)
        )
        monthly = [
            MonthlyCollection(month=month, amount=as_money(amount), payments=count)
            for month, amount, count in result.all()
        ]

        result = await session.execute(
            select(Payment, Member.first_name, Member.last_name)
            .join(Member, Member.id == Payment.member_id)
            .order_by(Payment.created_at.desc())
            .limit(recent)
        )
        recent_payments = [
            RecentItem(
                id=payment.id,
                label=f"{first_name} {last_name}",
                detail=f"{as_money(payment.amount)} {payment.payment_month} {payment.status}",
            )
            for payment, first_name, last_name in result.all()
        ]

        result = await session.execute(select(Member).order_by(Member.created_at.desc()).limit(recent))
        recent_members = [
            RecentItem(id=m.id, label=m.full_name, detail=m.city)
            for m in result.scalars().all()
        ]

        result = await session.execute(select(Group).order_by(Group.created_at.desc()).limit(recent))
        recent_groups = [
            RecentItem(id=g.id, label=g.name, detail=f"{g.start_date} - {g.end_date}")
            for g in result.scalars().all()
        ]

    return DashboardData(
        total_members=total_members,
        active_members=active_members,
        total_groups=len(groups),
        total_slots=sum(g.total_slots for g in groups),
        payments=payment_stats,
        groups=groups,
        monthly_collections=monthly,
        recent_payments=recent_payments,
        recent_members=recent_members,
        recent_groups=recent_groups,
    )
