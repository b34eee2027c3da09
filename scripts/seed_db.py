import asyncio
import logging
import random
from datetime import date, timedelta
from decimal import Decimal
from faker import Faker

from sqlalchemy import delete
from app.db.session import AsyncSessionLocal, engine
from app.models import AuthLog, Bank, Group, GroupSlot, Member, Message, MessageRecipient, Payment, User
from app.models.enums import MemberStatus, PaymentMethod, PaymentStatus, UserRole
from app.core.errors import DuplicateMonthClaim
from app.core.security import get_password_hash
from app.services import slots as slot_service
from app.utils.financials import calculate_late_fine
from app.utils.months import expand_months, months_between, payment_deadline

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Constants
PASSWORD = "password123"
hashed_password = get_password_hash(PASSWORD)
fake = Faker()

BANKS = [
    ("De Surinaamsche Bank", "DSB"),
    ("Hakrinbank", "HKB"),
    ("Finabank", "FINA"),
    ("Southern Commercial Bank", "SCB"),
    ("Republic Bank Suriname", "RBS"),
]

GROUPS = [
    ("Familie Kasmoni", Decimal("1000.00"), 12, "2024-01", "2024-12", 25, Decimal("5.00"), None),
    ("Kantoor Spaarpot", Decimal("2500.00"), 6, "2024-03", "2024-08", 20, None, Decimal("50.00")),
    ("Buurt Kasmoni 2025", Decimal("500.00"), 10, "2025-01", "2025-10", None, None, None),
]

async def seed_data():
    async with AsyncSessionLocal() as session:
        # 0. Clear Database
        logger.info("Clearing database...")
        for model in (MessageRecipient, Message, AuthLog, Payment, GroupSlot, User, Group, Member, Bank):
            await session.execute(delete(model))
        await session.commit()
        logger.info("Database cleared.")

        # 1. Banks
        banks = [Bank(name=name, short_name=short) for name, short in BANKS]
        session.add_all(banks)

        # 2. Members
        logger.info("Creating members...")
        members = []
        for _ in range(30):
            member = Member(
                first_name=fake.first_name(),
                last_name=fake.last_name(),
                birth_date=fake.date_of_birth(minimum_age=18, maximum_age=75),
                birthplace=fake.city(),
                address=fake.street_address(),
                city=fake.city(),
                phone=f"+597{random.randint(7000000, 8999999)}",
                email=fake.unique.email(),
                national_id=fake.bothify("??######").upper(),
                nationality="Surinamese",
                occupation=fake.job()[:100],
                bank_name=random.choice(BANKS)[0],
                account_number=fake.bothify("##########"),
                status=random.choice(list(MemberStatus)),
            )
            session.add(member)
            members.append(member)

        # 3. Users
        admin = User(
            email="admin@example.com",
            hashed_password=hashed_password,
            first_name="Admin",
            last_name="User",
            role=UserRole.ADMIN,
        )
        session.add(admin)
        for member in members[:5]:
            session.add(User(
                email=member.email,
                hashed_password=hashed_password,
                first_name=member.first_name,
                last_name=member.last_name,
                role=UserRole.MEMBER,
                member_id=member.id,
            ))

        # 4. Groups
        logger.info("Creating groups...")
        groups = []
        for name, amount, max_members, start, end, deadline_day, fine_pct, fine_fixed in GROUPS:
            group = Group(
                name=name,
                description=fake.sentence(),
                monthly_amount=amount,
                max_members=max_members,
                duration=months_between(start, end) + 1,
                start_date=start,
                end_date=end,
                payment_deadline_day=deadline_day,
                late_fine_percentage=fine_pct,
                late_fine_fixed_amount=fine_fixed,
            )
            session.add(group)
            groups.append(group)
        await session.commit()

        # 5. Slots, through the allocator so the month invariants hold
        logger.info("Assigning months...")
        slots = []
        for group in groups:
            months = expand_months(group.start_date, group.end_date)
            for month in random.sample(months, k=len(months) * 3 // 4):
                try:
                    slots.append(await slot_service.assign(session, group.id, random.choice(members).id, month))
                except DuplicateMonthClaim:
                    logger.warning(f"Skipping {month} in {group.name}, already taken")

        # 6. Payments for every slot month that has passed
        logger.info("Creating payments...")
        today = date.today()
        groups_by_id = {group.id: group for group in groups}
        count = 0
        for slot in slots:
            group = groups_by_id[slot.group_id]
            deadline = payment_deadline(slot.assigned_month, group.payment_deadline_day or 28)
            if deadline > today:
                continue
            payment_date = deadline + timedelta(days=random.randint(-10, 5))
            is_late, fine, due = calculate_late_fine(group, payment_date, group.monthly_amount)
            session.add(Payment(
                member_id=slot.member_id,
                group_id=slot.group_id,
                slot_id=slot.id,
                payment_date=payment_date,
                payment_month=slot.assigned_month,
                amount=group.monthly_amount,
                payment_method=random.choice(list(PaymentMethod)),
                status=random.choice([PaymentStatus.RECEIVED, PaymentStatus.SETTLED, PaymentStatus.PENDING]),
                receiver_bank_id=random.choice(banks).id,
                fine_amount=fine,
                is_late_payment=is_late,
                payment_deadline=due,
            ))
            count += 1

        await session.commit()
        logger.info(f"Created {len(members)} members, {len(groups)} groups, {len(slots)} slots and {count} payments.")
        logger.info(f"Admin login: {admin.email} / {PASSWORD}")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(seed_data())
