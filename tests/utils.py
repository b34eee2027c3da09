import uuid
from decimal import Decimal
from httpx import AsyncClient
from app.core.config import settings
from app.core.security import get_password_hash
from app.models.enums import UserRole
from app.models.group import Group
from app.models.member import Member
from app.models.user import User
from app.utils.months import months_between

API = settings.API_V1_STR
PASSWORD = "password123"

def member_payload(**overrides) -> dict:
    suffix = uuid.uuid4().hex[:8]
    data = {
        "first_name": "Ana",
        "last_name": "Pinas",
        "birth_date": "1985-04-12",
        "birthplace": "Paramaribo",
        "address": "Keizerstraat 12",
        "city": "Paramaribo",
        "phone": f"+597{uuid.uuid4().int % 10000000:07d}",
        "email": f"member_{suffix}@example.com",
        "national_id": f"FZ{suffix}",
        "nationality": "Surinamese",
        "occupation": "Teacher",
        "bank_name": "DSB",
        "account_number": "1234567",
    }
    data.update(overrides)
    return data

def group_payload(**overrides) -> dict:
    data = {
        "name": f"Group {uuid.uuid4().hex[:8]}",
        "description": "Test group",
        "monthly_amount": "1000.00",
        "max_members": 12,
        "start_date": "2024-01",
        "end_date": "2024-12",
        "payment_deadline_day": 25,
        "late_fine_percentage": "5.00",
        "late_fine_fixed_amount": None,
    }
    data.update(overrides)
    return data

async def create_member(session, **overrides) -> Member:
    data = member_payload(**overrides)
    member = Member.model_validate(data)
    session.add(member)
    await session.commit()
    await session.refresh(member)
    return member

async def create_group(session, **overrides) -> Group:
    data = group_payload(**overrides)
    group = Group.model_validate(
        data, update={"duration": months_between(data["start_date"], data["end_date"]) + 1}
    )
    session.add(group)
    await session.commit()
    await session.refresh(group)
    return group

async def create_user(session, email: str = None, password: str = PASSWORD, role: UserRole = UserRole.MEMBER, member_id=None) -> User:
    if not email:
        email = f"user_{uuid.uuid4().hex[:8]}@example.com"
    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        first_name="Test",
        last_name="User",
        role=role,
        member_id=member_id,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user

async def get_auth_headers(client: AsyncClient, email: str, password: str = PASSWORD):
    resp = await client.post(f"{API}/auth/login", json={
        "email": email,
        "password": password
    })
    assert resp.status_code == 200
    token = resp.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}

async def create_admin_and_get_headers(client: AsyncClient, session):
    admin = await create_user(session, role=UserRole.ADMIN)
    headers = await get_auth_headers(client, admin.email)
    return admin, headers

async def create_user_and_get_headers(client: AsyncClient, session, member_id=None):
    user = await create_user(session, member_id=member_id)
    headers = await get_auth_headers(client, user.email)
    return user, headers

def money(value) -> Decimal:
    return Decimal(str(value))
