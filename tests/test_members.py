import uuid
from datetime import date
import pytest
from httpx import AsyncClient
from sqlmodel import select
from app.models.group import GroupSlot
from app.services import slots
from app.services.members import get_member_slots_info
from tests.utils import (
    API, create_admin_and_get_headers, create_group, create_member,
    create_user, create_user_and_get_headers, member_payload, money,
)

@pytest.mark.asyncio
async def test_create_member(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)

    response = await client.post(f"{API}/members/", json=member_payload(first_name="Ana"), headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Member created successfully"
    assert data["data"]["first_name"] == "Ana"
    assert data["data"]["status"] == "pending"

@pytest.mark.asyncio
async def test_create_member_missing_fields(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    payload = member_payload()
    del payload["phone"]

    response = await client.post(f"{API}/members/", json=payload, headers=headers)

    assert response.status_code == 400
    assert response.json()["data"][0]["field"] == "phone"

@pytest.mark.asyncio
async def test_search_members(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    await create_member(session, first_name="Ana", last_name="Pinas")
    await create_member(session, first_name="Ravi", last_name="Jagessar")

    response = await client.get(f"{API}/members/", headers=headers)
    assert len(response.json()["data"]) == 2

    response = await client.get(f"{API}/members/?q=jages", headers=headers)
    names = [m["first_name"] for m in response.json()["data"]]
    assert names == ["Ravi"]

@pytest.mark.asyncio
async def test_member_list_refreshes_after_create(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    await client.get(f"{API}/members/", headers=headers)

    await client.post(f"{API}/members/", json=member_payload(), headers=headers)

    response = await client.get(f"{API}/members/", headers=headers)
    assert len(response.json()["data"]) == 1

@pytest.mark.asyncio
async def test_update_member(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    member = await create_member(session)

    payload = member_payload(city="Nickerie", status="active")
    response = await client.put(f"{API}/members/{member.id}", json=payload, headers=headers)

    assert response.status_code == 200
    assert response.json()["data"]["city"] == "Nickerie"
    assert response.json()["data"]["status"] == "active"

@pytest.mark.asyncio
async def test_member_can_only_read_own_record(client: AsyncClient, session):
    member = await create_member(session)
    other = await create_member(session)
    _, headers = await create_user_and_get_headers(client, session, member_id=member.id)

    response = await client.get(f"{API}/members/{member.id}", headers=headers)
    assert response.status_code == 200

    response = await client.get(f"{API}/members/{other.id}", headers=headers)
    assert response.status_code == 404

    response = await client.get(f"{API}/members/", headers=headers)
    assert response.status_code == 403

@pytest.mark.asyncio
async def test_delete_member_cascades(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group = await create_group(session)
    member = await create_member(session)
    member_id = member.id
    user = await create_user(session, member_id=member_id)
    await slots.assign(session, group.id, member_id, "2024-01")

    response = await client.delete(f"{API}/members/{member_id}", headers=headers)
    assert response.status_code == 200

    result = await session.execute(select(GroupSlot).where(GroupSlot.member_id == member_id))
    assert result.scalars().all() == []
    await session.refresh(user)
    assert user.member_id is None

    response = await client.get(f"{API}/members/{member_id}", headers=headers)
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_member_slots_info(session):
    g1 = await create_group(session, name="First", monthly_amount="1000.00", start_date="2024-01", end_date="2024-12")
    g2 = await create_group(session, name="Second", monthly_amount="500.00", start_date="2024-01", end_date="2024-12")
    member = await create_member(session)
    await slots.assign(session, g1.id, member.id, "2024-02")
    await slots.assign(session, g2.id, member.id, "2024-08")

    info = await get_member_slots_info(session, member.id, today=date(2024, 5, 10))

    assert info.total_slots == 2
    assert info.total_monthly_amount == money("1500")
    assert info.next_receive_month == "2024-08"
    assert info.is_active
    assert [s.group_name for s in info.slots] == ["First", "Second"]

    info = await get_member_slots_info(session, member.id, today=date(2024, 9, 1))
    assert info.next_receive_month is None
    assert not info.is_active

@pytest.mark.asyncio
async def test_member_slots_endpoint(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    member = await create_member(session)

    response = await client.get(f"{API}/members/{member.id}/slots", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["total_slots"] == 0

    response = await client.get(f"{API}/members/{uuid.uuid4()}/slots", headers=headers)
    assert response.status_code == 404
