import uuid
from datetime import date
import pytest
from httpx import AsyncClient
from app.models.bank import Bank
from app.models.enums import MessageType
from app.services import slots
from app.services.messaging import get_inbox
from tests.utils import (
    API, create_admin_and_get_headers, create_group, create_member,
    create_user, money,
)

async def setup_slot(session, **group_overrides):
    group = await create_group(session, **group_overrides)
    member = await create_member(session, first_name="Ana", last_name="Pinas")
    slot = await slots.assign(session, group.id, member.id, "2024-03")
    return group, member, slot

def payment_payload(group, member, slot, **overrides) -> dict:
    data = {
        "member_id": str(member.id),
        "group_id": str(group.id),
        "slot_id": str(slot.id),
        "payment_date": "2024-03-20",
        "payment_month": "2024-03",
        "payment_method": "bank_transfer",
        "status": "received",
    }
    data.update(overrides)
    return data

@pytest.mark.asyncio
async def test_create_payment_takes_amount_from_group(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session, monthly_amount="1250.00")

    response = await client.post(f"{API}/payments/", json=payment_payload(group, member, slot), headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert money(data["amount"]) == money("1250")
    assert data["is_late_payment"] is False
    assert money(data["fine_amount"]) == money("0")
    assert data["payment_deadline"] == "2024-03-25"

    await session.refresh(member)
    assert member.last_payment == date(2024, 3, 20)

@pytest.mark.asyncio
async def test_late_payment_gets_fine(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session, late_fine_percentage="5.00")

    response = await client.post(
        f"{API}/payments/",
        json=payment_payload(group, member, slot, payment_date="2024-03-28"),
        headers=headers,
    )

    data = response.json()["data"]
    assert data["is_late_payment"] is True
    assert money(data["fine_amount"]) == money("50")

@pytest.mark.asyncio
async def test_slot_must_belong_to_member_and_group(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, _, slot = await setup_slot(session)
    stranger = await create_member(session)

    response = await client.post(f"{API}/payments/", json=payment_payload(group, stranger, slot), headers=headers)
    assert response.status_code == 400

    response = await client.post(
        f"{API}/payments/",
        json=payment_payload(group, stranger, slot, slot_id=str(uuid.uuid4())),
        headers=headers,
    )
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_unknown_bank(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session)

    response = await client.post(
        f"{API}/payments/",
        json=payment_payload(group, member, slot, receiver_bank_id=str(uuid.uuid4())),
        headers=headers,
    )
    assert response.status_code == 404
    assert response.json()["data"]["entity"] == "Bank"

@pytest.mark.asyncio
async def test_payment_notifies_linked_user(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session)
    user = await create_user(session, member_id=member.id)

    await client.post(f"{API}/payments/", json=payment_payload(group, member, slot), headers=headers)

    inbox = await get_inbox(session, user)
    assert len(inbox) == 1
    assert inbox[0].message_type == MessageType.PAYMENT_NOTIFICATION
    assert inbox[0].sender_name == "System"

@pytest.mark.asyncio
async def test_filter_payments(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session)
    await client.post(f"{API}/payments/", json=payment_payload(group, member, slot, status="pending"), headers=headers)
    await client.post(f"{API}/payments/", json=payment_payload(group, member, slot, payment_method="cash"), headers=headers)

    response = await client.get(f"{API}/payments/?status=pending", headers=headers)
    assert len(response.json()["data"]) == 1

    response = await client.get(f"{API}/payments/?payment_month=2024-03&group_id={group.id}", headers=headers)
    assert len(response.json()["data"]) == 2

    response = await client.get(f"{API}/payments/?payment_month=2024-3", headers=headers)
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_update_payment_recomputes_fine(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session, late_fine_fixed_amount="75.00")
    response = await client.post(f"{API}/payments/", json=payment_payload(group, member, slot), headers=headers)
    payment_id = response.json()["data"]["id"]

    response = await client.patch(f"{API}/payments/{payment_id}", json={"payment_date": "2024-03-27"}, headers=headers)

    data = response.json()["data"]
    assert data["is_late_payment"] is True
    assert money(data["fine_amount"]) == money("75")

@pytest.mark.asyncio
async def test_payment_stats(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session)
    await client.post(f"{API}/payments/", json=payment_payload(group, member, slot), headers=headers)
    await client.post(
        f"{API}/payments/",
        json=payment_payload(group, member, slot, status="pending", payment_method="cash", payment_date="2024-03-30"),
        headers=headers,
    )

    response = await client.get(f"{API}/payments/stats", headers=headers)

    stats = response.json()["data"]
    assert stats["total_payments"] == 2
    assert stats["received_count"] == 1
    assert stats["pending_count"] == 1
    assert stats["cash_payments"] == 1
    assert money(stats["total_amount"]) == money("2000")
    assert money(stats["total_fines"]) == money("50")

@pytest.mark.asyncio
async def test_delete_payment_and_history(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session)
    response = await client.post(f"{API}/payments/", json=payment_payload(group, member, slot), headers=headers)
    payment_id = response.json()["data"]["id"]

    response = await client.get(f"{API}/members/{member.id}/payments", headers=headers)
    assert [p["id"] for p in response.json()["data"]] == [payment_id]

    response = await client.delete(f"{API}/payments/{payment_id}", headers=headers)
    assert response.status_code == 200
    response = await client.get(f"{API}/payments/{payment_id}", headers=headers)
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_deleting_bank_keeps_payment(client: AsyncClient, session):
    _, headers = await create_admin_and_get_headers(client, session)
    group, member, slot = await setup_slot(session)
    bank = Bank(name="Hakrinbank", short_name="HKB")
    session.add(bank)
    await session.commit()

    response = await client.post(
        f"{API}/payments/",
        json=payment_payload(group, member, slot, receiver_bank_id=str(bank.id)),
        headers=headers,
    )
    payment_id = response.json()["data"]["id"]

    await client.delete(f"{API}/banks/{bank.id}", headers=headers)

    response = await client.get(f"{API}/payments/{payment_id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["receiver_bank_id"] is None
