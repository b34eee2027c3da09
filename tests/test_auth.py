import pytest
from httpx import AsyncClient
from sqlmodel import select
from app.core.config import settings
from app.models.auth_log import AuthLog
from app.models.enums import AuthEvent
from tests.utils import PASSWORD, create_admin_and_get_headers, create_user

@pytest.mark.asyncio
async def test_login(client: AsyncClient, session):
    user = await create_user(session)

    response = await client.post(f"{settings.API_V1_STR}/auth/login", json={
        "email": user.email,
        "password": PASSWORD
    })

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert "access_token" in data["data"]
    assert data["data"]["token_type"] == "bearer"
    assert data["data"]["role"] == "member"

    await session.refresh(user)
    assert user.last_login is not None

@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient, session):
    user = await create_user(session)
    email = user.email

    response = await client.post(f"{settings.API_V1_STR}/auth/login", json={
        "email": email,
        "password": "wrongpassword"
    })

    assert response.status_code == 400
    assert response.json()["message"] == "Incorrect email or password"

    result = await session.execute(select(AuthLog).where(AuthLog.email == email))
    log = result.scalars().one()
    assert log.event == AuthEvent.LOGIN_FAILED
    assert log.success is False

@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient, session):
    response = await client.post(f"{settings.API_V1_STR}/auth/login", json={
        "email": "nonexistent@example.com",
        "password": "wrongpassword"
    })
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_login_inactive_user(client: AsyncClient, session):
    user = await create_user(session)
    user.is_active = False
    session.add(user)
    await session.commit()

    response = await client.post(f"{settings.API_V1_STR}/auth/login", json={
        "email": user.email,
        "password": PASSWORD
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Inactive user"

@pytest.mark.asyncio
async def test_protected_route_requires_token(client: AsyncClient, session):
    response = await client.get(f"{settings.API_V1_STR}/users/me")
    assert response.status_code in [401, 403]

    response = await client.get(f"{settings.API_V1_STR}/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 403

@pytest.mark.asyncio
async def test_auth_logs_admin_only(client: AsyncClient, session):
    member = await create_user(session)
    await client.post(f"{settings.API_V1_STR}/auth/login", json={"email": member.email, "password": "wrongpassword"})
    _, headers = await create_admin_and_get_headers(client, session)

    response = await client.get(f"{settings.API_V1_STR}/auth/logs?success=false", headers=headers)

    assert response.status_code == 200
    logs = response.json()["data"]
    assert len(logs) == 1
    assert logs[0]["email"] == member.email
