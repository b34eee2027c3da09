from datetime import datetime
from typing import Annotated, Any, List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api import deps
from app.core import security
from app.core.config import settings
from app.core.rate_limit import limiter
from app.models.auth_log import AuthLog
from app.models.enums import AuthEvent
from app.models.user import User
from app.schemas.response import APIResponse
from app.schemas.token import Token
from app.schemas.user import AuthLogRead, LoginRequest

router = APIRouter()

@router.post("/login", response_model=APIResponse[Token])
@limiter.limit("10/minute")
async def login_access_token(
    request: Request,
    session: Annotated[AsyncSession, Depends(deps.get_db)],
    form_data: LoginRequest,
) -> Any:
    """
    Exchange e-mail and password for a bearer token. Every attempt is logged.
    """
    result = await session.execute(select(User).where(User.email == form_data.email))
    user = result.scalars().first()
    password_ok = bool(user and security.verify_password(form_data.password, user.hashed_password))
    success = password_ok and user.is_active

    session.add(AuthLog(
        user_id=user.id if user else None,
        email=form_data.email,
        event=AuthEvent.LOGIN_SUCCESS if success else AuthEvent.LOGIN_FAILED,
        success=success,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    ))
    if success:
        user.last_login = datetime.utcnow()
        session.add(user)
    await session.commit()

    if not password_ok:
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    elif not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    token = Token(
        access_token=security.create_access_token(user.id),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        role=user.role,
    )
    return APIResponse(message="Login successful", data=token)

@router.get("/logs", response_model=APIResponse[List[AuthLogRead]])
async def get_auth_logs(
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
    pagination: Annotated[deps.PageParams, Depends()],
    success: bool | None = None,
):
    """
    Login attempts and back-office changes, newest first.
    """
    query = select(AuthLog)
    if success is not None:
        query = query.where(AuthLog.success == success)
    query = query.order_by(AuthLog.timestamp.desc()).offset(pagination.offset).limit(pagination.limit)
    result = await session.execute(query)
    return APIResponse(message="Auth logs retrieved", data=result.scalars().all())
