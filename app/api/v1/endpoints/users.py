from typing import Annotated, Any, List
import uuid
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import delete, update
from sqlmodel import select

from app.api import deps
from app.models.auth_log import AuthLog
from app.models.enums import AuthEvent
from app.models.member import Member
from app.models.message import Message, MessageRecipient
from app.models.user import User
from app.schemas.user import UserCreate, UserRead, UserUpdate, UserUpdateMe
from app.schemas.response import APIResponse
from app.core.security import get_password_hash

router = APIRouter()

@router.get("/me", response_model=APIResponse[UserRead])
async def read_user_me(current_user: deps.CurrentUser) -> Any:
    """
    Get current user details.
    """
    return APIResponse(message="User details retrieved", data=current_user)

@router.put("/me", response_model=APIResponse[UserRead])
async def update_user_me(
    *,
    session: deps.SessionDep,
    user_in: UserUpdateMe,
    current_user: deps.CurrentUser,
) -> Any:
    """
    Update own user.
    """
    user_data = user_in.model_dump(exclude_unset=True)
    _hash_password(user_data)

    for field, value in user_data.items():
        setattr(current_user, field, value)

    session.add(current_user)
    await session.commit()
    await session.refresh(current_user)

    return APIResponse(message="User profile updated", data=current_user)

@router.get("/", response_model=APIResponse[List[UserRead]])
async def list_users(
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
    pagination: Annotated[deps.PageParams, Depends()],
):
    """
    List all accounts (admin only).
    """
    query = select(User).order_by(User.created_at.desc()).offset(pagination.offset).limit(pagination.limit)
    result = await session.execute(query)
    return APIResponse(message="Users retrieved", data=result.scalars().all())

@router.post("/", response_model=APIResponse[UserRead])
async def create_user(
    request: Request,
    user_in: UserCreate,
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
):
    """
    Create an account (admin only). Member accounts may be linked to a member record.
    """
    result = await session.execute(select(User).where(User.email == user_in.email))
    if result.scalars().first():
        raise HTTPException(status_code=400, detail="The user with this email already exists in the system.")
    await _check_member(session, user_in.member_id)

    user = User(
        **user_in.model_dump(exclude={"password"}),
        hashed_password=get_password_hash(user_in.password),
    )
    session.add(user)
    _audit(session, request, admin, AuthEvent.ADMIN_CREATE, user)
    await session.commit()
    await session.refresh(user)
    return APIResponse(message="User created successfully", data=user)

@router.get("/{user_id}", response_model=APIResponse[UserRead])
async def get_user(user_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return APIResponse(message="User details retrieved", data=user)

@router.put("/{user_id}", response_model=APIResponse[UserRead])
async def update_user(
    request: Request,
    user_id: uuid.UUID,
    user_in: UserUpdate,
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
):
    """
    Update role, status, link or credentials of an account (admin only).
    """
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user_data = user_in.model_dump(exclude_unset=True)
    if "email" in user_data and user_data["email"] != user.email:
        result = await session.execute(select(User).where(User.email == user_data["email"]))
        if result.scalars().first():
            raise HTTPException(status_code=400, detail="The user with this email already exists in the system.")
    if user_data.get("member_id"):
        await _check_member(session, user_data["member_id"])
    if user.id == admin.id and (user_data.get("is_active") is False or user_data.get("role") not in (None, admin.role)):
        raise HTTPException(status_code=400, detail="Administrators cannot demote or deactivate themselves")
    _hash_password(user_data)

    for field, value in user_data.items():
        setattr(user, field, value)
    session.add(user)
    _audit(session, request, admin, AuthEvent.ADMIN_UPDATE, user)
    await session.commit()
    await session.refresh(user)
    return APIResponse(message="User updated successfully", data=user)

@router.delete("/{user_id}", response_model=APIResponse[dict])
async def delete_user(request: Request, user_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="Administrators cannot delete themselves")

    _audit(session, request, admin, AuthEvent.ADMIN_DELETE, user)
    await session.execute(delete(MessageRecipient).where(MessageRecipient.recipient_id == user_id))
    await session.execute(update(Message).where(Message.sender_id == user_id).values(sender_id=None))
    await session.delete(user)
    await session.commit()
    return APIResponse(message="User deleted successfully", data={"user_id": user_id})

def _hash_password(user_data: dict) -> None:
    password = user_data.pop("password", None)
    if password:
        user_data["hashed_password"] = get_password_hash(password)

async def _check_member(session, member_id: uuid.UUID | None) -> None:
    if member_id and not await session.get(Member, member_id):
        raise HTTPException(status_code=404, detail="Member not found")

def _audit(session, request: Request, admin: User, event: AuthEvent, target: User) -> None:
    session.add(AuthLog(
        user_id=admin.id,
        email=admin.email,
        event=event,
        target_model="User",
        target_id=str(target.id),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    ))
