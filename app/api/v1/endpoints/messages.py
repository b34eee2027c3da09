from typing import Annotated, List
import uuid
from fastapi import APIRouter, Depends, Request

from app.api import deps
from app.core.rate_limit import limiter
from app.models.enums import MessageType
from app.schemas.message import InboxMessage, MessageCreate, MessageRead, UnreadCount
from app.schemas.response import APIResponse
from app.services import messaging

router = APIRouter()

@router.get("/", response_model=APIResponse[List[InboxMessage]])
@limiter.limit("30/minute")
async def get_inbox(
    request: Request,
    current_user: deps.CurrentUser,
    session: deps.SessionDep,
    pagination: Annotated[deps.PageParams, Depends()],
    message_type: MessageType | None = None,
    is_read: bool | None = None,
):
    """
    Retrieve the current user's inbox, newest first.
    """
    inbox = await messaging.get_inbox(
        session, current_user,
        message_type=message_type, is_read=is_read,
        offset=pagination.offset, limit=pagination.limit,
    )
    return APIResponse(message="Messages retrieved", data=inbox)

@router.get("/unread-count", response_model=APIResponse[UnreadCount])
async def get_unread_count(current_user: deps.CurrentUser, session: deps.SessionDep):
    unread = await messaging.get_unread_count(session, current_user)
    return APIResponse(message="Unread count retrieved", data=UnreadCount(unread=unread))

@router.post("/", response_model=APIResponse[MessageRead])
@limiter.limit("20/minute")
async def send_message(
    request: Request,
    message_in: MessageCreate,
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
):
    """
    Send a message to one or more users (admin only).
    """
    message = await messaging.send_message(
        session, message_in, sender=admin,
        sender_ip=request.client.host if request.client else None,
    )
    data = await messaging.get_message(session, message.id, admin)
    return APIResponse(message="Message sent", data=data)

@router.get("/{message_id}", response_model=APIResponse[MessageRead])
async def get_message(message_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    data = await messaging.get_message(session, message_id, current_user)
    return APIResponse(message="Message retrieved", data=data)

@router.post("/{message_id}/read", response_model=APIResponse[dict])
async def mark_as_read(message_id: uuid.UUID, current_user: deps.CurrentUser, session: deps.SessionDep):
    """
    Mark a message as read for the current user.
    """
    await messaging.mark_as_read(session, message_id, current_user)
    return APIResponse(message="Marked as read", data={})
