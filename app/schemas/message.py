from datetime import datetime
import uuid
from sqlmodel import SQLModel, Field
from app.models.enums import MessageType, SenderType

class MessageCreate(SQLModel):
    """
    Schema for sending a message to one or more users.
    """
    subject: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    message_type: MessageType = MessageType.SYSTEM_NOTIFICATION
    recipient_ids: list[uuid.UUID] = Field(min_length=1)

class InboxMessage(SQLModel):
    id: uuid.UUID
    subject: str
    message_type: MessageType
    sender_id: uuid.UUID | None
    sender_name: str
    sender_type: SenderType
    is_read: bool
    created_at: datetime

class RecipientRead(SQLModel):
    recipient_id: uuid.UUID
    is_read: bool
    read_at: datetime | None

class MessageRead(SQLModel):
    id: uuid.UUID
    subject: str
    content: str
    message_type: MessageType
    sender_id: uuid.UUID | None
    sender_type: SenderType
    created_at: datetime
    recipients: list[RecipientRead] = []

class UnreadCount(SQLModel):
    unread: int
