import uuid
from datetime import datetime
from sqlmodel import SQLModel, Field
from app.models.enums import MessageType, SenderType

class Message(SQLModel, table=True):
    """
    In-app message; delivery state lives on MessageRecipient.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    subject: str = Field(max_length=255)
    content: str
    message_type: MessageType = Field(index=True)
    sender_id: uuid.UUID | None = Field(default=None, foreign_key="user.id", description="NULL for system messages")
    sender_type: SenderType
    sender_ip_address: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

class MessageRecipient(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    message_id: uuid.UUID = Field(foreign_key="message.id", index=True)
    recipient_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    is_read: bool = Field(default=False)
    read_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
