from datetime import datetime
import uuid
from sqlmodel import SQLModel, Field
from app.models.enums import AuthEvent

class AuthLog(SQLModel, table=True):
    """
    Login attempts and back-office changes.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID | None = Field(default=None, index=True)
    email: str | None = None
    event: AuthEvent
    success: bool = True
    target_model: str | None = None
    target_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
