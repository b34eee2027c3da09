from datetime import datetime
import uuid
from sqlmodel import SQLModel
from app.models.bank import BankBase

class BankCreate(BankBase):
    pass

class BankUpdate(SQLModel):
    name: str | None = None
    short_name: str | None = None
    address: str | None = None

class BankRead(BankBase):
    id: uuid.UUID
    created_at: datetime
