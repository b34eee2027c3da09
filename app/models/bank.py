import uuid
from datetime import datetime
from sqlmodel import SQLModel, Field

class BankBase(SQLModel):
    name: str = Field(max_length=100, unique=True, description="Bank name")
    short_name: str | None = Field(default=None, max_length=20)
    address: str | None = None

class Bank(BankBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
