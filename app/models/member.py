import uuid
from datetime import date, datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field
from app.models.enums import MemberStatus

class MemberBase(SQLModel):
    first_name: str = Field(max_length=100, description="Member's first name")
    last_name: str = Field(max_length=100, description="Member's last name")
    birth_date: date = Field(description="Date of birth")
    birthplace: str = Field(max_length=100)
    address: str
    city: str = Field(max_length=100, index=True)
    phone: str = Field(max_length=20, index=True)
    email: str = Field(max_length=255, index=True)
    national_id: str = Field(max_length=50, index=True)
    nationality: str = Field(max_length=100)
    occupation: str = Field(max_length=100)
    bank_name: str = Field(max_length=100, description="Bank where the member receives payouts")
    account_number: str = Field(max_length=50)
    date_of_registration: date = Field(default_factory=date.today)
    notes: str | None = None

class Member(MemberBase, table=True):
    """
    A natural person eligible to hold slots in savings groups.

    The running totals are denormalised display values and are not kept
    consistent with the payment ledger.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    status: MemberStatus = Field(default=MemberStatus.PENDING, index=True)
    total_received: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    last_payment: date | None = None
    next_payment: date | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
