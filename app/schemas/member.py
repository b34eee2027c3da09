from datetime import date, datetime
from decimal import Decimal
import uuid
from sqlmodel import SQLModel
from app.models.enums import MemberStatus
from app.models.member import MemberBase

class MemberCreate(MemberBase):
    """
    Schema for registering a member.
    """
    model_config = {
        "json_schema_extra": {
            "example": {
                "first_name": "Ana",
                "last_name": "Pinas",
                "birth_date": "1985-04-12",
                "birthplace": "Paramaribo",
                "address": "Keizerstraat 12",
                "city": "Paramaribo",
                "phone": "+5978123456",
                "email": "ana.pinas@example.com",
                "national_id": "FZ123456",
                "nationality": "Surinamese",
                "occupation": "Teacher",
                "bank_name": "DSB",
                "account_number": "1234567",
                "date_of_registration": "2025-01-05",
                "notes": None
            }
        }
    }

class MemberUpdate(MemberBase):
    """
    Full-field update of a member.
    """
    status: MemberStatus | None = None

class MemberRead(MemberBase):
    id: uuid.UUID
    status: MemberStatus
    total_received: Decimal
    last_payment: date | None
    next_payment: date | None
    created_at: datetime
    updated_at: datetime

class MemberSlot(SQLModel):
    group_id: uuid.UUID
    group_name: str
    assigned_month: str
    monthly_amount: Decimal

class MemberSlotsInfo(SQLModel):
    """
    Aggregate of a member's slots across all groups.
    """
    total_slots: int
    total_monthly_amount: Decimal
    next_receive_month: str | None
    is_active: bool
    slots: list[MemberSlot] = []
