from datetime import datetime
from decimal import Decimal
import uuid
from pydantic import field_validator, model_validator
from sqlmodel import SQLModel, Field

from app.utils.months import parse_month, validate_range

# Group Schemas
class GroupBase(SQLModel):
    """
    Base Group schema with shared properties.
    """
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    monthly_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    max_members: int = Field(gt=0)
    start_date: str
    end_date: str
    payment_deadline_day: int | None = Field(default=None, ge=1, le=31)
    late_fine_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    late_fine_fixed_amount: Decimal | None = Field(default=None, ge=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def check_month(cls, v: str) -> str:
        parse_month(v)
        return v

    @model_validator(mode="after")
    def check_range(self):
        validate_range(self.start_date, self.end_date)
        return self

class GroupCreate(GroupBase):
    """
    Schema for creating a new group.
    """
    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Kasmoni 2025",
                "description": "Monthly rotation for 2025",
                "monthly_amount": "1000.00",
                "max_members": 12,
                "start_date": "2025-01",
                "end_date": "2025-12",
                "payment_deadline_day": 25,
                "late_fine_percentage": "5.00",
                "late_fine_fixed_amount": None
            }
        }
    }

class GroupUpdate(GroupBase):
    """
    Full-field update; every attribute is replaced.
    """
    pass

class GroupRead(GroupBase):
    id: uuid.UUID
    duration: int
    created_at: datetime
    updated_at: datetime

class GroupSummary(SQLModel):
    group_id: uuid.UUID
    name: str
    total_months: int
    total_slots: int
    available_slots: int
    unique_members: int
    paid_slots: int
    collected_amount: Decimal

# Slot Schemas
class Claimant(SQLModel):
    """
    Member holding a month in a group.
    """
    member_id: uuid.UUID
    name: str

class MonthSlot(SQLModel):
    month: str
    reserved: bool
    reserved_by: str | None = None
    member_id: uuid.UUID | None = None

class SlotAssign(SQLModel):
    member_id: uuid.UUID
    assigned_month: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "member_id": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
                "assigned_month": "2025-03"
            }
        }
    }

class SlotRead(SQLModel):
    id: uuid.UUID
    group_id: uuid.UUID
    member_id: uuid.UUID
    assigned_month: str
    created_at: datetime

class GroupMemberRead(SlotRead):
    """
    Slot joined with the claimant's name.
    """
    member_name: str
