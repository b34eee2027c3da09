import uuid
from datetime import datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

class Group(SQLModel, table=True):
    """
    Savings group with a fixed monthly contribution over a month range.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, description="Unique identifier for the group")
    name: str = Field(max_length=255, unique=True, description="Name of the group")
    description: str | None = Field(default=None, description="Description of the group")
    monthly_amount: Decimal = Field(max_digits=12, decimal_places=2, description="Contribution per member per month")
    max_members: int = Field(description="Maximum number of monthly slots in the group")
    duration: int = Field(description="Number of months between start_date and end_date, inclusive")
    start_date: str = Field(max_length=7, description="First month of the group (YYYY-MM)")
    end_date: str = Field(max_length=7, description="Last month of the group (YYYY-MM)")
    payment_deadline_day: int | None = Field(default=None, description="Day of month after which payments are late")
    late_fine_percentage: Decimal | None = Field(default=None, max_digits=5, decimal_places=2, description="Fine as a percentage of the amount")
    late_fine_fixed_amount: Decimal | None = Field(default=None, max_digits=12, decimal_places=2, description="Fixed fine, takes precedence over the percentage")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class GroupSlot(SQLModel, table=True):
    """
    Claim by one member on one calendar month of one group.

    (group_id, assigned_month) is unique; a member may hold several months.
    """
    __table_args__ = (
        UniqueConstraint("group_id", "assigned_month", name="uq_groupslot_group_month"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    group_id: uuid.UUID = Field(foreign_key="group.id", index=True, description="ID of the group")
    member_id: uuid.UUID = Field(foreign_key="member.id", index=True, description="ID of the claimant")
    assigned_month: str = Field(max_length=7, description="Claimed month (YYYY-MM)")
    created_at: datetime = Field(default_factory=datetime.utcnow)
