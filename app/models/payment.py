import uuid
from datetime import date, datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field
from app.models.enums import PaymentMethod, PaymentStatus

class Payment(SQLModel, table=True):
    """
    Record of funds moved for one group slot.

    `slot_id` becomes NULL when the slot is removed; the payment itself is kept.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    member_id: uuid.UUID = Field(foreign_key="member.id", index=True)
    group_id: uuid.UUID = Field(foreign_key="group.id", index=True)
    slot_id: uuid.UUID | None = Field(default=None, foreign_key="groupslot.id", index=True)
    payment_date: date = Field(index=True)
    payment_month: str = Field(max_length=7, index=True, description="Month the payment covers (YYYY-MM)")
    amount: Decimal = Field(max_digits=12, decimal_places=2, description="Fixed to the group's monthly amount")
    payment_method: PaymentMethod
    status: PaymentStatus = Field(default=PaymentStatus.PENDING, index=True)
    sender_bank_id: uuid.UUID | None = Field(default=None, foreign_key="bank.id")
    receiver_bank_id: uuid.UUID | None = Field(default=None, foreign_key="bank.id")
    notes: str | None = None
    fine_amount: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    is_late_payment: bool = Field(default=False)
    payment_deadline: date | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
