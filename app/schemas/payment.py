from datetime import date, datetime
from decimal import Decimal
import uuid
from pydantic import field_validator
from sqlmodel import SQLModel
from app.models.enums import PaymentMethod, PaymentStatus
from app.utils.months import parse_month

class PaymentCreate(SQLModel):
    """
    Schema for recording a payment. The amount is taken from the group.
    """
    member_id: uuid.UUID
    group_id: uuid.UUID
    slot_id: uuid.UUID
    payment_date: date
    payment_month: str
    payment_method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    sender_bank_id: uuid.UUID | None = None
    receiver_bank_id: uuid.UUID | None = None
    notes: str | None = None

    @field_validator("payment_month")
    @classmethod
    def check_month(cls, v: str) -> str:
        parse_month(v)
        return v

class PaymentUpdate(SQLModel):
    """
    Partial update; the amount and the slot cannot change.
    """
    payment_date: date | None = None
    payment_month: str | None = None
    payment_method: PaymentMethod | None = None
    status: PaymentStatus | None = None
    sender_bank_id: uuid.UUID | None = None
    receiver_bank_id: uuid.UUID | None = None
    notes: str | None = None

    @field_validator("payment_month")
    @classmethod
    def check_month(cls, v: str | None) -> str | None:
        if v is not None:
            parse_month(v)
        return v

class PaymentRead(SQLModel):
    id: uuid.UUID
    member_id: uuid.UUID
    group_id: uuid.UUID
    slot_id: uuid.UUID | None
    payment_date: date
    payment_month: str
    amount: Decimal
    payment_method: PaymentMethod
    status: PaymentStatus
    sender_bank_id: uuid.UUID | None
    receiver_bank_id: uuid.UUID | None
    notes: str | None
    fine_amount: Decimal
    is_late_payment: bool
    payment_deadline: date | None
    created_at: datetime
    updated_at: datetime

class PaymentStats(SQLModel):
    total_payments: int = 0
    total_amount: Decimal = Decimal("0.00")
    received_amount: Decimal = Decimal("0.00")
    pending_amount: Decimal = Decimal("0.00")
    not_paid_amount: Decimal = Decimal("0.00")
    settled_amount: Decimal = Decimal("0.00")
    received_count: int = 0
    pending_count: int = 0
    not_paid_count: int = 0
    settled_count: int = 0
    cash_payments: int = 0
    bank_transfer_payments: int = 0
    total_fines: Decimal = Decimal("0.00")
