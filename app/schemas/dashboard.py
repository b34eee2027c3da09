from decimal import Decimal
import uuid
from sqlmodel import SQLModel
from app.schemas.payment import PaymentStats

class GroupFill(SQLModel):
    group_id: uuid.UUID
    name: str
    max_members: int
    total_slots: int
    fill_rate: float

class MonthlyCollection(SQLModel):
    month: str
    amount: Decimal
    payments: int

class RecentItem(SQLModel):
    id: uuid.UUID
    label: str
    detail: str | None = None

class DashboardData(SQLModel):
    total_members: int
    active_members: int
    total_groups: int
    total_slots: int
    payments: PaymentStats
    groups: list[GroupFill]
    monthly_collections: list[MonthlyCollection]
    recent_payments: list[RecentItem]
    recent_members: list[RecentItem]
    recent_groups: list[RecentItem]
