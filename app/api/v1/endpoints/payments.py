from datetime import date
from typing import Annotated, List
import uuid
from fastapi import APIRouter, Depends

from app.api import deps
from app.models.enums import PaymentMethod, PaymentStatus
from app.schemas.payment import PaymentCreate, PaymentRead, PaymentStats, PaymentUpdate
from app.schemas.response import APIResponse
from app.services import payments as payment_service
from app.utils.months import parse_month

router = APIRouter()

@router.get("/", response_model=APIResponse[List[PaymentRead]])
async def list_payments(
    admin: deps.CurrentAdmin,
    session: deps.SessionDep,
    pagination: Annotated[deps.PageParams, Depends()],
    status: PaymentStatus | None = None,
    payment_method: PaymentMethod | None = None,
    group_id: uuid.UUID | None = None,
    member_id: uuid.UUID | None = None,
    payment_month: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
):
    """
    List payments, newest payment date first.
    """
    if payment_month is not None:
        parse_month(payment_month)
    payments = await payment_service.list_payments(
        session,
        status=status,
        payment_method=payment_method,
        group_id=group_id,
        member_id=member_id,
        payment_month=payment_month,
        start_date=start_date,
        end_date=end_date,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return APIResponse(message="Payments retrieved", data=payments)

@router.get("/stats", response_model=APIResponse[PaymentStats])
async def get_payment_stats(admin: deps.CurrentAdmin, session: deps.SessionDep):
    stats = await payment_service.get_payment_stats(session)
    return APIResponse(message="Payment statistics retrieved", data=stats)

@router.post("/", response_model=APIResponse[PaymentRead])
async def create_payment(payment_in: PaymentCreate, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Record a payment for a slot. The amount is the group's monthly amount.
    """
    payment = await payment_service.create_payment(session, payment_in)
    return APIResponse(message="Payment recorded successfully", data=payment)

@router.get("/{payment_id}", response_model=APIResponse[PaymentRead])
async def get_payment(payment_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    payment = await payment_service.get_payment_or_404(session, payment_id)
    return APIResponse(message="Payment details retrieved", data=payment)

@router.patch("/{payment_id}", response_model=APIResponse[PaymentRead])
async def update_payment(payment_id: uuid.UUID, payment_in: PaymentUpdate, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Update status, date, method, banks or notes. The amount is read-only.
    """
    payment = await payment_service.update_payment(session, payment_id, payment_in)
    return APIResponse(message="Payment updated successfully", data=payment)

@router.delete("/{payment_id}", response_model=APIResponse[dict])
async def delete_payment(payment_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    await payment_service.delete_payment(session, payment_id)
    return APIResponse(message="Payment deleted successfully", data={"payment_id": payment_id})
