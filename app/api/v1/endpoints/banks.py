from typing import List
import uuid
from fastapi import APIRouter, HTTPException
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from app.api import deps
from app.models.bank import Bank
from app.models.payment import Payment
from app.schemas.bank import BankCreate, BankRead, BankUpdate
from app.schemas.response import APIResponse

router = APIRouter()

@router.get("/", response_model=APIResponse[List[BankRead]])
async def list_banks(current_user: deps.CurrentUser, session: deps.SessionDep):
    result = await session.execute(select(Bank).order_by(Bank.name))
    return APIResponse(message="Banks retrieved", data=result.scalars().all())

@router.post("/", response_model=APIResponse[BankRead])
async def create_bank(bank_in: BankCreate, admin: deps.CurrentAdmin, session: deps.SessionDep):
    bank = Bank.model_validate(bank_in)
    session.add(bank)
    await _commit(session, bank_in.name)
    await session.refresh(bank)
    return APIResponse(message="Bank created successfully", data=bank)

@router.put("/{bank_id}", response_model=APIResponse[BankRead])
async def update_bank(bank_id: uuid.UUID, bank_in: BankUpdate, admin: deps.CurrentAdmin, session: deps.SessionDep):
    bank = await session.get(Bank, bank_id)
    if not bank:
        raise HTTPException(status_code=404, detail="Bank not found")
    for key, value in bank_in.model_dump(exclude_unset=True).items():
        setattr(bank, key, value)
    session.add(bank)
    await _commit(session, bank.name)
    await session.refresh(bank)
    return APIResponse(message="Bank updated successfully", data=bank)

@router.delete("/{bank_id}", response_model=APIResponse[dict])
async def delete_bank(bank_id: uuid.UUID, admin: deps.CurrentAdmin, session: deps.SessionDep):
    """
    Delete a bank; payments referencing it keep their other data.
    """
    bank = await session.get(Bank, bank_id)
    if not bank:
        raise HTTPException(status_code=404, detail="Bank not found")
    await session.execute(update(Payment).where(Payment.sender_bank_id == bank_id).values(sender_bank_id=None))
    await session.execute(update(Payment).where(Payment.receiver_bank_id == bank_id).values(receiver_bank_id=None))
    await session.delete(bank)
    await session.commit()
    return APIResponse(message="Bank deleted successfully", data={"bank_id": bank_id})

async def _commit(session, name: str) -> None:
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=400, detail=f"A bank named '{name}' already exists")
