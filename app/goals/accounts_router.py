"""Accounts endpoints — the ledger surface goals are funded from."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import current_user_id, verify_api_key
from app.config import settings
from app.db import get_session, unit_of_work
from app.goals.errors import ValidationError
from app.goals.features import MAX_AMOUNT
from app.goals.ledger import AccountLedger
from app.goals.models import AccountCreate, AccountOperationOut, AccountOut, AccountStatus
from app.goals.router import ERRORS

router = APIRouter(
    prefix="/api/v1/accounts",
    tags=["accounts"],
    dependencies=[Depends(verify_api_key)],
    responses=ERRORS,
)


@router.get("", response_model=list[AccountOut])
async def list_accounts(
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
    status: AccountStatus | None = Query(default=None, description="Filter by status"),
) -> list[AccountOut]:
    accounts = await AccountLedger(session).list_for_user(user_id, status.value if status else None)
    return [AccountOut.model_validate(a) for a in accounts]


@router.post("", response_model=AccountOut, status_code=201)
async def create_account(
    body: AccountCreate,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> AccountOut:
    balance = body.balance
    if not balance.is_finite():
        raise ValidationError("balance must be a finite number")
    if abs(balance) > MAX_AMOUNT:
        raise ValidationError(f"balance must not exceed {MAX_AMOUNT} in magnitude")
    if balance.quantize(Decimal("0.01")) != balance:
        raise ValidationError("balance must have at most 2 decimal places")

    async with unit_of_work(session, "create account"):
        account = await AccountLedger(session).create(
            user_id=user_id,
            name=body.name.strip(),
            type=body.type.value,
            balance=balance,
            currency=(body.currency or settings.default_currency).upper(),
        )
    return AccountOut.model_validate(account)


@router.get("/{account_id}", response_model=AccountOut)
async def get_account(
    account_id: str,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> AccountOut:
    account = await AccountLedger(session).require(account_id, user_id)
    return AccountOut.model_validate(account)


@router.get("/{account_id}/history", response_model=list[AccountOperationOut])
async def account_history(
    account_id: str,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> list[AccountOperationOut]:
    ledger = AccountLedger(session)
    await ledger.require(account_id, user_id)
    return [AccountOperationOut.model_validate(op) for op in await ledger.history(account_id)]
