"""Account ledger — balances and per-account operation history."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.goals.errors import NotFoundError
from app.goals.tables import Account, AccountOperation, utcnow


class AccountLedger:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user_id: str, name: str, type: str, balance: Decimal, currency: str) -> Account:
        account = Account(user_id=user_id, name=name, type=type, balance=balance, currency=currency, status="active")
        self.session.add(account)
        await self.session.flush()
        return await self.require(account.id, user_id)

    async def get(self, account_id: str, user_id: str) -> Account | None:
        stmt = (
            select(Account)
            .where(Account.id == account_id, Account.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def require(self, account_id: str, user_id: str) -> Account:
        account = await self.get(account_id, user_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    async def lock(self, user_id: str, account_ids: Iterable[str]) -> dict[str, Account]:
        """Load and row-lock accounts in id order. Missing ids are absent from the result."""
        ids = sorted(set(account_ids))
        stmt = (
            select(Account)
            .where(Account.id.in_(ids), Account.user_id == user_id)
            .order_by(Account.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return {a.id: a for a in result.scalars().all()}

    async def list_for_user(self, user_id: str, status: str | None = None) -> list[Account]:
        stmt = select(Account).where(Account.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Account.status == status)
        stmt = stmt.order_by(Account.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def history(self, account_id: str) -> list[AccountOperation]:
        stmt = (
            select(AccountOperation)
            .where(AccountOperation.account_id == account_id)
            .order_by(AccountOperation.date)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def debit(
        self,
        account_id: str,
        amount: Decimal,
        description: str,
        linked_account_id: str | None,
        when: datetime.datetime,
    ) -> bool:
        """Take `amount` off an active, non-goal account that still holds it.

        The balance check is part of the UPDATE. False when no row qualified.
        """
        stmt = (
            update(Account)
            .where(
                Account.id == account_id,
                Account.status == "active",
                Account.type != "goal",
                Account.balance >= amount,
            )
            .values(balance=Account.balance - amount, updated_at=when)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        self._record(account_id, "expense", amount, description, linked_account_id, when)
        return True

    async def credit(
        self,
        account_id: str,
        amount: Decimal,
        description: str,
        linked_account_id: str | None,
        when: datetime.datetime,
    ) -> bool:
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.status == "active")
            .values(balance=Account.balance + amount, updated_at=when)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        self._record(account_id, "income", amount, description, linked_account_id, when)
        return True

    def _record(
        self,
        account_id: str,
        operation_type: str,
        amount: Decimal,
        description: str,
        linked_account_id: str | None,
        when: datetime.datetime | None = None,
    ) -> None:
        self.session.add(
            AccountOperation(
                account_id=account_id,
                operation_type=operation_type,
                amount=amount,
                date=when or utcnow(),
                description=description,
                linked_account_id=linked_account_id,
            )
        )
