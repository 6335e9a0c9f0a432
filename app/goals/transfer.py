"""Transfer engine — move funds from an account into a goal.

All checks run before the first write. The writes (debit, credit, both
account history entries, the goal increment and its history entry) share one
transaction, so a failure anywhere leaves every record as it was.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import unit_of_work
from app.goals import features
from app.goals.errors import (
    GoalsError,
    InsufficientFundsError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.goals.ledger import AccountLedger
from app.goals.store import GoalStore
from app.goals.tables import Goal, utcnow

logger = logging.getLogger(__name__)


async def transfer_to_goal(
    session: AsyncSession,
    user_id: str,
    goal_id: str,
    from_account_id: str,
    amount: object,
) -> Goal:
    """Contribute `amount` from `from_account_id` to the goal and return the updated goal.

    Raises ValidationError, NotFoundError, InvalidStateError,
    InsufficientFundsError or PersistenceError. Nothing is written unless
    the whole transfer succeeds.
    """
    goals = GoalStore(session)
    ledger = AccountLedger(session)

    try:
        value = features.validate_money(amount)

        async with unit_of_work(session, "transfer to goal"):
            goal = await goals.require(goal_id, user_id, for_update=True)
            if goal.status != "active":
                raise InvalidStateError(f"Goal is {goal.status}; only active goals accept transfers")
            if from_account_id == goal.account_id:
                raise ValidationError("Source account must differ from the goal's account")

            accounts = await ledger.lock(user_id, [from_account_id, goal.account_id])

            source = accounts.get(from_account_id)
            if source is None:
                raise NotFoundError(f"Account {from_account_id} not found")
            if source.status != "active":
                raise InvalidStateError("Source account is not active")
            if source.type == "goal":
                raise InvalidStateError("Goal accounts cannot fund other goals")

            destination = accounts.get(goal.account_id)
            if destination is None:
                raise NotFoundError(f"Goal account {goal.account_id} not found")
            if destination.status != "active":
                raise InvalidStateError("Goal account is not active")

            if source.balance < value:
                raise InsufficientFundsError(
                    f"Insufficient funds: account holds {source.balance}, transfer needs {value}"
                )

            now = utcnow()
            debited = await ledger.debit(
                source.id, value, f"Transfer to goal: {goal.name}", destination.id, now
            )
            if not debited:
                raise InsufficientFundsError("Source account changed during the transfer")

            credited = await ledger.credit(
                destination.id, value, f"Goal contribution: {goal.name}", source.id, now
            )
            if not credited:
                raise InvalidStateError("Goal account is not active")

            if not await goals.record_transfer(goal.id, value, source.id, now):
                raise InvalidStateError("Goal stopped accepting transfers")

            updated = await goals.require(goal.id, user_id)
    except GoalsError as exc:
        logger.info("Transfer of %s to goal %s rejected: %s", amount, goal_id, exc.message)
        raise

    logger.info(
        "Transferred %s from account %s to goal %s (progress %s/%s, %s)",
        value,
        from_account_id,
        goal_id,
        updated.progress,
        updated.target_amount,
        updated.status,
    )
    return updated
