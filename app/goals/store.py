"""Goal store — async access to the goals and goal_transfers tables.

Methods only flush. The calling operation owns the transaction
(``app.db.unit_of_work``), so several store calls commit or roll back together.
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, case, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.goals.errors import NotFoundError
from app.goals.tables import Goal, GoalTransfer, utcnow


class GoalStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, **data: Any) -> Goal:
        goal = Goal(progress=Decimal("0"), status="active", **data)
        self.session.add(goal)
        await self.session.flush()
        return await self.require(goal.id, goal.user_id)

    async def get(self, goal_id: str, user_id: str, for_update: bool = False) -> Goal | None:
        """Fetch one goal with its transfer history, fresh from the database.

        ``for_update`` locks the row until the transaction ends (ignored on SQLite).
        """
        stmt = (
            select(Goal)
            .where(Goal.id == goal_id, Goal.user_id == user_id)
            .options(selectinload(Goal.transfers))
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def require(self, goal_id: str, user_id: str, for_update: bool = False) -> Goal:
        goal = await self.get(goal_id, user_id, for_update=for_update)
        if goal is None:
            raise NotFoundError(f"Goal {goal_id} not found")
        return goal

    async def list_for_user(self, user_id: str, status: str | None = None) -> list[Goal]:
        """Goals of one user, newest first, optionally filtered by status."""
        stmt = select(Goal).where(Goal.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Goal.status == status)
        stmt = stmt.order_by(Goal.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def patch(self, goal_id: str, **fields: Any) -> None:
        """Plain field update. Not for progress, history or status."""
        if not fields:
            return
        stmt = (
            update(Goal)
            .where(Goal.id == goal_id)
            .values(updated_at=utcnow(), **fields)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def set_status(self, goal_id: str, expected: str, status: str, archived_from: str | None) -> bool:
        """Move status only if it is still ``expected``. False when it was not."""
        stmt = (
            update(Goal)
            .where(Goal.id == goal_id, Goal.status == expected)
            .values(status=status, archived_from=archived_from, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def set_target(self, goal_id: str, target_amount: Decimal) -> None:
        """Change the target and re-apply completion in the same statement.

        Progress is read by the database at write time, so a concurrent
        transfer cannot slip between the check and the update.
        """
        stmt = (
            update(Goal)
            .where(Goal.id == goal_id)
            .values(
                target_amount=target_amount,
                status=case(
                    (and_(Goal.status == "active", Goal.progress >= target_amount), "completed"),
                    else_=Goal.status,
                ),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def record_transfer(
        self,
        goal_id: str,
        amount: Decimal,
        from_account_id: str,
        when: datetime.datetime,
    ) -> bool:
        """Increment progress, maybe complete, and append the history entry.

        The increment happens store-side and only while the goal is active,
        so concurrent transfers never lose an update. False if the goal was
        no longer active.
        """
        new_progress = Goal.progress + amount
        stmt = (
            update(Goal)
            .where(Goal.id == goal_id, Goal.status == "active")
            .values(
                progress=new_progress,
                status=case((new_progress >= Goal.target_amount, "completed"), else_=Goal.status),
                updated_at=when,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        self.session.add(GoalTransfer(goal_id=goal_id, amount=amount, from_account_id=from_account_id, date=when))
        await self.session.flush()
        return True
