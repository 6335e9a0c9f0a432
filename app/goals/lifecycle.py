"""Goal lifecycle — create, edit, archive and restore.

Status edges outside of transfers::

    active ──────────────┐
    completed ── archive ─┼──> archived ── restore ──> status held before archiving
    cancelled ───────────┘                            (re-checked for completion)

Archiving an archived goal is a no-op. Restoring anything that is not
archived is an InvalidStateError.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import unit_of_work
from app.goals import features
from app.goals.errors import InvalidStateError, ValidationError
from app.goals.ledger import AccountLedger
from app.goals.models import GoalCreate, GoalUpdate
from app.goals.store import GoalStore
from app.goals.tables import Goal

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("name must not be blank")
    return cleaned


async def create_goal(session: AsyncSession, user_id: str, data: GoalCreate) -> Goal:
    """New active goal with zero progress, tied to one of the caller's active accounts."""
    name = _clean_name(data.name)
    target = features.validate_money(data.target_amount, "targetAmount")

    async with unit_of_work(session, "create goal"):
        account = await AccountLedger(session).require(data.account_id, user_id)
        if account.status != "active":
            raise InvalidStateError("Goal account is not active")
        goal = await GoalStore(session).create(
            user_id=user_id,
            name=name,
            account_id=account.id,
            target_amount=target,
            deadline=data.deadline,
        )

    logger.info("Created goal %s for user %s (target %s)", goal.id, user_id, target)
    return goal


async def edit_goal(session: AsyncSession, user_id: str, goal_id: str, data: GoalUpdate) -> Goal:
    """Apply a partial edit. Progress and history are never touched.

    A new target re-runs completion in the same statement that stores it.
    """
    fields = {}
    if data.name is not None:
        fields["name"] = _clean_name(data.name)
    if data.deadline is not None:
        fields["deadline"] = data.deadline
    target = None
    if data.target_amount is not None:
        target = features.validate_money(data.target_amount, "targetAmount")

    store = GoalStore(session)
    async with unit_of_work(session, "update goal"):
        previous = (await store.require(goal_id, user_id)).status
        await store.patch(goal_id, **fields)
        if target is not None:
            await store.set_target(goal_id, target)
        goal = await store.require(goal_id, user_id)

    if goal.status != previous:
        logger.info("Goal %s moved %s -> %s after target change", goal_id, previous, goal.status)
    return goal


async def archive_goal(session: AsyncSession, user_id: str, goal_id: str) -> Goal:
    store = GoalStore(session)
    async with unit_of_work(session, "archive goal"):
        goal = await store.require(goal_id, user_id, for_update=True)
        if goal.status == "archived":
            return goal
        if not features.can_archive(goal.status):
            raise InvalidStateError(f"Goal in status {goal.status} cannot be archived")

        previous = goal.status
        if not await store.set_status(goal_id, previous, "archived", archived_from=previous):
            raise InvalidStateError("Goal status changed concurrently")
        goal = await store.require(goal_id, user_id)

    logger.info("Archived goal %s (was %s)", goal_id, previous)
    return goal


async def restore_goal(session: AsyncSession, user_id: str, goal_id: str) -> Goal:
    store = GoalStore(session)
    async with unit_of_work(session, "restore goal"):
        goal = await store.require(goal_id, user_id, for_update=True)
        if goal.status != "archived":
            raise InvalidStateError(f"Only archived goals can be restored; goal is {goal.status}")

        status = features.restored_status(goal.archived_from, goal.progress, goal.target_amount)
        if not await store.set_status(goal_id, "archived", status, archived_from=None):
            raise InvalidStateError("Goal status changed concurrently")
        goal = await store.require(goal_id, user_id)

    logger.info("Restored goal %s to %s", goal_id, status)
    return goal
