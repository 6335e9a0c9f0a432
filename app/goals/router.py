"""Goals HTTP router — CRUD, archive/restore, transfers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import current_user_id, verify_api_key
from app.db import get_session
from app.goals import lifecycle
from app.goals.errors import NotFoundError
from app.goals.models import ErrorResponse, GoalCreate, GoalOut, GoalStatus, GoalUpdate, TransferRequest
from app.goals.store import GoalStore
from app.goals.transfer import transfer_to_goal

ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

router = APIRouter(
    prefix="/api/v1/goals",
    tags=["goals"],
    dependencies=[Depends(verify_api_key)],
    responses=ERRORS,
)


@router.get("", response_model=list[GoalOut])
async def list_goals(
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
    status: GoalStatus | None = Query(default=None, description="Filter by status"),
) -> list[GoalOut]:
    goals = await GoalStore(session).list_for_user(user_id, status.value if status else None)
    return [GoalOut.from_row(g) for g in goals]


@router.get("/{goal_id}", response_model=GoalOut)
async def get_goal(
    goal_id: str,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> GoalOut:
    goal = await GoalStore(session).get(goal_id, user_id)
    if goal is None:
        raise NotFoundError(f"Goal {goal_id} not found")
    return GoalOut.from_row(goal)


@router.post("", response_model=GoalOut, status_code=201)
async def create_goal(
    body: GoalCreate,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> GoalOut:
    goal = await lifecycle.create_goal(session, user_id, body)
    return GoalOut.from_row(goal)


@router.put("/{goal_id}", response_model=GoalOut)
async def update_goal(
    goal_id: str,
    body: GoalUpdate,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> GoalOut:
    goal = await lifecycle.edit_goal(session, user_id, goal_id, body)
    return GoalOut.from_row(goal)


@router.put("/{goal_id}/archive", response_model=GoalOut)
async def archive_goal(
    goal_id: str,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> GoalOut:
    goal = await lifecycle.archive_goal(session, user_id, goal_id)
    return GoalOut.from_row(goal)


@router.put("/{goal_id}/restore", response_model=GoalOut)
async def restore_goal(
    goal_id: str,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> GoalOut:
    goal = await lifecycle.restore_goal(session, user_id, goal_id)
    return GoalOut.from_row(goal)


@router.post("/{goal_id}/transfer", response_model=GoalOut)
async def transfer(
    goal_id: str,
    body: TransferRequest,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(current_user_id),
) -> GoalOut:
    goal = await transfer_to_goal(session, user_id, goal_id, body.from_account_id, body.amount)
    return GoalOut.from_row(goal)
