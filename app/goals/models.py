"""Goal/account API contract — Pydantic v2 models.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from app.goals import features
from app.goals.tables import Goal

# Decimal in Python, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class GoalStatus(str, Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"
    archived = "archived"


class AccountStatus(str, Enum):
    active = "active"
    archived = "archived"


class AccountType(str, Enum):
    bank = "bank"
    deposit = "deposit"
    goal = "goal"
    credit = "credit"
    subscription = "subscription"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class GoalCreate(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    account_id: str
    target_amount: Decimal
    deadline: date


class GoalUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    target_amount: Decimal | None = None
    deadline: date | None = None


class TransferRequest(ApiModel):
    from_account_id: str
    amount: Decimal


class AccountCreate(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    type: AccountType
    balance: Decimal = Decimal("0")
    currency: str | None = Field(default=None, min_length=3, max_length=3)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TransferHistoryItem(ApiModel):
    amount: Money
    date: datetime
    from_account_id: str


class GoalOut(ApiModel):
    id: str
    user_id: str
    name: str
    account_id: str
    target_amount: Money
    deadline: date
    progress: Money
    transfer_history: list[TransferHistoryItem] = Field(default_factory=list)
    status: GoalStatus
    created_at: datetime
    updated_at: datetime

    # Derived, read-only
    progress_percent: float = 0.0
    remaining_amount: Money = Decimal("0")
    days_left: int = 0

    @classmethod
    def from_row(cls, goal: Goal, today: date | None = None) -> GoalOut:
        return cls(
            id=goal.id,
            user_id=goal.user_id,
            name=goal.name,
            account_id=goal.account_id,
            target_amount=goal.target_amount,
            deadline=goal.deadline,
            progress=goal.progress,
            transfer_history=[TransferHistoryItem.model_validate(t) for t in goal.transfers],
            status=goal.status,
            created_at=goal.created_at,
            updated_at=goal.updated_at,
            progress_percent=features.progress_percent(goal.progress, goal.target_amount),
            remaining_amount=features.remaining_amount(goal.progress, goal.target_amount),
            days_left=features.days_left(goal.deadline, today),
        )


class AccountOut(ApiModel):
    id: str
    user_id: str
    name: str
    type: AccountType
    balance: Money
    currency: str
    status: AccountStatus
    created_at: datetime
    updated_at: datetime


class AccountOperationOut(ApiModel):
    id: str
    account_id: str
    operation_type: str  # "income" | "expense"
    amount: Money
    date: datetime
    description: str | None = None
    linked_account_id: str | None = None


class ErrorResponse(BaseModel):
    code: str
    message: str
