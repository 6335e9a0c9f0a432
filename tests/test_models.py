"""Tests for the goal/account wire contract."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.goals.models import GoalCreate, GoalOut, GoalStatus, GoalUpdate, TransferRequest
from app.goals.tables import Goal, GoalTransfer

CREATED = datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc)


def _goal(**overrides) -> Goal:
    defaults = dict(
        id="g-1",
        user_id="user-1",
        name="Vacation",
        account_id="acc-goal",
        target_amount=Decimal("1000.00"),
        deadline=date(2026, 12, 31),
        progress=Decimal("400.00"),
        status="active",
        created_at=CREATED,
        updated_at=CREATED,
    )
    defaults.update(overrides)
    goal = Goal(**defaults)
    goal.transfers = [
        GoalTransfer(id="t-1", goal_id="g-1", amount=Decimal("400.00"), from_account_id="acc-bank", date=CREATED),
    ]
    return goal


class TestGoalOut:
    def test_camel_case_on_the_wire(self):
        data = GoalOut.from_row(_goal(), today=date(2026, 12, 1)).model_dump(mode="json", by_alias=True)
        for key in ("userId", "accountId", "targetAmount", "transferHistory", "createdAt", "progressPercent"):
            assert key in data
        assert data["transferHistory"][0]["fromAccountId"] == "acc-bank"

    def test_money_is_a_json_number(self):
        data = GoalOut.from_row(_goal()).model_dump(mode="json", by_alias=True)
        assert data["progress"] == 400.0
        assert data["targetAmount"] == 1000.0
        assert data["transferHistory"][0]["amount"] == 400.0

    def test_derived_fields(self):
        out = GoalOut.from_row(_goal(), today=date(2026, 12, 1))
        assert out.progress_percent == 40.0
        assert out.remaining_amount == Decimal("600.00")
        assert out.days_left == 30

    def test_overshoot_keeps_stored_progress(self):
        out = GoalOut.from_row(_goal(progress=Decimal("1200.00"), status="completed"))
        assert out.progress == Decimal("1200.00")
        assert out.progress_percent == 100.0
        assert out.remaining_amount == Decimal("0")
        assert out.status == GoalStatus.completed


class TestRequests:
    def test_goal_create_accepts_camel_case(self):
        body = GoalCreate.model_validate(
            {"name": "Car", "accountId": "a1", "targetAmount": 5000, "deadline": "2027-01-01"}
        )
        assert body.account_id == "a1"
        assert body.target_amount == Decimal("5000")
        assert body.deadline == date(2027, 1, 1)

    def test_goal_create_accepts_snake_case(self):
        body = GoalCreate.model_validate(
            {"name": "Car", "account_id": "a1", "target_amount": "5000.50", "deadline": "2027-01-01"}
        )
        assert body.target_amount == Decimal("5000.50")

    def test_goal_create_requires_fields(self):
        with pytest.raises(PydanticValidationError):
            GoalCreate.model_validate({"name": "Car"})

    def test_goal_update_is_partial(self):
        body = GoalUpdate.model_validate({"targetAmount": 800})
        assert body.name is None
        assert body.deadline is None
        assert body.target_amount == Decimal("800")

    def test_transfer_float_amount_keeps_cents(self):
        body = TransferRequest.model_validate({"fromAccountId": "a1", "amount": 0.1})
        assert body.amount == Decimal("0.1")

    def test_transfer_rejects_non_numeric(self):
        with pytest.raises(PydanticValidationError):
            TransferRequest.model_validate({"fromAccountId": "a1", "amount": "lots"})
