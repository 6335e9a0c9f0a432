"""SQLAlchemy tables: accounts, their operation history, goals and goal transfers."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

MONEY = Numeric(14, 2)


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)


class Account(Base):
    __tablename__ = "accounts"
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(200))
    type: Mapped[str] = mapped_column(String(20))  # bank, deposit, goal, credit, subscription
    balance: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), default="RUB")
    status: Mapped[str] = mapped_column(String(20), default="active")  # active, archived
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    operations: Mapped[list["AccountOperation"]] = relationship(
        back_populates="account",
        foreign_keys="AccountOperation.account_id",
        order_by="AccountOperation.date",
    )


class AccountOperation(Base):
    __tablename__ = "account_operations"
    account_id: Mapped[str] = mapped_column(ForeignKey("accounts.id"), index=True)
    operation_type: Mapped[str] = mapped_column(String(20))  # income, expense
    amount: Mapped[Decimal] = mapped_column(MONEY)
    date: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    description: Mapped[str | None] = mapped_column(String(300))
    linked_account_id: Mapped[str | None] = mapped_column(ForeignKey("accounts.id"))

    account: Mapped["Account"] = relationship(back_populates="operations", foreign_keys=[account_id])


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (
        Index("ix_goals_user_status", "user_id", "status"),
        Index("ix_goals_user_deadline", "user_id", "deadline"),
    )
    user_id: Mapped[str] = mapped_column(String(64))
    name: Mapped[str] = mapped_column(String(200))
    account_id: Mapped[str] = mapped_column(ForeignKey("accounts.id"))
    target_amount: Mapped[Decimal] = mapped_column(MONEY)
    deadline: Mapped[datetime.date] = mapped_column(Date)
    progress: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(20), default="active")  # active, completed, cancelled, archived
    archived_from: Mapped[str | None] = mapped_column(String(20))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    transfers: Mapped[list["GoalTransfer"]] = relationship(
        back_populates="goal",
        order_by="GoalTransfer.date",
        lazy="selectin",
    )


class GoalTransfer(Base):
    __tablename__ = "goal_transfers"
    goal_id: Mapped[str] = mapped_column(ForeignKey("goals.id"), index=True)
    amount: Mapped[Decimal] = mapped_column(MONEY)
    date: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    from_account_id: Mapped[str] = mapped_column(ForeignKey("accounts.id"))

    goal: Mapped["Goal"] = relationship(back_populates="transfers")
