"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.db import create_db_tables, get_session
from app.goals.ledger import AccountLedger
from app.goals.store import GoalStore
from app.goals.tables import Account, Goal
from app.main import app

USER = "user-1"
OTHER_USER = "user-2"


# ---------------------------------------------------------------------------
# Throwaway SQLite database (no real Postgres needed)
# ---------------------------------------------------------------------------

@pytest.fixture()
async def engine(tmp_path):
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'goals.db'}",
        connect_args={"timeout": 30},
    )

    # Writers must queue up instead of failing with "database is locked",
    # so every transaction takes the write lock when it starts.
    # Transfers never interleave here; tests/test_store.py writes over stale rows.
    @event.listens_for(eng.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    await create_db_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Seeder:
    """Writes fixture rows directly and reads state back on fresh sessions."""

    def __init__(self, factory: async_sessionmaker) -> None:
        self.factory = factory

    async def account(
        self,
        balance: str = "1000",
        type: str = "bank",
        status: str = "active",
        user_id: str = USER,
    ) -> Account:
        async with self.factory() as session, session.begin():
            account = Account(
                user_id=user_id,
                name=f"{type} account",
                type=type,
                balance=Decimal(balance),
                currency="RUB",
                status=status,
            )
            session.add(account)
        return account

    async def goal(
        self,
        account_id: str,
        target: str = "1000",
        status: str = "active",
        progress: str = "0",
        user_id: str = USER,
        archived_from: str | None = None,
    ) -> Goal:
        async with self.factory() as session, session.begin():
            goal = Goal(
                user_id=user_id,
                name="Vacation",
                account_id=account_id,
                target_amount=Decimal(target),
                deadline=date(2030, 1, 1),
                progress=Decimal(progress),
                status=status,
                archived_from=archived_from,
            )
            session.add(goal)
        return goal

    async def fetch_goal(self, goal_id: str, user_id: str = USER) -> Goal:
        async with self.factory() as session:
            return await GoalStore(session).require(goal_id, user_id)

    async def fetch_account(self, account_id: str, user_id: str = USER) -> Account:
        async with self.factory() as session:
            return await AccountLedger(session).require(account_id, user_id)

    async def history(self, account_id: str) -> list:
        async with self.factory() as session:
            return await AccountLedger(session).history(account_id)


@pytest.fixture()
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture()
async def funded(seed):
    """A bank account with 1000, a goal account, and an active goal targeting 1000."""
    source = await seed.account(balance="1000", type="bank")
    target_account = await seed.account(balance="0", type="goal")
    goal = await seed.goal(target_account.id, target="1000")
    return source, target_account, goal


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture()
def override_session(session_factory):
    """Point the FastAPI session dependency at the test database."""
    async def _override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override
    yield session_factory
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers={"X-User-Id": USER}) as ac:
        yield ac
