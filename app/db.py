import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.goals.errors import PersistenceError
from app.goals.tables import Base

logger = logging.getLogger(__name__)


def normalize_url(raw_url: str) -> str:
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw_url


engine = create_async_engine(normalize_url(settings.database_url), pool_pre_ping=True, echo=settings.sql_echo)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncSession:  # type: ignore[misc]
    async with async_session() as session:
        yield session


@asynccontextmanager
async def unit_of_work(session: AsyncSession, action: str) -> AsyncIterator[AsyncSession]:
    """One transaction: commit on success, roll back on any exception.

    Database failures surface as PersistenceError. Domain errors pass through
    unchanged after the rollback.
    """
    try:
        async with session.begin():
            yield session
    except SQLAlchemyError as exc:
        logger.exception("Could not %s", action)
        raise PersistenceError(f"Could not {action}; no changes were saved") from exc


async def create_db_tables(engine: AsyncEngine) -> None:
    """Create missing tables from the SQLAlchemy models."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
