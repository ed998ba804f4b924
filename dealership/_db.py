"""
Database layer — declarative base and schema setup.
"""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def to_utc_naive(value: datetime) -> datetime:
    """
    Normalize for storage.

    Note: SQLite drops tzinfo, so every timestamp is stored as naive UTC.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
    *,
    echo: bool = False,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create schema and return (session_factory, engine)."""
    # Register tables on Base.metadata
    from dealership.catalog import _sqlalchemy as _catalog_tables  # noqa: F401
    from dealership.ledger import _sqlalchemy as _ledger_tables  # noqa: F401

    engine = create_async_engine(url, echo=echo)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("Base", "create_database", "to_utc_naive", "from_utc_naive")
