"""
SQLAlchemy integration — catalog store backed by an `items` table.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///shop.db")
    catalog = SQLAlchemyCatalog(session_factory)
    await catalog.add(Item(...))
"""

import logging
from typing import Any, cast

from sqlalchemy import JSON, Boolean, Integer, String, Text, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from kungfu import Result, Ok, Error

from dealership._db import Base
from dealership._errors import StoreError
from dealership.catalog._types import Item

logger = logging.getLogger("dealership.store")


# ═══════════════════════════════════════════════════════════════════════════════
# Items Table
# ═══════════════════════════════════════════════════════════════════════════════


class ItemTable(Base):
    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    base_price: Mapped[int] = mapped_column(Integer, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    vip_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    specs: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


def _to_item(row: ItemTable) -> Item:
    return Item(
        id=row.id,
        name=row.name,
        category=row.category,
        base_price=row.base_price,
        stock=row.stock,
        is_used=row.is_used,
        mileage=row.mileage,
        vip_only=row.vip_only,
        specs=dict(row.specs or {}),
        description=row.description,
        disabled=row.disabled,
    )


def _to_row(item: Item) -> ItemTable:
    return ItemTable(
        id=item.id,
        name=item.name,
        category=item.category,
        base_price=item.base_price,
        stock=item.stock,
        is_used=item.is_used,
        mileage=item.mileage,
        vip_only=item.vip_only,
        specs=dict(item.specs),
        description=item.description,
        disabled=item.disabled,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SQLAlchemy Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyCatalog:
    """
    Catalog store on SQLAlchemy async sessions.

    Note: compare_and_set_stock is a single conditional UPDATE, so it stays
    atomic across processes sharing the database.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, item_id: str) -> Result[Item | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ItemTable, item_id)
                return Ok(_to_item(row) if row is not None else None)
        except Exception as e:
            return Error(StoreError(f"Failed to get item: {e}", e))

    async def add(self, item: Item) -> Result[bool, StoreError]:
        try:
            async with self._session_factory() as session:
                session.add(_to_row(item))
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return Ok(False)
                return Ok(True)
        except Exception as e:
            return Error(StoreError(f"Failed to add item: {e}", e))

    async def compare_and_set_stock(
        self, item_id: str, expected: int, new: int
    ) -> Result[bool, StoreError]:
        stmt = (
            update(ItemTable)
            .where(ItemTable.id == item_id, ItemTable.stock == expected)
            .values(stock=new)
        )
        return await self._execute_update(stmt, "set stock")

    async def set_price(self, item_id: str, price: int) -> Result[bool, StoreError]:
        stmt = update(ItemTable).where(ItemTable.id == item_id).values(base_price=price)
        return await self._execute_update(stmt, "set price")

    async def set_disabled(self, item_id: str, disabled: bool) -> Result[bool, StoreError]:
        stmt = update(ItemTable).where(ItemTable.id == item_id).values(disabled=disabled)
        return await self._execute_update(stmt, "set disabled")

    async def snapshot(self) -> Result[tuple[Item, ...], StoreError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(select(ItemTable))).scalars().all()
                return Ok(tuple(_to_item(row) for row in rows))
        except Exception as e:
            return Error(StoreError(f"Failed to read catalog: {e}", e))

    async def _execute_update(self, stmt: Any, action: str) -> Result[bool, StoreError]:
        try:
            async with self._session_factory() as session:
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                await session.commit()
                return Ok(cursor.rowcount > 0)
        except Exception as e:
            logger.error("Catalog %s failed: %s", action, e)
            return Error(StoreError(f"Failed to {action}: {e}", e))


__all__ = (
    "ItemTable",
    "SQLAlchemyCatalog",
)
