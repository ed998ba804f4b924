"""
SQLAlchemy integration — append-only `sales` table.

Uniqueness of plate and VIN is enforced by the database, so concurrent
appends from separate processes still cannot share an identifier.
"""

import logging
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from kungfu import Result, Ok, Error

from dealership._db import Base, from_utc_naive, to_utc_naive
from dealership._errors import StoreError
from dealership.ledger._types import Sale, SaleDraft, DuplicateIdentifier

logger = logging.getLogger("dealership.store")


# ═══════════════════════════════════════════════════════════════════════════════
# Sales Table
# ═══════════════════════════════════════════════════════════════════════════════


class SaleTable(Base):
    __tablename__ = "sales"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    buyer_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    price_paid: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    plate: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    vin: Mapped[str] = mapped_column(String(17), nullable=False, unique=True)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    item_category: Mapped[str] = mapped_column(String(64), nullable=False)


def _to_sale(row: SaleTable) -> Sale:
    return Sale(
        id=row.id,
        item_id=row.item_id,
        buyer_id=row.buyer_id,
        price_paid=row.price_paid,
        timestamp=from_utc_naive(row.timestamp),
        plate=row.plate,
        vin=row.vin,
        item_name=row.item_name,
        item_category=row.item_category,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SQLAlchemy Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyLedger:
    """Ledger store on SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(
        self, draft: SaleDraft
    ) -> Result[Sale, StoreError | DuplicateIdentifier]:
        try:
            async with self._session_factory() as session:
                row = SaleTable(
                    item_id=draft.item_id,
                    buyer_id=draft.buyer_id,
                    price_paid=draft.price_paid,
                    timestamp=to_utc_naive(draft.timestamp),
                    plate=draft.plate,
                    vin=draft.vin,
                    item_name=draft.item_name,
                    item_category=draft.item_category,
                )
                session.add(row)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return Error(DuplicateIdentifier(draft.plate, draft.vin))
                return Ok(Sale.from_draft(row.id, draft))
        except Exception as e:
            logger.error("Ledger append failed: %s", e)
            return Error(StoreError(f"Failed to append sale: {e}", e))

    async def get(self, sale_id: int) -> Result[Sale | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(SaleTable, sale_id)
                return Ok(_to_sale(row) if row is not None else None)
        except Exception as e:
            return Error(StoreError(f"Failed to get sale: {e}", e))

    async def identifiers_taken(self, plate: str, vin: str) -> Result[bool, StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(SaleTable.id)
                    .where(or_(SaleTable.plate == plate, SaleTable.vin == vin))
                    .limit(1)
                )
                found = (await session.execute(stmt)).scalar_one_or_none()
                return Ok(found is not None)
        except Exception as e:
            return Error(StoreError(f"Failed to check identifiers: {e}", e))

    async def query(
        self,
        *,
        buyer_id: str | None = None,
        item_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Result[tuple[Sale, ...], StoreError]:
        stmt = select(SaleTable).order_by(SaleTable.id)
        if buyer_id is not None:
            stmt = stmt.where(SaleTable.buyer_id == buyer_id)
        if item_id is not None:
            stmt = stmt.where(SaleTable.item_id == item_id)
        if since is not None:
            stmt = stmt.where(SaleTable.timestamp >= to_utc_naive(since))
        if until is not None:
            stmt = stmt.where(SaleTable.timestamp <= to_utc_naive(until))
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return Ok(tuple(_to_sale(row) for row in rows))
        except Exception as e:
            return Error(StoreError(f"Failed to query sales: {e}", e))


__all__ = ("SaleTable", "SQLAlchemyLedger")
