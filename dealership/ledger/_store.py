"""
Ledger store — append-only sales storage.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Protocol

from kungfu import Result, Ok, Error

from dealership._db import from_utc_naive
from dealership._errors import StoreError
from dealership.ledger._types import Sale, SaleDraft, DuplicateIdentifier

# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class LedgerStore(Protocol):
    """
    Ledger storage protocol.

    Note: No update or delete. append() must be atomic and enforce
    uniqueness of plate and VIN across all sales.
    """

    async def append(
        self, draft: SaleDraft
    ) -> Result[Sale, StoreError | DuplicateIdentifier]:
        """Append sale, assigning the next monotonic id."""
        ...

    async def get(self, sale_id: int) -> Result[Sale | None, StoreError]:
        ...

    async def identifiers_taken(self, plate: str, vin: str) -> Result[bool, StoreError]:
        """True if either plate or VIN is already used."""
        ...

    async def query(
        self,
        *,
        buyer_id: str | None = None,
        item_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Result[tuple[Sale, ...], StoreError]:
        """Sales matching every given filter, ordered by id. since/until inclusive."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryLedger:
    """In-memory ledger. Single process only."""

    def __init__(self) -> None:
        self._sales: list[Sale] = []
        self._plates: set[str] = set()
        self._vins: set[str] = set()
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def append(
        self, draft: SaleDraft
    ) -> Result[Sale, StoreError | DuplicateIdentifier]:
        async with self._lock:
            if draft.plate in self._plates or draft.vin in self._vins:
                return Error(DuplicateIdentifier(draft.plate, draft.vin))

            sale = Sale.from_draft(self._next_id, draft)
            self._next_id += 1
            self._sales.append(sale)
            self._plates.add(sale.plate)
            self._vins.add(sale.vin)
            return Ok(sale)

    async def get(self, sale_id: int) -> Result[Sale | None, StoreError]:
        for sale in self._sales:
            if sale.id == sale_id:
                return Ok(sale)
        return Ok(None)

    async def identifiers_taken(self, plate: str, vin: str) -> Result[bool, StoreError]:
        return Ok(plate in self._plates or vin in self._vins)

    async def query(
        self,
        *,
        buyer_id: str | None = None,
        item_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Result[tuple[Sale, ...], StoreError]:
        # naive bounds are UTC, as in the SQL ledger
        since = from_utc_naive(since) if since is not None else None
        until = from_utc_naive(until) if until is not None else None
        matches = (
            sale
            for sale in tuple(self._sales)
            if (buyer_id is None or sale.buyer_id == buyer_id)
            and (item_id is None or sale.item_id == item_id)
            and (since is None or from_utc_naive(sale.timestamp) >= since)
            and (until is None or from_utc_naive(sale.timestamp) <= until)
        )
        sales = tuple(matches)
        return Ok(sales[:limit] if limit is not None else sales)


__all__ = ("LedgerStore", "MemoryLedger")
