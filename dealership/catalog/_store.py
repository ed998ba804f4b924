"""
Catalog store — typed storage protocol for items.

All methods return Result for explicit error handling.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Protocol

from kungfu import Result, Ok

from dealership._errors import StoreError
from dealership.catalog._types import Item

# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol — Result-based
# ═══════════════════════════════════════════════════════════════════════════════


class CatalogStore(Protocol):
    """
    Catalog storage protocol.

    Note: compare_and_set_stock is the only stock write. It must be atomic,
    so two writers can never both act on the same observed stock value.
    """

    async def get(self, item_id: str) -> Result[Item | None, StoreError]:
        """Get item. Returns Ok(None) if not found."""
        ...

    async def add(self, item: Item) -> Result[bool, StoreError]:
        """Insert item. Returns Ok(False) if the id already exists."""
        ...

    async def compare_and_set_stock(
        self, item_id: str, expected: int, new: int
    ) -> Result[bool, StoreError]:
        """
        Atomically set stock to new if it currently equals expected.

        Returns Ok(True) if set, Ok(False) if stock changed or item is absent.
        """
        ...

    async def set_price(self, item_id: str, price: int) -> Result[bool, StoreError]:
        """Set base price. Returns Ok(False) if item is absent."""
        ...

    async def set_disabled(self, item_id: str, disabled: bool) -> Result[bool, StoreError]:
        """Soft-disable / re-enable item. Returns Ok(False) if absent."""
        ...

    async def snapshot(self) -> Result[tuple[Item, ...], StoreError]:
        """Point-in-time copy of every item. Never blocks writers."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCatalog:
    """
    In-memory catalog store.

    Note: Single process only. Items are immutable, so snapshot() hands out
    the current records without copying or locking.
    """

    def __init__(self, items: tuple[Item, ...] | list[Item] = ()) -> None:
        self._items: dict[str, Item] = {item.id: item for item in items}
        self._lock = asyncio.Lock()

    async def get(self, item_id: str) -> Result[Item | None, StoreError]:
        return Ok(self._items.get(item_id))

    async def add(self, item: Item) -> Result[bool, StoreError]:
        async with self._lock:
            if item.id in self._items:
                return Ok(False)
            self._items[item.id] = item
            return Ok(True)

    async def compare_and_set_stock(
        self, item_id: str, expected: int, new: int
    ) -> Result[bool, StoreError]:
        async with self._lock:
            current = self._items.get(item_id)
            if current is None or current.stock != expected:
                return Ok(False)
            self._items[item_id] = replace(current, stock=new)
            return Ok(True)

    async def set_price(self, item_id: str, price: int) -> Result[bool, StoreError]:
        async with self._lock:
            current = self._items.get(item_id)
            if current is None:
                return Ok(False)
            self._items[item_id] = replace(current, base_price=price)
            return Ok(True)

    async def set_disabled(self, item_id: str, disabled: bool) -> Result[bool, StoreError]:
        async with self._lock:
            current = self._items.get(item_id)
            if current is None:
                return Ok(False)
            self._items[item_id] = replace(current, disabled=disabled)
            return Ok(True)

    async def snapshot(self) -> Result[tuple[Item, ...], StoreError]:
        return Ok(tuple(self._items.values()))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CatalogStore",
    "MemoryCatalog",
)
