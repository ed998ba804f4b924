"""
Catalog view — pure filter/sort over a snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from operator import attrgetter

from dealership.catalog import Item
from dealership.view._types import Criteria, SortField, SortOrder

_SORT_KEYS = {
    SortField.PRICE: attrgetter("base_price"),
    SortField.NAME: lambda item: item.name.casefold(),
    SortField.STOCK: attrgetter("stock"),
}


def _matches(item: Item, criteria: Criteria, low: int | None, high: int | None, needle: str) -> bool:
    if item.disabled and not criteria.include_disabled:
        return False
    if criteria.categories and item.category not in criteria.categories:
        return False
    if low is not None and item.base_price < low:
        return False
    if high is not None and item.base_price > high:
        return False
    if criteria.in_stock_only and item.stock <= 0:
        return False
    if needle and needle not in f"{item.name}\n{item.description}".casefold():
        return False
    return True


def filter_items(snapshot: Iterable[Item], criteria: Criteria) -> Iterator[Item]:
    """Lazily yield items matching criteria, in snapshot order."""
    low, high = criteria.price_bounds()
    needle = criteria.text.strip().casefold()
    return (item for item in snapshot if _matches(item, criteria, low, high, needle))


def view(snapshot: Iterable[Item], criteria: Criteria | None = None) -> tuple[Item, ...]:
    """
    Filter and sort a catalog snapshot.

    Side-effect free; never touches a store. Ties on the sort field are
    broken by item id ascending, in both sort orders.
    """
    criteria = criteria or Criteria()
    by_id = sorted(filter_items(snapshot, criteria), key=attrgetter("id"))
    # sort is stable, so the id order survives within equal keys
    by_id.sort(
        key=_SORT_KEYS[criteria.sort_field],
        reverse=criteria.sort_order is SortOrder.DESC,
    )
    return tuple(by_id)


__all__ = ("filter_items", "view")
