"""
Catalog types — purchasable items.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from kungfu import Result, Ok, Error

from dealership._errors import Failure, Failures

# ═══════════════════════════════════════════════════════════════════════════════
# Category — open set of well-known values
# ═══════════════════════════════════════════════════════════════════════════════


class Category:
    """Well-known vehicle categories. Any string is accepted."""

    COMPACT = "compacts"
    SEDAN = "sedans"
    SUV = "suvs"
    COUPE = "coupes"
    MUSCLE = "muscle"
    SPORTS = "sports"
    SUPER = "super"
    MOTORCYCLE = "motorcycles"
    OFFROAD = "offroad"
    VAN = "vans"


# ═══════════════════════════════════════════════════════════════════════════════
# Item
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Item:
    """
    A catalog item (vehicle model or single used unit).

    Note: Prices are integers in the smallest currency unit.
    specs is display-only and frozen into a read-only mapping.
    """

    id: str
    name: str
    category: str
    base_price: int
    stock: int
    is_used: bool = False
    mileage: int | None = None
    vip_only: bool = False
    specs: Mapping[str, str] = field(default_factory=dict)
    description: str = ""
    disabled: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.specs, MappingProxyType):
            object.__setattr__(self, "specs", MappingProxyType(dict(self.specs)))

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


def validate_item(item: Item) -> Result[Item, Failure]:
    """Check item invariants before it enters a store."""
    if not isinstance(item.id, str) or not item.id.strip():
        return Error(Failures.invalid_input("Item id must be a non-empty string"))
    if not _is_int(item.base_price) or item.base_price < 0:
        return Error(Failures.invalid_input(f"{item.id}: price must be a non-negative integer"))
    if not _is_int(item.stock) or item.stock < 0:
        return Error(Failures.invalid_input(f"{item.id}: stock must be a non-negative integer"))
    if item.is_used and item.mileage is None:
        return Error(Failures.invalid_input(f"{item.id}: used items require mileage"))
    if not item.is_used and item.mileage is not None:
        return Error(Failures.invalid_input(f"{item.id}: mileage is only valid on used items"))
    if item.mileage is not None and (not _is_int(item.mileage) or item.mileage < 0):
        return Error(Failures.invalid_input(f"{item.id}: mileage must be a non-negative integer"))
    return Ok(item)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Category",
    "Item",
    "validate_item",
)
