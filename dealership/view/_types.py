"""
View criteria — filter and sort settings for catalog browsing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class SortField(Enum):
    PRICE = "price"
    NAME = "name"
    STOCK = "stock"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class Criteria:
    """
    Catalog view criteria.

    Example:
        Criteria(
            categories=frozenset({"super", "sports"}),
            price_min=250_000.5,
            text="turbo",
            sort_field=SortField.NAME,
        )

    Note: An empty categories set matches every category.
    Price bounds are inclusive; see price_bounds().
    """

    categories: frozenset[str] = frozenset()
    price_min: float | None = None
    price_max: float | None = None
    text: str = ""
    in_stock_only: bool = False
    sort_field: SortField = SortField.PRICE
    sort_order: SortOrder = SortOrder.ASC
    include_disabled: bool = False

    def price_bounds(self) -> tuple[int | None, int | None]:
        """
        Whole-number bounds: min floored, max ceiled.

        A fractional bound always widens to the more permissive integer.
        """
        low = math.floor(self.price_min) if self.price_min is not None else None
        high = math.ceil(self.price_max) if self.price_max is not None else None
        return low, high


__all__ = ("SortField", "SortOrder", "Criteria")
