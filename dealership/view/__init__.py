"""
View — filter/sort engine for catalog browsing.

    from dealership import view as V

    items = V.view(snapshot, V.Criteria(price_max=500_000, sort_order=V.SortOrder.DESC))
"""

from dealership.view._types import SortField, SortOrder, Criteria
from dealership.view._view import filter_items, view

__all__ = (
    "SortField",
    "SortOrder",
    "Criteria",
    "filter_items",
    "view",
)
