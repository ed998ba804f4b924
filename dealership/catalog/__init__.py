"""
Catalog — the set of purchasable items and their stock.

    from dealership import catalog as K

    store = K.MemoryCatalog([K.Item(id="adder", name="Adder", category=K.Category.SUPER,
                                    base_price=1_000_000, stock=3)])
    result = await store.get("adder")  # Ok(Item(...))
"""

from dealership.catalog._types import (
    Category,
    Item,
    validate_item,
)
from dealership.catalog._store import (
    CatalogStore,
    MemoryCatalog,
)
from dealership.catalog._sqlalchemy import (
    ItemTable,
    SQLAlchemyCatalog,
)

__all__ = (
    # Types
    "Category",
    "Item",
    "validate_item",
    # Store
    "CatalogStore",
    "MemoryCatalog",
    # SQLAlchemy
    "ItemTable",
    "SQLAlchemyCatalog",
)
