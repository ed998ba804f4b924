"""
Engine — reservation and transaction core.

    from dealership.engine import InventoryEngine

    engine = InventoryEngine(catalog, ledger, is_eligible=is_vip)
    result = await engine.purchase("adder", "player:7", expected_price=1_000_000)
"""

from dealership.engine._locks import KeyedLocks
from dealership.engine._engine import (
    CompensationFailed,
    Reservation,
    InventoryEngine,
)

__all__ = (
    "KeyedLocks",
    "CompensationFailed",
    "Reservation",
    "InventoryEngine",
)
