"""
dealership — storefront inventory and transaction engine.

    from dealership import InventoryEngine
    from dealership import catalog as K   # Items and catalog stores
    from dealership import ledger as L    # Append-only sales ledger
    from dealership import view as V      # Filter/sort for browsing
    from dealership import events as N    # State-change notifications
    from dealership import testdrive as T # Timed test-drive sessions
"""

from dealership import catalog
from dealership import ledger
from dealership import view
from dealership import events
from dealership import testdrive
from dealership import variants
from dealership._types import (
    Result,
    Ok,
    Error,
    LazyCoroResult,
    Lazy,
    ItemId,
    RequesterId,
    EligibilityCheck,
    Clock,
)
from dealership._errors import Failure, FailureKind, Failures, StoreError
from dealership._db import create_database
from dealership.config import EngineConfig
from dealership.engine import InventoryEngine, Reservation, CompensationFailed

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "ledger",
    "view",
    "events",
    "testdrive",
    "variants",
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Lazy",
    "ItemId",
    "RequesterId",
    "EligibilityCheck",
    "Clock",
    "Failure",
    "FailureKind",
    "Failures",
    "StoreError",
    "create_database",
    "EngineConfig",
    "InventoryEngine",
    "Reservation",
    "CompensationFailed",
)
