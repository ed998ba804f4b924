"""
Ledger — append-only record of committed sales.

    from dealership import ledger as L

    ledger = L.MemoryLedger()
    result = await ledger.append(draft)   # Ok(Sale) | Error(DuplicateIdentifier | StoreError)
    sales = await ledger.query(buyer_id="steam:110000112345678")
"""

from dealership.ledger._types import (
    SaleDraft,
    Sale,
    DuplicateIdentifier,
)
from dealership.ledger._store import (
    LedgerStore,
    MemoryLedger,
)
from dealership.ledger._identifiers import (
    PLATE_LENGTH,
    VIN_LENGTH,
    VIN_ALPHABET,
    IdentifierGenerator,
    generate_identifiers,
    IdentifierOracle,
    LedgerOracle,
)
from dealership.ledger._sqlalchemy import (
    SaleTable,
    SQLAlchemyLedger,
)

__all__ = (
    # Types
    "SaleDraft",
    "Sale",
    "DuplicateIdentifier",
    # Store
    "LedgerStore",
    "MemoryLedger",
    # Identifiers
    "PLATE_LENGTH",
    "VIN_LENGTH",
    "VIN_ALPHABET",
    "IdentifierGenerator",
    "generate_identifiers",
    "IdentifierOracle",
    "LedgerOracle",
    # SQLAlchemy
    "SaleTable",
    "SQLAlchemyLedger",
)
