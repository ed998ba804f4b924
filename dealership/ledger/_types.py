"""
Ledger types — committed sales.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class SaleDraft:
    """
    A sale ready to be appended.

    Note: item_name/item_category are a snapshot taken at commit time,
    so the sale stays readable if the item is later changed or disabled.
    """

    item_id: str
    buyer_id: str
    price_paid: int
    timestamp: datetime
    plate: str
    vin: str
    item_name: str
    item_category: str


@dataclass(frozen=True, slots=True)
class Sale:
    """A committed, immutable sale. id is assigned by the ledger."""

    id: int
    item_id: str
    buyer_id: str
    price_paid: int
    timestamp: datetime
    plate: str
    vin: str
    item_name: str
    item_category: str

    @classmethod
    def from_draft(cls, sale_id: int, draft: SaleDraft) -> Sale:
        return cls(
            id=sale_id,
            item_id=draft.item_id,
            buyer_id=draft.buyer_id,
            price_paid=draft.price_paid,
            timestamp=draft.timestamp,
            plate=draft.plate,
            vin=draft.vin,
            item_name=draft.item_name,
            item_category=draft.item_category,
        )


@dataclass(frozen=True, slots=True)
class DuplicateIdentifier:
    """Append rejected: plate or VIN already belongs to a committed sale."""

    plate: str
    vin: str


__all__ = ("SaleDraft", "Sale", "DuplicateIdentifier")
