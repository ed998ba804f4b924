"""
Registration identifiers — plate/VIN candidates and the uniqueness oracle.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Callable
from typing import Protocol

from kungfu import Result, Ok, Error

from dealership._errors import StoreError
from dealership.ledger._store import LedgerStore

PLATE_LENGTH = 8
VIN_LENGTH = 17
VIN_ALPHABET = "ABCDEFGHJKLMNPRSTUVWXYZ0123456789"  # I, O, Q are never used in VINs

type IdentifierGenerator = Callable[[], tuple[str, str]]
"""Returns a (plate, vin) candidate pair."""


def generate_identifiers() -> tuple[str, str]:
    """Random plate (8 uppercase alphanumerics) and VIN (17 chars)."""
    plate_alphabet = string.ascii_uppercase + string.digits
    plate = "".join(secrets.choice(plate_alphabet) for _ in range(PLATE_LENGTH))
    vin = "".join(secrets.choice(VIN_ALPHABET) for _ in range(VIN_LENGTH))
    return plate, vin


class IdentifierOracle(Protocol):
    """External authority on whether a plate/VIN pair is unused."""

    async def is_free(self, plate: str, vin: str) -> Result[bool, StoreError]:
        ...


class LedgerOracle:
    """Oracle backed by the sales ledger itself."""

    def __init__(self, ledger: LedgerStore) -> None:
        self._ledger = ledger

    async def is_free(self, plate: str, vin: str) -> Result[bool, StoreError]:
        match await self._ledger.identifiers_taken(plate, vin):
            case Ok(taken):
                return Ok(not taken)
            case Error(err):
                return Error(err)


__all__ = (
    "PLATE_LENGTH",
    "VIN_LENGTH",
    "VIN_ALPHABET",
    "IdentifierGenerator",
    "generate_identifiers",
    "IdentifierOracle",
    "LedgerOracle",
)
