"""
Failure taxonomy — every engine operation fails with a Failure value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

# ═══════════════════════════════════════════════════════════════════════════════
# Failure Kind
# ═══════════════════════════════════════════════════════════════════════════════


class FailureKind(Enum):
    """Kinds of engine failures."""

    OUT_OF_STOCK = auto()
    PRICE_MISMATCH = auto()  # Caller's expected price is stale
    NOT_ELIGIBLE = auto()  # VIP-gated item, requester not VIP
    INVALID_INPUT = auto()
    NOT_FOUND = auto()
    CONCURRENT_CONFLICT = auto()  # Identifier retries exhausted / lost CAS
    ALREADY_ACTIVE = auto()
    NOT_ACTIVE = auto()
    STORAGE_FAILURE = auto()  # External store unavailable


# ═══════════════════════════════════════════════════════════════════════════════
# Failure
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Failure:
    """
    Typed operation failure.

    Note: cause holds the underlying store error or exception, if any.
    """

    kind: FailureKind
    message: str
    cause: object | None = None

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"


class Failures:
    @staticmethod
    def out_of_stock(item_id: str) -> Failure:
        return Failure(FailureKind.OUT_OF_STOCK, f"{item_id} is out of stock")

    @staticmethod
    def price_mismatch(item_id: str, expected: int, actual: int) -> Failure:
        return Failure(
            FailureKind.PRICE_MISMATCH,
            f"{item_id}: expected price {expected}, current price {actual}",
        )

    @staticmethod
    def not_eligible(item_id: str, requester_id: str) -> Failure:
        return Failure(
            FailureKind.NOT_ELIGIBLE,
            f"{requester_id} is not eligible to purchase {item_id}",
        )

    @staticmethod
    def invalid_input(msg: str) -> Failure:
        return Failure(FailureKind.INVALID_INPUT, msg)

    @staticmethod
    def not_found(item_id: str) -> Failure:
        return Failure(FailureKind.NOT_FOUND, f"Item {item_id} not found")

    @staticmethod
    def concurrent_conflict(msg: str) -> Failure:
        return Failure(FailureKind.CONCURRENT_CONFLICT, msg)

    @staticmethod
    def already_active(requester_id: str) -> Failure:
        return Failure(
            FailureKind.ALREADY_ACTIVE,
            f"{requester_id} already has an active test drive",
        )

    @staticmethod
    def not_active(requester_id: str) -> Failure:
        return Failure(
            FailureKind.NOT_ACTIVE,
            f"{requester_id} has no active test drive",
        )

    @staticmethod
    def storage(msg: str, cause: object | None = None) -> Failure:
        return Failure(FailureKind.STORAGE_FAILURE, msg, cause)


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


def from_store_error(err: StoreError) -> Failure:
    """Surface a store error as STORAGE_FAILURE."""
    return Failures.storage(err.message, err)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "FailureKind",
    "Failure",
    "Failures",
    "StoreError",
    "from_store_error",
)
