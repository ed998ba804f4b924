"""
Core types for dealership.

Re-exports from kungfu + shared type aliases.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime

from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Identity Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type ItemId = str
"""Opaque, stable catalog item identifier."""

type RequesterId = str
"""Identifier of the player/customer issuing an operation."""

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Collaborators
# ═══════════════════════════════════════════════════════════════════════════════

type EligibilityCheck = Callable[[RequesterId], Awaitable[bool]]
"""VIP eligibility predicate, supplied by the host."""

type Clock = Callable[[], datetime]
"""Returns the current (timezone-aware) time."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "ItemId",
    "RequesterId",
    "Lazy",
    "EligibilityCheck",
    "Clock",
)
