"""
Event types.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any


class EventKind(Enum):
    STOCK_CHANGED = "stock_changed"
    PRICE_CHANGED = "price_changed"
    SALE_COMMITTED = "sale_committed"
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    SESSION_EXPIRED = "session_expired"
    ITEM_ADDED = "item_added"
    ITEM_DISABLED = "item_disabled"


@dataclass(frozen=True, slots=True)
class Event:
    kind: EventKind
    payload: Mapping[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))


type Handler = Callable[[Event], Awaitable[None] | None]
"""Plain or async event handler."""


__all__ = ("EventKind", "Event", "Handler")
