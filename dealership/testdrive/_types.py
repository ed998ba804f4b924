"""
Test-drive types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum, auto


class SessionState(Enum):
    """
    Lifecycle:
        ACTIVE → EXPIRED (scheduler)
               → ENDED_EARLY (requester)
    """

    ACTIVE = auto()
    EXPIRED = auto()
    ENDED_EARLY = auto()


@dataclass(frozen=True, slots=True)
class TestDriveSession:
    """
    One requester's loan of one item.

    Note: token identifies this arming of the expiry timer. A timer
    carrying any other token is stale and does nothing.
    """

    __test__ = False  # not a pytest test class

    item_id: str
    requester_id: str
    started_at: datetime
    duration_limit: timedelta
    token: str
    state: SessionState = SessionState.ACTIVE

    @property
    def deadline(self) -> datetime:
        return self.started_at + self.duration_limit

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE


__all__ = ("SessionState", "TestDriveSession")
