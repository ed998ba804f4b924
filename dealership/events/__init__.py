"""
Events — state-change notifications.

    from dealership import events as N

    notifier = N.Notifier()
    notifier.subscribe(N.EventKind.STOCK_CHANGED, lambda e: print(e.payload))
"""

from dealership.events._types import EventKind, Event, Handler
from dealership.events._notifier import Notifier

__all__ = (
    "EventKind",
    "Event",
    "Handler",
    "Notifier",
)
