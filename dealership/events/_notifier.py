"""
Notifier — live in-process pub/sub.

Not a durable queue: nothing survives a restart.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any

from dealership._types import Clock
from dealership.events._types import Event, EventKind, Handler

logger = logging.getLogger("dealership.events")


class Notifier:
    """
    Subscriber registry with in-order fan-out.

    Example:
        notifier = Notifier()
        unsubscribe = notifier.subscribe(EventKind.SALE_COMMITTED, on_sale)
        await notifier.publish(EventKind.SALE_COMMITTED, {"sale_id": 1})

    Note: Handlers run one at a time, in subscription order, over the list
    as it stood when publish() was called. A failing handler is logged and
    skipped; the rest still receive the event.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._handlers: defaultdict[EventKind, list[Handler]] = defaultdict(list)
        self._clock = clock

    def subscribe(self, kind: EventKind, handler: Handler) -> Callable[[], None]:
        """Register handler. Returns a callable that unsubscribes it."""
        self._handlers[kind].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers[kind]
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscriber_count(self, kind: EventKind) -> int:
        return len(self._handlers[kind])

    async def publish(self, kind: EventKind, payload: Mapping[str, Any]) -> int:
        """Deliver to current subscribers. Returns how many handled it without error."""
        event = (
            Event(kind, payload, self._clock())
            if self._clock is not None
            else Event(kind, payload)
        )
        delivered = 0

        for handler in tuple(self._handlers[kind]):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception("Handler %r failed on %s", handler, kind.value)

        return delivered


__all__ = ("Notifier",)
