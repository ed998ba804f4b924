"""Shared fixtures: seeded catalog, deterministic identifiers, manual timers."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone

import pytest
from kungfu import Ok, Error

from dealership import EngineConfig, Failure, InventoryEngine
from dealership.catalog import Category, Item, MemoryCatalog
from dealership.events import Event, EventKind, Notifier
from dealership.ledger import MemoryLedger, SaleDraft

VIP_PLAYERS = frozenset({"player:vip"})


# ── Items ─────────────────────────────────────────────────────


def make_item(item_id: str, **overrides) -> Item:
    fields = {
        "id": item_id,
        "name": item_id.title(),
        "category": Category.SPORTS,
        "base_price": 100_000,
        "stock": 3,
    }
    fields.update(overrides)
    return Item(**fields)


@pytest.fixture
def items() -> list[Item]:
    return [
        make_item("adder", name="Truffade Adder", category=Category.SUPER, base_price=1_000_000, stock=3,
                  description="Hypercar with a quad-turbo W16", specs={"seats": "2"}),
        make_item("blista", name="Dinka Blista", category=Category.COMPACT, base_price=15_000, stock=10),
        make_item("sultan", name="Karin Sultan", category=Category.SPORTS, base_price=50_000, stock=1),
        make_item("zentorno", name="Pegassi Zentorno", category=Category.SUPER, base_price=725_000,
                  stock=2, vip_only=True),
        make_item("empty", name="Sold Out", category=Category.SEDAN, base_price=20_000, stock=0),
    ]


# ── Clock ─────────────────────────────────────────────────────


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ── Identifiers ───────────────────────────────────────────────


class SequentialIdentifiers:
    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.calls = 0

    def __call__(self) -> tuple[str, str]:
        self.calls += 1
        n = next(self._counter)
        return f"PL{n:06d}", f"VIN{n:014d}"


@pytest.fixture
def identifiers() -> SequentialIdentifiers:
    return SequentialIdentifiers()


# ── Timers ────────────────────────────────────────────────────


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> bool:
        if self.fired or self.cancelled:
            return False
        self.cancelled = True
        return True


class ManualScheduler:
    """Timers fire only when a test says so."""

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], Awaitable[None]]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    async def fire(self, timer: ManualTimer, *, ignore_cancel: bool = False) -> None:
        """Run the callback. ignore_cancel simulates a timer already in flight."""
        if timer.cancelled and not ignore_cancel:
            return
        timer.fired = True
        await timer.callback()

    @property
    def last(self) -> ManualTimer:
        return self.timers[-1]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


# ── Events ────────────────────────────────────────────────────


class Recorder:
    def __init__(self, notifier: Notifier) -> None:
        self.events: list[Event] = []
        for kind in EventKind:
            notifier.subscribe(kind, self.events.append)

    def of(self, kind: EventKind) -> list[Event]:
        return [e for e in self.events if e.kind is kind]


# ── Ledgers ───────────────────────────────────────────────────


class SlowLedger(MemoryLedger):
    """Yields to the loop before appending so concurrent purchases interleave."""

    async def append(self, draft: SaleDraft):
        await asyncio.sleep(0.001)
        return await super().append(draft)


# ── Engine ────────────────────────────────────────────────────


async def is_vip(requester_id: str) -> bool:
    return requester_id in VIP_PLAYERS


@pytest.fixture
def catalog(items: list[Item]) -> MemoryCatalog:
    return MemoryCatalog(items)


@pytest.fixture
def ledger() -> MemoryLedger:
    return SlowLedger()


@pytest.fixture
def notifier(clock: FakeClock) -> Notifier:
    return Notifier(clock=clock)


@pytest.fixture
def recorder(notifier: Notifier) -> Recorder:
    return Recorder(notifier)


@pytest.fixture
def engine(
    catalog: MemoryCatalog,
    ledger: MemoryLedger,
    notifier: Notifier,
    scheduler: ManualScheduler,
    clock: FakeClock,
    identifiers: SequentialIdentifiers,
) -> InventoryEngine:
    return InventoryEngine(
        catalog,
        ledger,
        is_eligible=is_vip,
        generate=identifiers,
        notifier=notifier,
        scheduler=scheduler,
        clock=clock,
        config=EngineConfig().with_identifier_attempts(4),
    )


# ── Helpers ───────────────────────────────────────────────────


def ok(result):
    """Value of an Ok result; fails the test on Error."""
    match result:
        case Ok(value):
            return value
        case Error(failure):
            pytest.fail(f"expected Ok, got {failure}")
    pytest.fail(f"not a result: {result!r}")


def failed(result) -> Failure:
    """Failure of an Error result; fails the test on Ok."""
    match result:
        case Error(failure):
            return failure
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")
    pytest.fail(f"not a result: {result!r}")
