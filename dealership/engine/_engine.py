"""
Inventory engine — stock, prices, sales, test drives.

Purchase is a two-step saga run under the item's lock:

    decrement stock (CAS)  ──compensate──▶  restore stock
          │
          ▼
    append sale to ledger

If the append fails, the decrement is rolled back before purchase returns.
A decrement without a sale is never left behind.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from kungfu import Result, Ok, Error, LazyCoroResult
from combinators import lift as L

from dealership import _saga as S
from dealership._errors import Failure, Failures, StoreError, from_store_error
from dealership._types import Clock, EligibilityCheck, Lazy
from dealership.catalog import CatalogStore, Item, validate_item
from dealership.config import EngineConfig
from dealership.engine._locks import KeyedLocks
from dealership.events import EventKind, Handler, Notifier
from dealership.ledger import (
    DuplicateIdentifier,
    IdentifierGenerator,
    IdentifierOracle,
    LedgerOracle,
    LedgerStore,
    Sale,
    SaleDraft,
    generate_identifiers,
)
from dealership.testdrive import Scheduler, TestDriveManager, TestDriveSession
from dealership import variants
from dealership import view as V

logger = logging.getLogger("dealership.engine")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _valid_id(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


async def _lifted[T, E](
    call: Callable[[], Awaitable[Result[T, E]]],
    what: str,
) -> Result[T, E | StoreError]:
    """Await a store-shaped call; an exception it raises becomes a StoreError."""
    lifted = await L.catching_async(
        call,
        on_error=lambda e: StoreError(f"{what} raised: {e}", e),
    )
    match lifted:
        case Ok(result):
            return result
        case Error(err):
            return Error(err)


class CompensationFailed(Exception):
    """Stock could not be restored after a failed ledger append."""


# ═══════════════════════════════════════════════════════════════════════════════
# Reservation — in-flight intent, lives only inside the item lock
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Reservation:
    item_id: str
    requester_id: str
    nonce: str
    stock_before: int
    price: int
    item_name: str
    item_category: str

    @property
    def stock_after(self) -> int:
        return self.stock_before - 1


@dataclass(frozen=True, slots=True)
class _Committed:
    sale: Sale
    stock: int


# ═══════════════════════════════════════════════════════════════════════════════
# Engine
# ═══════════════════════════════════════════════════════════════════════════════


class InventoryEngine:
    """
    Storefront inventory and transaction engine.

    Example:
        engine = InventoryEngine(
            MemoryCatalog(items),
            MemoryLedger(),
            is_eligible=vip_registry.contains,
        )
        match await engine.purchase("adder", "player:7", expected_price=1_000_000):
            case Ok(sale):
                ...
            case Error(failure):
                ...

    Note: Mutations of one item are serialized by a per-item lock.
    Reads (snapshot, view) never take it.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        ledger: LedgerStore,
        *,
        is_eligible: EligibilityCheck,
        oracle: IdentifierOracle | None = None,
        generate: IdentifierGenerator | None = None,
        notifier: Notifier | None = None,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._is_eligible = is_eligible
        self._oracle = oracle or LedgerOracle(ledger)
        self._generate = generate or generate_identifiers
        self._clock = clock or _utcnow
        self._config = config or EngineConfig()
        self._notifier = notifier or Notifier(clock=self._clock)
        self._locks = KeyedLocks()
        self._test_drives = TestDriveManager(
            self._notifier, scheduler, clock=self._clock, config=self._config
        )

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def test_drives(self) -> TestDriveManager:
        return self._test_drives

    def subscribe(self, kind: EventKind, handler: Handler) -> Callable[[], None]:
        """Subscribe to engine events. Returns an unsubscribe callable."""
        return self._notifier.subscribe(kind, handler)

    # ── Reads ──────────────────────────────────────────────────

    async def get_item(self, item_id: str) -> Result[Item, Failure]:
        return await self._load(item_id, include_disabled=True)

    async def snapshot(self) -> Result[tuple[Item, ...], Failure]:
        match await self._catalog.snapshot():
            case Ok(items):
                return Ok(items)
            case Error(err):
                return Error(from_store_error(err))

    async def view(self, criteria: V.Criteria | None = None) -> Result[tuple[Item, ...], Failure]:
        match await self.snapshot():
            case Ok(items):
                return Ok(V.view(items, criteria))
            case Error() as failed:
                return failed

    async def sales(
        self,
        *,
        buyer_id: str | None = None,
        item_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Result[tuple[Sale, ...], Failure]:
        if limit is not None and (not _is_int(limit) or limit < 0):
            return Error(Failures.invalid_input("limit must be a non-negative integer"))
        result = await self._ledger.query(
            buyer_id=buyer_id, item_id=item_id, since=since, until=until, limit=limit
        )
        match result:
            case Ok(sales):
                return Ok(sales)
            case Error(err):
                return Error(from_store_error(err))

    # ── Catalog administration ─────────────────────────────────

    async def add_item(self, item: Item) -> Result[Item, Failure]:
        match validate_item(item):
            case Error() as failed:
                return failed
            case Ok(_):
                pass

        match await self._catalog.add(item):
            case Ok(True):
                logger.info("Item added: %s (%s)", item.id, item.name)
                await self._notifier.publish(EventKind.ITEM_ADDED, {
                    "item_id": item.id,
                    "price": item.base_price,
                    "stock": item.stock,
                })
                return Ok(item)
            case Ok(False):
                return Error(Failures.invalid_input(f"Item {item.id} already exists"))
            case Error(err):
                return Error(from_store_error(err))

    async def load_catalog(self, items: Iterable[Item]) -> Result[int, Failure]:
        """Validate every item, then add them in order. Returns count added."""
        batch = list(items)
        seen: set[str] = set()
        for item in batch:
            match validate_item(item):
                case Error() as failed:
                    return failed
                case Ok(_):
                    pass
            if item.id in seen:
                return Error(Failures.invalid_input(f"Duplicate item id {item.id}"))
            seen.add(item.id)

        for added, item in enumerate(batch):
            match await self.add_item(item):
                case Error(failure):
                    return Error(Failure(
                        failure.kind,
                        f"{failure.message} (after {added} items loaded)",
                        failure.cause,
                    ))
                case Ok(_):
                    pass
        return Ok(len(batch))

    async def disable_item(self, item_id: str) -> Result[Item, Failure]:
        """Soft-disable: item stays readable for ledger integrity but is no longer sold."""
        async with self._locks.hold(item_id):
            match await self._load(item_id, include_disabled=True):
                case Error() as failed:
                    return failed
                case Ok(item):
                    pass
            match await self._catalog.set_disabled(item_id, True):
                case Ok(True):
                    pass
                case Ok(False):
                    return Error(Failures.not_found(item_id))
                case Error(err):
                    return Error(from_store_error(err))

        logger.info("Item disabled: %s", item_id)
        await self._notifier.publish(EventKind.ITEM_DISABLED, {"item_id": item_id})
        return Ok(item)

    # ── Variants ───────────────────────────────────────────────

    async def derive_used_variant(
        self,
        base_item_id: str,
        mileage: int,
        discount_factor: float | Decimal,
    ) -> Result[Item, Failure]:
        """Derive a used unit from base and add it to the catalog."""
        match await self._load(base_item_id, include_disabled=True):
            case Error() as failed:
                return failed
            case Ok(base):
                pass

        derived = variants.derive_used_variant(
            base,
            mileage,
            discount_factor,
            name_suffix=self._config.used_name_suffix,
        )
        match derived:
            case Ok(item):
                return await self.add_item(item)
            case Error() as failed:
                return failed

    async def derive_vip_variant(self, base_item_id: str) -> Result[Item, Failure]:
        match await self._load(base_item_id, include_disabled=True):
            case Ok(base):
                return await self.add_item(variants.derive_vip_variant(base))
            case Error() as failed:
                return failed

    # ── Stock and price ────────────────────────────────────────

    async def adjust_stock(self, item_id: str, delta: int) -> Result[int, Failure]:
        """
        Add delta to stock, clamped at zero.

        Note: Over-decrement floors to zero instead of failing.
        A warning is logged when the clamp applies.
        """
        if not _valid_id(item_id):
            return Error(Failures.invalid_input("item id must be a non-empty string"))
        if not _is_int(delta):
            return Error(Failures.invalid_input("stock delta must be an integer"))

        async with self._locks.hold(item_id):
            match await self._load(item_id, include_disabled=True):
                case Error() as failed:
                    return failed
                case Ok(item):
                    pass

            new_stock = max(0, item.stock + delta)
            if item.stock + delta < 0:
                logger.warning(
                    "Stock clamp on %s: %d %+d floored to 0", item_id, item.stock, delta
                )
            if new_stock != item.stock:
                match await self._catalog.compare_and_set_stock(item_id, item.stock, new_stock):
                    case Ok(True):
                        pass
                    case Ok(False):
                        return Error(Failures.concurrent_conflict(
                            f"stock of {item_id} changed outside the engine"
                        ))
                    case Error(err):
                        return Error(from_store_error(err))

        await self._notifier.publish(EventKind.STOCK_CHANGED, {
            "item_id": item_id,
            "previous": item.stock,
            "stock": new_stock,
            "reason": "adjustment",
        })
        return Ok(new_stock)

    async def adjust_price(self, item_id: str, new_price: int) -> Result[None, Failure]:
        """Set base price. Committed sales keep the price they were sold at."""
        if not _valid_id(item_id):
            return Error(Failures.invalid_input("item id must be a non-empty string"))
        if not _is_int(new_price) or new_price < 0:
            return Error(Failures.invalid_input("price must be a non-negative integer"))

        async with self._locks.hold(item_id):
            match await self._load(item_id, include_disabled=True):
                case Error() as failed:
                    return failed
                case Ok(item):
                    pass
            match await self._catalog.set_price(item_id, new_price):
                case Ok(True):
                    pass
                case Ok(False):
                    return Error(Failures.not_found(item_id))
                case Error(err):
                    return Error(from_store_error(err))

        logger.info("Price of %s: %d -> %d", item_id, item.base_price, new_price)
        await self._notifier.publish(EventKind.PRICE_CHANGED, {
            "item_id": item_id,
            "previous": item.base_price,
            "price": new_price,
        })
        return Ok(None)

    # ── Purchase ───────────────────────────────────────────────

    async def purchase(
        self,
        item_id: str,
        requester_id: str,
        expected_price: int,
    ) -> Result[Sale, Failure]:
        """
        Buy one unit of item_id at expected_price.

        Checks, in order: item exists and is enabled, VIP eligibility,
        stock, price. Then generates a free plate/VIN pair and commits
        the decrement and the sale together.
        """
        if not _valid_id(item_id) or not _valid_id(requester_id):
            return Error(Failures.invalid_input("item and requester ids must be non-empty strings"))
        if not _is_int(expected_price) or expected_price < 0:
            return Error(Failures.invalid_input("expected price must be a non-negative integer"))

        async with self._locks.hold(item_id):
            result = await self._purchase_locked(item_id, requester_id, expected_price)

        match result:
            case Ok(committed):
                sale = committed.sale
                logger.info(
                    "Sale %d: %s bought %s for %d (plate %s)",
                    sale.id, sale.buyer_id, sale.item_id, sale.price_paid, sale.plate,
                )
                await self._notifier.publish(EventKind.STOCK_CHANGED, {
                    "item_id": item_id,
                    "previous": committed.stock + 1,
                    "stock": committed.stock,
                    "reason": "sale",
                })
                await self._notifier.publish(EventKind.SALE_COMMITTED, {
                    "sale_id": sale.id,
                    "item_id": sale.item_id,
                    "buyer_id": sale.buyer_id,
                    "price_paid": sale.price_paid,
                    "plate": sale.plate,
                    "vin": sale.vin,
                })
                return Ok(sale)
            case Error() as failed:
                return failed

    async def _purchase_locked(
        self,
        item_id: str,
        requester_id: str,
        expected_price: int,
    ) -> Result[_Committed, Failure]:
        match await self._load(item_id):
            case Error() as failed:
                return failed
            case Ok(item):
                pass

        if item.vip_only:
            match await self._check_eligible(requester_id):
                case Error() as failed:
                    return failed
                case Ok(False):
                    return Error(Failures.not_eligible(item_id, requester_id))
                case Ok(_):
                    pass

        if item.stock <= 0:
            return Error(Failures.out_of_stock(item_id))
        if item.base_price != expected_price:
            return Error(Failures.price_mismatch(item_id, expected_price, item.base_price))

        attempts = self._config.identifier_attempts
        for attempt in range(1, attempts + 1):
            match await self._draw_identifiers():
                case Error(err):
                    return Error(from_store_error(err))
                case Ok((plate, vin)):
                    pass

            is_free = await _lifted(
                lambda plate=plate, vin=vin: self._oracle.is_free(plate, vin),
                "identifier oracle",
            )
            match is_free:
                case Error(err):
                    return Error(from_store_error(err))
                case Ok(False):
                    logger.debug("Identifiers taken (attempt %d): %s / %s", attempt, plate, vin)
                    continue
                case Ok(_):
                    pass

            reservation = Reservation(
                item_id=item.id,
                requester_id=requester_id,
                nonce=uuid.uuid4().hex,
                stock_before=item.stock,
                price=item.base_price,
                item_name=item.name,
                item_category=item.category,
            )
            saga = S.step(
                self._decrement(reservation),
                compensate=self._restore,
            ).then(lambda r, plate=plate, vin=vin: S.step(self._append(r, plate, vin)))

            match await S.run(saga):
                case Ok(done):
                    return Ok(_Committed(done.value, reservation.stock_after))
                case Error(saga_error):
                    if not saga_error.rollback_complete:
                        logger.error(
                            "Purchase of %s by %s failed and stock rollback did not complete",
                            item_id, requester_id,
                        )
                        return Error(Failures.storage(
                            f"sale of {item_id} failed and stock could not be restored",
                            saga_error,
                        ))
                    match saga_error.error:
                        case DuplicateIdentifier():
                            logger.debug("Ledger rejected identifiers (attempt %d)", attempt)
                            continue
                        case failure:
                            return Error(failure)  # type: ignore[arg-type]

        logger.warning("No free plate/VIN for %s after %d attempts", item_id, attempts)
        return Error(Failures.concurrent_conflict(
            f"could not generate unique identifiers after {attempts} attempts"
        ))

    def _decrement(self, reservation: Reservation) -> Lazy[Reservation, Failure]:
        async def impl() -> Result[Reservation, Failure]:
            result = await self._catalog.compare_and_set_stock(
                reservation.item_id, reservation.stock_before, reservation.stock_after
            )
            match result:
                case Ok(True):
                    return Ok(reservation)
                case Ok(_):
                    return Error(Failures.concurrent_conflict(
                        f"stock of {reservation.item_id} changed outside the engine"
                    ))
                case Error(err):
                    return Error(from_store_error(err))

        return LazyCoroResult(impl)

    async def _restore(self, reservation: Reservation) -> None:
        result = await self._catalog.compare_and_set_stock(
            reservation.item_id, reservation.stock_after, reservation.stock_before
        )
        match result:
            case Ok(True):
                logger.debug("Stock of %s restored to %d", reservation.item_id, reservation.stock_before)
            case Ok(_):
                raise CompensationFailed(f"stock of {reservation.item_id} moved before restore")
            case Error(err):
                raise CompensationFailed(err.message)

    def _append(
        self, reservation: Reservation, plate: str, vin: str
    ) -> Lazy[Sale, Failure | DuplicateIdentifier]:
        draft = SaleDraft(
            item_id=reservation.item_id,
            buyer_id=reservation.requester_id,
            price_paid=reservation.price,
            timestamp=self._clock(),
            plate=plate,
            vin=vin,
            item_name=reservation.item_name,
            item_category=reservation.item_category,
        )

        async def impl() -> Result[Sale, Failure | DuplicateIdentifier]:
            match await _lifted(lambda: self._ledger.append(draft), "ledger append"):
                case Ok(sale):
                    return Ok(sale)
                case Error(DuplicateIdentifier() as dup):
                    return Error(dup)
                case Error(err):
                    return Error(from_store_error(err))

        return LazyCoroResult(impl)

    async def _draw_identifiers(self) -> Result[tuple[str, str], StoreError]:
        async def draw() -> Result[tuple[str, str], StoreError]:
            return Ok(self._generate())

        return await _lifted(draw, "identifier generator")

    async def _check_eligible(self, requester_id: str) -> Result[bool, Failure]:
        return await L.catching_async(
            lambda: self._is_eligible(requester_id),
            on_error=lambda e: Failures.storage(f"eligibility check failed: {e}", e),
        )

    # ── Test drives ────────────────────────────────────────────

    async def start_test_drive(
        self,
        item_id: str,
        requester_id: str,
        duration: timedelta | None = None,
    ) -> Result[TestDriveSession, Failure]:
        if not _valid_id(requester_id):
            return Error(Failures.invalid_input("requester id must be a non-empty string"))
        match await self._load(item_id):
            case Ok(_):
                return await self._test_drives.start(item_id, requester_id, duration)
            case Error() as failed:
                return failed

    async def end_test_drive(self, requester_id: str) -> Result[TestDriveSession, Failure]:
        return await self._test_drives.end(requester_id)

    async def extend_test_drive(
        self, requester_id: str, extra: timedelta
    ) -> Result[TestDriveSession, Failure]:
        return await self._test_drives.extend(requester_id, extra)

    # ── Internals ──────────────────────────────────────────────

    async def _load(self, item_id: str, *, include_disabled: bool = False) -> Result[Item, Failure]:
        if not _valid_id(item_id):
            return Error(Failures.invalid_input("item id must be a non-empty string"))
        match await self._catalog.get(item_id):
            case Ok(None):
                return Error(Failures.not_found(item_id))
            case Ok(item):
                if item.disabled and not include_disabled:
                    return Error(Failures.not_found(item_id))
                return Ok(item)
            case Error(err):
                return Error(from_store_error(err))


__all__ = (
    "CompensationFailed",
    "Reservation",
    "InventoryEngine",
)
