"""
Variant derivation — used and VIP records derived from a base item.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from kungfu import Result, Ok, Error

from dealership._errors import Failure, Failures
from dealership.catalog import Item

USED_SUFFIX = " (Used)"


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def discounted_price(base_price: int, discount_factor: float | Decimal) -> int:
    """
    base_price × discount_factor, rounded half-up.

    Note: the factor goes through its decimal string, so 0.7 is exactly 0.7
    rather than the nearest binary float.
    """
    factor = discount_factor if isinstance(discount_factor, Decimal) else Decimal(str(discount_factor))
    return round_half_up(Decimal(base_price) * factor)


def derive_used_variant(
    base: Item,
    mileage: int,
    discount_factor: float | Decimal,
    *,
    item_id: str | None = None,
    name_suffix: str = USED_SUFFIX,
) -> Result[Item, Failure]:
    """
    Derive a single used unit from a base item.

    Price is discounted, stock is 1 (each used unit is one physical vehicle),
    specs gain a "mileage" entry. The VIP flag is inherited.
    """
    if isinstance(mileage, bool) or not isinstance(mileage, int) or mileage < 0:
        return Error(Failures.invalid_input("mileage must be a non-negative integer"))

    try:
        factor = Decimal(str(discount_factor))
    except InvalidOperation:
        return Error(Failures.invalid_input(f"invalid discount factor {discount_factor!r}"))
    if not factor.is_finite() or not (Decimal(0) < factor <= Decimal(1)):
        return Error(Failures.invalid_input("discount factor must be in (0, 1]"))

    specs = dict(base.specs)
    specs["mileage"] = str(mileage)

    return Ok(replace(
        base,
        id=item_id or f"{base.id}:used:{uuid.uuid4().hex[:8]}",
        name=f"{base.name}{name_suffix}",
        base_price=discounted_price(base.base_price, factor),
        stock=1,
        is_used=True,
        mileage=mileage,
        specs=specs,
        disabled=False,
    ))


def derive_vip_variant(base: Item, *, item_id: str | None = None) -> Item:
    """Copy of base restricted to VIP-eligible buyers."""
    return replace(base, id=item_id or f"{base.id}:vip", vip_only=True)


__all__ = (
    "USED_SUFFIX",
    "round_half_up",
    "discounted_price",
    "derive_used_variant",
    "derive_vip_variant",
)
