from __future__ import annotations

from decimal import Decimal

import pytest

from dealership import FailureKind
from dealership.variants import (
    derive_used_variant,
    derive_vip_variant,
    discounted_price,
    round_half_up,
)

from tests.conftest import failed, make_item, ok


@pytest.mark.parametrize("base, factor, expected", [
    (50_000, 0.7, 35_000),
    (50_001, 0.7, 35_001),  # 35000.7 rounds up
    (3, 0.5, 2),  # 1.5 rounds half-up
    (5, 0.5, 3),  # 2.5 rounds half-up, not to even
    (100, 1, 100),
    (1, 0.1, 0),
])
def test_discounted_price(base, factor, expected):
    assert discounted_price(base, factor) == expected


def test_round_half_up():
    assert round_half_up(Decimal("0.5")) == 1
    assert round_half_up(Decimal("0.49")) == 0
    assert round_half_up(Decimal("12.5")) == 13


def test_decimal_factor_is_used_as_is():
    assert discounted_price(10, Decimal("0.35")) == 4


class TestUsedVariant:
    def test_derives_single_used_unit(self):
        base = make_item("sultan", name="Karin Sultan", base_price=50_000, stock=7, specs={"seats": "4"})

        used = ok(derive_used_variant(base, 12_345, 0.7))

        assert used.id != base.id
        assert used.name == "Karin Sultan (Used)"
        assert used.category == base.category
        assert used.base_price == 35_000
        assert used.stock == 1
        assert used.is_used
        assert used.mileage == 12_345
        assert used.specs == {"seats": "4", "mileage": "12345"}

    def test_base_is_untouched(self):
        base = make_item("sultan", base_price=50_000, stock=7)

        ok(derive_used_variant(base, 10, 0.5))

        assert base.stock == 7
        assert base.base_price == 50_000
        assert "mileage" not in base.specs

    def test_ids_are_distinct(self):
        base = make_item("sultan")
        first = ok(derive_used_variant(base, 1, 0.9))
        second = ok(derive_used_variant(base, 1, 0.9))
        assert first.id != second.id

    def test_vip_flag_is_inherited(self):
        base = make_item("zentorno", vip_only=True)
        assert ok(derive_used_variant(base, 1, 0.9)).vip_only

    def test_explicit_id_and_suffix(self):
        base = make_item("sultan", name="Sultan")
        used = ok(derive_used_variant(base, 1, 0.9, item_id="sultan-u1", name_suffix=" [pre-owned]"))
        assert used.id == "sultan-u1"
        assert used.name == "Sultan [pre-owned]"

    @pytest.mark.parametrize("factor", [0, -0.2, 1.01, float("nan"), "cheap"])
    def test_rejects_factor_outside_unit_interval(self, factor):
        result = derive_used_variant(make_item("sultan"), 1, factor)
        assert failed(result).kind is FailureKind.INVALID_INPUT

    @pytest.mark.parametrize("mileage", [-1, 1.5, None, True])
    def test_rejects_bad_mileage(self, mileage):
        result = derive_used_variant(make_item("sultan"), mileage, 0.5)
        assert failed(result).kind is FailureKind.INVALID_INPUT


def test_vip_variant():
    base = make_item("blista", base_price=15_000, stock=4)

    vip = derive_vip_variant(base)

    assert vip.id == "blista:vip"
    assert vip.vip_only
    assert vip.base_price == 15_000
    assert vip.stock == 4
    assert not base.vip_only
