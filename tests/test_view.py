from __future__ import annotations

import pytest

from dealership.catalog import Category
from dealership.view import Criteria, SortField, SortOrder, filter_items, view

from tests.conftest import make_item


@pytest.fixture
def snapshot():
    return (
        make_item("d", name="Delta", category=Category.SUPER, base_price=1_000, stock=0),
        make_item("b", name="bravo", category=Category.SPORTS, base_price=500, stock=2,
                  description="Twin TURBO coupe"),
        make_item("a", name="Alpha", category=Category.SPORTS, base_price=500, stock=5),
        make_item("c", name="Charlie", category=Category.SEDAN, base_price=999, stock=1),
        make_item("e", name="Echo", category=Category.SEDAN, base_price=10, stock=9, disabled=True),
    )


def ids(items) -> list[str]:
    return [item.id for item in items]


def test_default_sorts_by_price_with_id_ties(snapshot):
    assert ids(view(snapshot)) == ["a", "b", "c", "d"]


def test_descending_keeps_id_order_on_ties(snapshot):
    criteria = Criteria(sort_order=SortOrder.DESC)
    assert ids(view(snapshot, criteria)) == ["d", "c", "a", "b"]


def test_sort_by_name_is_case_insensitive(snapshot):
    assert ids(view(snapshot, Criteria(sort_field=SortField.NAME))) == ["a", "b", "c", "d"]


def test_sort_by_stock_descending(snapshot):
    criteria = Criteria(sort_field=SortField.STOCK, sort_order=SortOrder.DESC)
    assert ids(view(snapshot, criteria)) == ["a", "b", "c", "d"]


def test_identical_items_order_by_id():
    twins = [make_item(i, name="Same", base_price=100, stock=1) for i in ("z", "m", "a")]
    assert ids(view(twins, Criteria(sort_field=SortField.NAME))) == ["a", "m", "z"]
    assert ids(view(twins, Criteria(sort_order=SortOrder.DESC))) == ["a", "m", "z"]


def test_category_filter(snapshot):
    criteria = Criteria(categories=frozenset({Category.SPORTS, Category.SUPER}))
    assert ids(view(snapshot, criteria)) == ["a", "b", "d"]


def test_empty_categories_match_everything(snapshot):
    assert len(view(snapshot, Criteria(categories=frozenset()))) == 4


def test_fractional_bounds_widen():
    items = [
        make_item("low", base_price=999),
        make_item("mid", base_price=1_000),
        make_item("high", base_price=1_001),
        make_item("out", base_price=1_002),
    ]

    criteria = Criteria(price_min=999.4, price_max=1000.1)

    assert criteria.price_bounds() == (999, 1001)
    assert ids(view(items, criteria)) == ["low", "mid", "high"]


def test_bounds_are_inclusive(snapshot):
    assert ids(view(snapshot, Criteria(price_min=500, price_max=999))) == ["a", "b", "c"]


def test_in_stock_only(snapshot):
    assert ids(view(snapshot, Criteria(in_stock_only=True))) == ["a", "b", "c"]


def test_text_matches_name_or_description_case_insensitively(snapshot):
    assert ids(view(snapshot, Criteria(text="turbo"))) == ["b"]
    assert ids(view(snapshot, Criteria(text="  CHAR "))) == ["c"]
    assert ids(view(snapshot, Criteria(text="nothing like this"))) == []


def test_disabled_items_are_hidden_unless_asked(snapshot):
    assert "e" not in ids(view(snapshot))
    assert ids(view(snapshot, Criteria(include_disabled=True)))[0] == "e"


def test_combined_filters(snapshot):
    criteria = Criteria(
        categories=frozenset({Category.SPORTS, Category.SEDAN}),
        price_max=600,
        in_stock_only=True,
        sort_field=SortField.STOCK,
    )
    assert ids(view(snapshot, criteria)) == ["b", "a"]


def test_view_does_not_mutate_input(snapshot):
    before = list(snapshot)
    view(snapshot, Criteria(sort_order=SortOrder.DESC))
    assert list(snapshot) == before


def test_filter_items_keeps_snapshot_order(snapshot):
    assert ids(filter_items(snapshot, Criteria(price_max=999))) == ["b", "a", "c"]
