import pytest

from dinebot.dialogue.cart import (
    CartLine,
    add_to_cart,
    cart_count,
    cart_total,
    dump_cart,
    load_cart,
    remove_line,
    resolve_cart,
)
from dinebot.dialogue.catalog import build_snapshot


def test_repeated_add_merges_into_one_line():
    cart = []
    add_to_cart(cart, "veg-biryani", 1)
    add_to_cart(cart, "veg-biryani", 2)
    assert cart == [CartLine("veg-biryani", 3)]


def test_add_rejects_non_positive_quantity():
    with pytest.raises(ValueError):
        add_to_cart([], "idli", 0)


def test_json_round_trip_skips_bad_lines():
    raw = '[{"item_id": "idli", "quantity": 2}, {"item_id": "", "quantity": 1}, "junk", {"item_id": "coke", "quantity": "x"}]'
    cart = load_cart(raw)
    assert cart == [CartLine("idli", 2), CartLine("coke", 1)]
    assert load_cart(dump_cart(cart)) == cart
    assert load_cart("not json") == []
    assert load_cart(None) == []


def test_remove_line_bounds():
    cart = [CartLine("a", 1), CartLine("b", 1)]
    assert not remove_line(cart, 5)
    assert remove_line(cart, 0)
    assert cart == [CartLine("b", 1)]


def test_resolve_drops_vanished_items(menu_items):
    snap = build_snapshot(menu_items, [])
    cart = [CartLine("veg-biryani", 2), CartLine("gone", 1), CartLine("coke", 3)]
    resolved = resolve_cart(cart, snap)
    assert [item.id for _, item in resolved] == ["veg-biryani", "coke"]
    assert cart_total(resolved) == 180 * 2 + 40 * 3
    assert cart_count(cart) == 6
