import math

import pytest

from dinebot.dialogue.catalog import MenuItem
from dinebot.dialogue.responses import (
    CATS_PER_PAGE,
    MAX_ROWS,
    Button,
    ButtonsMessage,
    ListMessage,
    Row,
    Screens,
    Section,
    buttons,
    category_rows,
    paginate,
)


def catalog_with(n_categories, per_category=1):
    items = []
    for c in range(n_categories):
        for k in range(per_category):
            items.append(MenuItem(id=f"c{c}-{k}", name=f"Dish {c}-{k}", price=100, categories=(f"Category {c}",)))
    return items


@pytest.mark.parametrize("n", [0, 9, 10, 19])
def test_category_pages(n):
    items = catalog_with(n)
    expected_pages = math.ceil(n / CATS_PER_PAGE)
    for page in range(max(expected_pages, 1)):
        rows, pg = category_rows(items, page)
        assert pg.total_pages == expected_pages
        assert len(rows) <= MAX_ROWS
        remaining = n - page * CATS_PER_PAGE
        all_row = 1 if page == 0 and n else 0
        assert len(rows) == min(CATS_PER_PAGE, max(remaining, 0)) + all_row


def test_all_items_row_only_on_first_page():
    items = catalog_with(19)
    first, _ = category_rows(items, 0)
    second, _ = category_rows(items, 1)
    assert first[0].id == "cat_all"
    assert all(r.id != "cat_all" for r in second)


def test_paginate_bounds():
    pg = paginate(list(range(25)), 2, 10)
    assert pg.entries == [20, 21, 22, 23, 24]
    assert pg.total_pages == 3
    assert pg.has_prev and not pg.has_next


def test_multi_page_menu_has_navigation():
    out = Screens().categories(catalog_with(19), "🍽️ All Menu", page=1)
    assert isinstance(out[0], ListMessage)
    nav = out[1]
    assert isinstance(nav, ButtonsMessage)
    assert [b.id for b in nav.buttons] == ["menucat_page_0", "menucat_page_2", "home"]


def test_ordering_menu_uses_ordering_tokens():
    out = Screens().categories(catalog_with(12), "🍽️ All Menu", ordering=True)
    rows = out[0].sections[0].rows
    assert rows[0].id == "order_cat_all"
    assert rows[1].id == "order_cat_Category_0"
    assert [b.id for b in out[1].buttons] == ["ordercat_page_1", "home"]


def test_item_pages_of_ten():
    items = catalog_with(1, per_category=23)
    out = Screens().category_items(items, "Category 0", page=2)
    assert len(out[0].sections[0].rows) == 3
    assert [b.id for b in out[1].buttons] == ["catpage_Category_0_1", "view_menu"]


def test_limits_are_enforced_on_descriptors():
    assert len(Button(id="x", title="a" * 40).title) == 20
    row = Row(id="x", title="t" * 40, description="d" * 100)
    assert len(row.title) == 24
    assert len(row.description) == 72
    section = Section(title="s", rows=[Row(id=str(i), title=str(i)) for i in range(15)])
    assert len(section.rows) == MAX_ROWS
    msg = buttons("pick", ("a", "A"), ("b", "B"), ("c", "C"), ("d", "D"))
    assert len(msg.buttons) == 3
