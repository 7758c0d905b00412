import asyncio

from dinebot.dialogue.catalog import MenuItem
from dinebot.dialogue.search import EXACT_NAME, EXACT_TAG, PARTIAL, rank, score_item, search_catalog, smart_search
from dinebot.dialogue.translate import Translation, Translator


def search(text, items):
    return asyncio.run(smart_search(text, items, Translator(enabled=False)))


def names(result):
    return [i.name for i in result.items]


def test_exact_name_is_a_singleton(menu_items):
    result = search("veg biryani", menu_items)
    assert names(result) == ["Veg Biryani"]
    assert result.exact_match


def test_exact_name_beats_shared_tags(menu_items):
    # "Idli" is also a tag; the name match still wins alone
    result = search("Idli", menu_items)
    assert names(result) == ["Idli"]


def test_chicken_never_returns_veg(menu_items):
    result = search("chicken", menu_items)
    assert result.items
    assert all(i.food_type != "veg" for i in result.items)
    assert set(names(result)) == {"Chicken Biryani", "Chicken Curry"}
    assert result.matched_food_type.ingredient == "chicken"


def test_regional_synonym_covers_direct_term(menu_items):
    curry = {i.id for i in search_catalog(Translation("curry", ["curry"]), menu_items).items}
    pulusu = {i.id for i in search_catalog(Translation("pulusu", ["pulusu"]), menu_items).items}
    assert curry
    assert pulusu >= curry


def test_alternate_spelling_hits_tag(menu_items):
    assert "Idli" in names(search("idly", menu_items))


def test_non_veg_filter_applies_to_tag_hits(menu_items):
    result = search("non veg biryani", menu_items)
    assert set(names(result)) == {"Chicken Biryani", "Mutton Biryani", "Egg Biryani"}
    assert result.matched_food_type.type == "nonveg"


def test_food_type_only_query_returns_hint_without_items(menu_items):
    result = search("egg", menu_items)
    assert result.items == []
    assert result.matched_food_type.filter_type == "egg"

    result = search("veg", menu_items)
    assert result.items == []
    assert result.matched_food_type.filter_type == "veg"


def test_no_relation_is_empty(menu_items):
    result = search("asdkfj", menu_items)
    assert result.items == []
    assert result.matched_food_type is None


def test_hindi_query_offline(menu_items):
    assert names(search("चिकन बिरयानी", menu_items)) == ["Chicken Biryani"]


def test_weights():
    dal = MenuItem(id="d", name="Dal Tadka", price=150, categories=("Curries",), tags=("dal",))
    assert score_item(dal, ["dal tadka"]) >= EXACT_NAME
    assert score_item(dal, ["dal"]) == EXACT_TAG + PARTIAL
    assert score_item(dal, ["tad"]) == PARTIAL
    assert score_item(dal, ["pizza"]) == 0


def test_rank_is_stable_on_ties(menu_items):
    ranked = rank(menu_items, ["biryani"])
    assert [i.name for i in ranked][:4] == ["Veg Biryani", "Chicken Biryani", "Mutton Biryani", "Egg Biryani"]
