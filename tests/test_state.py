import pytest
from pydantic import ValidationError

from dinebot.dialogue.state import (
    ItemFocusState,
    ItemListState,
    dump_state,
    field_of,
    initial_state,
    load_state,
    transition,
)


def test_unreadable_state_starts_at_welcome():
    assert load_state(None).step == "welcome"
    assert load_state("").step == "welcome"
    assert load_state("{not json").step == "welcome"
    assert load_state('{"step": "no_such_step"}').step == "welcome"


def test_round_trip_keeps_step_fields():
    state = transition(initial_state(), "select_quantity", selected_item="idli")
    loaded = load_state(dump_state(state))
    assert isinstance(loaded, ItemFocusState)
    assert loaded.selected_item == "idli"


def test_step_fields_are_required():
    with pytest.raises(ValidationError):
        transition(initial_state(), "select_quantity")
    with pytest.raises(ValidationError):
        transition(initial_state(), "awaiting_payment", payment_method="upi")


def test_transition_carries_only_the_food_type_preference():
    start = transition(initial_state(), "select_category", food_type_preference="veg", category_page=2)
    items = transition(start, "viewing_items", selected_category="Biryani")
    assert isinstance(items, ItemListState)
    assert items.food_type_preference == "veg"
    assert field_of(items, "category_page") is None

    menu = transition(items, "main_menu")
    assert field_of(menu, "selected_category") is None
    assert menu.food_type_preference == "veg"


def test_unknown_step_is_rejected():
    with pytest.raises(ValueError):
        transition(initial_state(), "dancing")


def test_stale_extra_fields_are_ignored():
    raw = '{"step": "main_menu", "selected_item": "idli", "food_type_preference": "nonveg"}'
    state = load_state(raw)
    assert state.step == "main_menu"
    assert field_of(state, "selected_item") is None
    assert state.food_type_preference == "nonveg"
