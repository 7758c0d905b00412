# dinebot/dialogue/state.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Type, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

logger = logging.getLogger(__name__)

# ----------------------------
# Conversation state: one model per group of steps.
# A field exists only on the steps where it means something.
# ----------------------------


class _StateBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    food_type_preference: Optional[str] = None  # veg | nonveg | both
    last_interaction: Optional[datetime] = None


class IdleState(_StateBase):
    step: Literal[
        "welcome",
        "main_menu",
        "select_food_type",
        "select_food_type_order",
        "select_cancel",
        "select_refund",
        "select_track",
    ] = "welcome"


class CategoryListState(_StateBase):
    step: Literal["select_category", "browsing_menu"]
    category_page: int = 0


class ItemListState(_StateBase):
    step: Literal["viewing_items", "selecting_item"]
    selected_category: str = "all"
    current_page: int = 0


class TagResultsState(_StateBase):
    step: Literal["viewing_tag_results"] = "viewing_tag_results"
    search_tag: str = ""
    current_page: int = 0


class ItemFocusState(_StateBase):
    step: Literal["viewing_item_details", "select_quantity"]
    selected_item: str


class CartStepState(_StateBase):
    step: Literal["item_added", "viewing_cart", "awaiting_location", "select_payment_method"]


class OrderPlacedState(_StateBase):
    step: Literal["awaiting_payment", "order_confirmed"]
    payment_method: str
    pending_order_id: str


ConversationState = Annotated[
    Union[
        IdleState,
        CategoryListState,
        ItemListState,
        TagResultsState,
        ItemFocusState,
        CartStepState,
        OrderPlacedState,
    ],
    Field(discriminator="step"),
]

_ADAPTER: TypeAdapter = TypeAdapter(ConversationState)

STATE_TYPES = (
    IdleState,
    CategoryListState,
    ItemListState,
    TagResultsState,
    ItemFocusState,
    CartStepState,
    OrderPlacedState,
)

STEP_TYPES: Dict[str, Type[_StateBase]] = {}
for _cls in STATE_TYPES:
    for _step in get_args(_cls.model_fields["step"].annotation):
        STEP_TYPES[_step] = _cls

BROWSING_CATEGORY_STEPS = {"select_category", "browsing_menu"}
BROWSING_ITEM_STEPS = {"viewing_items", "selecting_item"}


def initial_state() -> IdleState:
    return IdleState(step="welcome")


def load_state(state_json: Optional[str]) -> _StateBase:
    """Stored JSON -> typed state. Anything unreadable starts over at welcome."""
    if not state_json:
        return initial_state()
    try:
        return _ADAPTER.validate_json(state_json)
    except Exception as e:
        logger.warning("discarding unreadable conversation state: %s", e)
        return initial_state()


def dump_state(state: _StateBase) -> str:
    return state.model_dump_json()


def transition(prev: _StateBase, step: str, **fields: Any) -> _StateBase:
    """
    State for the next step. Only the food-type preference carries over;
    everything else must be passed explicitly.
    """
    cls = STEP_TYPES.get(step)
    if cls is None:
        raise ValueError(f"unknown step: {step}")
    fields.setdefault("food_type_preference", prev.food_type_preference)
    return cls(step=step, **fields)


def field_of(state: _StateBase, name: str, default: Any = None) -> Any:
    """Step-gated read: only returns a field the current step actually carries."""
    return getattr(state, name, default) if name in type(state).model_fields else default


StateModel = Union[
    IdleState,
    CategoryListState,
    ItemListState,
    TagResultsState,
    ItemFocusState,
    CartStepState,
    OrderPlacedState,
]
