# dinebot/dialogue/brain.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from .cart import add_to_cart, cart_count, remove_line, resolve_cart
from .catalog import (
    MENU_LABELS,
    MenuItem,
    Snapshot,
    build_snapshot,
    category_from_safe_id,
    category_names,
    filter_by_food_type,
    find_category,
    items_in_category,
)
from .collaborators import CatalogSource, Customer, CustomerStore, Geocoder, OrderService
from .errors import DialogueError, EmptyCart, ItemUnavailable
from .intents import (
    is_cancel_intent,
    is_cart_intent,
    is_clear_cart_intent,
    is_greeting,
    is_home,
    is_order_status_intent,
    is_refund_intent,
    is_track_intent,
    show_menu_intent,
)
from .locks import KeyedLocks
from .nlp import clean
from .responses import Response, Screens, menu_label
from .search import smart_search
from .state import (
    BROWSING_CATEGORY_STEPS,
    BROWSING_ITEM_STEPS,
    StateModel,
    dump_state,
    field_of,
    load_state,
    transition,
)
from .translate import Translator

logger = logging.getLogger(__name__)

NO_ADDRESS = "Address not provided - will confirm on call"
PLACEHOLDER_NAMES = {"", "unknown", "customer"}


@dataclass
class Location:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    name: Optional[str] = None


@dataclass
class InboundEvent:
    phone: str
    message: Union[str, Location, None] = ""
    message_type: str = "text"  # text | location
    selected_id: Optional[str] = None
    sender_name: Optional[str] = None


@dataclass
class Turn:
    event: InboundEvent
    customer: Customer
    state: StateModel
    snapshot: Snapshot = field(default_factory=Snapshot)
    next_state: Optional[StateModel] = None
    replies: List[Response] = field(default_factory=list)

    @property
    def phone(self) -> str:
        return self.event.phone

    @property
    def text(self) -> str:
        return self.event.message.strip() if isinstance(self.event.message, str) else ""

    @property
    def msg(self) -> str:
        return self.text.lower()

    @property
    def selection(self) -> str:
        return (self.event.selected_id or self.msg).strip()

    @property
    def free_text(self) -> bool:
        """Text classifiers only apply to typed/spoken text, never to button taps."""
        return not self.event.selected_id

    @property
    def step(self) -> str:
        return self.state.step

    @property
    def preference(self) -> str:
        return self.state.food_type_preference or "both"

    def pool(self) -> List[MenuItem]:
        return filter_by_food_type(self.snapshot.items, self.preference)

    def say(self, responses: List[Response]) -> None:
        self.replies.extend(responses)

    def go(self, step: str, **fields) -> None:
        self.next_state = transition(self.state, step, **fields)

    def stay(self) -> None:
        self.next_state = self.state


Predicate = Callable[[Turn], bool]
Handler = Callable[[Turn], Awaitable[None]]


def _page(token: str, prefix: str) -> int:
    return int(token[len(prefix):])


def _split_page(token: str, prefix: str) -> Tuple[str, int]:
    """"catpage_Main_Course_2" -> ("Main_Course", 2)"""
    body, _, page = token[len(prefix):].rpartition("_")
    return body, int(page)


class DialogueController:
    """
    Per-customer state machine. Each inbound event is one turn:
    load customer -> build catalog snapshot -> first matching guard -> persist state.
    """

    def __init__(
        self,
        catalog: CatalogSource,
        customers: CustomerStore,
        orders: OrderService,
        translator: Translator,
        geocoder: Geocoder,
        locks: Optional[KeyedLocks] = None,
        currency: str = "₹",
    ):
        self.catalog = catalog
        self.customers = customers
        self.orders = orders
        self.translator = translator
        self.geocoder = geocoder
        self.locks = locks or KeyedLocks()
        self.screens = Screens(currency)
        self.guards: List[Tuple[str, Predicate, Handler]] = self._guards()

    # ----------------------------
    # Guard table (first match wins)
    # ----------------------------
    def _guards(self) -> List[Tuple[str, Predicate, Handler]]:
        sel = lambda *ids: (lambda t: t.selection in ids)
        prefix = lambda p: (lambda t: t.selection.startswith(p))
        return [
            ("location", lambda t: t.event.message_type == "location", self._on_location),
            ("greeting", lambda t: t.free_text and is_greeting(t.msg), self._on_home),
            ("home", lambda t: t.selection in ("home", "back") or (t.free_text and is_home(t.msg)), self._on_home),
            # clear before view: "clear my cart" also contains "cart"
            ("clear_cart", lambda t: t.selection == "clear_cart" or (t.free_text and is_clear_cart_intent(t.msg)),
             self._on_clear_cart),
            ("view_cart", lambda t: t.selection == "view_cart" or (t.free_text and (t.msg == "cart" or is_cart_intent(t.msg))),
             self._on_view_cart),
            ("view_menu", lambda t: t.selection == "view_menu" or (t.free_text and t.msg == "menu"), self._on_view_menu),
            ("menu_intent", lambda t: t.free_text and show_menu_intent(t.msg) is not None, self._on_menu_intent),
            ("food_type", sel("food_veg", "food_nonveg", "food_both"), self._on_food_type),
            ("place_order", lambda t: t.selection in ("place_order", "order_now") or (t.free_text and t.msg == "order"),
             self._on_place_order),
            ("add_more", sel("add_more"), self._on_add_more),
            # cancel / refund / track before the generic status intent
            ("cancel_order", lambda t: t.selection == "cancel_order" or (t.free_text and is_cancel_intent(t.msg)),
             self._on_cancel_order),
            ("request_refund", lambda t: t.selection == "request_refund" or (t.free_text and is_refund_intent(t.msg)),
             self._on_request_refund),
            ("track_order", lambda t: t.selection == "track_order" or (t.free_text and (t.msg == "track" or is_track_intent(t.msg))),
             self._on_track_order),
            ("order_status", lambda t: t.selection == "order_status" or (t.free_text and (t.msg == "status" or is_order_status_intent(t.msg))),
             self._on_order_status),
            ("help", lambda t: t.selection == "help", self._on_help),
            ("checkout", sel("checkout", "review_pay"), self._on_checkout),
            ("share_location", sel("share_location"), self._on_share_location),
            ("skip_location", sel("skip_location"), self._on_skip_location),
            ("pay_upi", sel("pay_upi", "confirm_order", "pay_now"), self._on_pay),
            ("pay_cod", sel("pay_cod"), self._on_pay),
            ("cat_all", sel("cat_all"), self._on_category),
            ("cat", prefix("cat_"), self._on_category),
            ("order_cat_all", sel("order_cat_all"), self._on_category),
            ("order_cat", prefix("order_cat_"), self._on_category),
            ("menucat_page", prefix("menucat_page_"), self._on_category_page),
            ("ordercat_page", prefix("ordercat_page_"), self._on_category_page),
            ("allitems_page", prefix("allitems_page_"), self._on_all_items_page),
            ("orderitems_page", prefix("orderitems_page_"), self._on_all_items_page),
            ("catpage", prefix("catpage_"), self._on_category_items_page),
            ("ordercatpage", prefix("ordercatpage_"), self._on_category_items_page),
            ("tagpage", prefix("tagpage_"), self._on_tag_page),
            ("view_item", prefix("view_"), self._on_view_item),
            ("add_item", lambda t: t.selection.startswith("confirm_add_") or t.selection.startswith("add_"), self._on_add_item),
            ("quantity", prefix("qty_"), self._on_quantity),
            ("track_one", prefix("track_"), self._on_track_one),
            ("cancel_one", prefix("cancel_"), self._on_cancel_one),
            ("refund_one", prefix("refund_"), self._on_refund_one),
            ("remove_line", prefix("remove_"), self._on_remove_line),
            ("category_number", lambda t: t.free_text and t.msg.isdigit() and t.step in BROWSING_CATEGORY_STEPS, self._on_category_number),
            ("item_number", lambda t: t.free_text and t.msg.isdigit() and t.step in BROWSING_ITEM_STEPS, self._on_item_number),
            ("free_text", lambda t: True, self._on_free_text),
        ]

    # ----------------------------
    # Turn
    # ----------------------------
    async def handle(self, event: InboundEvent) -> List[Response]:
        """One turn. Never raises: every failure ends in a reply."""
        async with self.locks.hold(event.phone):
            return await self._turn(event)

    async def _turn(self, event: InboundEvent) -> List[Response]:
        try:
            customer = self._load_customer(event)
        except Exception:
            logger.exception("could not load customer %s", event.phone)
            return self.screens.apology()

        state = load_state(customer.state_json)
        turn = Turn(event=event, customer=customer, state=state)
        fired = None

        try:
            turn.snapshot = build_snapshot(
                self.catalog.list_available_items(),
                self.catalog.list_paused_categories(),
            )
            for name, predicate, handler in self.guards:
                if predicate(turn):
                    fired = name
                    await handler(turn)
                    break
        except DialogueError as e:
            logger.info("recoverable dialogue error for %s: %s", event.phone, e)
            turn.replies = self._recover(e)
            turn.next_state = transition(state, "main_menu")
        except Exception:
            logger.exception("turn failed for %s (guard=%s)", event.phone, fired)
            turn.replies = self.screens.apology()
            turn.next_state = state

        final = turn.next_state or state
        logger.info(
            "turn phone=%s step=%s selection=%r guard=%s -> %s",
            event.phone, state.step, turn.selection, fired, final.step,
        )
        self._persist(event.phone, final)
        return turn.replies

    def _recover(self, e: DialogueError) -> List[Response]:
        if isinstance(e, ItemUnavailable):
            return self.screens.reselect_item() if e.stage == "quantity" else self.screens.item_unavailable()
        if isinstance(e, EmptyCart):
            return self.screens.checkout_empty()
        return self.screens.apology()

    def _load_customer(self, event: InboundEvent) -> Customer:
        customer = self.customers.get(event.phone)
        if customer is None:
            return self.customers.create(event.phone, event.sender_name or None)
        if event.sender_name and (customer.name or "").strip().lower() in PLACEHOLDER_NAMES:
            customer.name = event.sender_name
            self.customers.save(customer)
        return customer

    def _fresh(self, t: Turn) -> Customer:
        """Re-read the stored customer right before a cart mutation."""
        latest = self.customers.get(t.phone)
        if latest is not None:
            t.customer = latest
        return t.customer

    def _persist(self, phone: str, state: StateModel) -> None:
        """Re-read the customer and write only the conversation state back."""
        try:
            latest = self.customers.get(phone)
            if latest is None:
                return
            stamped = state.model_copy(update={"last_interaction": datetime.utcnow()})
            latest.state_json = dump_state(stamped)
            self.customers.save(latest)
        except Exception:
            logger.exception("could not save conversation state for %s", phone)

    # ----------------------------
    # Global / navigation
    # ----------------------------
    async def _on_location(self, t: Turn) -> None:
        loc = t.event.message if isinstance(t.event.message, Location) else Location()
        address = "Location shared"
        if loc.latitude is not None and loc.longitude is not None:
            address = await self.geocoder.reverse_geocode(loc.latitude, loc.longitude)

        customer = self._fresh(t)
        customer.address = {
            "latitude": loc.latitude,
            "longitude": loc.longitude,
            "address": address,
            "updated_at": datetime.utcnow().isoformat(),
        }
        self.customers.save(customer)

        resolved = resolve_cart(customer.cart, t.snapshot)
        if resolved:
            t.say(self.screens.payment_choice(resolved, address))
            t.go("select_payment_method")
        else:
            t.say(self.screens.location_saved(address))
            t.go("main_menu")

    async def _on_home(self, t: Turn) -> None:
        t.say(self.screens.welcome())
        t.go("main_menu")

    async def _on_view_menu(self, t: Turn) -> None:
        t.say(self.screens.food_type_choice())
        t.go("select_food_type")

    async def _on_menu_intent(self, t: Turn) -> None:
        pref = show_menu_intent(t.msg) or "both"
        items = filter_by_food_type(t.snapshot.items, pref)
        if pref != "both" and not items:
            t.say(self.screens.no_food_type_items(pref))
            t.go("main_menu", food_type_preference=pref)
            return
        t.say(self.screens.categories(items, menu_label(pref)))
        t.go("select_category", food_type_preference=pref)

    async def _on_food_type(self, t: Turn) -> None:
        pref = t.selection[len("food_"):]
        items = filter_by_food_type(t.snapshot.items, pref)
        if t.step == "select_food_type_order":
            t.say(self.screens.categories(items, menu_label(pref), ordering=True))
            t.go("browsing_menu", food_type_preference=pref)
        else:
            t.say(self.screens.categories(items, menu_label(pref)))
            t.go("select_category", food_type_preference=pref)

    async def _on_place_order(self, t: Turn) -> None:
        t.say(self.screens.food_type_choice())
        t.go("select_food_type_order")

    async def _on_add_more(self, t: Turn) -> None:
        t.say(self.screens.add_more_choice())
        t.go("select_food_type_order")

    async def _on_help(self, t: Turn) -> None:
        t.say(self.screens.help())
        t.go("main_menu")

    # ----------------------------
    # Cart
    # ----------------------------
    async def _on_clear_cart(self, t: Turn) -> None:
        customer = self._fresh(t)
        customer.cart = []
        self.customers.save(customer)
        t.say(self.screens.cart_cleared())
        t.go("main_menu")

    async def _on_view_cart(self, t: Turn) -> None:
        customer = self._fresh(t)
        resolved = resolve_cart(customer.cart, t.snapshot)
        if len(resolved) != len(customer.cart):
            # drop lines whose item is gone
            customer.cart = [line for line, _ in resolved]
            self.customers.save(customer)
        t.say(self.screens.cart(resolved))
        t.go("viewing_cart")

    async def _on_remove_line(self, t: Turn) -> None:
        index = _page(t.selection, "remove_")
        customer = self._fresh(t)
        if remove_line(customer.cart, index):
            self.customers.save(customer)
        t.say(self.screens.cart(resolve_cart(customer.cart, t.snapshot)))
        t.go("viewing_cart")

    async def _on_add_item(self, t: Turn) -> None:
        p = "confirm_add_" if t.selection.startswith("confirm_add_") else "add_"
        item_id = t.selection[len(p):]
        item = t.snapshot.get(item_id)
        if item is None:
            raise ItemUnavailable(item_id)
        self._select_for_quantity(t, item)

    def _select_for_quantity(self, t: Turn, item: MenuItem) -> None:
        t.go("select_quantity", selected_item=item.id)
        # quantity comes in a later turn; the selection must already be stored by then
        self._persist(t.phone, t.next_state)
        t.say(self.screens.quantity_picker(item))

    async def _on_quantity(self, t: Turn) -> None:
        qty = _page(t.selection, "qty_")
        selected = field_of(t.state, "selected_item")
        item = t.snapshot.get(selected)
        if item is None or qty < 1:
            raise ItemUnavailable(selected, stage="quantity")

        customer = self._fresh(t)
        add_to_cart(customer.cart, item.id, qty)
        self.customers.save(customer)

        t.say(self.screens.added_to_cart(item, qty, cart_count(customer.cart)))
        t.go("item_added")

    # ----------------------------
    # Checkout
    # ----------------------------
    async def _on_checkout(self, t: Turn) -> None:
        customer = self._fresh(t)
        pending = field_of(t.state, "selected_item")
        if not customer.cart and pending:
            item = t.snapshot.get(pending)
            if item is not None:
                add_to_cart(customer.cart, item.id, 1)
                self.customers.save(customer)

        if not resolve_cart(customer.cart, t.snapshot):
            raise EmptyCart("checkout")

        t.say(self.screens.location_request())
        t.go("awaiting_location")

    async def _on_share_location(self, t: Turn) -> None:
        t.say(self.screens.share_location_hint())
        t.go("awaiting_location")

    async def _on_skip_location(self, t: Turn) -> None:
        customer = self._fresh(t)
        customer.address = {"address": NO_ADDRESS, "updated_at": datetime.utcnow().isoformat()}
        self.customers.save(customer)

        resolved = resolve_cart(customer.cart, t.snapshot)
        if not resolved:
            raise EmptyCart("payment")
        t.say(self.screens.payment_choice(resolved, NO_ADDRESS))
        t.go("select_payment_method")

    async def _on_pay(self, t: Turn) -> None:
        method = "cod" if t.selection == "pay_cod" else "upi"
        customer = self._fresh(t)
        resolved = resolve_cart(customer.cart, t.snapshot)
        if not resolved:
            raise EmptyCart("payment")

        delivery = customer.address or {"address": NO_ADDRESS}
        order = self.orders.create_order(customer, resolved, "delivery", delivery, method)
        logger.info("order %s created for %s (%s, total=%s)", order.order_id, t.phone, method, order.total)

        customer = self._fresh(t)
        customer.cart = []
        customer.has_ordered = True
        self.customers.save(customer)

        if method == "cod":
            t.say(self.screens.order_confirmed(order))
            t.go("order_confirmed", payment_method=method, pending_order_id=order.order_id)
        else:
            t.say(self.screens.awaiting_payment(order))
            t.go("awaiting_payment", payment_method=method, pending_order_id=order.order_id)

    # ----------------------------
    # Orders
    # ----------------------------
    async def _on_order_status(self, t: Turn) -> None:
        t.say(self.screens.order_status(self.orders.recent_orders(t.phone, 5)))
        t.go("main_menu")

    async def _on_track_order(self, t: Turn) -> None:
        orders = self.orders.active_orders(t.phone, 5)
        if not orders:
            t.say(self.screens.no_active_orders())
            t.go("main_menu")
        elif len(orders) == 1:
            t.say(self.screens.tracking_details(orders[0]))
            t.go("main_menu")
        else:
            t.say(self.screens.tracking_choice(orders))
            t.go("select_track")

    async def _on_cancel_order(self, t: Turn) -> None:
        orders = self.orders.cancellable_orders(t.phone, 5)
        if not orders:
            t.say(self.screens.no_cancellable_orders())
            t.go("main_menu")
        elif len(orders) == 1:
            await self._cancel(t, orders[0].order_id)
        else:
            t.say(self.screens.cancel_choice(orders))
            t.go("select_cancel")

    async def _on_request_refund(self, t: Turn) -> None:
        orders = self.orders.refundable_orders(t.phone, 5)
        if not orders:
            t.say(self.screens.no_refundable_orders())
            t.go("main_menu")
        elif len(orders) == 1:
            await self._refund(t, orders[0].order_id)
        else:
            t.say(self.screens.refund_choice(orders))
            t.go("select_refund")

    async def _on_track_one(self, t: Turn) -> None:
        order = self.orders.get_order(t.phone, t.selection[len("track_"):])
        t.say(self.screens.tracking_details(order) if order else self.screens.order_not_found())
        t.go("main_menu")

    async def _on_cancel_one(self, t: Turn) -> None:
        await self._cancel(t, t.selection[len("cancel_"):])

    async def _on_refund_one(self, t: Turn) -> None:
        await self._refund(t, t.selection[len("refund_"):])

    async def _cancel(self, t: Turn, order_id: str) -> None:
        code, order = self.orders.cancel_order(t.phone, order_id)
        logger.info("cancel %s for %s -> %s", order_id, t.phone, code)
        t.say(self.screens.cancel_outcome(code, order_id, order))
        t.go("main_menu")

    async def _refund(self, t: Turn, order_id: str) -> None:
        code, order = self.orders.request_refund(t.phone, order_id)
        logger.info("refund %s for %s -> %s", order_id, t.phone, code)
        t.say(self.screens.refund_outcome(code, order_id, order))
        t.go("main_menu")

    # ----------------------------
    # Browsing selections
    # ----------------------------
    async def _on_category(self, t: Turn) -> None:
        ordering = t.selection.startswith("order_cat_")
        token = t.selection[len("order_cat_" if ordering else "cat_"):]
        pool = t.pool()
        next_step = "selecting_item" if ordering else "viewing_items"

        if token == "all":
            t.say(self.screens.all_items(pool, ordering=ordering))
            t.go(next_step, selected_category="all")
            return

        category = category_from_safe_id(token, pool)
        t.say(self.screens.category_items(pool, category, ordering=ordering))
        t.go(next_step, selected_category=category)

    async def _on_category_page(self, t: Turn) -> None:
        ordering = t.selection.startswith("ordercat_page_")
        page = _page(t.selection, "ordercat_page_" if ordering else "menucat_page_")
        t.say(self.screens.categories(t.pool(), menu_label(t.preference), page, ordering=ordering))
        t.go("browsing_menu" if ordering else "select_category", category_page=page)

    async def _on_all_items_page(self, t: Turn) -> None:
        ordering = t.selection.startswith("orderitems_page_")
        page = _page(t.selection, "orderitems_page_" if ordering else "allitems_page_")
        t.say(self.screens.all_items(t.pool(), page, ordering=ordering))
        t.go("selecting_item" if ordering else "viewing_items", selected_category="all", current_page=page)

    async def _on_category_items_page(self, t: Turn) -> None:
        ordering = t.selection.startswith("ordercatpage_")
        token, page = _split_page(t.selection, "ordercatpage_" if ordering else "catpage_")
        pool = t.pool()
        category = category_from_safe_id(token, pool)
        t.say(self.screens.category_items(pool, category, page, ordering=ordering))
        t.go("selecting_item" if ordering else "viewing_items", selected_category=category, current_page=page)

    async def _on_tag_page(self, t: Turn) -> None:
        token, page = _split_page(t.selection, "tagpage_")
        term = field_of(t.state, "search_tag") or token.replace("_", " ")
        result = await smart_search(term, t.snapshot.items, self.translator)
        t.say(self.screens.tag_results(result.items, result.display_label, term, page))
        t.go("viewing_tag_results", search_tag=term, current_page=page)

    async def _on_view_item(self, t: Turn) -> None:
        item_id = t.selection[len("view_"):]
        item = t.snapshot.get(item_id)
        if item is None:
            raise ItemUnavailable(item_id)
        t.say(self.screens.item_details(item))
        t.go("viewing_item_details", selected_item=item.id)

    async def _on_category_number(self, t: Turn) -> None:
        n = int(t.msg)
        pool = t.pool()
        cats = category_names(pool)
        ordering = t.step == "browsing_menu"
        next_step = "selecting_item" if ordering else "viewing_items"

        if n == 0:
            t.say(self.screens.all_items(pool, ordering=ordering))
            t.go(next_step, selected_category="all")
        elif 1 <= n <= len(cats):
            category = cats[n - 1]
            t.say(self.screens.category_items(pool, category, ordering=ordering))
            t.go(next_step, selected_category=category)
        else:
            t.say(self.screens.invalid_number(0, len(cats)))
            t.stay()

    async def _on_item_number(self, t: Turn) -> None:
        n = int(t.msg)
        items = items_in_category(t.pool(), field_of(t.state, "selected_category"))
        if not 1 <= n <= len(items):
            t.say(self.screens.invalid_number(1, len(items)))
            t.stay()
            return

        item = items[n - 1]
        if t.step == "selecting_item":
            self._select_for_quantity(t, item)
        else:
            t.say(self.screens.item_details(item))
            t.go("viewing_item_details", selected_item=item.id)

    # ----------------------------
    # Free text: search -> food type only -> category -> welcome -> fallback
    # ----------------------------
    async def _on_free_text(self, t: Turn) -> None:
        if len(clean(t.text)) >= 2:
            result = await smart_search(t.text, t.snapshot.items, self.translator)
            if len(result.items) == 1:
                item = result.items[0]
                t.say(self.screens.item_details(item))
                t.go("viewing_item_details", selected_item=item.id)
                return
            if result.items:
                t.say(self.screens.tag_results(result.items, result.display_label, t.msg))
                t.go("viewing_tag_results", search_tag=t.msg)
                return

            hint = result.matched_food_type
            if hint is not None and hint.filter_type:
                items = filter_by_food_type(t.snapshot.items, hint.filter_type)
                if items:
                    t.say(self.screens.categories(items, MENU_LABELS[hint.filter_type]))
                    t.go("select_category", food_type_preference=hint.filter_type)
                else:
                    t.say(self.screens.no_food_type_items(hint.filter_type))
                    t.go("main_menu")
                return

        category = find_category(t.msg, t.pool())
        if category:
            ordering = t.step in ("browsing_menu", "selecting_item")
            t.say(self.screens.category_items(t.pool(), category, ordering=ordering))
            t.go("selecting_item" if ordering else "viewing_items", selected_category=category)
            return

        if t.step == "welcome":
            t.say(self.screens.welcome())
            t.go("main_menu")
            return

        t.say(self.screens.fallback())
        t.stay()
