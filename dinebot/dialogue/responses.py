# dinebot/dialogue/responses.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, field_validator

from .cart import CartLine, line_total
from .catalog import (
    MENU_LABELS,
    MenuItem,
    category_names,
    food_type_icon,
    food_type_label,
    format_price,
    items_in_category,
    safe_id,
    unit_info,
)
from .collaborators import OrderSummary

MAX_BUTTONS = 3
MAX_ROWS = 10
BUTTON_TITLE_LEN = 20
ROW_TITLE_LEN = 24
ROW_DESC_LEN = 72

CATS_PER_PAGE = 9  # + "All Items" row on the first page = 10 rows
ITEMS_PER_PAGE = 10

RULE = "━━━━━━━━━━━━━━━"

STATUS_EMOJI = {
    "pending": "⏳", "confirmed": "✅", "preparing": "👨‍🍳", "ready": "📦",
    "out_for_delivery": "🛵", "delivered": "✅", "cancelled": "❌", "refunded": "💰",
}
STATUS_LABEL = {
    "pending": "Pending", "confirmed": "Confirmed", "preparing": "Preparing", "ready": "Ready",
    "out_for_delivery": "On the Way", "delivered": "Delivered", "cancelled": "Cancelled",
    "refunded": "Refunded",
}


# ----------------------------
# Response descriptors (what to say; the gateway decides how)
# ----------------------------
class Button(BaseModel):
    id: str
    title: str

    @field_validator("title")
    @classmethod
    def cap_title(cls, v: str) -> str:
        return v[:BUTTON_TITLE_LEN]


class Row(BaseModel):
    id: str
    title: str
    description: str = ""

    @field_validator("title")
    @classmethod
    def cap_title(cls, v: str) -> str:
        return v[:ROW_TITLE_LEN]

    @field_validator("description")
    @classmethod
    def cap_desc(cls, v: str) -> str:
        return v[:ROW_DESC_LEN]


class Section(BaseModel):
    title: str
    rows: List[Row]

    @field_validator("rows")
    @classmethod
    def cap_rows(cls, v: List[Row]) -> List[Row]:
        return v[:MAX_ROWS]


def _cap_buttons(v: List[Button]) -> List[Button]:
    return v[:MAX_BUTTONS]


class TextMessage(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class ButtonsMessage(BaseModel):
    kind: Literal["buttons"] = "buttons"
    text: str
    buttons: List[Button]
    footer: Optional[str] = None

    @field_validator("buttons")
    @classmethod
    def cap_buttons(cls, v: List[Button]) -> List[Button]:
        return _cap_buttons(v)


class ListMessage(BaseModel):
    kind: Literal["list"] = "list"
    title: str
    description: str
    button_label: str
    sections: List[Section]
    footer: Optional[str] = None


class ImageButtonsMessage(BaseModel):
    kind: Literal["image_buttons"] = "image_buttons"
    image_url: str
    text: str
    buttons: List[Button]

    @field_validator("buttons")
    @classmethod
    def cap_buttons(cls, v: List[Button]) -> List[Button]:
        return _cap_buttons(v)


class LocationRequest(BaseModel):
    kind: Literal["location_request"] = "location_request"
    text: str


class CtaUrlMessage(BaseModel):
    kind: Literal["cta_url"] = "cta_url"
    text: str
    button_label: str
    url: str
    footer: Optional[str] = None


Response = Union[TextMessage, ButtonsMessage, ListMessage, ImageButtonsMessage, LocationRequest, CtaUrlMessage]


def buttons(text: str, *pairs: Tuple[str, str], footer: Optional[str] = None) -> ButtonsMessage:
    return ButtonsMessage(text=text, buttons=[Button(id=i, title=t) for i, t in pairs], footer=footer)


HOME = ("home", "Main Menu")
VIEW_MENU = ("view_menu", "View Menu")
VIEW_CART = ("view_cart", "View Cart")
HELP = ("help", "Help")
ORDER_NOW = ("place_order", "Order Now")
VIEW_ORDERS = ("order_status", "View Orders")


# ----------------------------
# Pagination
# ----------------------------
@dataclass
class Page:
    entries: list
    page: int
    total_pages: int
    total: int

    @property
    def has_prev(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1


def paginate(seq: Sequence, page: int, size: int) -> Page:
    """Zero-based page; totalPages = ceil(n / size). Page indexes are trusted (we generate them)."""
    n = len(seq)
    total_pages = math.ceil(n / size) if n else 0
    start = max(0, page) * size
    return Page(list(seq[start:start + size]), page, total_pages, n)


def category_rows(
    items: Sequence[MenuItem],
    page: int = 0,
    prefix: str = "cat_",
    count_suffix: str = "items available",
) -> Tuple[List[Row], Page]:
    """Category rows for one list screen: the "All Items" row only on the first page."""
    cats = category_names(items)
    pg = paginate(cats, page, CATS_PER_PAGE)
    rows: List[Row] = []
    if page == 0 and cats:
        rows.append(Row(id=f"{prefix}all", title="📋 All Items", description=f"{len(items)} items - View everything"))
    for c in pg.entries:
        count = len(items_in_category(items, c))
        rows.append(Row(id=f"{prefix}{safe_id(c)}", title=c, description=f"{count} {count_suffix}"))
    return rows, pg


def _nav(pg: Page, token: Callable[[int], str], back: Tuple[str, str]) -> ButtonsMessage:
    pairs: List[Tuple[str, str]] = []
    if pg.has_prev:
        pairs.append((token(pg.page - 1), "Previous"))
    if pg.has_next:
        pairs.append((token(pg.page + 1), "Next"))
    pairs.append(back)
    return buttons(f"Page {pg.page + 1} of {pg.total_pages}", *pairs)


def item_row(item: MenuItem, prefix: str, currency: str) -> Row:
    icon = food_type_icon(item.food_type)
    title = f"{icon} {item.name}" if icon else item.name
    return Row(
        id=f"{prefix}{item.id}",
        title=title,
        description=f"{currency}{format_price(item.price)} • {unit_info(item)}",
    )


# ----------------------------
# Screens
# ----------------------------
class Screens:
    """Builders for every screen the controller can show."""

    def __init__(self, currency: str = "₹"):
        self.cur = currency

    def money(self, amount: float) -> str:
        return f"{self.cur}{format_price(amount)}"

    # --- welcome / browsing ---
    def welcome(self) -> List[Response]:
        return [ListMessage(
            title="🍽️ Welcome!",
            description="Welcome to our restaurant! How can we help you today?",
            button_label="View Options",
            sections=[
                Section(title="Order Food", rows=[
                    Row(id="food_both", title="All Menu", description="Browse all dishes"),
                    Row(id="food_veg", title="Veg Menu", description="Browse vegetarian dishes"),
                    Row(id="food_nonveg", title="Non-Veg Menu", description="Browse non-vegetarian dishes"),
                    Row(id="view_cart", title="My Cart", description="View items in cart"),
                ]),
                Section(title="My Orders", rows=[
                    Row(id="order_status", title="Order Status", description="Check your orders"),
                    Row(id="track_order", title="Track Delivery", description="Live order tracking"),
                    Row(id="cancel_order", title="Cancel Order", description="Cancel & auto-refund if paid"),
                ]),
                Section(title="Support", rows=[
                    Row(id="help", title="Help", description="Get assistance"),
                ]),
            ],
            footer="Powered by AI",
        )]

    def food_type_choice(self) -> List[Response]:
        return [buttons(
            "🍽️ *Browse Menu*\n\nWhat would you like to see?",
            ("food_veg", "Veg Only"), ("food_nonveg", "Non-Veg Only"), ("food_both", "Show All"),
        )]

    def add_more_choice(self) -> List[Response]:
        return [buttons(
            "🍽️ *Add More Items*\n\nWhat would you like to browse?",
            ("food_veg", "Veg"), ("food_nonveg", "Non-Veg"), ("food_both", "All Items"),
        )]

    def no_food_type_items(self, preference: str) -> List[Response]:
        label = {"veg": "🟢 No veg items", "nonveg": "🔴 No non-veg items", "egg": "🟡 No egg items"}
        return [buttons(
            f"{label.get(preference, '📋 No items')} available right now.",
            ("view_menu", "View All Menu"), HOME,
        )]

    def categories(self, items: Sequence[MenuItem], label: str, page: int = 0, ordering: bool = False) -> List[Response]:
        if not items:
            return [buttons("📋 No menu items available right now.", HOME)]

        prefix = "order_cat_" if ordering else "cat_"
        rows, pg = category_rows(items, page, prefix, "items" if ordering else "items available")
        section = "Categories" if ordering else "Menu Categories"

        if pg.total_pages <= 1:
            hint = "Choose a category to add items to your cart" if ordering else "Select a category to browse items"
            return [ListMessage(
                title=label,
                description=hint,
                button_label="View Categories",
                sections=[Section(title=section, rows=rows)],
                footer="Tap to browse" if ordering else "Fresh & Delicious!",
            )]

        out: List[Response] = [ListMessage(
            title=f"{'🛒' if ordering else '📋'} {label}",
            description=f"Page {pg.page + 1}/{pg.total_pages} • {pg.total} categories\nTap to select a category",
            button_label="View Categories",
            sections=[Section(title=section, rows=rows)],
            footer="Select a category",
        )]
        token = (lambda p: f"ordercat_page_{p}") if ordering else (lambda p: f"menucat_page_{p}")
        out.append(_nav(pg, token, ("home", "Menu")))
        return out

    def _items(
        self,
        items: Sequence[MenuItem],
        page: int,
        title: str,
        section_title: str,
        description: str,
        row_prefix: str,
        token: Callable[[int], str],
        back: Tuple[str, str],
    ) -> List[Response]:
        pg = paginate(items, page, ITEMS_PER_PAGE)
        rows = [item_row(it, row_prefix, self.cur) for it in pg.entries]
        out: List[Response] = [ListMessage(
            title=title,
            description=description.format(page=pg.page + 1, pages=pg.total_pages, total=pg.total),
            button_label="View Items",
            sections=[Section(title=section_title, rows=rows)],
            footer="Select an item",
        )]
        if pg.total_pages > 1:
            out.append(_nav(pg, token, back))
        return out

    def category_items(self, items: Sequence[MenuItem], category: str, page: int = 0, ordering: bool = False) -> List[Response]:
        in_cat = items_in_category(items, category)
        if not in_cat:
            if ordering:
                return [buttons(f"📋 No items in {category}.", ("add_more", "Other Categories"), HOME)]
            return [buttons(f"📋 No items in {category} right now.", ("view_menu", "Back to Menu"), HOME)]
        tap = "Tap an item to add to cart" if ordering else "Tap an item to view details"
        sc = safe_id(category)
        return self._items(
            in_cat, page,
            title=f"📋 {category}",
            section_title=f"{category} ({len(in_cat)} items)",
            description="Page {page}/{pages} • {total} items total\n" + tap,
            row_prefix="add_" if ordering else "view_",
            token=(lambda p: f"ordercatpage_{sc}_{p}") if ordering else (lambda p: f"catpage_{sc}_{p}"),
            back=("add_more", "Menu") if ordering else ("view_menu", "Menu"),
        )

    def all_items(self, items: Sequence[MenuItem], page: int = 0, ordering: bool = False) -> List[Response]:
        if not items:
            return [buttons("📋 No items available right now.", ("view_menu", "Back to Menu"), HOME)]
        tap = "Tap an item to add to cart" if ordering else "Tap an item to view details"
        return self._items(
            items, page,
            title="📋 All Items",
            section_title=f"All Items ({len(items)})",
            description="Page {page}/{pages} • {total} items total\n" + tap,
            row_prefix="add_" if ordering else "view_",
            token=(lambda p: f"orderitems_page_{p}") if ordering else (lambda p: f"allitems_page_{p}"),
            back=("add_more", "Menu") if ordering else ("view_menu", "Menu"),
        )

    def tag_results(self, items: Sequence[MenuItem], label: str, search_tag: str, page: int = 0) -> List[Response]:
        if not items:
            return [buttons(f"🔍 No items found for {label}.", ("view_menu", "Browse Menu"), HOME)]
        st = safe_id(search_tag)
        return self._items(
            items, page,
            title=f"🏷️ {label}",
            section_title=f"{label} Items ({len(items)})",
            description=f"Found {len(items)} items matching {label}\nTap an item to view details & add to cart",
            row_prefix="view_",
            token=lambda p: f"tagpage_{st}_{p}",
            back=("view_menu", "Menu"),
        )

    # --- item ---
    def item_details(self, item: MenuItem, ordering: bool = False) -> List[Response]:
        ft = food_type_label(item.food_type)
        msg = f"*{item.name}*{' ' + ft if ft else ''}\n\n"
        msg += f"💰 *Price:* {self.money(item.price)} / {unit_info(item)}\n"
        msg += f"⏱️ *Prep Time:* {item.preparation_time or 15} mins\n"
        if item.tags:
            msg += f"🏷️ *Tags:* {', '.join(item.tags)}\n"
        msg += f"\n📝 {item.description or 'Delicious dish prepared fresh!'}"

        pairs = [
            (f"confirm_add_{item.id}" if ordering else f"add_{item.id}", "Add to Cart"),
            ("add_more" if ordering else "view_menu", "Back to Menu"),
            ("review_pay", "Review & Pay"),
        ]
        if item.image and not item.image.startswith("data:"):
            return [ImageButtonsMessage(
                image_url=item.image, text=msg, buttons=[Button(id=i, title=t) for i, t in pairs],
            )]
        return [buttons(msg, *pairs)]

    def item_not_found(self) -> List[Response]:
        return [buttons("❌ Item not found.", VIEW_MENU)]

    def quantity_picker(self, item: MenuItem) -> List[Response]:
        return [buttons(
            f"*{item.name}*\n💰 {self.money(item.price)} / {unit_info(item)}\n\nHow many would you like?",
            ("qty_1", "1"), ("qty_2", "2"), ("qty_3", "3"),
        )]

    def added_to_cart(self, item: MenuItem, qty: int, cart_count: int) -> List[Response]:
        return [buttons(
            f"✅ *Added to Cart!*\n\n{qty}x {item.name} ({unit_info(item)})\n"
            f"💰 {self.money(item.price * qty)}\n\n🛒 Cart: {cart_count} items",
            ("add_more", "Add More"), VIEW_CART, ("review_pay", "Review & Pay"),
        )]

    def item_unavailable(self) -> List[Response]:
        return [buttons(
            "⚠️ This item is no longer available. Please select another item.",
            ("place_order", "View Menu"), HOME,
        )]

    def reselect_item(self) -> List[Response]:
        return [buttons(
            "⚠️ Something went wrong. Please select an item again.",
            ("place_order", "Order Again"), VIEW_MENU, HOME,
        )]

    def invalid_number(self, low: int, high: int) -> List[Response]:
        if low == 0:
            text = f"❌ Invalid number. Please enter 0 for All Items or 1-{high} for a category."
        else:
            text = f"❌ Invalid number. Please enter a number between 1 and {high}."
        return [buttons(text, HOME)]

    # --- cart / checkout ---
    def _cart_lines(self, resolved: Sequence[Tuple[CartLine, MenuItem]], with_qty_label: bool) -> Tuple[str, float]:
        text = ""
        total = 0.0
        for n, (line, item) in enumerate(resolved, start=1):
            sub = line_total(line, item)
            total += sub
            qty = f"Qty: {line.quantity}" if with_qty_label else f"{line.quantity}"
            text += f"{n}. *{item.name}* ({unit_info(item)})\n"
            text += f"   {qty} × {self.money(item.price)} = {self.money(sub)}\n\n"
        return text, round(total, 2)

    def empty_cart(self) -> List[Response]:
        return [buttons("🛒 *Your Cart is Empty*\n\nStart adding delicious items!", VIEW_MENU, HOME)]

    def checkout_empty(self) -> List[Response]:
        return [buttons("Your cart is empty! Please add items first.", VIEW_MENU, HOME)]

    def cart(self, resolved: Sequence[Tuple[CartLine, MenuItem]]) -> List[Response]:
        if not resolved:
            return self.empty_cart()
        lines, total = self._cart_lines(resolved, with_qty_label=False)
        text = f"🛒 *Your Cart*\n\n{lines}{RULE}\n*Total: {self.money(total)}*"
        return [buttons(text, ("review_pay", "Review & Pay"), ("add_more", "Add More"), ("clear_cart", "Clear Cart"))]

    def cart_cleared(self) -> List[Response]:
        return [buttons("🗑️ Cart cleared!", ("place_order", "New Order"), HOME)]

    def location_request(self) -> List[Response]:
        return [LocationRequest(text="📍 *Share Your Delivery Location*\n\nPlease share your location for accurate delivery.")]

    def share_location_hint(self) -> List[Response]:
        return [TextMessage(text=(
            "📍 Please share your location:\n\n"
            "1️⃣ Tap the 📎 attachment icon below\n"
            "2️⃣ Select \"Location\"\n"
            "3️⃣ Send your current location\n\n"
            "We're waiting for your location! 🛵"
        ))]

    def location_saved(self, address: str) -> List[Response]:
        return [buttons(
            f"📍 Location saved!\n\n{address}\n\nStart ordering to use this address.",
            ("place_order", "Start Order"), HOME,
        )]

    def payment_choice(self, resolved: Sequence[Tuple[CartLine, MenuItem]], address: Optional[str]) -> List[Response]:
        lines, total = self._cart_lines(resolved, with_qty_label=True)
        text = f"🛒 *Order Summary*\n\n{lines}{RULE}\n*Total: {self.money(total)}*\n\n"
        if address:
            text += f"📍 *Delivery Address:*\n{address}\n\n"
        text += "💳 Select payment method:"
        return [buttons(text, ("pay_upi", "UPI/APP"), ("pay_cod", "COD"), ("clear_cart", "Cancel"))]

    def _order_items(self, order: OrderSummary) -> str:
        out = ""
        for n, line in enumerate(order.items, start=1):
            uq = int(line.unit_quantity) if float(line.unit_quantity).is_integer() else line.unit_quantity
            out += f"{n}. {line.name} ({uq} {line.unit}) x{line.quantity} - {self.money(line.subtotal)}\n"
        return out

    def order_confirmed(self, order: OrderSummary) -> List[Response]:
        text = "✅ *Order Confirmed!*\n\n"
        text += f"📦 Order ID: *{order.order_id}*\n"
        text += "💵 Payment: *Cash on Delivery*\n"
        text += f"💰 Total: *{self.money(order.total)}*\n\n"
        text += f"{RULE}\n*Items:*\n{self._order_items(order)}{RULE}\n\n"
        text += f"🙏 Thank you for your order!\nPlease keep {self.money(order.total)} ready for payment."
        return [buttons(text, ("track_order", "Track Order"), HOME)]

    def awaiting_payment(self, order: OrderSummary) -> List[Response]:
        if not order.payment_url:
            return [buttons(
                f"✅ *Order Created!*\n\nOrder ID: {order.order_id}\nTotal: {self.money(order.total)}\n\n"
                "⚠️ Payment link unavailable.\nPlease contact us.",
                ("order_status", "Check Status"), HOME,
            )]
        text = "🧾 *Order Placed!*\n\n"
        text += f"📦 Order ID: *{order.order_id}*\n"
        text += f"💰 Total: *{self.money(order.total)}*\n\n"
        text += f"{RULE}\n*Items:*\n{self._order_items(order)}{RULE}\n\n"
        text += "Tap below to complete your payment."
        return [CtaUrlMessage(text=text, button_label="Pay Now", url=order.payment_url, footer="Secure payment")]

    # --- orders ---
    def _status(self, status: str) -> str:
        return STATUS_LABEL.get(status) or status.replace("_", " ")

    def order_status(self, orders: Sequence[OrderSummary]) -> List[Response]:
        if not orders:
            return [buttons("📋 *No Orders Found*\n\nYou haven't placed any orders yet.", ORDER_NOW, HOME)]
        text = "📋 *Your Orders*\n\n"
        for o in orders:
            text += f"{STATUS_EMOJI.get(o.status, '•')} *{o.order_id}*\n"
            text += f"   {self._status(o.status)} | {self.money(o.total)}\n"
            if o.created_at:
                text += f"   {o.created_at.strftime('%d/%m/%Y')}\n"
            text += "\n"
        return [buttons(text.rstrip(), ("track_order", "Track Order"), HOME)]

    def no_active_orders(self) -> List[Response]:
        return [buttons("📍 *No Active Orders*\n\nNo orders to track right now.", ORDER_NOW, HOME)]

    def order_not_found(self) -> List[Response]:
        return [buttons("❌ Order not found.", HOME)]

    def tracking_choice(self, orders: Sequence[OrderSummary]) -> List[Response]:
        rows = [Row(id=f"track_{o.order_id}", title=o.order_id,
                    description=f"{self.money(o.total)} - {self._status(o.status)}") for o in orders]
        return [ListMessage(
            title="Track Order",
            description=f"You have {len(orders)} active orders. Select which one to track.",
            button_label="Select Order",
            sections=[Section(title="Active Orders", rows=rows)],
        )]

    def tracking_details(self, order: OrderSummary) -> List[Response]:
        text = "📍 *Order Tracking*\n\n"
        text += f"Order: *{order.order_id}*\n"
        text += f"Status: {STATUS_EMOJI.get(order.status, '•')} *{self._status(order.status).upper()}*\n"
        text += f"Amount: {self.money(order.total)}\n\n"
        text += f"{RULE}\n*Timeline:*\n\n"
        for u in order.tracking:
            text += f"{STATUS_EMOJI.get(u.status, '•')} {u.message}\n"
            if u.timestamp:
                text += f"   {u.timestamp.strftime('%d/%m/%Y %H:%M')}\n"
            text += "\n"
        return [buttons(text.rstrip(), ("order_status", "All Orders"), HOME)]

    def no_cancellable_orders(self) -> List[Response]:
        return [buttons("❌ *No Orders to Cancel*\n\nNo cancellable orders found.", VIEW_ORDERS, HOME)]

    def cancel_choice(self, orders: Sequence[OrderSummary]) -> List[Response]:
        rows = [Row(
            id=f"cancel_{o.order_id}", title=o.order_id,
            description=f"{self.money(o.total)} - {o.status} - {'Paid' if o.payment_status == 'paid' else 'Unpaid'}",
        ) for o in orders]
        return [ListMessage(
            title="Cancel Order",
            description=f"You have {len(orders)} active orders. Select which one to cancel.",
            button_label="Select Order",
            sections=[Section(title="Your Orders", rows=rows)],
            footer="This cannot be undone",
        )]

    def cancel_outcome(self, code: str, order_id: str, order: Optional[OrderSummary]) -> List[Response]:
        if code == "not_found" or order is None:
            return self.order_not_found()
        if code == "not_cancellable":
            return [buttons(f"❌ *Cannot Cancel*\n\nOrder is already {self._status(order.status).lower()}.", HOME)]
        text = f"✅ *Order Cancelled*\n\nOrder {order_id} has been cancelled."
        if code == "cancelled_refund_pending":
            text += (f"\n\n💰 *Refund Requested*\nYour refund of {self.money(order.total)} is pending approval."
                     "\n\n⏱️ You'll receive a confirmation once processed.")
        return [buttons(text, ("place_order", "New Order"), HOME)]

    def no_refundable_orders(self) -> List[Response]:
        return [buttons(
            "💰 *No Refundable Orders*\n\nNo paid orders available for refund.\n\n"
            "Note: Delivered orders cannot be refunded.",
            VIEW_ORDERS, HOME,
        )]

    def refund_choice(self, orders: Sequence[OrderSummary]) -> List[Response]:
        rows = [Row(
            id=f"refund_{o.order_id}", title=o.order_id,
            description=f"{self.money(o.total)} - {o.status}{' (Refund Pending)' if o.refund_status == 'pending' else ''}",
        ) for o in orders]
        return [ListMessage(
            title="Request Refund",
            description=f"You have {len(orders)} paid orders. Select which one to refund.",
            button_label="Select Order",
            sections=[Section(title="Paid Orders", rows=rows)],
        )]

    def refund_outcome(self, code: str, order_id: str, order: Optional[OrderSummary]) -> List[Response]:
        if code == "not_found" or order is None:
            return self.order_not_found()
        if code == "not_paid":
            return [buttons("❌ No payment found for this order.", HOME)]
        if code == "delivered":
            return [buttons("❌ Delivered orders cannot be refunded.", HOME)]
        if code == "already_refunded":
            return [buttons("❌ This order is already refunded.", HOME)]
        if code == "already_pending":
            return [buttons(
                f"⏳ *Refund Already Scheduled*\n\nYour refund of {self.money(order.total)} is being processed."
                "\n\n⏱️ You'll receive a confirmation once complete.",
                VIEW_ORDERS, HOME,
            )]
        return [buttons(
            f"✅ *Refund Requested!*\n\nOrder: {order_id}\nAmount: {self.money(order.total)}\n\n"
            "⏱️ Your refund is pending approval.\nYou'll receive a confirmation once processed.",
            VIEW_ORDERS, HOME,
        )]

    # --- support ---
    def help(self) -> List[Response]:
        text = (
            "❓ *Help & Support*\n\n"
            "🍽️ *Ordering*\n"
            "• Browse menu and place orders\n"
            "• Search dishes in your own language or by voice\n\n"
            "📦 *Order Management*\n"
            "• Track your order in real-time\n"
            "• Cancel orders before preparation\n"
            "• Request refunds for paid orders\n\n"
            "💬 *Quick Commands*\n"
            "• \"hi\" - Main menu\n"
            "• \"menu\" - View menu\n"
            "• \"cart\" - View cart\n"
            "• \"status\" - Check orders"
        )
        return [buttons(text, HOME, ORDER_NOW)]

    def fallback(self) -> List[Response]:
        return [buttons("🤔 I didn't understand that.\n\nPlease select an option:", HOME, VIEW_CART, HELP)]

    def apology(self) -> List[Response]:
        return [buttons("❌ Something went wrong. Please try again.", HOME, HELP)]

    def not_heard(self) -> List[Response]:
        return [buttons("🎤 Sorry, I couldn't understand the voice message. Please try again or type your order.", HOME, HELP)]


def menu_label(preference: Optional[str]) -> str:
    return MENU_LABELS.get(preference or "both", MENU_LABELS["both"])
