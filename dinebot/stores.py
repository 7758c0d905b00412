# dinebot/stores.py
from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from .dialogue.cart import CartLine, cart_total, dump_cart, load_cart
from .dialogue.catalog import MenuItem
from .dialogue.collaborators import (
    CANCELLED,
    CANCELLED_REFUND_PENDING,
    NOT_CANCELLABLE,
    NOT_FOUND,
    REFUND_ALREADY_DONE,
    REFUND_ALREADY_PENDING,
    REFUND_DELIVERED,
    REFUND_NOT_PAID,
    REFUND_REQUESTED,
    Customer,
    OrderLine,
    OrderSummary,
    TrackingUpdate,
)
from .models import CategoryRow, CustomerRow, MenuItemRow, OrderRow

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]

CLOSED_STATUSES = {"delivered", "cancelled", "refunded"}
CANCELLABLE_STATUSES = ("pending", "confirmed", "preparing", "ready", "out_for_delivery")


# -------------------
# JSON column helpers
# -------------------
def _safe_json_dict(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        v = json.loads(raw)
        return v if isinstance(v, dict) else {}
    except Exception:
        return {}


def _safe_json_list(raw: Optional[str]) -> List[Any]:
    if not raw:
        return []
    try:
        v = json.loads(raw)
        return v if isinstance(v, list) else []
    except Exception:
        return []


def _base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = digits[r] + out
    return out or "0"


def new_order_id(now_ms: Optional[int] = None) -> str:
    ms = int(time.time() * 1000) if now_ms is None else now_ms
    return "ORD" + _base36(ms).upper()


# -------------------
# Catalog
# -------------------
def _item_from_row(row: MenuItemRow) -> MenuItem:
    return MenuItem(
        id=row.id,
        name=row.name,
        price=float(row.price or 0.0),
        categories=tuple(str(c) for c in _safe_json_list(row.categories_json)),
        tags=tuple(str(t) for t in _safe_json_list(row.tags_json)),
        food_type=row.food_type or "none",
        unit=row.unit or "piece",
        unit_quantity=row.unit_quantity or 1,
        available=bool(row.available),
        description=row.description or "",
        image=row.image or "",
        preparation_time=row.preparation_time or 15,
    )


class SqlCatalog:
    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def list_available_items(self) -> List[MenuItem]:
        with self.session_factory() as db:
            rows = (
                db.query(MenuItemRow)
                .filter(MenuItemRow.available.is_(True))
                .order_by(MenuItemRow.position, MenuItemRow.name)
                .all()
            )
            return [_item_from_row(r) for r in rows]

    def list_paused_categories(self) -> List[str]:
        with self.session_factory() as db:
            return [c.name for c in db.query(CategoryRow).filter(CategoryRow.is_paused.is_(True)).all()]

    def set_category_paused(self, name: str, paused: bool = True) -> None:
        with self.session_factory() as db:
            row = db.get(CategoryRow, name) or CategoryRow(name=name)
            row.is_paused = paused
            db.add(row)
            db.commit()


def seed_catalog(session_factory: SessionFactory, path: Path) -> int:
    """
    Load a menu.json into an empty catalog. Returns the number of items inserted
    (0 when the catalog already has items or the file is missing).
    """
    if not path.exists():
        logger.warning("menu file not found: %s", path)
        return 0

    with session_factory() as db:
        if db.query(MenuItemRow).count():
            return 0

        data = json.loads(path.read_text(encoding="utf-8"))
        raw_items = data.get("items") if isinstance(data, dict) else data
        categories = set()
        n = 0
        for pos, raw in enumerate(raw_items or []):
            item = MenuItem.from_dict(raw)
            if not item.id or not item.name:
                continue
            db.add(MenuItemRow(
                id=item.id,
                name=item.name,
                price=item.price,
                categories_json=json.dumps(list(item.categories), ensure_ascii=False),
                tags_json=json.dumps(list(item.tags), ensure_ascii=False),
                food_type=item.food_type,
                unit=item.unit,
                unit_quantity=float(item.unit_quantity),
                available=item.available,
                description=item.description,
                image=item.image,
                preparation_time=item.preparation_time,
                position=pos,
            ))
            categories.update(item.categories)
            n += 1

        paused = set((data.get("paused_categories") or []) if isinstance(data, dict) else [])
        for name in sorted(categories | paused):
            db.add(CategoryRow(name=name, is_paused=name in paused))
        db.commit()

    logger.info("seeded %d menu items from %s", n, path)
    return n


# -------------------
# Customers
# -------------------
def _customer_from_row(row: CustomerRow) -> Customer:
    return Customer(
        phone=row.phone,
        name=row.name,
        cart=load_cart(row.cart_json),
        state_json=row.state_json or "",
        address=_safe_json_dict(row.address_json) or None,
        has_ordered=bool(row.has_ordered),
    )


class SqlCustomerStore:
    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get(self, phone: str) -> Optional[Customer]:
        with self.session_factory() as db:
            row = db.query(CustomerRow).filter(CustomerRow.phone == phone).first()
            return _customer_from_row(row) if row else None

    def create(self, phone: str, name: Optional[str] = None) -> Customer:
        with self.session_factory() as db:
            row = CustomerRow(phone=phone, name=name or "Customer", cart_json="[]", state_json="")
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info("new customer %s", phone)
            return _customer_from_row(row)

    def save(self, customer: Customer) -> None:
        with self.session_factory() as db:
            row = db.query(CustomerRow).filter(CustomerRow.phone == customer.phone).first()
            if row is None:
                row = CustomerRow(phone=customer.phone)
            row.name = customer.name
            row.cart_json = dump_cart(customer.cart)
            row.state_json = customer.state_json or ""
            row.address_json = json.dumps(customer.address, ensure_ascii=False) if customer.address else ""
            row.has_ordered = customer.has_ordered
            row.updated_at = datetime.utcnow()
            db.add(row)
            db.commit()


# -------------------
# Orders
# -------------------
def _summary_from_row(row: OrderRow) -> OrderSummary:
    items = [
        OrderLine(
            item_id=str(x.get("item_id") or ""),
            name=str(x.get("name") or ""),
            quantity=int(x.get("quantity") or 1),
            price=float(x.get("price") or 0.0),
            unit=str(x.get("unit") or "piece"),
            unit_quantity=x.get("unit_quantity") or 1,
        )
        for x in _safe_json_list(row.items_json)
        if isinstance(x, dict)
    ]
    tracking = []
    for x in _safe_json_list(row.tracking_json):
        if not isinstance(x, dict):
            continue
        ts = x.get("timestamp")
        try:
            ts = datetime.fromisoformat(ts) if ts else None
        except ValueError:
            ts = None
        tracking.append(TrackingUpdate(status=str(x.get("status") or ""), message=str(x.get("message") or ""), timestamp=ts))

    return OrderSummary(
        order_id=row.order_id,
        status=row.status,
        total=float(row.total or 0.0),
        payment_method=row.payment_method,
        payment_status=row.payment_status,
        refund_status=row.refund_status,
        service_type=row.service_type,
        created_at=row.created_at,
        items=items,
        tracking=tracking,
        payment_url=row.payment_url,
        address=_safe_json_dict(row.address_json).get("address"),
    )


def _track(row: OrderRow, status: str, message: str) -> None:
    updates = _safe_json_list(row.tracking_json)
    updates.append({"status": status, "message": message, "timestamp": datetime.utcnow().isoformat()})
    row.tracking_json = json.dumps(updates, ensure_ascii=False)


class SqlOrderService:
    """
    Minimal order book behind the chat. Payment capture and kitchen updates
    happen elsewhere; they only change `status` / `payment_status` on the row.
    """

    def __init__(self, session_factory: SessionFactory, payment_link_template: str = "", currency: str = "₹"):
        self.session_factory = session_factory
        self.payment_link_template = payment_link_template
        self.currency = currency

    def _payment_url(self, order_id: str, amount: float) -> Optional[str]:
        if not self.payment_link_template:
            return None
        try:
            return self.payment_link_template.format(order_id=order_id, amount=amount)
        except (KeyError, IndexError, ValueError):
            logger.warning("bad PAYMENT_LINK_TEMPLATE: %r", self.payment_link_template)
            return None

    def create_order(
        self,
        customer: Customer,
        lines: Sequence[Tuple[CartLine, MenuItem]],
        service_type: str,
        delivery: Optional[Dict[str, Any]],
        payment_method: str,
    ) -> OrderSummary:
        if not lines:
            raise ValueError("cannot create an order without lines")

        total = cart_total(list(lines))
        items = [
            {
                "item_id": item.id,
                "name": item.name,
                "quantity": line.quantity,
                "price": item.price,
                "unit": item.unit,
                "unit_quantity": item.unit_quantity,
            }
            for line, item in lines
        ]

        row = OrderRow(
            phone=customer.phone,
            customer_name=customer.name,
            service_type=service_type,
            payment_method=payment_method,
            payment_status="pending",
            total=total,
            items_json=json.dumps(items, ensure_ascii=False),
            address_json=json.dumps(delivery or {}, ensure_ascii=False),
            tracking_json="[]",
        )
        if payment_method == "cod":
            row.status = "confirmed"
            _track(row, "confirmed", "Order confirmed - Cash on Delivery")
        else:
            row.status = "pending"
            _track(row, "pending", "Order placed - awaiting payment")

        with self.session_factory() as db:
            # ids are timestamp based; step forward on a same-millisecond clash
            ms = int(time.time() * 1000)
            while db.query(OrderRow.id).filter(OrderRow.order_id == new_order_id(ms)).first():
                ms += 1
            row.order_id = new_order_id(ms)
            if payment_method != "cod":
                row.payment_url = self._payment_url(row.order_id, total)
            db.add(row)
            db.commit()
            db.refresh(row)
            return _summary_from_row(row)

    def _query(self, db: Session, phone: str):
        return db.query(OrderRow).filter(OrderRow.phone == phone).order_by(OrderRow.created_at.desc(), OrderRow.id.desc())

    def recent_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]:
        with self.session_factory() as db:
            return [_summary_from_row(r) for r in self._query(db, phone).limit(limit).all()]

    def active_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]:
        with self.session_factory() as db:
            rows = self._query(db, phone).filter(OrderRow.status.notin_(CLOSED_STATUSES)).limit(limit).all()
            return [_summary_from_row(r) for r in rows]

    def cancellable_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]:
        with self.session_factory() as db:
            rows = self._query(db, phone).filter(OrderRow.status.in_(CANCELLABLE_STATUSES)).limit(limit).all()
            return [_summary_from_row(r) for r in rows]

    def refundable_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]:
        with self.session_factory() as db:
            rows = (
                self._query(db, phone)
                .filter(OrderRow.payment_status == "paid")
                .filter(OrderRow.status.notin_(("delivered", "refunded")))
                .filter((OrderRow.refund_status.is_(None)) | (OrderRow.refund_status != "completed"))
                .limit(limit)
                .all()
            )
            return [_summary_from_row(r) for r in rows]

    def get_order(self, phone: str, order_id: str) -> Optional[OrderSummary]:
        with self.session_factory() as db:
            row = self._query(db, phone).filter(OrderRow.order_id == order_id).first()
            return _summary_from_row(row) if row else None

    def cancel_order(self, phone: str, order_id: str) -> Tuple[str, Optional[OrderSummary]]:
        with self.session_factory() as db:
            row = self._query(db, phone).filter(OrderRow.order_id == order_id).first()
            if row is None:
                return NOT_FOUND, None
            if row.status in CLOSED_STATUSES:
                return NOT_CANCELLABLE, _summary_from_row(row)

            row.status = "cancelled"
            _track(row, "cancelled", "Order cancelled by customer")
            code = CANCELLED
            if row.payment_method == "cod" and row.payment_status == "pending":
                row.payment_status = "cancelled"
            elif row.payment_status == "paid":
                row.refund_status = "pending"
                _track(row, "refund_pending", f"Refund of {self.currency}{row.total:g} pending admin approval")
                code = CANCELLED_REFUND_PENDING

            row.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(row)
            return code, _summary_from_row(row)

    def request_refund(self, phone: str, order_id: str) -> Tuple[str, Optional[OrderSummary]]:
        with self.session_factory() as db:
            row = self._query(db, phone).filter(OrderRow.order_id == order_id).first()
            if row is None:
                return NOT_FOUND, None
            summary = _summary_from_row(row)
            if row.payment_status == "refunded" or row.refund_status == "completed":
                return REFUND_ALREADY_DONE, summary
            if row.payment_status != "paid":
                return REFUND_NOT_PAID, summary
            if row.status == "delivered":
                return REFUND_DELIVERED, summary
            if row.refund_status in ("pending", "scheduled"):
                return REFUND_ALREADY_PENDING, summary

            row.refund_status = "pending"
            row.status = "cancelled"
            _track(row, "refund_pending", f"Refund of {self.currency}{row.total:g} requested by customer")
            row.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(row)
            return REFUND_REQUESTED, _summary_from_row(row)
