# dinebot/dialogue/collaborators.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from .cart import CartLine
from .catalog import MenuItem

# ----------------------------
# Records exchanged with the outside world
# ----------------------------


@dataclass
class Customer:
    phone: str
    name: Optional[str] = None
    cart: List[CartLine] = field(default_factory=list)
    state_json: str = ""
    address: Optional[Dict[str, Any]] = None
    has_ordered: bool = False


@dataclass
class OrderLine:
    item_id: str
    name: str
    quantity: int
    price: float
    unit: str = "piece"
    unit_quantity: float = 1

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass
class TrackingUpdate:
    status: str
    message: str
    timestamp: Optional[datetime] = None


@dataclass
class OrderSummary:
    order_id: str
    status: str
    total: float
    payment_method: str = "cod"
    payment_status: str = "pending"
    refund_status: Optional[str] = None
    service_type: str = "delivery"
    created_at: Optional[datetime] = None
    items: List[OrderLine] = field(default_factory=list)
    tracking: List[TrackingUpdate] = field(default_factory=list)
    payment_url: Optional[str] = None
    address: Optional[str] = None


# Outcome codes reported by the order service
CANCELLED = "cancelled"
CANCELLED_REFUND_PENDING = "cancelled_refund_pending"
NOT_FOUND = "not_found"
NOT_CANCELLABLE = "not_cancellable"
REFUND_REQUESTED = "refund_requested"
REFUND_NOT_PAID = "not_paid"
REFUND_DELIVERED = "delivered"
REFUND_ALREADY_DONE = "already_refunded"
REFUND_ALREADY_PENDING = "already_pending"


# ----------------------------
# Collaborator interfaces
# ----------------------------
class CatalogSource(Protocol):
    def list_available_items(self) -> List[MenuItem]: ...

    def list_paused_categories(self) -> List[str]: ...


class CustomerStore(Protocol):
    def get(self, phone: str) -> Optional[Customer]: ...

    def create(self, phone: str, name: Optional[str] = None) -> Customer: ...

    def save(self, customer: Customer) -> None: ...


class OrderService(Protocol):
    def create_order(
        self,
        customer: Customer,
        lines: Sequence[Tuple[CartLine, MenuItem]],
        service_type: str,
        delivery: Optional[Dict[str, Any]],
        payment_method: str,
    ) -> OrderSummary: ...

    def recent_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]: ...

    def active_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]: ...

    def cancellable_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]: ...

    def refundable_orders(self, phone: str, limit: int = 5) -> List[OrderSummary]: ...

    def get_order(self, phone: str, order_id: str) -> Optional[OrderSummary]: ...

    def cancel_order(self, phone: str, order_id: str) -> Tuple[str, Optional[OrderSummary]]: ...

    def request_refund(self, phone: str, order_id: str) -> Tuple[str, Optional[OrderSummary]]: ...


class Geocoder(Protocol):
    async def reverse_geocode(self, latitude: float, longitude: float) -> str: ...
