from pathlib import Path

from dinebot.dialogue.cart import CartLine
from dinebot.dialogue.collaborators import (
    CANCELLED,
    CANCELLED_REFUND_PENDING,
    NOT_CANCELLABLE,
    NOT_FOUND,
    REFUND_ALREADY_PENDING,
    REFUND_DELIVERED,
    REFUND_NOT_PAID,
    REFUND_REQUESTED,
    Customer,
)
from dinebot.models import OrderRow
from dinebot.stores import SqlCatalog, SqlCustomerStore, SqlOrderService, new_order_id, seed_catalog


MENU_PATH = Path(__file__).resolve().parents[1] / "data" / "menu.json"
PHONE = "919800000002"


def test_seed_runs_once(session_factory):
    assert seed_catalog(session_factory, MENU_PATH) == 16
    assert seed_catalog(session_factory, MENU_PATH) == 0

    catalog = SqlCatalog(session_factory)
    items = catalog.list_available_items()
    assert items[0].id == "veg-biryani"
    assert items[0].categories == ("Biryani",)
    assert catalog.list_paused_categories() == []

    catalog.set_category_paused("Desserts")
    assert catalog.list_paused_categories() == ["Desserts"]


def test_customer_round_trip(session_factory):
    store = SqlCustomerStore(session_factory)
    assert store.get(PHONE) is None

    c = store.create(PHONE)
    assert c.name == "Customer"
    c.cart = [CartLine("idli", 2)]
    c.state_json = '{"step": "main_menu"}'
    c.address = {"address": "MG Road"}
    store.save(c)

    again = store.get(PHONE)
    assert again.cart == [CartLine("idli", 2)]
    assert again.state_json == '{"step": "main_menu"}'
    assert again.address == {"address": "MG Road"}


def test_order_ids():
    assert new_order_id(0) == "ORD0"
    assert new_order_id(36 ** 2) == "ORD100"


def _order(service, menu_items, method="cod"):
    item = next(i for i in menu_items if i.id == "idli")
    return service.create_order(Customer(phone=PHONE, name="Asha"), [(CartLine("idli", 2), item)],
                                "delivery", {"address": "MG Road"}, method)


def _set(session_factory, order_id, **values):
    with session_factory() as db:
        db.query(OrderRow).filter(OrderRow.order_id == order_id).update(values)
        db.commit()


def test_cod_and_upi_orders(session_factory, menu_items):
    service = SqlOrderService(session_factory, "https://pay.example.com/{order_id}?amount={amount}")
    cod = _order(service, menu_items, "cod")
    upi = _order(service, menu_items, "upi")

    assert cod.order_id != upi.order_id
    assert cod.status == "confirmed"
    assert cod.payment_url is None
    assert cod.total == 120
    assert cod.items[0].subtotal == 120
    assert cod.address == "MG Road"

    assert upi.status == "pending"
    assert upi.payment_url == f"https://pay.example.com/{upi.order_id}?amount=120.0"
    assert [o.order_id for o in service.recent_orders(PHONE)] == [upi.order_id, cod.order_id]


def test_cancel_outcomes(session_factory, menu_items):
    service = SqlOrderService(session_factory)
    order = _order(service, menu_items)

    assert service.cancel_order(PHONE, "ORDNOPE") == (NOT_FOUND, None)
    code, summary = service.cancel_order(PHONE, order.order_id)
    assert code == CANCELLED
    assert summary.status == "cancelled"
    assert summary.payment_status == "cancelled"
    assert service.cancel_order(PHONE, order.order_id)[0] == NOT_CANCELLABLE
    assert service.cancellable_orders(PHONE) == []


def test_cancelling_a_paid_order_queues_a_refund(session_factory, menu_items):
    service = SqlOrderService(session_factory)
    order = _order(service, menu_items, "upi")
    _set(session_factory, order.order_id, payment_status="paid", status="confirmed")

    code, summary = service.cancel_order(PHONE, order.order_id)
    assert code == CANCELLED_REFUND_PENDING
    assert summary.refund_status == "pending"
    assert summary.tracking[-1].status == "refund_pending"


def test_refund_outcomes(session_factory, menu_items):
    service = SqlOrderService(session_factory)
    order = _order(service, menu_items, "upi")

    assert service.request_refund(PHONE, order.order_id)[0] == REFUND_NOT_PAID
    assert service.refundable_orders(PHONE) == []

    _set(session_factory, order.order_id, payment_status="paid")
    assert [o.order_id for o in service.refundable_orders(PHONE)] == [order.order_id]

    code, summary = service.request_refund(PHONE, order.order_id)
    assert code == REFUND_REQUESTED
    assert summary.refund_status == "pending"
    assert service.request_refund(PHONE, order.order_id)[0] == REFUND_ALREADY_PENDING

    delivered = _order(service, menu_items, "upi")
    _set(session_factory, delivered.order_id, payment_status="paid", status="delivered")
    assert service.request_refund(PHONE, delivered.order_id)[0] == REFUND_DELIVERED
    assert service.active_orders(PHONE) == []
