import asyncio
import copy
import json
import os
from pathlib import Path
from typing import Dict, List, Optional

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TRANSLATION_ENABLED"] = "0"
os.environ["OPENAI_API_KEY"] = ""
os.environ["WEBHOOK_VERIFY_TOKEN"] = "verify-me"
os.environ["PAYMENT_LINK_TEMPLATE"] = "https://pay.example.com/{order_id}?amount={amount}"

import pytest
from sqlalchemy.orm import sessionmaker

from dinebot.db import Base, make_engine
from dinebot.dialogue.brain import DialogueController, InboundEvent, Location
from dinebot.dialogue.catalog import MenuItem
from dinebot.dialogue.collaborators import Customer
from dinebot.dialogue.state import load_state
from dinebot.dialogue.translate import Translator
from dinebot.stores import SqlOrderService

MENU_PATH = Path(__file__).resolve().parents[1] / "data" / "menu.json"


def load_menu_items() -> List[MenuItem]:
    data = json.loads(MENU_PATH.read_text(encoding="utf-8"))
    return [MenuItem.from_dict(d) for d in data["items"]]


class FakeCatalog:
    def __init__(self, items: List[MenuItem], paused: Optional[List[str]] = None):
        self.items = list(items)
        self.paused = list(paused or [])

    def list_available_items(self) -> List[MenuItem]:
        return [i for i in self.items if i.available]

    def list_paused_categories(self) -> List[str]:
        return list(self.paused)


class MemoryCustomers:
    """Copies on the way in and out, like a real store."""

    def __init__(self):
        self.rows: Dict[str, Customer] = {}
        self.saves = 0

    def get(self, phone: str) -> Optional[Customer]:
        c = self.rows.get(phone)
        return copy.deepcopy(c) if c else None

    def create(self, phone: str, name: Optional[str] = None) -> Customer:
        self.rows[phone] = Customer(phone=phone, name=name or "Customer")
        return copy.deepcopy(self.rows[phone])

    def save(self, customer: Customer) -> None:
        self.saves += 1
        self.rows[customer.phone] = copy.deepcopy(customer)


class FakeGeocoder:
    def __init__(self, address: str = "12, MG Road, Bengaluru, Karnataka, 560001"):
        self.address = address
        self.calls = []

    async def reverse_geocode(self, latitude: float, longitude: float) -> str:
        self.calls.append((latitude, longitude))
        return self.address


class Bot:
    """Controller plus its collaborators, driven synchronously."""

    def __init__(self, controller: DialogueController, customers: MemoryCustomers, catalog: FakeCatalog,
                 orders: SqlOrderService, geocoder: FakeGeocoder):
        self.controller = controller
        self.customers = customers
        self.catalog = catalog
        self.orders = orders
        self.geocoder = geocoder

    def send(self, phone: str, text: str = "", selected: Optional[str] = None, name: Optional[str] = None):
        event = InboundEvent(phone=phone, message=text, selected_id=selected, sender_name=name)
        return asyncio.run(self.controller.handle(event))

    def tap(self, phone: str, selected: str, title: Optional[str] = None):
        """Button or list tap; the gateway also carries the visible title as text."""
        return self.send(phone, selected if title is None else title, selected=selected)

    def share_location(self, phone: str, lat: float, lon: float):
        event = InboundEvent(phone=phone, message=Location(latitude=lat, longitude=lon), message_type="location")
        return asyncio.run(self.controller.handle(event))

    def state(self, phone: str):
        c = self.customers.get(phone)
        return load_state(c.state_json if c else None)

    def cart(self, phone: str):
        c = self.customers.get(phone)
        return [(line.item_id, line.quantity) for line in (c.cart if c else [])]

    def set_state(self, phone: str, state) -> None:
        c = self.customers.get(phone) or self.customers.create(phone)
        c.state_json = state.model_dump_json()
        self.customers.save(c)

    def set_cart(self, phone: str, lines) -> None:
        from dinebot.dialogue.cart import CartLine

        c = self.customers.get(phone) or self.customers.create(phone)
        c.cart = [CartLine(i, q) for i, q in lines]
        self.customers.save(c)


@pytest.fixture
def menu_items() -> List[MenuItem]:
    return load_menu_items()


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def bot(menu_items, session_factory) -> Bot:
    catalog = FakeCatalog(menu_items)
    customers = MemoryCustomers()
    orders = SqlOrderService(session_factory, "https://pay.example.com/{order_id}?amount={amount}")
    geocoder = FakeGeocoder()
    controller = DialogueController(
        catalog=catalog,
        customers=customers,
        orders=orders,
        translator=Translator(enabled=False),
        geocoder=geocoder,
    )
    return Bot(controller, customers, catalog, orders, geocoder)
