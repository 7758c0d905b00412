# dinebot/models.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text

from .db import Base


class CustomerRow(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True)
    phone = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    cart_json = Column(Text, default="[]")
    state_json = Column(Text, default="")  # conversation state (tagged by step)
    address_json = Column(Text, default="")
    has_ordered = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)


class MenuItemRow(Base):
    __tablename__ = "menu_items"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    categories_json = Column(Text, default="[]")
    tags_json = Column(Text, default="[]")
    food_type = Column(String, default="none")  # veg | nonveg | egg | none
    unit = Column(String, default="piece")
    unit_quantity = Column(Float, default=1)
    available = Column(Boolean, default=True)
    description = Column(Text, default="")
    image = Column(String, default="")
    preparation_time = Column(Integer, default=15)
    position = Column(Integer, default=0)


class CategoryRow(Base):
    __tablename__ = "categories"
    name = Column(String, primary_key=True)
    is_paused = Column(Boolean, default=False)


class OrderRow(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True)
    order_id = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, index=True, nullable=False)
    customer_name = Column(String, nullable=True)
    status = Column(String, default="pending")  # pending | confirmed | preparing | ready | out_for_delivery | delivered | cancelled
    service_type = Column(String, default="delivery")
    payment_method = Column(String, default="cod")  # cod | upi
    payment_status = Column(String, default="pending")  # pending | paid | refunded
    refund_status = Column(String, nullable=True)  # pending | completed
    total = Column(Float, default=0.0)
    items_json = Column(Text, default="[]")
    address_json = Column(Text, default="")
    tracking_json = Column(Text, default="[]")
    payment_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)
