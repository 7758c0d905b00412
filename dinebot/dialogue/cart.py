# dinebot/dialogue/cart.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .catalog import MenuItem, Snapshot


@dataclass
class CartLine:
    item_id: str
    quantity: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"item_id": self.item_id, "quantity": self.quantity}


def load_cart(cart_json: Optional[str]) -> List[CartLine]:
    try:
        v = json.loads(cart_json or "[]")
    except Exception:
        return []
    if not isinstance(v, list):
        return []
    out: List[CartLine] = []
    for x in v:
        if not isinstance(x, dict):
            continue
        iid = str(x.get("item_id") or "").strip()
        try:
            qty = int(x.get("quantity", 1) or 1)
        except (TypeError, ValueError):
            qty = 1
        if iid and qty >= 1:
            out.append(CartLine(iid, qty))
    return out


def dump_cart(cart: List[CartLine]) -> str:
    return json.dumps([line.to_dict() for line in cart], ensure_ascii=False)


def add_to_cart(cart: List[CartLine], item_id: str, quantity: int) -> List[CartLine]:
    """One line per item: a repeated add increments the existing line."""
    if quantity < 1:
        raise ValueError("quantity must be >= 1")
    for line in cart:
        if line.item_id == item_id:
            line.quantity += quantity
            return cart
    cart.append(CartLine(item_id, quantity))
    return cart


def remove_line(cart: List[CartLine], index: int) -> bool:
    if 0 <= index < len(cart):
        del cart[index]
        return True
    return False


def resolve_cart(cart: List[CartLine], snapshot: Snapshot) -> List[Tuple[CartLine, MenuItem]]:
    """Lines whose item still resolves in the working catalog (others are dropped)."""
    out: List[Tuple[CartLine, MenuItem]] = []
    for line in cart:
        item = snapshot.get(line.item_id)
        if item is not None:
            out.append((line, item))
    return out


def line_total(line: CartLine, item: MenuItem) -> float:
    return round(item.price * line.quantity, 2)


def cart_total(resolved: List[Tuple[CartLine, MenuItem]]) -> float:
    return round(sum(line_total(line, item) for line, item in resolved), 2)


def cart_count(cart: List[CartLine]) -> int:
    return sum(line.quantity for line in cart)
