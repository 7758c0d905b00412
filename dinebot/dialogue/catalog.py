# dinebot/dialogue/catalog.py
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

FOOD_TYPES = ("veg", "nonveg", "egg", "none")

_SAFE_ID_RE = re.compile(r"[^a-zA-Z0-9_]")


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    price: float
    categories: Tuple[str, ...]
    tags: Tuple[str, ...] = ()
    food_type: str = "none"
    unit: str = "piece"
    unit_quantity: float = 1
    available: bool = True
    description: str = ""
    image: str = ""
    preparation_time: int = 15

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MenuItem":
        cats = d.get("categories") or d.get("category") or []
        if isinstance(cats, str):
            cats = [cats]
        ft = str(d.get("food_type") or d.get("foodType") or "none").lower()
        return cls(
            id=str(d.get("id") or "").strip(),
            name=str(d.get("name") or "").strip(),
            price=float(d.get("price", 0.0) or 0.0),
            categories=tuple(str(c).strip() for c in cats if str(c).strip()),
            tags=tuple(str(t).strip() for t in (d.get("tags") or []) if str(t).strip()),
            food_type=ft if ft in FOOD_TYPES else "none",
            unit=str(d.get("unit") or "piece"),
            unit_quantity=d.get("unit_quantity") or d.get("quantity") or 1,
            available=bool(d.get("available", True)),
            description=str(d.get("description") or ""),
            image=str(d.get("image") or ""),
            preparation_time=int(d.get("preparation_time") or d.get("preparationTime") or 15),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "categories": list(self.categories),
            "tags": list(self.tags),
            "food_type": self.food_type,
            "unit": self.unit,
            "unit_quantity": self.unit_quantity,
            "available": self.available,
            "description": self.description,
            "image": self.image,
            "preparation_time": self.preparation_time,
        }


@dataclass(frozen=True)
class Category:
    name: str
    is_paused: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Read-only working catalog for one turn."""
    items: Tuple[MenuItem, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.items)

    def get(self, item_id: Optional[str]) -> Optional[MenuItem]:
        return find_item(self.items, item_id)


def build_snapshot(items: Iterable[MenuItem], paused: Iterable[str]) -> Snapshot:
    """
    Working catalog for a turn:
    - unavailable items are dropped
    - items whose every category is paused are dropped
    - paused categories are stripped from the remaining items
    """
    paused_set = {p for p in paused if p}
    out: List[MenuItem] = []
    for it in items:
        if not it.available:
            continue
        live = tuple(c for c in it.categories if c not in paused_set)
        if not live:
            continue
        out.append(it if live == it.categories else replace(it, categories=live))
    return Snapshot(tuple(out))


def filter_by_food_type(items: Sequence[MenuItem], preference: Optional[str]) -> List[MenuItem]:
    """veg -> veg only, nonveg -> nonveg + egg, egg -> egg only, both/None -> everything."""
    if preference == "veg":
        return [i for i in items if i.food_type == "veg"]
    if preference == "nonveg":
        return [i for i in items if i.food_type in ("nonveg", "egg")]
    if preference == "egg":
        return [i for i in items if i.food_type == "egg"]
    return list(items)


def category_names(items: Sequence[MenuItem]) -> List[str]:
    """Distinct categories in first-seen catalog order."""
    seen: List[str] = []
    for it in items:
        for c in it.categories:
            if c not in seen:
                seen.append(c)
    return seen


def items_in_category(items: Sequence[MenuItem], category: Optional[str]) -> List[MenuItem]:
    if not category or category == "all":
        return list(items)
    return [i for i in items if category in i.categories]


def find_item(items: Sequence[MenuItem], item_id: Optional[str]) -> Optional[MenuItem]:
    iid = (item_id or "").strip()
    if not iid:
        return None
    for it in items:
        if it.id == iid:
            return it
    return None


def safe_id(name: str) -> str:
    return _SAFE_ID_RE.sub("_", name or "")


def category_from_safe_id(token: str, items: Sequence[MenuItem]) -> str:
    """Original category name for a list-row id; falls back to the token itself."""
    for c in category_names(items):
        if safe_id(c) == token:
            return c
    return token


def find_category(text: str, items: Sequence[MenuItem]) -> Optional[str]:
    """First category whose name contains the text or is contained in it."""
    q = (text or "").strip().lower()
    if len(q) < 2:
        return None
    for c in category_names(items):
        cl = c.lower()
        if q in cl or cl in q:
            return c
    return None


def food_type_icon(food_type: str) -> str:
    return {"veg": "🟢", "nonveg": "🔴", "egg": "🟡"}.get(food_type, "")


def food_type_label(food_type: str) -> str:
    return {"veg": "🟢 Veg", "nonveg": "🔴 Non-Veg", "egg": "🟡 Egg"}.get(food_type, "")


MENU_LABELS = {
    "veg": "🟢 Veg Menu",
    "nonveg": "🔴 Non-Veg Menu",
    "egg": "🟡 Egg Menu",
    "both": "🍽️ All Menu",
}


def unit_info(item: MenuItem) -> str:
    qty = item.unit_quantity
    if isinstance(qty, float) and qty.is_integer():
        qty = int(qty)
    return f"{qty} {item.unit or 'piece'}"


def format_price(amount: float) -> str:
    amount = round(float(amount or 0.0), 2)
    return str(int(amount)) if amount.is_integer() else f"{amount:.2f}"
