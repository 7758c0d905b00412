# dinebot/dialogue/intents.py
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from .lexicon import (
    GREETINGS,
    HOME_WORDS,
    INTENT_PATTERNS,
    NONVEG_GENERIC,
    NONVEG_INGREDIENTS,
    VEG_GENERIC,
)
from .nlp import clean, pad


def _anchor(phrase: str) -> str:
    """
    Whole-word anchoring on whitespace rather than \\b:
    Indic vowel signs are not \\w, so \\b would split words in the middle.
    """
    body = phrase.replace(" ", r"\s+")
    return rf"(?<!\S)(?:{body})(?!\S)"


@lru_cache(maxsize=None)
def _compiled(intent: str) -> Tuple[Pattern[str], ...]:
    table: Dict[str, List[str]] = INTENT_PATTERNS.get(intent) or {}
    out: List[Pattern[str]] = []
    for phrases in table.values():
        for p in phrases:
            out.append(re.compile(_anchor(p), re.IGNORECASE))
    return tuple(out)


def _words(*phrases: str) -> Pattern[str]:
    return re.compile("|".join(_anchor(p) for p in phrases), re.IGNORECASE)


def matches(intent: str, text: str) -> bool:
    """True when any pattern (any locale) of `intent` matches the padded text."""
    if not text or not str(text).strip():
        return False
    padded = pad(text)
    return any(p.search(padded) for p in _compiled(intent))


# ----------------------------
# Intent classifiers (independent, may overlap; the controller orders them)
# ----------------------------
def is_cancel_intent(text: str) -> bool:
    return matches("cancel", text)


def is_refund_intent(text: str) -> bool:
    return matches("refund", text)


def is_cart_intent(text: str) -> bool:
    return matches("cart", text)


def is_clear_cart_intent(text: str) -> bool:
    return matches("clear_cart", text)


def is_track_intent(text: str) -> bool:
    return matches("track", text)


def is_order_status_intent(text: str) -> bool:
    # cancel/refund/track are more specific and win
    if is_cancel_intent(text) or is_refund_intent(text) or is_track_intent(text):
        return False
    return matches("order_status", text)


def show_menu_intent(text: str) -> Optional[str]:
    """
    Returns "nonveg" | "veg" | "both" or None.
    Non-veg is checked first: "non veg items" also contains "veg items".
    """
    if matches("show_menu_nonveg", text):
        return "nonveg"
    if matches("show_menu_veg", text):
        return "veg"
    if matches("show_menu", text):
        return "both"
    return None


def is_greeting(text: str) -> bool:
    return clean(text) in GREETINGS


def is_home(text: str) -> bool:
    return clean(text) in HOME_WORDS


# ----------------------------
# Food-type detection
# ----------------------------
@dataclass(frozen=True)
class FoodTypeHint:
    type: str  # specific | egg | nonveg | veg
    ingredient: Optional[str] = None

    @property
    def filter_type(self) -> Optional[str]:
        """Catalog food-type filter implied by the hint (specific filters by ingredient instead)."""
        return None if self.type == "specific" else self.type


_INGREDIENT_RES = [(ing, _words(ing)) for ing in NONVEG_INGREDIENTS]
_EGG_RE = _words("egg", "eggs")
_NONVEG_RE = _words(*NONVEG_GENERIC)
_NONVEG_PHRASE_RE = re.compile(r"(?<!\S)non[\s-]?veg", re.IGNORECASE)
_VEG_RE = _words(*VEG_GENERIC)


def detect_food_type(text: str) -> Optional[FoodTypeHint]:
    """
    Specificity order:
      ingredient ("chicken") > egg (not "eggless") > non-veg words > veg words
    Veg words only count when no non-veg phrase is present ("non veg" contains "veg").
    """
    padded = pad(text)
    if not padded.strip():
        return None

    for ingredient, rx in _INGREDIENT_RES:
        if rx.search(padded):
            return FoodTypeHint("specific", ingredient)

    if _EGG_RE.search(padded):
        return FoodTypeHint("egg")

    has_nonveg = bool(_NONVEG_RE.search(padded))
    has_veg = not _NONVEG_PHRASE_RE.search(padded) and bool(_VEG_RE.search(padded))

    if has_veg and not has_nonveg:
        return FoodTypeHint("veg")
    if has_nonveg:
        return FoodTypeHint("nonveg")
    return None


def dietary_flags(texts: Iterable[str]) -> Tuple[bool, bool]:
    """
    (names_nonveg, names_veg) across all texts.
    An ingredient or a non-veg word counts as non-veg; veg words only without a non-veg phrase.
    """
    nonveg = False
    veg = False
    for t in texts:
        padded = pad(t)
        if _NONVEG_RE.search(padded) or any(rx.search(padded) for _, rx in _INGREDIENT_RES):
            nonveg = True
        if not _NONVEG_PHRASE_RE.search(padded) and _VEG_RE.search(padded):
            veg = True
    return nonveg, veg
