# dinebot/dialogue/search.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from .catalog import MenuItem, filter_by_food_type
from .intents import FoodTypeHint, detect_food_type, dietary_flags
from .nlp import clean, expand_synonyms, keywords, normalize_name, strip_food_type_keywords
from .translate import Translation, Translator

logger = logging.getLogger(__name__)

# Ranking weights
EXACT_NAME = 100
EXACT_TAG = 50
KEYWORD = 20
PARTIAL = 10


@dataclass
class SearchResult:
    items: List[MenuItem] = field(default_factory=list)
    matched_food_type: Optional[FoodTypeHint] = None
    label: Optional[str] = None
    exact_match: bool = False
    search_term: str = ""

    @property
    def display_label(self) -> str:
        if self.label and self.search_term:
            return f'{self.label} "{self.search_term}"'
        if self.label:
            return self.label
        if self.search_term:
            return f'"{self.search_term}"'
        return "Search Results"


def _dedupe(values) -> List[str]:
    out: List[str] = []
    for v in values:
        if v and v not in out:
            out.append(v)
    return out


def _hint_label(hint: Optional[FoodTypeHint]) -> Optional[str]:
    if not hint:
        return None
    if hint.type == "specific" and hint.ingredient:
        return f"🍗 {hint.ingredient.capitalize()}"
    return {"veg": "🟢 Veg", "nonveg": "🔴 Non-Veg", "egg": "🟡 Egg"}.get(hint.type)


def _mentions(item: MenuItem, word: str) -> bool:
    w = word.lower()
    return w in item.name.lower() or any(w in t.lower() for t in item.tags)


def _hint_pool(items: Sequence[MenuItem], hint: Optional[FoodTypeHint]) -> List[MenuItem]:
    if not hint:
        return list(items)
    if hint.type == "specific":
        return [i for i in items if _mentions(i, hint.ingredient or "")]
    return filter_by_food_type(items, hint.type)


def _consistent(items: Sequence[MenuItem], texts: Sequence[str]) -> List[MenuItem]:
    """
    A query naming only non-veg words never returns veg items,
    and one naming only veg words never returns non-veg/egg items.
    """
    nonveg, veg = dietary_flags(texts)
    if nonveg and not veg:
        return [i for i in items if i.food_type != "veg"]
    if veg and not nonveg:
        return [i for i in items if i.food_type not in ("nonveg", "egg")]
    return list(items)


def _tag_keys(item: MenuItem) -> Set[str]:
    return {normalize_name(t) for t in item.tags if normalize_name(t)}


def score_item(item: MenuItem, terms: Sequence[str]) -> int:
    name = normalize_name(item.name)
    tags = _tag_keys(item)
    score = 0
    for term in terms:
        key = normalize_name(term)
        if not key:
            continue
        if key == name:
            score += EXACT_NAME
        if key in tags:
            score += EXACT_TAG
        if key in name or (name and name in key) or any(key in t or t in key for t in tags):
            score += PARTIAL
        words = keywords(term)
        if len(words) > 1:
            for w in words:
                wk = normalize_name(w)
                if wk and (wk in name or any(wk in t for t in tags)):
                    score += KEYWORD
    return score


def rank(items: Sequence[MenuItem], terms: Sequence[str]) -> List[MenuItem]:
    """Items with a positive score, best first; ties keep catalog order."""
    scored: List[Tuple[int, MenuItem]] = []
    for it in items:
        s = score_item(it, terms)
        if s > 0:
            scored.append((s, it))
    scored.sort(key=lambda x: -x[0])
    return [it for _, it in scored]


def search_catalog(translation: Translation, items: Sequence[MenuItem]) -> SearchResult:
    """
    Layered resolution:
      exact name -> exact tag -> scored (hint pool) -> scored (full) -> scored (single keywords)
    An empty result keeps the detected food-type hint so the caller can show a filtered menu.
    """
    variations = _dedupe(clean(v) for v in (translation.variations or []))
    primary = clean(translation.primary) or (variations[0] if variations else "")
    if primary and primary not in variations:
        variations.insert(0, primary)

    hint = detect_food_type(primary)
    label = _hint_label(hint)

    terms = _dedupe(t for t in (strip_food_type_keywords(v) for v in variations) if len(t) >= 2)
    search_term = terms[0] if terms else ((hint.ingredient or "") if hint else "")

    if not terms:
        return SearchResult([], hint, label, False, search_term)

    # 1) exact name (raw variations first, then stripped terms)
    for q in _dedupe(variations + terms):
        key = normalize_name(q)
        if not key:
            continue
        hits = [i for i in items if normalize_name(i.name) == key]
        if hits:
            return SearchResult(hits, hint, None, True, q)

    expanded = expand_synonyms(terms)
    tokens = _dedupe(expand_synonyms([k for t in terms for k in keywords(t)]) + expanded)
    pool = _hint_pool(items, hint)

    # 2) exact tag union
    token_keys = {normalize_name(t) for t in tokens if normalize_name(t)}
    tag_hits = [i for i in pool if _tag_keys(i) & token_keys]
    tag_hits = _consistent(tag_hits, variations)
    if tag_hits:
        return SearchResult(tag_hits, hint, label, True, search_term)

    # 3) scored, narrowing scope last
    ranked = _consistent(rank(pool, expanded), variations)
    if ranked:
        return SearchResult(ranked, hint, label, False, search_term)

    if hint:
        ranked = _consistent(rank(items, expanded), variations)
        if ranked:
            return SearchResult(ranked, hint, None, False, search_term)

    singles = expand_synonyms([k for t in terms for k in keywords(t)])
    ranked = _consistent(rank(items, singles), variations)
    if ranked:
        return SearchResult(ranked, hint, None, False, search_term)

    return SearchResult([], hint, label, False, search_term)


async def smart_search(text: str, items: Sequence[MenuItem], translator: Translator) -> SearchResult:
    translation = await translator.translate(text)
    result = search_catalog(translation, items)
    logger.info(
        "search %r -> %d items (exact=%s, hint=%s)",
        text, len(result.items), result.exact_match,
        result.matched_food_type.type if result.matched_food_type else None,
    )
    return result
