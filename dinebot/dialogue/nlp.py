# dinebot/dialogue/nlp.py
from __future__ import annotations

import re
from typing import Iterable, List

from .lexicon import FOOD_TYPE_STRIP, STOPWORDS, SYNONYM_GROUPS, TRANSLITERATIONS

# ----------------------------
# Regex helpers
# ----------------------------
# Sentence punctuation to spaces. Hyphens and apostrophes stay ("non-veg", "don't").
_PUNCT_RE = re.compile(r"[!?.,;:()\[\]{}\"“”«»…*#/\\|<>~]+")

# Anything that is not a letter or digit (used for exact-name comparison)
_NAME_STRIP_RE = re.compile(r"[\W_]+", re.UNICODE)

_WS_RE = re.compile(r"\s+")

_STRIP_RE = re.compile(
    r"(?<!\S)(?:" + "|".join(FOOD_TYPE_STRIP) + r")(?!\S)",
    re.IGNORECASE,
)


def clean(text: str) -> str:
    """
    Basic cleanup used by every classifier:
    - lower
    - curly apostrophe -> '
    - sentence punctuation to spaces
    - collapse whitespace
    """
    s = (text or "").strip().lower()
    s = s.replace("’", "'").replace("‘", "'")
    s = _PUNCT_RE.sub(" ", s)
    return _WS_RE.sub(" ", s).strip()


def pad(text: str) -> str:
    return f" {clean(text)} "


def normalize_name(text: str) -> str:
    """Exact-match key: lower-cased with all whitespace and punctuation removed."""
    return _NAME_STRIP_RE.sub("", (text or "").lower())


def has_non_latin(text: str) -> bool:
    return any(ord(ch) > 127 for ch in (text or ""))


def is_ascii(text: str) -> bool:
    return not has_non_latin(text)


# ----------------------------
# Transliteration
# ----------------------------
def _transliteration_patterns():
    # longest keys first so "कोल्ड ड्रिंक" wins over any shorter overlap
    out = []
    for key in sorted(TRANSLITERATIONS, key=len, reverse=True):
        value = TRANSLITERATIONS[key]
        if is_ascii(key):
            pattern = re.compile(rf"(?<![a-z]){re.escape(key)}(?![a-z])")
        else:
            pattern = re.compile(re.escape(key))
        out.append((pattern, value))
    return out


_TRANSLIT = _transliteration_patterns()


def transliterate(text: str) -> str:
    """Regional words (native script or romanized) -> English search words."""
    s = (text or "").lower()
    for pattern, value in _TRANSLIT:
        s = pattern.sub(value, s)
    return _WS_RE.sub(" ", s).strip()


# ----------------------------
# Search term helpers
# ----------------------------
def strip_food_type_keywords(text: str) -> str:
    """
    Removes generic food-type words (veg, non veg, meat, egg ...).
    Ingredient words like "chicken" are kept: they are search terms too.
    """
    s = _STRIP_RE.sub(" ", clean(text))
    return _WS_RE.sub(" ", s).strip()


def keywords(text: str) -> List[str]:
    out: List[str] = []
    for w in clean(text).split(" "):
        w = w.strip("'-")
        if len(w) < 2 or w in STOPWORDS or w in out:
            continue
        out.append(w)
    return out


def _groups_for(term: str):
    return [g for g in SYNONYM_GROUPS if term in g]


def expand_synonyms(terms: Iterable[str]) -> List[str]:
    """
    Adds synonym expansions next to each term (never replaces it).
      "pulusu"        -> pulusu, curry, gravy, ...
      "chicken koora" -> chicken koora, chicken curry, chicken gravy, ...
    """
    out: List[str] = []

    def add(t: str) -> None:
        t = t.strip()
        if t and t not in out:
            out.append(t)

    for term in terms:
        term = clean(term)
        add(term)

        for group in _groups_for(term):
            for alt in sorted(group):
                add(alt)

        words = term.split(" ")
        if len(words) < 2:
            continue
        for i, w in enumerate(words):
            for group in _groups_for(w):
                for alt in sorted(group):
                    if alt != w:
                        add(" ".join(words[:i] + [alt] + words[i + 1:]))

    return out
