# dinebot/dialogue/translate.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from openai import AsyncOpenAI

from ..settings import settings
from .errors import TranslationServiceFailure
from .nlp import clean, has_non_latin, is_ascii, transliterate

logger = logging.getLogger(__name__)

TRANSLATE_SYSTEM = """You translate Indian food names from any Indian language into English for a restaurant menu search.
Return several possible renderings separated by commas:
- the most common English name first
- then the romanized regional name
- then alternative spellings or closely related menu terms
Return ONLY the comma separated list, no explanations.
Examples:
- బిర్యానీ -> biryani, biriyani, briyani
- தயிர் சாதம் -> curd rice, thayir sadam, dahi chawal
- పెసరట్టు -> pesarattu, moong dal dosa, green gram dosa
- मटन बिरयानी -> mutton biryani, gosht biryani, goat biryani
- இட்லி -> idli, idly"""

ROMANIZED_SYSTEM = """You normalize romanized Indian food words for a restaurant menu search.
Convert regional words to the common English menu word, keep well known dish names as they are.
Return ONLY the converted text.
Examples:
- kodi biryani -> chicken biryani
- mamsam curry -> mutton curry
- chepala pulusu -> fish curry
- pappu -> dal
- perugu -> curd
- gongura chicken -> gongura chicken
If it is already standard or you are unsure, return it unchanged."""

_QUOTES_RE = re.compile(r"^[\"'`]+|[\"'`]+$")
_LABEL_RE = re.compile(r"^(?:translation|english|answer|result|variations?|convert(?:ed)?)\s*[:=→-]+\s*", re.I)
_ARTICLE_RE = re.compile(r"^(?:the|a|an)\s+", re.I)
_SPLIT_RE = re.compile(r"[,/\n]")


@dataclass
class Translation:
    primary: str
    variations: List[str] = field(default_factory=list)


def _dedupe(values: List[str]) -> List[str]:
    out: List[str] = []
    for v in values:
        v = (v or "").strip()
        if v and v not in out:
            out.append(v)
    return out


def _strip_reply(reply: str) -> str:
    s = (reply or "").strip()
    s = _QUOTES_RE.sub("", s).strip()
    s = _LABEL_RE.sub("", s).strip()
    return s


def parse_variations(reply: str) -> List[str]:
    """Comma/slash separated reply -> lower-case ASCII-only variations (order kept)."""
    parts = [clean(_QUOTES_RE.sub("", p.strip())) for p in _SPLIT_RE.split(_strip_reply(reply))]
    return _dedupe([p for p in parts if p and is_ascii(p)])


def parse_romanized(reply: str) -> Optional[str]:
    s = _ARTICLE_RE.sub("", _strip_reply(reply)).strip()
    # an explanation instead of a name
    if not s or len(s) > 50 or "\n" in s or not is_ascii(s):
        return None
    return clean(s) or None


class Translator:
    """
    Normalization & translation pipeline: text in any script -> English search variations.
    translate() never raises and always returns at least one variation.
    """

    def __init__(self, client: Any = None, model: Optional[str] = None, enabled: Optional[bool] = None):
        self._client = client
        self.model = model or settings.translation_model
        self.enabled = settings.translation_active if enabled is None else enabled

    def _get_client(self) -> Any:
        if self._client is None:
            kwargs = {"api_key": settings.openai_api_key}
            if settings.openai_base_url:
                kwargs["base_url"] = settings.openai_base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def _complete(self, system: str, user: str, max_tokens: int, temperature: float) -> str:
        if not self.enabled:
            raise TranslationServiceFailure("translation service disabled")
        try:
            resp = await self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
            return (resp.choices[0].message.content or "").strip()
        except Exception as e:
            raise TranslationServiceFailure(str(e)) from e

    async def _ask_variations(self, text: str) -> List[str]:
        reply = await self._complete(TRANSLATE_SYSTEM, f'Translate with variations: "{text}"', 150, 0.2)
        return parse_variations(reply)

    # ----------------------------
    # Public
    # ----------------------------
    async def translate(self, text: str) -> Translation:
        raw = (text or "").strip()
        if not raw:
            return Translation("", [""])

        lowered = raw.lower()
        try:
            if has_non_latin(raw):
                result = await self._translate_non_latin(raw)
            else:
                result = await self._translate_latin(raw)
        except Exception:
            logger.exception("translation pipeline failed for %r", raw)
            return Translation(lowered, [lowered])

        if not result.variations:
            return Translation(lowered, [lowered])
        return result

    async def _translate_non_latin(self, raw: str) -> Translation:
        try:
            variations = await self._ask_variations(raw)
            if variations:
                logger.info("translated %r -> %s", raw, variations)
                return Translation(variations[0], variations)

            variations = await self._word_by_word(raw)
            if variations:
                logger.info("translated %r word by word -> %s", raw, variations)
                return Translation(variations[0], variations)
        except TranslationServiceFailure as e:
            logger.warning("translation service unavailable (%s); using static transliteration", e)

        static = transliterate(raw)
        if static and static != raw.lower():
            return Translation(static, [static])
        return Translation(raw.lower(), [raw.lower()])

    async def _word_by_word(self, raw: str) -> List[str]:
        """Translate each non-Latin token on its own and recombine with the Latin ones."""
        words = raw.split()
        combined: List[str] = []
        collected: List[str] = []

        for w in words:
            if not has_non_latin(w):
                combined.append(w.lower())
                continue
            try:
                options = await self._ask_variations(w)
            except TranslationServiceFailure:
                options = []
            if not options:
                static = transliterate(w)
                options = [static] if static and is_ascii(static) else []
            if options:
                combined.append(options[0])
                collected.extend(options)
            else:
                combined.append(w)

        phrase = clean(" ".join(combined))
        head = [phrase] if phrase and is_ascii(phrase) else []
        return _dedupe(head + collected)

    async def _translate_latin(self, raw: str) -> Translation:
        base = clean(raw) or raw.lower()
        static = transliterate(base)
        variations = [static, base]

        if self.enabled:
            try:
                romanized = parse_romanized(
                    await self._complete(ROMANIZED_SYSTEM, f'Convert: "{raw}"', 50, 0.1)
                )
                if romanized:
                    variations.append(romanized)
            except TranslationServiceFailure as e:
                logger.debug("romanized lookup skipped: %s", e)

        variations = _dedupe(variations)
        return Translation(variations[0] if variations else base, variations)
