import asyncio
from types import SimpleNamespace

import pytest

from dinebot.dialogue.translate import Translator, parse_romanized, parse_variations


class FakeCompletions:
    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        content = self.replies.pop(0) if self.replies else ""
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def fake_client(replies=None, error=None):
    completions = FakeCompletions(replies, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def translate(translator, text):
    return asyncio.run(translator.translate(text))


def test_parse_variations_keeps_order_and_drops_non_ascii():
    assert parse_variations('Translation: "biryani, biriyani, బిర్యానీ, briyani"') == ["biryani", "biriyani", "briyani"]


def test_parse_romanized_rejects_explanations():
    assert parse_romanized("chicken biryani") == "chicken biryani"
    assert parse_romanized("The dal") == "dal"
    assert parse_romanized("This word means something like a lentil stew served with rice in the south") is None
    assert parse_romanized("") is None


@pytest.mark.parametrize("text", ["", "   ", "🍕🍕", "chicken బిర్యానీ", "!!!"])
def test_translate_is_total(text):
    result = translate(Translator(enabled=False), text)
    assert result.variations
    assert isinstance(result.primary, str)


def test_latin_offline_uses_static_transliteration():
    result = translate(Translator(enabled=False), "Kodi Biryani")
    assert result.primary == "chicken biryani"
    assert "kodi biryani" in result.variations


def test_non_latin_offline_falls_back_to_transliteration():
    result = translate(Translator(enabled=False), "चिकन बिरयानी")
    assert result.primary == "chicken biryani"
    assert result.variations == ["chicken biryani"]


def test_non_latin_uses_service_variations():
    client, calls = fake_client(["biryani, biriyani, briyani"])
    result = translate(Translator(client=client, enabled=True), "బిర్యానీ")
    assert result.primary == "biryani"
    assert result.variations == ["biryani", "biriyani", "briyani"]
    assert len(calls.calls) == 1


def test_non_latin_word_by_word_when_phrase_reply_is_unusable():
    # phrase reply is non-ascii only; then one call per non-latin word
    client, _ = fake_client(["పెరుగు అన్నం", "curd, perugu", "rice, annam"])
    result = translate(Translator(client=client, enabled=True), "పెరుగు అన్నం")
    assert result.primary == "curd rice"
    assert "curd" in result.variations
    assert "rice" in result.variations


def test_service_failure_never_escapes():
    client, _ = fake_client(error=RuntimeError("boom"))
    result = translate(Translator(client=client, enabled=True), "चिकन बिरयानी")
    assert result.primary == "chicken biryani"


def test_latin_adds_romanized_variant():
    client, _ = fake_client(["fish curry"])
    result = translate(Translator(client=client, enabled=True), "chepala pulusu")
    assert result.primary == "fish pulusu"
    assert "chepala pulusu" in result.variations
    assert "fish curry" in result.variations
