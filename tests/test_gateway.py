import asyncio
import json

import httpx

from dinebot.dialogue.responses import (
    Button,
    ButtonsMessage,
    CtaUrlMessage,
    ListMessage,
    LocationRequest,
    Row,
    Section,
    TextMessage,
)
from dinebot.gateway import WhatsAppGateway, build_payload, fallback_text, normalize_phone, parse_inbound


def sample_list():
    return ListMessage(
        title="🍽️ Veg Menu",
        description="Select a category",
        button_label="View Categories",
        sections=[Section(title="Menu Categories", rows=[
            Row(id="cat_all", title="📋 All Items", description="16 items"),
            Row(id="cat_Biryani", title="Biryani", description="4 items available"),
        ])],
    )


def test_normalize_phone():
    assert normalize_phone("+91 98000-00001@c.us") == "919800000001"


def test_buttons_payload():
    msg = ButtonsMessage(text="Pick", buttons=[Button(id="home", title="Main Menu")], footer="f")
    payload = build_payload("+919800000001", msg)
    assert payload["to"] == "919800000001"
    assert payload["type"] == "interactive"
    inter = payload["interactive"]
    assert inter["type"] == "button"
    assert inter["action"]["buttons"][0] == {"type": "reply", "reply": {"id": "home", "title": "Main Menu"}}
    assert inter["footer"] == {"text": "f"}


def test_list_location_and_cta_payloads():
    inter = build_payload("1", sample_list())["interactive"]
    assert inter["type"] == "list"
    assert inter["action"]["sections"][0]["rows"][1]["id"] == "cat_Biryani"
    assert "footer" not in inter

    assert build_payload("1", LocationRequest(text="where?"))["interactive"]["action"] == {"name": "send_location"}

    cta = build_payload("1", CtaUrlMessage(text="pay", button_label="Pay Now", url="https://x/1"))["interactive"]
    assert cta["action"]["parameters"] == {"display_text": "Pay Now", "url": "https://x/1"}

    text = build_payload("1", TextMessage(text="hello"))
    assert text["type"] == "text"
    assert text["text"] == {"body": "hello"}


def test_fallback_text_numbers_options():
    msg = ButtonsMessage(text="Pick", buttons=[Button(id="a", title="Veg"), Button(id="b", title="Non-Veg")])
    assert fallback_text(msg) == "Pick\n\n1. Veg\n2. Non-Veg"
    listed = fallback_text(sample_list())
    assert "*Menu Categories*" in listed
    assert "2. Biryani" in listed


def test_send_falls_back_to_text_when_interactive_is_rejected():
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        sent.append(body)
        if body["type"] == "interactive":
            return httpx.Response(400, json={"error": {"message": "bad interactive"}})
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            gw = WhatsAppGateway("123", "token", "v21.0", client=client)
            return await gw.send("919800000001", sample_list())

    assert asyncio.run(run()) is True
    assert [b["type"] for b in sent] == ["interactive", "text"]
    assert "Biryani" in sent[1]["text"]["body"]


def test_send_reports_total_failure():
    def handler(request):
        return httpx.Response(500)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await WhatsAppGateway("123", "token", client=client).send("1", TextMessage(text="hi"))

    assert asyncio.run(run()) is False


def _webhook(*messages, name="Asha"):
    return {"entry": [{"changes": [{"value": {
        "contacts": [{"wa_id": "919800000001", "profile": {"name": name}}],
        "messages": list(messages),
    }}]}]}


def test_parse_text_and_interactive():
    payload = _webhook(
        {"from": "919800000001", "id": "m1", "type": "text", "text": {"body": "veg biryani"}},
        {"from": "919800000001", "id": "m2", "type": "interactive",
         "interactive": {"type": "list_reply", "list_reply": {"id": "cat_Biryani", "title": "Biryani"}}},
    )
    first, second = parse_inbound(payload)
    assert first.text == "veg biryani"
    assert first.sender_name == "Asha"
    event = second.to_event()
    assert event.selected_id == "cat_Biryani"
    assert event.message == "Biryani"


def test_parse_location_and_audio():
    payload = _webhook(
        {"from": "919800000001", "id": "m3", "type": "location", "location": {"latitude": 12.9, "longitude": 77.5}},
        {"from": "919800000001", "id": "m4", "type": "audio", "audio": {"id": "media-1", "mime_type": "audio/ogg"}},
    )
    loc, audio = parse_inbound(payload)
    event = loc.to_event()
    assert event.message_type == "location"
    assert event.message.latitude == 12.9
    assert audio.media_id == "media-1"
    assert audio.to_event("dal tadka").message == "dal tadka"


def test_status_callbacks_and_junk_yield_nothing():
    assert parse_inbound({"entry": [{"changes": [{"value": {"statuses": [{"id": "x"}]}}]}]}) == []
    assert parse_inbound({}) == []
    assert parse_inbound({"entry": "nonsense"}) == []
