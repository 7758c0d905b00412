import pytest
from fastapi.testclient import TestClient

from dinebot import main


class FakeGateway:
    def __init__(self):
        self.sent = []

    async def send_all(self, phone, responses):
        self.sent.append((phone, list(responses)))
        return len(responses)

    async def download_media(self, media_id):
        return b"OggS"


@pytest.fixture
def gateway(monkeypatch):
    fake = FakeGateway()
    monkeypatch.setattr(main, "gateway", fake)
    return fake


@pytest.fixture
def client():
    return TestClient(main.app)


def _webhook(phone, message_id, **message):
    return {"entry": [{"changes": [{"value": {
        "contacts": [{"wa_id": phone, "profile": {"name": "Ravi"}}],
        "messages": [{"from": phone, "id": message_id, **message}],
    }}]}]}


def test_root(client):
    assert client.get("/").json() == {"ok": True, "service": "dinebot"}


def test_webhook_verification(client):
    params = {"hub.mode": "subscribe", "hub.verify_token": "verify-me", "hub.challenge": "12345"}
    r = client.get("/webhook", params=params)
    assert r.status_code == 200
    assert r.text == "12345"

    params["hub.verify_token"] = "wrong"
    assert client.get("/webhook", params=params).status_code == 403


def test_menu_lists_seeded_items(client):
    ids = {it["id"] for it in client.get("/menu").json()["items"]}
    assert {"veg-biryani", "idli", "coke"} <= ids


def test_chat_greeting_and_add_to_cart(client):
    phone = "919811100001"
    body = client.post("/chat", json={"phone": phone, "message": "hi"}).json()
    assert body["state"]["step"] == "main_menu"
    assert body["responses"][0]["kind"] == "list"
    assert body["cart"] == []

    client.post("/chat", json={"phone": phone, "message": "Idli", "selected_id": "add_idli"})
    body = client.post("/chat", json={"phone": phone, "message": "2", "selected_id": "qty_2"}).json()
    assert body["cart"] == [{"item_id": "idli", "quantity": 2}]
    assert body["state"]["step"] == "item_added"


def test_chat_location_skips_to_payment_choice(client, monkeypatch):
    async def geocode(lat, lon):
        return "MG Road, Bengaluru"

    monkeypatch.setattr(main.controller.geocoder, "reverse_geocode", geocode)
    phone = "919811100002"
    client.post("/chat", json={"phone": phone, "message": "Coke", "selected_id": "add_coke"})
    client.post("/chat", json={"phone": phone, "message": "1", "selected_id": "qty_1"})
    body = client.post("/chat", json={"phone": phone, "location": {"latitude": 12.9, "longitude": 77.6}}).json()
    assert body["state"]["step"] == "select_payment_method"


def test_chat_requires_phone(client):
    assert client.post("/chat", json={"phone": "  ", "message": "hi"}).status_code == 400


def test_webhook_processes_message_once(client, gateway):
    payload = _webhook("919811100003", "wamid.A1", type="text", text={"body": "hi"})

    r = client.post("/webhook", json=payload)
    assert r.json() == {"ok": True, "queued": 1}
    assert len(gateway.sent) == 1
    phone, responses = gateway.sent[0]
    assert phone == "919811100003"
    assert responses[0].kind == "list"

    assert client.post("/webhook", json=payload).json() == {"ok": True, "queued": 0}
    assert len(gateway.sent) == 1


def test_unheard_voice_note_gets_apology(client, gateway):
    payload = _webhook("919811100004", "wamid.A2", type="audio", audio={"id": "media-9", "mime_type": "audio/ogg"})
    client.post("/webhook", json=payload)
    _, responses = gateway.sent[0]
    assert "voice message" in responses[0].text


def test_status_callbacks_are_acknowledged(client, gateway):
    r = client.post("/webhook", json={"entry": [{"changes": [{"value": {"statuses": [{"id": "s1"}]}}]}]})
    assert r.json() == {"ok": True, "queued": 0}
    assert gateway.sent == []
