# dinebot/gateway.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .dialogue.brain import InboundEvent, Location
from .dialogue.responses import (
    BUTTON_TITLE_LEN,
    ButtonsMessage,
    CtaUrlMessage,
    ImageButtonsMessage,
    ListMessage,
    LocationRequest,
    Response,
    TextMessage,
)
from .settings import settings

logger = logging.getLogger(__name__)

GRAPH_URL = "https://graph.facebook.com"
TIMEOUT_S = 15.0


def normalize_phone(phone: str) -> str:
    return re.sub(r"\D", "", (phone or "").replace("@c.us", ""))


def _footer(text: Optional[str]) -> Optional[Dict[str, str]]:
    return {"text": text[:60]} if text else None


def _reply_buttons(msg: ButtonsMessage | ImageButtonsMessage) -> Dict[str, Any]:
    return {
        "buttons": [
            {"type": "reply", "reply": {"id": b.id, "title": b.title[:BUTTON_TITLE_LEN]}}
            for b in msg.buttons
        ]
    }


def _interactive(msg: Response) -> Dict[str, Any]:
    if isinstance(msg, ButtonsMessage):
        out = {"type": "button", "body": {"text": msg.text}, "action": _reply_buttons(msg)}
        if msg.footer:
            out["footer"] = _footer(msg.footer)
        return out

    if isinstance(msg, ImageButtonsMessage):
        return {
            "type": "button",
            "header": {"type": "image", "image": {"link": msg.image_url}},
            "body": {"text": msg.text},
            "action": _reply_buttons(msg),
        }

    if isinstance(msg, ListMessage):
        out = {
            "type": "list",
            "header": {"type": "text", "text": msg.title[:60]},
            "body": {"text": msg.description[:1024]},
            "action": {
                "button": msg.button_label[:20],
                "sections": [
                    {
                        "title": s.title[:24],
                        "rows": [{"id": r.id, "title": r.title, "description": r.description} for r in s.rows],
                    }
                    for s in msg.sections
                ],
            },
        }
        if msg.footer:
            out["footer"] = _footer(msg.footer)
        return out

    if isinstance(msg, LocationRequest):
        return {
            "type": "location_request_message",
            "body": {"text": msg.text},
            "action": {"name": "send_location"},
        }

    if isinstance(msg, CtaUrlMessage):
        out = {
            "type": "cta_url",
            "body": {"text": msg.text},
            "action": {"name": "cta_url", "parameters": {"display_text": msg.button_label, "url": msg.url}},
        }
        if msg.footer:
            out["footer"] = _footer(msg.footer)
        return out

    raise TypeError(f"no interactive form for {type(msg).__name__}")


def build_payload(phone: str, msg: Response) -> Dict[str, Any]:
    """Response descriptor -> Graph API /messages body."""
    base = {"messaging_product": "whatsapp", "to": normalize_phone(phone)}
    if isinstance(msg, TextMessage):
        return {**base, "type": "text", "text": {"body": msg.text}}
    return {**base, "type": "interactive", "interactive": _interactive(msg)}


def fallback_text(msg: Response) -> str:
    """Plain numbered rendition used when an interactive send is rejected."""
    if isinstance(msg, TextMessage):
        return msg.text
    if isinstance(msg, (ButtonsMessage, ImageButtonsMessage)):
        lines = [f"{n}. {b.title}" for n, b in enumerate(msg.buttons, start=1)]
        return msg.text + ("\n\n" + "\n".join(lines) if lines else "")
    if isinstance(msg, ListMessage):
        out = f"*{msg.title}*\n\n{msg.description}\n"
        for s in msg.sections:
            out += f"\n*{s.title}*\n"
            for n, r in enumerate(s.rows, start=1):
                out += f"{n}. {r.title}\n"
        return out.rstrip()
    if isinstance(msg, LocationRequest):
        return msg.text + "\n\n📍 Tap the attachment icon and share your location."
    if isinstance(msg, CtaUrlMessage):
        return f"{msg.text}\n\n🔗 {msg.button_label}: {msg.url}"
    return ""


class WhatsAppGateway:
    """Sends planned responses through the WhatsApp Cloud API."""

    def __init__(
        self,
        phone_number_id: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.phone_number_id = phone_number_id or settings.meta_phone_number_id
        self.access_token = access_token or settings.meta_access_token
        self.api_version = api_version or settings.meta_api_version
        self._client = client

    @property
    def messages_url(self) -> str:
        return f"{GRAPH_URL}/{self.api_version}/{self.phone_number_id}/messages"

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}", "Content-Type": "application/json"}

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self._client is not None:
            r = await self._client.post(self.messages_url, json=payload, headers=self.headers, timeout=TIMEOUT_S)
        else:
            async with httpx.AsyncClient(timeout=TIMEOUT_S) as client:
                r = await client.post(self.messages_url, json=payload, headers=self.headers)
        r.raise_for_status()
        return r.json()

    async def send(self, phone: str, msg: Response) -> bool:
        """True when something was delivered (the interactive form or its text fallback)."""
        try:
            await self._post(build_payload(phone, msg))
            return True
        except Exception as e:
            logger.warning("send %s to %s failed: %s", msg.kind, phone, e)

        if isinstance(msg, TextMessage):
            return False
        try:
            await self._post(build_payload(phone, TextMessage(text=fallback_text(msg))))
            return True
        except Exception:
            logger.exception("text fallback to %s failed", phone)
            return False

    async def send_all(self, phone: str, responses: List[Response]) -> int:
        sent = 0
        for msg in responses:
            if await self.send(phone, msg):
                sent += 1
        return sent

    async def download_media(self, media_id: str) -> Optional[bytes]:
        """Graph media id -> raw bytes (two hops: metadata, then the signed URL)."""
        meta_url = f"{GRAPH_URL}/{self.api_version}/{media_id}"
        auth = {"Authorization": f"Bearer {self.access_token}"}
        try:
            async with httpx.AsyncClient(timeout=TIMEOUT_S) as client:
                meta = await client.get(meta_url, headers=auth)
                meta.raise_for_status()
                url = meta.json().get("url")
                if not url:
                    return None
                media = await client.get(url, headers=auth)
                media.raise_for_status()
                return media.content
        except Exception as e:
            logger.warning("media download %s failed: %s", media_id, e)
            return None


# -------------------
# Inbound webhook payloads
# -------------------
@dataclass
class InboundMessage:
    message_id: str
    phone: str
    message_type: str  # text | interactive | location | audio | <other>
    text: str = ""
    selected_id: Optional[str] = None
    location: Optional[Location] = None
    media_id: Optional[str] = None
    mime_type: Optional[str] = None
    sender_name: Optional[str] = None

    def to_event(self, text: Optional[str] = None) -> InboundEvent:
        if self.message_type == "location":
            return InboundEvent(
                phone=self.phone,
                message=self.location or Location(),
                message_type="location",
                sender_name=self.sender_name,
            )
        return InboundEvent(
            phone=self.phone,
            message=self.text if text is None else text,
            message_type="text",
            selected_id=self.selected_id,
            sender_name=self.sender_name,
        )


def _parse_one(raw: Dict[str, Any], names: Dict[str, str]) -> Optional[InboundMessage]:
    phone = str(raw.get("from") or "")
    mtype = str(raw.get("type") or "")
    if not phone:
        return None
    msg = InboundMessage(
        message_id=str(raw.get("id") or ""),
        phone=phone,
        message_type=mtype,
        sender_name=names.get(phone),
    )

    if mtype == "text":
        msg.text = str((raw.get("text") or {}).get("body") or "")
    elif mtype == "interactive":
        inter = raw.get("interactive") or {}
        reply = inter.get("button_reply") or inter.get("list_reply") or {}
        msg.selected_id = reply.get("id")
        msg.text = str(reply.get("title") or "")
    elif mtype == "button":
        # template quick-reply buttons
        btn = raw.get("button") or {}
        msg.selected_id = btn.get("payload")
        msg.text = str(btn.get("text") or "")
    elif mtype == "location":
        loc = raw.get("location") or {}
        msg.location = Location(
            latitude=loc.get("latitude"),
            longitude=loc.get("longitude"),
            address=loc.get("address"),
            name=loc.get("name"),
        )
    elif mtype == "audio":
        audio = raw.get("audio") or {}
        msg.media_id = audio.get("id")
        msg.mime_type = audio.get("mime_type")
    return msg


def parse_inbound(payload: Dict[str, Any]) -> List[InboundMessage]:
    """Webhook body -> customer messages. Status callbacks and junk yield nothing."""
    out: List[InboundMessage] = []
    try:
        for entry in payload.get("entry") or []:
            for change in entry.get("changes") or []:
                value = change.get("value") or {}
                names = {
                    str(c.get("wa_id")): (c.get("profile") or {}).get("name")
                    for c in value.get("contacts") or []
                    if c.get("wa_id")
                }
                for raw in value.get("messages") or []:
                    msg = _parse_one(raw, names)
                    if msg is not None:
                        out.append(msg)
    except (AttributeError, TypeError) as e:
        logger.warning("malformed webhook payload: %s", e)
    return out
