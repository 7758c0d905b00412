# dinebot/main.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from .db import Base, SessionLocal, engine
from .dialogue.brain import DialogueController, InboundEvent, Location
from .dialogue.catalog import build_snapshot
from .dialogue.locks import KeyedLocks, RecentIds
from .dialogue.state import load_state
from .dialogue.translate import Translator
from .gateway import InboundMessage, WhatsAppGateway, parse_inbound
from .geocode import NominatimGeocoder
from .settings import settings
from .speech import Transcriber
from .stores import SqlCatalog, SqlCustomerStore, SqlOrderService, seed_catalog

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Restaurant WhatsApp Ordering Bot",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

Base.metadata.create_all(bind=engine)

# Project paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
MENU_PATH = Path(settings.menu_file) if settings.menu_file else PROJECT_ROOT / "data" / "menu.json"

seed_catalog(SessionLocal, MENU_PATH)


# -------------------
# Wiring
# -------------------
catalog = SqlCatalog(SessionLocal)
customers = SqlCustomerStore(SessionLocal)
orders = SqlOrderService(SessionLocal, settings.payment_link_template, settings.currency_symbol)

controller = DialogueController(
    catalog=catalog,
    customers=customers,
    orders=orders,
    translator=Translator(),
    geocoder=NominatimGeocoder(),
    locks=KeyedLocks(),
    currency=settings.currency_symbol,
)
gateway = WhatsAppGateway()
transcriber = Transcriber()
recent_ids = RecentIds()


# -------------------
# Schemas
# -------------------
class LocationIn(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None
    name: Optional[str] = None


class ChatIn(BaseModel):
    phone: str
    message: str = ""
    selected_id: Optional[str] = None
    sender_name: Optional[str] = None
    location: Optional[LocationIn] = None


# -------------------
# Helpers
# -------------------
def _event_from_chat(payload: ChatIn) -> InboundEvent:
    if payload.location is not None:
        return InboundEvent(
            phone=payload.phone,
            message=Location(**payload.location.model_dump()),
            message_type="location",
            sender_name=payload.sender_name,
        )
    return InboundEvent(
        phone=payload.phone,
        message=payload.message,
        selected_id=payload.selected_id or None,
        sender_name=payload.sender_name,
    )


async def _process(msg: InboundMessage) -> None:
    """One webhook message end to end. Errors are logged, never raised back to the platform."""
    try:
        if msg.message_type == "audio":
            audio = await gateway.download_media(msg.media_id) if msg.media_id else None
            text = await transcriber.transcribe(audio, msg.mime_type) if audio else None
            if not text:
                await gateway.send_all(msg.phone, controller.screens.not_heard())
                return
            logger.info("voice note from %s transcribed: %r", msg.phone, text)
            event = msg.to_event(text)
        elif msg.message_type in ("text", "interactive", "button", "location"):
            event = msg.to_event()
        else:
            logger.info("ignoring %s message from %s", msg.message_type, msg.phone)
            return

        responses = await controller.handle(event)
        await gateway.send_all(msg.phone, responses)
    except Exception:
        logger.exception("webhook processing failed for %s", msg.phone)


# -------------------
# Health
# -------------------
@app.get("/")
def root():
    return {"ok": True, "service": "dinebot"}


# -------------------
# WhatsApp webhook
# -------------------
@app.get("/webhook")
def verify_webhook(
    mode: str = Query("", alias="hub.mode"),
    token: str = Query("", alias="hub.verify_token"),
    challenge: str = Query("", alias="hub.challenge"),
):
    if mode == "subscribe" and settings.webhook_verify_token and token == settings.webhook_verify_token:
        return PlainTextResponse(challenge)
    raise HTTPException(status_code=403, detail="Verification failed")


@app.post("/webhook")
async def receive_webhook(request: Request, background: BackgroundTasks):
    # always 200, otherwise the platform redelivers
    try:
        payload = await request.json()
    except Exception:
        logger.warning("webhook body is not JSON")
        return {"ok": True, "queued": 0}

    queued = 0
    for msg in parse_inbound(payload if isinstance(payload, dict) else {}):
        if recent_ids.seen(msg.message_id):
            logger.info("duplicate delivery %s ignored", msg.message_id)
            continue
        background.add_task(_process, msg)
        queued += 1
    return {"ok": True, "queued": queued}


# -------------------
# JSON chat channel (no sending; returns the planned responses)
# -------------------
@app.post("/chat")
async def chat(payload: ChatIn):
    if not payload.phone.strip():
        raise HTTPException(status_code=400, detail="phone is required")

    responses = await controller.handle(_event_from_chat(payload))

    customer = controller.customers.get(payload.phone)
    state = load_state(customer.state_json if customer else None)
    cart: List[Dict[str, Any]] = [line.to_dict() for line in customer.cart] if customer else []

    return {
        "responses": [r.model_dump() for r in responses],
        "state": state.model_dump(mode="json"),
        "cart": cart,
    }


# -------------------
# Menu (current working snapshot)
# -------------------
@app.get("/menu")
def menu():
    snap = build_snapshot(controller.catalog.list_available_items(), controller.catalog.list_paused_categories())
    return {"items": [it.to_dict() for it in snap.items]}
