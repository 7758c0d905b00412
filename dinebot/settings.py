# dinebot/settings.py
from __future__ import annotations

import os

from pydantic import BaseModel

# Load .env locally (safe in prod too)
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    pass


def _flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() not in {"0", "false", "no", "off", ""}


# -------------------
# Config (env-driven)
# -------------------
class Settings(BaseModel):
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./dinebot.db").strip()
    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    # translation + speech (OpenAI-compatible; point OPENAI_BASE_URL at Groq if you like)
    translation_enabled: bool = _flag("TRANSLATION_ENABLED", "1")
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "").strip()
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "").strip()
    translation_model: str = os.getenv("TRANSLATION_MODEL", "llama-3.1-8b-instant").strip()
    transcription_model: str = os.getenv("TRANSCRIPTION_MODEL", "whisper-large-v3").strip()

    # WhatsApp Cloud API
    meta_phone_number_id: str = os.getenv("META_PHONE_NUMBER_ID", "").strip()
    meta_access_token: str = os.getenv("META_ACCESS_TOKEN", "").strip()
    meta_api_version: str = os.getenv("META_API_VERSION", "v21.0").strip()
    webhook_verify_token: str = os.getenv("WEBHOOK_VERIFY_TOKEN", "").strip()

    # reverse geocoding
    geocoder_url: str = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/reverse").strip()
    geocoder_user_agent: str = os.getenv("GEOCODER_USER_AGENT", "RestaurantBot/1.0").strip()

    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")
    menu_file: str = os.getenv("MENU_FILE", "").strip()
    # e.g. "https://pay.example.com/{order_id}?amount={amount}"
    payment_link_template: str = os.getenv("PAYMENT_LINK_TEMPLATE", "").strip()

    business_phone: str = os.getenv("BUSINESS_PHONE", "").strip()
    qr_out_dir: str = os.getenv("QR_OUT_DIR", "qrcodes").strip()

    @property
    def translation_active(self) -> bool:
        return bool(self.translation_enabled and self.openai_api_key)


settings = Settings()
