# dinebot/speech.py
from __future__ import annotations

import logging
from typing import Any, Optional

from openai import AsyncOpenAI

from .settings import settings

logger = logging.getLogger(__name__)


class Transcriber:
    """Voice note bytes -> transcript (Whisper, language auto-detected)."""

    def __init__(self, client: Any = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.transcription_model

    def _get_client(self) -> Any:
        if self._client is None:
            kwargs = {"api_key": settings.openai_api_key}
            if settings.openai_base_url:
                kwargs["base_url"] = settings.openai_base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def transcribe(self, audio: bytes, mime_type: Optional[str] = None) -> Optional[str]:
        if not audio:
            return None
        if self._client is None and not settings.openai_api_key:
            logger.warning("voice note received but OPENAI_API_KEY is not set")
            return None
        try:
            text = await self._get_client().audio.transcriptions.create(
                file=("audio.ogg", audio, mime_type or "audio/ogg"),
                model=self.model,
                response_format="text",
            )
        except Exception as e:
            logger.warning("transcription failed: %s", e)
            return None
        text = (text if isinstance(text, str) else getattr(text, "text", "") or "").strip()
        return text or None
