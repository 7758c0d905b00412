# dinebot/geocode.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .dialogue.errors import GeocodeFailure
from .settings import settings

logger = logging.getLogger(__name__)

PLACEHOLDER = "Location shared"
TIMEOUT_S = 8.0


def format_address(data: Dict[str, Any]) -> str:
    """Nominatim reverse payload -> "12, MG Road, Indiranagar, Bengaluru, Karnataka, 560038"."""
    addr = data.get("address") or {}
    if not addr:
        return PLACEHOLDER
    parts = [
        addr.get("house_number"),
        addr.get("road"),
        addr.get("neighbourhood") or addr.get("suburb"),
        addr.get("city") or addr.get("town") or addr.get("village"),
        addr.get("state"),
        addr.get("postcode"),
    ]
    parts = [str(p) for p in parts if p]
    if parts:
        return ", ".join(parts)
    return data.get("display_name") or PLACEHOLDER


class NominatimGeocoder:
    def __init__(
        self,
        url: Optional[str] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url or settings.geocoder_url
        self.user_agent = user_agent or settings.geocoder_user_agent
        self._client = client

    async def _fetch(self, latitude: float, longitude: float) -> Dict[str, Any]:
        params = {"format": "json", "lat": latitude, "lon": longitude, "addressdetails": 1}
        headers = {"User-Agent": self.user_agent}
        try:
            if self._client is not None:
                r = await self._client.get(self.url, params=params, headers=headers, timeout=TIMEOUT_S)
            else:
                async with httpx.AsyncClient(timeout=TIMEOUT_S) as client:
                    r = await client.get(self.url, params=params, headers=headers)
            r.raise_for_status()
            data = r.json()
        except Exception as e:
            raise GeocodeFailure(str(e)) from e
        if not isinstance(data, dict):
            raise GeocodeFailure("unexpected geocoder payload")
        return data

    async def reverse_geocode(self, latitude: float, longitude: float) -> str:
        """Never raises: any failure becomes the placeholder address."""
        try:
            return format_address(await self._fetch(latitude, longitude))
        except GeocodeFailure as e:
            logger.warning("reverse geocoding failed for %s,%s: %s", latitude, longitude, e)
            return PLACEHOLDER
