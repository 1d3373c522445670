from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import get_http_timeout, get_nominatim_url, get_user_agent
from ..schemas.trip import GeoPoint

logger = logging.getLogger(__name__)


class GeocodeError(RuntimeError):
    pass


class NotFoundError(GeocodeError):
    pass


def _short_name(display_name: str) -> str:
    # "Paris, Ile-de-France, Metropolitan France, France" -> "Paris, Ile-de-France"
    return ",".join(display_name.split(",")[:2]).strip()


class GeoResolver:
    """
    Turns free text into a GeoPoint via a Nominatim-style search endpoint.

    Holds no per-query state, so concurrent resolve() calls for different
    queries are fine. The caller decides what to do with the point.
    """

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url or get_nominatim_url()
        self.user_agent = user_agent or get_user_agent()
        self.timeout_s = timeout_s or get_http_timeout()
        self._transport = transport

    async def resolve(self, query: str) -> GeoPoint:
        q = (query or "").strip()
        if not q:
            raise GeocodeError("Place name is empty")

        params = {
            "q": q,
            "format": "json",
            "limit": 1,
        }
        headers = {"User-Agent": self.user_agent}

        logger.debug("Geocoding %r", q)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                r = await client.get(self.url, params=params, headers=headers)
                r.raise_for_status()
                data: List[Dict[str, Any]] = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Geocoding request failed for %r: %r", q, e)
            raise GeocodeError(f"Geocoding service error for '{q}': {e}") from e

        if not isinstance(data, list):
            # e.g. Nominatim's {"error": "Unable to geocode"}
            logger.warning("Geocoding for %r returned %s, not a list", q, type(data).__name__)
            raise GeocodeError(f"Geocoding service returned an unexpected response for '{q}'")

        if not data:
            raise NotFoundError(f"Location not found: {q}")

        try:
            top = data[0]
            point = GeoPoint(
                name=_short_name(str(top.get("display_name") or q)),
                lat=float(top["lat"]),
                lng=float(top["lon"]),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GeocodeError(f"Geocoding service returned an unusable match for '{q}'") from e

        logger.debug("Geocoded %r to %s (%s, %s)", q, point.name, point.lat, point.lng)
        return point
