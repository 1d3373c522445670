from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import get_http_timeout, get_osrm_base_url, get_osrm_profile
from ..schemas.trip import GeoPoint, LatLng, RouteResult

logger = logging.getLogger(__name__)


class RoutingError(RuntimeError):
    """A single A→B request was rejected or failed."""

    def __init__(self, from_point: GeoPoint, to_point: GeoPoint, reason: str = "") -> None:
        self.from_point = from_point
        self.to_point = to_point
        self.reason = reason
        super().__init__(f"Routing failed: {self.pair}")

    @property
    def pair(self) -> str:
        return f"{self.from_point.name} → {self.to_point.name}"


def _transpose(coordinates: List[List[float]]) -> List[LatLng]:
    # OSRM GeoJSON geometry is [lon, lat]
    return [(float(c[1]), float(c[0])) for c in coordinates]


class SegmentRouter:
    """
    Driving route between two points from an OSRM /route endpoint.

    One request per call. Nothing is cached: asking for the same pair
    twice hits the service twice.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or get_osrm_base_url()).rstrip("/")
        self.profile = profile or get_osrm_profile()
        self.timeout_s = timeout_s or get_http_timeout()
        self._transport = transport

    def build_url(self, a: GeoPoint, b: GeoPoint) -> str:
        # OSRM expects lon,lat order
        coords = f"{a.lng},{a.lat};{b.lng},{b.lat}"
        return f"{self.base_url}/route/v1/{self.profile}/{coords}"

    async def route(self, a: GeoPoint, b: GeoPoint) -> RouteResult:
        url = self.build_url(a, b)
        params = {
            "overview": "full",
            "geometries": "geojson",
            "steps": "false",
        }

        logger.debug("Routing %s → %s", a.name, b.name)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                r = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning("Routing request failed for %s → %s: %r", a.name, b.name, e)
            raise RoutingError(a, b, reason=repr(e)) from e

        # OSRM reports failures (NoRoute, InvalidQuery, ...) in the body,
        # often alongside a 400, so the code field decides.
        try:
            data: Dict[str, Any] = r.json()
            if not isinstance(data, dict):
                raise ValueError("response body is not a JSON object")
        except ValueError as e:
            logger.warning(
                "Routing for %s → %s returned HTTP %s with an unreadable body: %r",
                a.name, b.name, r.status_code, e,
            )
            raise RoutingError(a, b, reason=f"HTTP {r.status_code}") from e

        code = data.get("code")
        routes = data.get("routes") or []
        if code != "Ok" or not routes:
            logger.warning(
                "Routing rejected for %s → %s (HTTP %s, code=%s, message=%s)",
                a.name, b.name, r.status_code, code, data.get("message"),
            )
            raise RoutingError(a, b, reason=f"code={code}")

        route0 = routes[0]
        try:
            geometry = (route0.get("geometry") or {}).get("coordinates") or []
            return RouteResult(
                distance_m=float(route0["distance"]),
                duration_s=float(route0["duration"]),
                path=_transpose(geometry),
            )
        except (KeyError, TypeError, ValueError, IndexError) as e:
            raise RoutingError(a, b, reason="route missing distance/duration/geometry") from e
