from __future__ import annotations

import logging
from typing import List, Sequence

from ..schemas.trip import GeoPoint, Leg, RouteResult, TripSummary
from .map_surface import TILE_LAYERS, MapSurface
from .stop_list import stop_label

logger = logging.getLogger(__name__)


ENDPOINT_COLOR = "#0d6efd"
INTERMEDIATE_COLOR = "#198754"

FORWARD_STYLE = {"color": "#0d6efd", "weight": 5, "opacity": 0.7}
RETURN_STYLE = {"color": "#dc3545", "weight": 4, "opacity": 0.5}

FIT_PADDING = (50, 50)
SINGLE_STOP_ZOOM = 8


def marker_color(index: int, count: int) -> str:
    return ENDPOINT_COLOR if index == 0 or index == count - 1 else INTERMEDIATE_COLOR


class MapSync:
    """
    Keeps a MapSurface in line with the stops and the latest route.

    Everything drawn comes from the snapshots passed in. The only thing
    kept here is the list of layer handles, so the next sync can take
    them down again.
    """

    def __init__(self, surface: MapSurface) -> None:
        self.surface = surface
        self._markers: List[int] = []
        self._routes: List[int] = []

    # ---- helpers ----

    def clear(self) -> None:
        for handle in self._routes + self._markers:
            self.surface.remove_layer(handle)
        self._routes = []
        self._markers = []

    def _draw_markers(self, stops: Sequence[GeoPoint]) -> None:
        count = len(stops)
        for i, stop in enumerate(stops):
            label = stop_label(i)
            handle = self.surface.add_marker(
                (stop.lat, stop.lng),
                label,
                f"{label} – {stop.name}",
                marker_color(i, count),
            )
            self._markers.append(handle)

    def _fit(self, stops: Sequence[GeoPoint]) -> None:
        if len(stops) > 1:
            self.surface.fit_bounds([(s.lat, s.lng) for s in stops], FIT_PADDING)
        elif len(stops) == 1:
            self.surface.set_view((stops[0].lat, stops[0].lng), SINGLE_STOP_ZOOM)
        # zero stops: leave whatever view is there

    # ---- public ----

    def sync_markers(self, stops: Sequence[GeoPoint]) -> None:
        self.clear()
        self._draw_markers(stops)
        self._fit(stops)

    def begin_route(self, stops: Sequence[GeoPoint]) -> None:
        """Fresh markers, no route lines, viewport untouched."""
        self.clear()
        self._draw_markers(stops)

    def draw_leg(self, leg: Leg, route: RouteResult) -> None:
        style = RETURN_STYLE if leg.is_return else FORWARD_STYLE
        handle = self.surface.add_polyline(
            route.path, style["color"], style["weight"], style["opacity"]
        )
        self._routes.append(handle)

    def sync_route(self, stops: Sequence[GeoPoint], summary: TripSummary) -> None:
        self.clear()
        self._draw_markers(stops)
        for lr in summary.legs:
            self.draw_leg(lr.leg, lr.route)
        self._fit(stops)
        logger.debug("Drew %d route lines", len(summary.legs))

    def apply_theme(self, theme: str) -> None:
        tiles = TILE_LAYERS[theme]
        self.surface.set_tiles(tiles["url"], tiles["attribution"], tiles["max_zoom"])
