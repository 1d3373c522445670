from __future__ import annotations

import logging
from typing import Optional

from ..config import VALID_THEMES, get_default_theme, get_mode, get_seed_stops
from ..schemas.trip import CostInput, GeoPoint, Leg, RouteResult, TripSummary
from .directions import SegmentRouter
from .geocode import GeoResolver
from .map_surface import LayerMap
from .map_sync import MapSync
from .planner import PlannerBusyError, RoutePlanner
from .stop_list import StopList, StopListChanged

logger = logging.getLogger(__name__)


DEFAULT_STOPS = (
    GeoPoint(name="Stockholm, Sweden", lat=59.3293, lng=18.0686),
    GeoPoint(name="Paris, France", lat=48.8566, lng=2.3522),
)


class TripSession:
    """
    Owns everything one user session can change: the stops, the last
    summary, the theme and the busy latch. Components get handed what
    they need from here.
    """

    def __init__(
        self,
        stops: StopList,
        *,
        resolver: GeoResolver,
        planner: RoutePlanner,
        surface: Optional[LayerMap] = None,
        theme: str = "light",
    ) -> None:
        self.stops = stops
        self.resolver = resolver
        self.planner = planner
        self.surface = surface or LayerMap()
        self.map_sync = MapSync(self.surface)

        self.summary: Optional[TripSummary] = None
        self.summary_visible = False
        self.busy = False
        self.revision = 0
        self.theme = theme if theme in VALID_THEMES else "light"

        self.stops.subscribe(self._on_stops_changed)
        self.map_sync.apply_theme(self.theme)
        self.map_sync.sync_markers(self.stops.snapshot())

    # ---- state changed -> resync ----

    def _on_stops_changed(self, event: StopListChanged) -> None:
        self.revision += 1
        self.map_sync.sync_markers(event.stops)
        self.summary_visible = False

    # ---- stop operations ----

    async def add_stop(self, query: str) -> GeoPoint:
        point = await self.resolver.resolve(query)
        self.stops.append(point)
        return point

    def remove_stop(self, index: int) -> GeoPoint:
        return self.stops.remove_at(index)

    def move_stop(self, source_index: Optional[int], target_index: int) -> bool:
        return self.stops.move_to(source_index, target_index)

    # ---- route ----

    async def calculate(
        self,
        include_return: bool = False,
        cost_input: Optional[CostInput] = None,
    ) -> TripSummary:
        """
        One calculation at a time. A failed run leaves the lines drawn so
        far on the map and keeps the previous summary hidden.

        If the stops change while legs are still being routed, the result
        belongs to a list that no longer exists: it is returned but stays
        hidden, and the map keeps showing the current stops.
        """
        if self.busy:
            raise PlannerBusyError("A route calculation is already running.")

        snapshot = self.stops.snapshot()
        started_at = self.revision

        def draw_leg(leg: Leg, route: RouteResult) -> None:
            if self.revision == started_at:
                self.map_sync.draw_leg(leg, route)

        self.busy = True
        self.summary_visible = False
        try:
            if len(snapshot) >= 2:
                self.map_sync.begin_route(snapshot)
            summary = await self.planner.calculate(
                snapshot,
                include_return=include_return,
                cost_input=cost_input,
                on_leg=draw_leg,
            )
        finally:
            self.busy = False

        self.summary = summary
        if self.revision != started_at:
            logger.info("Stops changed during calculation; route not shown")
            return summary

        self.summary_visible = True
        self.map_sync.sync_route(snapshot, summary)
        return summary

    def visible_summary(self) -> Optional[TripSummary]:
        return self.summary if self.summary_visible else None

    # ---- theme ----

    def set_theme(self, theme: str) -> str:
        value = (theme or "").strip().lower()
        if value not in VALID_THEMES:
            raise ValueError(f"Unknown theme '{theme}'. Use 'light' or 'dark'.")
        self.theme = value
        self.map_sync.apply_theme(value)
        return value

    def toggle_theme(self) -> str:
        return self.set_theme("dark" if self.theme == "light" else "light")


def build_session(
    *,
    resolver: Optional[GeoResolver] = None,
    router: Optional[SegmentRouter] = None,
) -> TripSession:
    """Session wired from the environment (see roadtrip.config)."""
    seed = DEFAULT_STOPS if get_seed_stops() else ()

    if get_mode() == "anchored" and len(seed) >= 2:
        stops = StopList(origin=seed[0], destination=seed[-1])
    else:
        stops = StopList(seed)

    session = TripSession(
        stops,
        resolver=resolver or GeoResolver(),
        planner=RoutePlanner(router or SegmentRouter()),
        theme=get_default_theme(),
    )
    logger.info(
        "Trip session ready (mode=%s, stops=%d, theme=%s)",
        "anchored" if stops.anchored else "free", len(stops), session.theme,
    )
    return session
