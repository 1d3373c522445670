from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from ..schemas.trip import CostInput, GeoPoint, Leg, LegResult, RouteResult, TripSummary
from .directions import SegmentRouter

logger = logging.getLogger(__name__)


class InsufficientStopsError(ValueError):
    pass


class PlannerBusyError(RuntimeError):
    pass


LegCallback = Callable[[Leg, RouteResult], None]


def build_legs(stops: Sequence[GeoPoint], include_return: bool = False) -> List[Leg]:
    """
    Consecutive pairs in itinerary order, then (optionally) the same walk
    over the reversed stops, so the return starts at the last stop.
    """
    legs = [
        Leg(from_point=stops[i], to_point=stops[i + 1], is_return=False)
        for i in range(len(stops) - 1)
    ]

    if include_return:
        back = list(reversed(stops))
        legs.extend(
            Leg(from_point=back[i], to_point=back[i + 1], is_return=True)
            for i in range(len(back) - 1)
        )

    return legs


def estimate_cost(total_distance_m: float, cost_input: Optional[CostInput]) -> Optional[float]:
    if cost_input is None or not cost_input.rate_per_km or cost_input.rate_per_km <= 0:
        return None
    return (total_distance_m / 1000.0) * cost_input.rate_per_km


class RoutePlanner:
    def __init__(self, router: SegmentRouter) -> None:
        self.router = router

    async def calculate(
        self,
        stops: Sequence[GeoPoint],
        include_return: bool = False,
        cost_input: Optional[CostInput] = None,
        on_leg: Optional[LegCallback] = None,
    ) -> TripSummary:
        """
        Route every leg one after the other and total them up.

        Legs run strictly in order (forward, then return). The first
        RoutingError stops the run and propagates; nothing after it is
        requested. Whatever on_leg already drew stays drawn.
        """
        snapshot = tuple(stops)
        if len(snapshot) < 2:
            raise InsufficientStopsError("Add at least 2 stops to calculate a route.")

        legs = build_legs(snapshot, include_return)
        logger.info(
            "Calculating %d legs for %d stops (return=%s)",
            len(legs), len(snapshot), include_return,
        )

        results: List[LegResult] = []
        total_distance = 0.0
        total_duration = 0.0

        for leg in legs:
            route = await self.router.route(leg.from_point, leg.to_point)
            results.append(LegResult(leg=leg, route=route))
            total_distance += route.distance_m
            total_duration += route.duration_s
            if on_leg is not None:
                on_leg(leg, route)

        cost = estimate_cost(total_distance, cost_input)

        summary = TripSummary(
            total_distance_m=total_distance,
            total_duration_s=total_duration,
            legs=results,
            estimated_cost=cost,
            cost_profile=cost_input.profile_label if cost is not None else None,
            rate_per_km=cost_input.rate_per_km if cost is not None else None,
        )
        logger.info(
            "Route ready: %.1f km, %.0f s, cost=%s",
            total_distance / 1000.0, total_duration, cost,
        )
        return summary
