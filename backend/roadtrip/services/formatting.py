from __future__ import annotations

from typing import Optional, Sequence

from ..schemas.trip import (
    CostView,
    GeoPoint,
    LegResult,
    SegmentView,
    TripSummary,
    TripSummaryView,
)


def format_distance(meters: float) -> str:
    km = meters / 1000.0
    return f"{round(km):,} km"


def format_duration(seconds: float) -> str:
    total_minutes = int(round(seconds / 60.0))
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes} min"
    return f"{hours}h {minutes}m"


def format_cost(amount: float) -> str:
    return f"${amount:.2f}"


def profile_label(car_type: Optional[str]) -> str:
    raw = (car_type or "").strip()
    if not raw:
        return ""
    return raw[0].upper() + raw[1:]


def subtitle(stops: Sequence[GeoPoint]) -> str:
    if len(stops) >= 2:
        return f"{stops[0].name} → {stops[-1].name}"
    if len(stops) == 1:
        return stops[0].name
    return "Add stops to plan your trip"


def _segment_view(lr: LegResult) -> SegmentView:
    return SegmentView(
        from_name=lr.leg.from_point.name,
        to_name=lr.leg.to_point.name,
        label=lr.leg.describe(),
        distance_m=lr.route.distance_m,
        duration_s=lr.route.duration_s,
        distance_text=format_distance(lr.route.distance_m),
        duration_text=format_duration(lr.route.duration_s),
        is_return=lr.leg.is_return,
    )


def summary_view(summary: TripSummary) -> TripSummaryView:
    cost = None
    if summary.estimated_cost is not None:
        label = summary.cost_profile or "Trip"
        cost = CostView(
            label=f"{label} — Est. cost",
            value_text=format_cost(summary.estimated_cost),
            amount=round(summary.estimated_cost, 2),
            rate_per_km=summary.rate_per_km or 0.0,
        )

    return TripSummaryView(
        segments=[_segment_view(lr) for lr in summary.forward_legs()],
        return_segments=[_segment_view(lr) for lr in summary.return_legs()],
        total_distance_m=summary.total_distance_m,
        total_duration_s=summary.total_duration_s,
        total_distance_text=format_distance(summary.total_distance_m),
        total_duration_text=format_duration(summary.total_duration_s),
        cost=cost,
    )
