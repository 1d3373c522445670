# backend/roadtrip/api/routes/trip.py

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request

from ...schemas.trip import (
    AddStopRequest,
    CalculateRequest,
    CostInput,
    MoveStopRequest,
    StopView,
    ThemeRequest,
    TripStateResponse,
    TripSummaryView,
    VehicleProfilesResponse,
)
from ...services.directions import RoutingError
from ...services.formatting import subtitle, summary_view
from ...services.geocode import GeocodeError, NotFoundError
from ...services.planner import InsufficientStopsError, PlannerBusyError
from ...services.session import TripSession
from ...services.stop_list import StopIndexError
from ...services.vehicle_profiles import label_for, list_profiles

router = APIRouter()


def get_session(request: Request) -> TripSession:
    return request.app.state.session


def _state(session: TripSession) -> TripStateResponse:
    stops = session.stops
    labels = stops.labels()
    snapshot = stops.snapshot()

    views: List[StopView] = [
        StopView(
            index=i,
            label=labels[i],
            name=stop.name,
            lat=stop.lat,
            lng=stop.lng,
            is_endpoint=stops.is_endpoint(i),
            removable=stops.is_removable(i),
        )
        for i, stop in enumerate(snapshot)
    ]

    return TripStateResponse(
        mode="anchored" if stops.anchored else "free",
        theme=session.theme,
        subtitle=subtitle(snapshot),
        stops=views,
        busy=session.busy,
        summary_visible=session.summary_visible,
    )


# ---------------------------------------------------------------------
# Stops
# ---------------------------------------------------------------------

@router.get("", response_model=TripStateResponse)
def trip_state(session: TripSession = Depends(get_session)) -> TripStateResponse:
    return _state(session)


@router.post("/stops", response_model=TripStateResponse)
async def add_stop(
    payload: AddStopRequest,
    session: TripSession = Depends(get_session),
) -> TripStateResponse:
    try:
        await session.add_stop(payload.query)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GeocodeError as e:
        status = 422 if not payload.query.strip() else 502
        raise HTTPException(status_code=status, detail=str(e))

    return _state(session)


@router.delete("/stops/{index}", response_model=TripStateResponse)
def remove_stop(index: int, session: TripSession = Depends(get_session)) -> TripStateResponse:
    try:
        session.remove_stop(index)
    except StopIndexError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _state(session)


@router.post("/stops/move", response_model=TripStateResponse)
def move_stop(
    payload: MoveStopRequest,
    session: TripSession = Depends(get_session),
) -> TripStateResponse:
    try:
        session.move_stop(payload.source_index, payload.target_index)
    except StopIndexError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _state(session)


# ---------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------

@router.post("/calculate", response_model=TripSummaryView)
async def calculate_route(
    payload: CalculateRequest,
    session: TripSession = Depends(get_session),
) -> TripSummaryView:
    cost_input = None
    if payload.price_per_km is not None and payload.price_per_km > 0:
        cost_input = CostInput(
            rate_per_km=payload.price_per_km,
            profile_label=label_for(payload.car_type),
        )

    try:
        summary = await session.calculate(
            include_return=payload.include_return,
            cost_input=cost_input,
        )
    except InsufficientStopsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PlannerBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RoutingError as e:
        raise HTTPException(status_code=502, detail=f"Error: {e}")

    return summary_view(summary)


@router.get("/summary", response_model=TripSummaryView)
def last_summary(session: TripSession = Depends(get_session)) -> TripSummaryView:
    summary = session.visible_summary()
    if summary is None:
        raise HTTPException(status_code=404, detail="No route calculated for the current stops.")
    return summary_view(summary)


# ---------------------------------------------------------------------
# Map, theme, profiles
# ---------------------------------------------------------------------

@router.get("/map")
def map_layers(session: TripSession = Depends(get_session)) -> Dict[str, Any]:
    return session.surface.snapshot()


@router.put("/theme")
def set_theme(payload: ThemeRequest, session: TripSession = Depends(get_session)) -> Dict[str, str]:
    try:
        theme = session.set_theme(payload.theme)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"theme": theme}


@router.post("/theme/toggle")
def toggle_theme(session: TripSession = Depends(get_session)) -> Dict[str, str]:
    return {"theme": session.toggle_theme()}


@router.get("/profiles", response_model=VehicleProfilesResponse)
def vehicle_profiles() -> VehicleProfilesResponse:
    try:
        profiles = list_profiles()
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    return VehicleProfilesResponse(profiles=profiles)
