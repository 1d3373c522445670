# backend/roadtrip/schemas/trip.py

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


LatLng = Tuple[float, float]


class GeoPoint(BaseModel):
    """A named stop. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    name: str
    lat: float
    lng: float


class Leg(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_point: GeoPoint
    to_point: GeoPoint
    is_return: bool = False

    def describe(self) -> str:
        return f"{self.from_point.name} → {self.to_point.name}"


class RouteResult(BaseModel):
    distance_m: float
    duration_s: float
    path: List[LatLng] = []  # (lat, lng), already transposed from the service order


class LegResult(BaseModel):
    leg: Leg
    route: RouteResult


class CostInput(BaseModel):
    rate_per_km: float
    profile_label: str = ""


class TripSummary(BaseModel):
    """
    Result of one full calculation. Never patched: the next calculation
    replaces it.
    """
    total_distance_m: float
    total_duration_s: float
    legs: List[LegResult]
    estimated_cost: Optional[float] = None
    cost_profile: Optional[str] = None
    rate_per_km: Optional[float] = None

    def forward_legs(self) -> List[LegResult]:
        return [lr for lr in self.legs if not lr.leg.is_return]

    def return_legs(self) -> List[LegResult]:
        return [lr for lr in self.legs if lr.leg.is_return]


# ---------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------

class AddStopRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Free text, e.g. 'Berlin'")


class MoveStopRequest(BaseModel):
    source_index: Optional[int] = None
    target_index: int


class CalculateRequest(BaseModel):
    include_return: bool = False
    price_per_km: Optional[float] = None
    car_type: str = "medium"


class ThemeRequest(BaseModel):
    theme: str


class StopView(BaseModel):
    index: int
    label: str
    name: str
    lat: float
    lng: float
    is_endpoint: bool
    removable: bool


class SegmentView(BaseModel):
    from_name: str
    to_name: str
    label: str
    distance_m: float
    duration_s: float
    distance_text: str
    duration_text: str
    is_return: bool


class CostView(BaseModel):
    label: str
    value_text: str
    amount: float
    rate_per_km: float


class TripSummaryView(BaseModel):
    segments: List[SegmentView]
    return_segments: List[SegmentView] = []
    total_distance_m: float
    total_duration_s: float
    total_distance_text: str
    total_duration_text: str
    cost: Optional[CostView] = None


class TripStateResponse(BaseModel):
    mode: str
    theme: str
    subtitle: str
    stops: List[StopView]
    busy: bool
    summary_visible: bool


class VehicleProfile(BaseModel):
    profile_id: str
    label: str
    suggested_rate_per_km: Optional[float] = None
    notes: Optional[str] = None


class VehicleProfilesResponse(BaseModel):
    profiles: List[VehicleProfile]
