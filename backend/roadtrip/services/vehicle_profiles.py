import json
import os
from typing import List, Optional

from ..schemas.trip import VehicleProfile
from .formatting import profile_label

# Simple in-memory cache so we only read the JSON once
_DB_CACHE: List[dict] = []
_DB_LOADED: bool = False


def _get_data_path() -> str:
    """
    Resolve the path to backend/roadtrip/data/vehicle_profiles.json
    relative to this file.
    """
    current_dir = os.path.dirname(os.path.abspath(__file__))
    data_path = os.path.join(current_dir, "..", "data", "vehicle_profiles.json")
    return os.path.normpath(data_path)


def _load_profile_db() -> List[dict]:
    global _DB_CACHE, _DB_LOADED

    if _DB_LOADED:
        return _DB_CACHE

    data_path = _get_data_path()
    if not os.path.exists(data_path):
        raise FileNotFoundError(f"vehicle_profiles.json not found at {data_path}")

    with open(data_path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    profiles = raw.get("profiles", [])
    if not isinstance(profiles, list):
        raise ValueError("vehicle_profiles.json is not in the expected format: 'profiles' must be a list")

    _DB_CACHE = profiles
    _DB_LOADED = True
    return _DB_CACHE


def _to_profile(rec: dict) -> VehicleProfile:
    return VehicleProfile(
        profile_id=rec.get("id", ""),
        label=rec.get("label") or profile_label(rec.get("id")),
        suggested_rate_per_km=rec.get("suggested_rate_per_km"),
        notes=rec.get("notes"),
    )


def list_profiles() -> List[VehicleProfile]:
    return [_to_profile(rec) for rec in _load_profile_db()]


def find_profile(car_type: Optional[str]) -> Optional[VehicleProfile]:
    key = (car_type or "").strip().lower()
    if not key:
        return None
    for rec in _load_profile_db():
        if (rec.get("id") or "").lower() == key:
            return _to_profile(rec)
    return None


def label_for(car_type: Optional[str]) -> str:
    """
    Display label for a car type. Unknown types still get a label so
    whatever the user typed shows up in the cost line.
    """
    profile = find_profile(car_type)
    if profile is not None:
        return profile.label
    return profile_label(car_type)
