# backend/roadtrip/config.py
"""Configuration for the roadtrip planner, read from the environment."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
OSRM_BASE_URL = "https://router.project-osrm.org"

VALID_MODES = ("free", "anchored")
VALID_THEMES = ("light", "dark")


def get_nominatim_url() -> str:
    return (os.getenv("NOMINATIM_URL") or "").strip() or NOMINATIM_SEARCH_URL


def get_osrm_base_url() -> str:
    raw = (os.getenv("OSRM_BASE_URL") or "").strip() or OSRM_BASE_URL
    return raw.rstrip("/")


def get_osrm_profile() -> str:
    return (os.getenv("OSRM_PROFILE") or "").strip() or "driving"


def get_user_agent() -> str:
    # Nominatim's usage policy rejects requests without an identifying agent
    return (os.getenv("GEOCODE_USER_AGENT") or "").strip() or "RoadtripPlanner/1.0"


def get_http_timeout() -> float:
    raw = (os.getenv("HTTP_TIMEOUT_S") or "").strip()
    if not raw:
        return 10.0
    try:
        v = float(raw)
        return v if v > 0 else 10.0
    except ValueError:
        return 10.0


def get_mode() -> str:
    """
    "free"     -> every stop can be removed and reordered.
    "anchored" -> first and last stop are fixed, only the middle moves.
    """
    raw = (os.getenv("ROADTRIP_MODE") or "").strip().lower()
    return raw if raw in VALID_MODES else "free"


def get_seed_stops() -> bool:
    raw = (os.getenv("ROADTRIP_SEED_STOPS") or "").strip().lower()
    if not raw:
        return True
    return raw not in ("0", "false", "no", "off")


def get_default_theme() -> str:
    raw = (os.getenv("ROADTRIP_THEME") or "").strip().lower()
    return raw if raw in VALID_THEMES else "light"


def get_log_level() -> str:
    raw = (os.getenv("LOG_LEVEL") or "").strip().upper()
    return raw if raw in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL") else "INFO"
