# quakewatch/config.py
from __future__ import annotations
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent
STATIC_DIR = BASE_DIR / "static"
TEMPLATES_DIR = BASE_DIR / "templates"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ---------- upstream ----------
BASE_URL = os.getenv("QUAKEWATCH_BASE_URL", "https://earthquake.usgs.gov/fdsnws/event/1/query")
SIGNIFICANT_URL = os.getenv(
    "QUAKEWATCH_SIGNIFICANT_URL",
    "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/significant_week.geojson",
)
TIMEOUT = float(os.getenv("QUAKEWATCH_TIMEOUT", "30"))

# ---------- historical query ----------
# (min_lat, max_lat, min_lon, max_lon); Ethiopia's borders
DEFAULT_BBOX = (3.4, 14.9, 32.9, 48.0)
HISTORY_START = os.getenv("QUAKEWATCH_HISTORY_START", "1900-01-01")
HISTORY_LIMIT = int(os.getenv("QUAKEWATCH_HISTORY_LIMIT", "10000"))
ORDER_BY = os.getenv("QUAKEWATCH_ORDER_BY", "time")

# ---------- recent window ----------
RECENT_HOURS = float(os.getenv("QUAKEWATCH_RECENT_HOURS", "24"))
REFRESH_SECONDS = float(os.getenv("QUAKEWATCH_REFRESH_SECONDS", "600"))

# ---------- display ----------
DISPLAY_TZ = os.getenv("QUAKEWATCH_DISPLAY_TZ", "Africa/Addis_Ababa")
MAP_CENTER = (8.0, 38.5)
MAP_ZOOM = 7

AUTOSTART = _env_bool("QUAKEWATCH_AUTOSTART", True)
LOG_LEVEL = os.getenv("QUAKEWATCH_LOG_LEVEL", "INFO")
