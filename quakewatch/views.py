# quakewatch/views.py
from __future__ import annotations
from datetime import tzinfo
from typing import Any, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from quakewatch import config
from quakewatch.records import EarthquakeRecord

HISTORICAL_COLOR = "orange"
RECENT_COLOR = "red"
RADIUS_PER_MAGNITUDE_M = 80

COLORS = {"historical": HISTORICAL_COLOR, "recent": RECENT_COLOR}

DISPLAY_TZ = ZoneInfo(config.DISPLAY_TZ)


def _fmt_local(record: EarthquakeRecord, tz: tzinfo) -> str:
    return record.local_time(tz).strftime("%Y-%m-%d %H:%M:%S")


def marker_radius(magnitude: Optional[float]) -> float:
    if magnitude is None or magnitude <= 0:
        return 0.0
    return magnitude * RADIUS_PER_MAGNITUDE_M


def marker(record: EarthquakeRecord, origin: str = "historical",
           tz: tzinfo = DISPLAY_TZ, index: Optional[int] = None) -> Dict[str, Any]:
    """Circle marker for the map: position, radius from magnitude, colour from origin."""
    color = COLORS.get(origin)
    if color is None:
        raise ValueError(f"unknown marker origin: {origin!r}")
    return {
        "index": index,
        "lat": record.latitude,
        "lon": record.longitude,
        "radius": marker_radius(record.magnitude),
        "color": color,
        "origin": origin,
        "popup": {
            "place": record.place,
            "magnitude": record.magnitude,
            "time": _fmt_local(record, tz),
            "depth_km": record.depth_km,
        },
    }


def markers(records: Iterable[EarthquakeRecord], origin: str = "historical",
            tz: tzinfo = DISPLAY_TZ) -> List[Dict[str, Any]]:
    return [marker(r, origin, tz, index=i) for i, r in enumerate(records)]


def table_rows(records: Iterable[EarthquakeRecord], tz: tzinfo = DISPLAY_TZ) -> List[Dict[str, Any]]:
    return [
        {
            "place": r.place,
            "magnitude": r.magnitude,
            "time": _fmt_local(r, tz),
            "depth_km": r.depth_km,
        }
        for r in records
    ]


def magnitude_series(records: Iterable[EarthquakeRecord]) -> List[Dict[str, Any]]:
    """(time, magnitude) points in record order; records without a magnitude are left out."""
    return [
        {"t": r.occurred_at.isoformat(), "mag": r.magnitude}
        for r in records
        if r.magnitude is not None
    ]


def detail(record: EarthquakeRecord, tz: tzinfo = DISPLAY_TZ) -> Dict[str, Any]:
    return {
        **record.to_dict(),
        "local_time": _fmt_local(record, tz),
        "timezone": str(tz),
    }
