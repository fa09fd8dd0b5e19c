# quakewatch/records.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

UNKNOWN_PLACE = "Unknown"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class EarthquakeRecord:
    occurred_at: datetime           # always UTC
    magnitude: Optional[float]      # None when upstream has no magnitude
    depth_km: float
    latitude: float
    longitude: float
    place: str = UNKNOWN_PLACE
    event_id: Optional[str] = None

    @property
    def year(self) -> int:
        return self.occurred_at.year

    def local_time(self, tz: tzinfo) -> datetime:
        return self.occurred_at.astimezone(tz)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.event_id,
            "time": self.occurred_at.isoformat(),
            "magnitude": self.magnitude,
            "depth_km": self.depth_km,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "place": self.place,
        }


RecordSet = Tuple[EarthquakeRecord, ...]


def normalize_feature(feature: Mapping[str, Any]) -> Optional[EarthquakeRecord]:
    """
    Map one GeoJSON feature to an EarthquakeRecord.

    Coordinates arrive as [lon, lat, depth]. Returns None for features
    that have no time or no usable coordinates.
    """
    if not isinstance(feature, Mapping):
        return None
    props = feature.get("properties") or {}
    geom = feature.get("geometry") or {}
    if not isinstance(props, Mapping) or not isinstance(geom, Mapping):
        return None
    coords = geom.get("coordinates") or []
    if not isinstance(coords, (list, tuple)):
        return None

    t = props.get("time")
    if t is None or len(coords) < 3 or None in coords[:3]:
        return None

    try:
        lon, lat, depth = float(coords[0]), float(coords[1]), float(coords[2])
        # pre-1970 events have negative epoch millis
        occurred_at = EPOCH + timedelta(milliseconds=int(t))
        mag = props.get("mag")
        magnitude = float(mag) if mag is not None else None
    except (TypeError, ValueError, OverflowError):
        return None

    fid = feature.get("id")
    return EarthquakeRecord(
        occurred_at=occurred_at,
        magnitude=magnitude,
        depth_km=depth,
        latitude=lat,
        longitude=lon,
        place=str(props.get("place") or UNKNOWN_PLACE),
        event_id=str(fid) if fid is not None else None,
    )


def normalize(collection: Mapping[str, Any]) -> RecordSet:
    """Normalize a FeatureCollection, keeping the upstream order."""
    records = []
    skipped = 0
    if not isinstance(collection, Mapping):
        return ()
    features = collection.get("features") or []
    if not isinstance(features, (list, tuple)):
        return ()
    for f in features:
        rec = normalize_feature(f)
        if rec is None:
            skipped += 1
            continue
        records.append(rec)
    if skipped:
        logger.debug("skipped %d malformed features or features without time or coordinates", skipped)
    return tuple(records)
