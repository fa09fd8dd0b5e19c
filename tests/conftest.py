import os

# keep the app from hitting the network when TestClient runs the lifespan
os.environ.setdefault("QUAKEWATCH_AUTOSTART", "0")

from datetime import datetime, timezone

import pytest

from quakewatch.events import EventBus
from quakewatch.records import EarthquakeRecord


def make_feature(time_ms, mag, coords, place="Somewhere", fid=None):
    f = {
        "type": "Feature",
        "properties": {"time": time_ms, "mag": mag, "place": place},
        "geometry": {"type": "Point", "coordinates": coords},
    }
    if fid is not None:
        f["id"] = fid
    return f


def make_record(mag=4.0, depth=10.0, year=2020, place="Somewhere"):
    return EarthquakeRecord(
        occurred_at=datetime(year, 6, 1, 12, 0, tzinfo=timezone.utc),
        magnitude=mag,
        depth_km=depth,
        latitude=9.1,
        longitude=40.5,
        place=place,
    )


@pytest.fixture
def events():
    return EventBus()
