from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from quakewatch import views
from quakewatch.records import EarthquakeRecord
from tests.conftest import make_record


def test_marker_colour_and_radius():
    rec = make_record(5.0)
    m = views.marker(rec, "historical")
    assert m["color"] == "orange"
    assert m["radius"] == 400.0
    assert (m["lat"], m["lon"]) == (rec.latitude, rec.longitude)
    assert views.marker(rec, "recent")["color"] == "red"


def test_marker_without_magnitude_has_zero_radius():
    assert views.marker(make_record(None))["radius"] == 0.0


def test_unknown_origin_rejected():
    with pytest.raises(ValueError):
        views.marker(make_record(), "future")


def test_popup_uses_local_time():
    rec = EarthquakeRecord(
        occurred_at=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
        magnitude=3.2, depth_km=10.0, latitude=9.0, longitude=40.0,
    )
    m = views.marker(rec, tz=ZoneInfo("Africa/Addis_Ababa"))
    assert m["popup"]["time"] == "2023-11-15 01:13:20"
    # storage stays UTC
    assert rec.occurred_at.hour == 22


def test_markers_are_indexed():
    ms = views.markers([make_record(4.0), make_record(5.0)])
    assert [m["index"] for m in ms] == [0, 1]


def test_magnitude_series_skips_missing():
    s = [make_record(4.0, year=2019), make_record(None, year=2020), make_record(5.0, year=2021)]
    points = views.magnitude_series(s)
    assert [p["mag"] for p in points] == [4.0, 5.0]
    assert points[0]["t"].startswith("2019-06-01")


def test_table_rows():
    rows = views.table_rows([make_record(4.0, depth=12.0, place="Afar")])
    assert rows == [{"place": "Afar", "magnitude": 4.0, "time": "2020-06-01 15:00:00", "depth_km": 12.0}]
