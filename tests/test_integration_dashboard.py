import time

import httpx
import pytest
import respx
from fastapi.testclient import TestClient
from httpx import Response

from quakewatch import config
from quakewatch.events import bus
from quakewatch.main import app
from quakewatch.state import DashboardState
from tests.conftest import make_feature

client = TestClient(app)

USGS_SAMPLE = {
    "type": "FeatureCollection",
    "features": [
        make_feature(1559347200000, 4.2, [40.0, 9.0, 5.0], place="Near Dire Dawa"),
        make_feature(1590969600000, 5.0, [39.5, 13.5, 10.0], place="Afar Region"),
        make_feature(1622505600000, 6.1, [38.7, 9.0, 15.0], place=None),
        make_feature(1654041600000, None, [41.0, 11.0, 20.0], place="Somewhere"),
    ],
}


@pytest.fixture(autouse=True)
def dashboard():
    state = DashboardState()
    with respx.mock:
        respx.get(url__startswith=config.BASE_URL).mock(return_value=Response(200, json=USGS_SAMPLE))
        respx.get(config.SIGNIFICANT_URL).mock(return_value=Response(200, json={
            "type": "FeatureCollection",
            "features": [make_feature(1700000000000, 6.8, [40.0, 9.0, 10.0], place="Big One", fid="us1")],
        }))
        assert state.load_historical()
        assert state.load_significant()
    app.state.dashboard = state
    yield state
    state.close()


def test_home_renders_map_and_list():
    r = client.get("/")
    assert r.status_code == 200
    assert "Apply Filters" in r.text
    assert "Showing 4 of 4 earthquakes" in r.text
    assert "Big One" in r.text


def test_table_view():
    r = client.get("/?view=table")
    assert r.status_code == 200
    assert "Afar Region" in r.text
    assert "Unknown" in r.text


def test_apply_filters_then_markers():
    r = client.post("/filters", data={"min_magnitude": "5.0"}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/?view=map"

    data = client.get("/api/quakes").json()
    assert data["total"] == 4
    assert data["count"] == 2
    assert [m["popup"]["magnitude"] for m in data["markers"]] == [5.0, 6.1]
    assert all(m["color"] == "orange" for m in data["markers"])
    assert data["criteria"]["min_magnitude"] == 5.0


def test_junk_filter_input_is_ignored():
    client.post("/filters", data={"max_depth": "ten", "start_year": "2020", "end_year": "2021"})
    data = client.get("/api/quakes").json()
    assert data["criteria"]["max_depth"] is None
    assert data["count"] == 2


def test_reset_filters():
    client.post("/filters", data={"min_magnitude": "6"})
    assert client.get("/api/quakes").json()["count"] == 1
    client.post("/filters/reset")
    assert client.get("/api/quakes").json()["count"] == 4


def test_detail_view():
    r = client.get("/api/quakes/1")
    assert r.status_code == 200
    assert r.json()["place"] == "Afar Region"
    assert client.get("/api/quakes/99").status_code == 404

    page = client.get("/?index=1")
    assert "3D View for Earthquake" in page.text


def test_series_skips_missing_magnitudes():
    points = client.get("/api/series").json()
    assert [p["mag"] for p in points] == [4.2, 5.0, 6.1]


def test_refresh_recent_and_failure(dashboard):
    recent = {"type": "FeatureCollection",
              "features": [make_feature(1700000000000, 2.5, [-121.5, 37.5, 3.0])]}
    with respx.mock:
        respx.get(url__startswith=config.BASE_URL).mock(return_value=Response(200, json=recent))
        r = client.post("/refresh")
    assert r.status_code == 200
    assert r.json()["records"] == 1

    with respx.mock:
        respx.get(url__startswith=config.BASE_URL).mock(side_effect=httpx.ConnectError("down"))
        r = client.post("/refresh")
    assert r.status_code == 502
    assert r.json()["ok"] is False
    assert r.json()["records"] == 1

    data = client.get("/api/recent").json()
    assert data["count"] == 1
    assert data["markers"][0]["color"] == "red"
    assert len(dashboard.historical) == 4

    failed = client.get("/events/tail", params={"type": "FetchFailed"}).json()
    assert failed[-1]["dataset"] == "recent"


def test_significant_api():
    items = client.get("/api/significant").json()
    assert items[0]["id"] == "us1"


def test_about_and_metrics():
    assert client.get("/about").status_code == 200
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "quakewatch_fetches_total" in r.text


def test_events_tail():
    bus.publish("TestEvent", note="hello")
    ev = client.get("/events/tail", params={"n": 1}).json()[0]
    assert ev["type"] == "TestEvent"
    assert ev["note"] == "hello"
    assert client.get("/events/counts").json()["TestEvent"] >= 1


def _wait_for(cond, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if cond():
            return True
        time.sleep(0.01)
    return False


def test_lifespan_starts_and_stops_refresh(monkeypatch):
    monkeypatch.setattr(config, "AUTOSTART", True)
    state = DashboardState()
    app.state.dashboard = state
    recent = {"type": "FeatureCollection",
              "features": [make_feature(1700000000000, 2.5, [-121.5, 37.5, 3.0])]}

    with respx.mock(assert_all_called=False) as router:
        router.get(url__startswith=config.BASE_URL).mock(return_value=Response(200, json=recent))
        router.get(config.SIGNIFICANT_URL).mock(return_value=Response(200, json=recent))

        with TestClient(app):
            refresher = app.state.refresher
            assert _wait_for(lambda: all(state.last_loaded.values()))
            assert refresher.running

        assert not refresher.running
        assert state.closed
        assert app.state.dashboard is state

        # a fetch finishing after shutdown is dropped
        before = state.recent
        assert state.refresh_recent() is False
        assert state.recent is before


def test_map_script_does_not_build_popups_from_html():
    r = client.get("/static/dashboard.js")
    assert r.status_code == 200
    assert "textContent" in r.text
    assert "${p.place}" not in r.text
    assert "bindPopup(popup(m.popup))" in r.text
