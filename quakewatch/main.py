# quakewatch/main.py
from __future__ import annotations
import asyncio
import logging
from contextlib import asynccontextmanager
from threading import Thread
from typing import Optional

from fastapi import FastAPI, Form, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from quakewatch import config, views
from quakewatch.events import bus
from quakewatch.filters import FilterCriteria
from quakewatch.logger import configure_logging
from quakewatch.scheduler import PeriodicTask
from quakewatch.state import DashboardState

logger = logging.getLogger(__name__)

VIEW_MODES = ("map", "table", "detail")


def _initial_load(state: DashboardState) -> None:
    state.load_historical()
    state.load_significant()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(config.LOG_LEVEL)
    state: DashboardState = app.state.dashboard
    if state.closed:
        state = app.state.dashboard = DashboardState()

    refresher = PeriodicTask(config.REFRESH_SECONDS, state.refresh_recent, name="recent-refresh")
    logger.info("dashboard starting (autostart=%s, refresh every %ss)", config.AUTOSTART, config.REFRESH_SECONDS)
    app.state.refresher = refresher
    if config.AUTOSTART:
        # historical and recent fetches run concurrently; each writes its own set
        Thread(target=_initial_load, args=(state,), name="initial-load", daemon=True).start()
        refresher.start()
    try:
        yield
    finally:
        # stop() joins the refresh thread, which may be mid-fetch
        await asyncio.to_thread(refresher.stop)
        state.close()


app = FastAPI(title="Earthquake Monitoring Dashboard", lifespan=lifespan)
app.state.dashboard = DashboardState()

config.STATIC_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=str(config.STATIC_DIR)), name="static")
templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))


def get_state(request: Request) -> DashboardState:
    return request.app.state.dashboard


# ---------- pages ----------
@app.get("/", response_class=HTMLResponse)
def home(request: Request, view: str = "map", index: Optional[int] = None):
    state = get_state(request)
    if view not in VIEW_MODES:
        view = "map"
    filtered = state.filtered
    selected = None
    if index is not None and 0 <= index < len(filtered):
        selected = views.detail(filtered[index])
        view = "detail"
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "view": view,
            "criteria": state.criteria,
            "total": len(state.historical),
            "count": len(filtered),
            "recent_count": len(state.recent),
            "rows": views.table_rows(filtered) if view == "table" else [],
            "selected": selected,
            "significant": [r.to_dict() for r in state.significant],
            "errors": {k: v for k, v in state.last_error.items() if v},
            "map_center": config.MAP_CENTER,
            "map_zoom": config.MAP_ZOOM,
            "colors": views.COLORS,
        },
    )


@app.get("/about", response_class=HTMLResponse)
def about(request: Request):
    return templates.TemplateResponse(request, "about.html", {})


# ---------- filters ----------
@app.post("/filters")
def apply_filters_endpoint(
    request: Request,
    start_year: Optional[str] = Form(None),
    end_year: Optional[str] = Form(None),
    min_magnitude: Optional[str] = Form(None),
    max_magnitude: Optional[str] = Form(None),
    min_depth: Optional[str] = Form(None),
    max_depth: Optional[str] = Form(None),
    view: str = Form("map"),
):
    criteria = FilterCriteria.from_form({
        "start_year": start_year,
        "end_year": end_year,
        "min_magnitude": min_magnitude,
        "max_magnitude": max_magnitude,
        "min_depth": min_depth,
        "max_depth": max_depth,
    })
    get_state(request).apply(criteria)
    if view not in VIEW_MODES:
        view = "map"
    return RedirectResponse(url=f"/?view={view}", status_code=303)


@app.post("/filters/reset")
def reset_filters(request: Request):
    get_state(request).apply(FilterCriteria())
    return RedirectResponse(url="/", status_code=303)


# ---------- data for the map / chart ----------
@app.get("/api/quakes")
def api_quakes(request: Request):
    state = get_state(request)
    filtered = state.filtered
    return {
        "criteria": state.criteria.to_dict(),
        "total": len(state.historical),
        "count": len(filtered),
        "markers": views.markers(filtered, "historical"),
    }


@app.get("/api/quakes/{index}")
def api_quake_detail(request: Request, index: int):
    filtered = get_state(request).filtered
    if not 0 <= index < len(filtered):
        raise HTTPException(status_code=404, detail="no such earthquake in the current view")
    return views.detail(filtered[index])


@app.get("/api/recent")
def api_recent(request: Request):
    state = get_state(request)
    loaded = state.last_loaded.get("recent")
    return {
        "count": len(state.recent),
        "loaded_at": loaded.isoformat() if loaded else None,
        "markers": views.markers(state.recent, "recent"),
    }


@app.get("/api/significant")
def api_significant(request: Request):
    return [r.to_dict() for r in get_state(request).significant]


@app.get("/api/series")
def api_series(request: Request):
    return views.magnitude_series(get_state(request).filtered)


@app.post("/refresh")
def refresh(request: Request):
    state = get_state(request)
    ok = state.refresh_recent()
    body = {"ok": ok, "records": len(state.recent), "error": state.last_error.get("recent")}
    return JSONResponse(body, status_code=200 if ok else 502)


# ---------- events ----------
@app.get("/events/tail")
def events_tail(n: int = 50, type: Optional[str] = None):
    return bus.tail(n, type=type)


@app.get("/events/counts")
def events_counts():
    return bus.counts()


# ---------- metrics ----------
@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
