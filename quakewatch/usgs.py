from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from quakewatch import config
from quakewatch.errors import FetchError, ParseError

logger = logging.getLogger(__name__)

# (min_lat, max_lat, min_lon, max_lon)
BBox = Tuple[float, float, float, float]
TimeBound = Union[str, datetime]

RECENT_WINDOW = timedelta(hours=config.RECENT_HOURS)


def _iso(value: TimeBound) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    return str(value)


def build_query_params(bbox: Optional[BBox],
                       start_time: TimeBound,
                       end_time: TimeBound,
                       order_by: str = "time",
                       limit: Optional[int] = None) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "format": "geojson",
        "starttime": _iso(start_time),
        "endtime": _iso(end_time),
    }
    if bbox is not None:
        min_lat, max_lat, min_lon, max_lon = bbox
        params.update({
            "minlatitude": min_lat,
            "maxlatitude": max_lat,
            "minlongitude": min_lon,
            "maxlongitude": max_lon,
        })
    params["orderby"] = order_by
    if limit is not None:
        params["limit"] = int(limit)
    return params


def _get_collection(url: str,
                    params: Optional[Dict[str, Any]] = None,
                    timeout: float = config.TIMEOUT,
                    client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    """
    GET a GeoJSON FeatureCollection and return it decoded, unchanged.

    Raises FetchError on transport errors, timeouts and non-2xx statuses,
    ParseError when the body is not a FeatureCollection.
    """
    close_client = False
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
        close_client = True

    try:
        try:
            resp = client.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"{url} returned HTTP {e.response.status_code}",
                url=url, status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"request to {url} failed: {e!r}", url=url) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError(f"{url} returned a non-JSON body", url=url) from e

        if not isinstance(data, dict) or not isinstance(data.get("features", []), list):
            raise ParseError(f"{url} did not return a FeatureCollection", url=url)

        logger.debug("fetched %d features from %s", len(data.get("features", [])), url)
        return data
    finally:
        if close_client:
            client.close()


def fetch_historical(bbox: Optional[BBox],
                     start_time: TimeBound,
                     end_time: TimeBound,
                     order_by: str = "time",
                     limit: Optional[int] = config.HISTORY_LIMIT,
                     timeout: float = config.TIMEOUT,
                     client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    params = build_query_params(bbox, start_time, end_time, order_by, limit)
    return _get_collection(config.BASE_URL, params, timeout=timeout, client=client)


def fetch_recent_window(window: timedelta = RECENT_WINDOW,
                        now: Optional[datetime] = None,
                        order_by: str = "time",
                        timeout: float = config.TIMEOUT,
                        client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    # the window is short, so no limit and no bbox
    end = now or datetime.now(timezone.utc)
    params = build_query_params(None, end - window, end, order_by, None)
    return _get_collection(config.BASE_URL, params, timeout=timeout, client=client)


def fetch_significant(timeout: float = config.TIMEOUT,
                      client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    return _get_collection(config.SIGNIFICANT_URL, None, timeout=timeout, client=client)


if __name__ == "__main__":
    import json
    data = fetch_recent_window()
    feats = data.get("features", [])
    print(f"Fetched {len(feats)} features from the last {config.RECENT_HOURS:g}h")
    for f in feats[:3]:
        print(json.dumps(f, indent=2))
