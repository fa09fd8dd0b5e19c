from __future__ import annotations
import logging
import time
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from quakewatch import config
from quakewatch.errors import FetchError, ParseError
from quakewatch.events import EventBus, bus
from quakewatch.filters import FilterCriteria, apply_filters
from quakewatch.metrics import (
    FETCH_COUNT, FETCH_FAILURES, FETCH_LATENCY, FILTER_APPLY_COUNT,
    LAST_REFRESH_TS, RECORD_COUNT,
)
from quakewatch.records import RecordSet, normalize
from quakewatch.usgs import BBox, fetch_historical, fetch_recent_window, fetch_significant

logger = logging.getLogger(__name__)

HISTORICAL = "historical"
RECENT = "recent"
SIGNIFICANT = "significant"


class DashboardState:
    """
    In-memory state behind the dashboard.

    Holds three independent record sets (historical, recent window,
    significant week) plus the current filter criteria and the filtered
    view derived from the historical set. A failed fetch keeps the previous
    set; the load methods report success as a bool and never raise
    FetchError or ParseError.
    """

    def __init__(self,
                 bbox: Optional[BBox] = config.DEFAULT_BBOX,
                 history_start: str = config.HISTORY_START,
                 history_limit: Optional[int] = config.HISTORY_LIMIT,
                 order_by: str = config.ORDER_BY,
                 recent_window: timedelta = timedelta(hours=config.RECENT_HOURS),
                 client: Optional[httpx.Client] = None,
                 events: EventBus = bus):
        self.bbox = bbox
        self.history_start = history_start
        self.history_limit = history_limit
        self.order_by = order_by
        self.recent_window = recent_window
        self._client = client
        self._events = events

        self._lock = Lock()
        self._closed = False
        self._historical: RecordSet = ()
        self._recent: RecordSet = ()
        self._significant: RecordSet = ()
        self._criteria = FilterCriteria()
        self._filtered: RecordSet = ()
        self.last_error: Dict[str, Optional[str]] = {HISTORICAL: None, RECENT: None, SIGNIFICANT: None}
        self.last_loaded: Dict[str, Optional[datetime]] = {HISTORICAL: None, RECENT: None, SIGNIFICANT: None}

    # ---------- snapshots ----------
    @property
    def historical(self) -> RecordSet:
        return self._historical

    @property
    def recent(self) -> RecordSet:
        return self._recent

    @property
    def significant(self) -> RecordSet:
        return self._significant

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def filtered(self) -> RecordSet:
        return self._filtered

    @property
    def closed(self) -> bool:
        return self._closed

    # ---------- loading ----------
    def _load(self, dataset: str,
              fetch: Callable[[], Mapping[str, Any]],
              store: Callable[[RecordSet], None]) -> bool:
        start = time.time()
        try:
            raw = fetch()
        except (FetchError, ParseError) as e:
            FETCH_FAILURES.labels(dataset).inc()
            with self._lock:
                self.last_error[dataset] = str(e)
            logger.warning("%s fetch failed, keeping previous records: %s", dataset, e)
            self._events.publish("FetchFailed", dataset=dataset, error=str(e))
            return False

        records = normalize(raw)
        with self._lock:
            if self._closed:
                logger.debug("discarding %s result that arrived after close", dataset)
                return False
            store(records)
            self.last_error[dataset] = None
            self.last_loaded[dataset] = datetime.now(timezone.utc)

        FETCH_COUNT.labels(dataset).inc()
        RECORD_COUNT.labels(dataset).set(len(records))
        LAST_REFRESH_TS.labels(dataset).set(int(time.time() * 1000))
        FETCH_LATENCY.labels(dataset).observe(time.time() - start)
        logger.info("%s: loaded %d records", dataset, len(records))
        return True

    def load_historical(self, end_time: Optional[datetime] = None) -> bool:
        end = end_time or datetime.now(timezone.utc)

        def store(records: RecordSet) -> None:
            self._historical = records
            self._filtered = apply_filters(records, self._criteria)

        ok = self._load(
            HISTORICAL,
            lambda: fetch_historical(self.bbox, self.history_start, end,
                                     order_by=self.order_by, limit=self.history_limit,
                                     client=self._client),
            store,
        )
        if ok:
            self._events.publish("HistoricalLoaded", records=len(self._historical))
        return ok

    def refresh_recent(self, now: Optional[datetime] = None) -> bool:
        def store(records: RecordSet) -> None:
            self._recent = records

        ok = self._load(
            RECENT,
            lambda: fetch_recent_window(self.recent_window, now=now,
                                        order_by=self.order_by, client=self._client),
            store,
        )
        if ok:
            self._events.publish("RecentRefreshed", records=len(self._recent))
        return ok

    def load_significant(self) -> bool:
        def store(records: RecordSet) -> None:
            self._significant = records

        ok = self._load(SIGNIFICANT, lambda: fetch_significant(client=self._client), store)
        if ok:
            self._events.publish("SignificantLoaded", records=len(self._significant))
        return ok

    # ---------- filtering ----------
    def apply(self, criteria: FilterCriteria) -> RecordSet:
        """Store ``criteria`` and re-derive the filtered view from the full historical set."""
        with self._lock:
            self._criteria = criteria
            self._filtered = apply_filters(self._historical, criteria)
            filtered = self._filtered
        FILTER_APPLY_COUNT.inc()
        self._events.publish(
            "FiltersApplied",
            criteria=criteria.to_dict(),
            matched=len(filtered),
            total=len(self._historical),
        )
        return filtered

    def close(self) -> None:
        with self._lock:
            self._closed = True
