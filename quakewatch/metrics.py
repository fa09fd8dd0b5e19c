# quakewatch/metrics.py
from __future__ import annotations
from prometheus_client import Counter, Gauge, Histogram

FETCH_COUNT    = Counter("quakewatch_fetches_total", "Successful catalog fetches", ["dataset"])
FETCH_FAILURES = Counter("quakewatch_fetch_failures_total", "Failed catalog fetches", ["dataset"])
RECORD_COUNT   = Gauge(  "quakewatch_records", "Records currently held", ["dataset"])
LAST_REFRESH_TS = Gauge( "quakewatch_last_refresh_timestamp", "Last successful fetch, epoch millis", ["dataset"])
FETCH_LATENCY  = Histogram("quakewatch_fetch_duration_seconds", "Fetch + normalize duration", ["dataset"])
FILTER_APPLY_COUNT = Counter("quakewatch_filter_applies_total", "Explicit filter applications")
