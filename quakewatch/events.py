# quakewatch/events.py
from __future__ import annotations
from collections import deque
from threading import Lock
from time import time
from typing import Any, Dict, List, Optional


class EventBus:
    """Bounded in-memory log of dashboard events (loads, refreshes, failures)."""

    def __init__(self, maxlen: int = 1000):
        self._events: deque = deque(maxlen=maxlen)
        self._counts: Dict[str, int] = {}
        self._lock = Lock()

    def publish(self, type: str, **fields: Any) -> Dict[str, Any]:
        ev = {"type": type, "ts_ms": int(time() * 1000), **fields}
        with self._lock:
            self._events.append(ev)
            self._counts[type] = self._counts.get(type, 0) + 1
        return ev

    def tail(self, n: int = 50, type: Optional[str] = None) -> List[Dict[str, Any]]:
        if n <= 0:
            return []
        with self._lock:
            events = list(self._events)
        if type is not None:
            events = [e for e in events if e["type"] == type]
        return events[-n:]

    def counts(self) -> Dict[str, int]:
        """Events published per type since start, including ones rotated out of the log."""
        with self._lock:
            return dict(self._counts)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
            self._counts.clear()


bus = EventBus()
