# quakewatch/scheduler.py
from __future__ import annotations
import logging
from threading import Event, Lock, Thread
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Runs ``func`` on a daemon thread: once at start, then every ``interval``
    seconds until stop() is called. A failing run is logged and the
    schedule continues.
    """

    def __init__(self, interval: float, func: Callable[[], object], name: str = "periodic-task"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = float(interval)
        self.func = func
        self.name = name
        self._stop = Event()
        self._lock = Lock()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        t = self._thread
        return t is not None and t.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        with self._lock:
            self._stop.set()
            t, self._thread = self._thread, None
        if t is not None and t.is_alive():
            t.join(timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.func()
            except Exception:
                logger.exception("%s: run failed", self.name)
            if self._stop.wait(self.interval):
                break
        logger.debug("%s: stopped", self.name)

    def __enter__(self) -> "PeriodicTask":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
