# quakewatch/errors.py
from __future__ import annotations
from typing import Optional


class QuakeWatchError(Exception):
    """Base class for all dashboard errors."""


class FetchError(QuakeWatchError):
    """Network failure, timeout or non-2xx status from the catalog."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(QuakeWatchError):
    """Response body is not a GeoJSON FeatureCollection."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class ValidationError(QuakeWatchError, ValueError):
    """Filter input that cannot be coerced. Never fatal: the bound is left unset."""

    def __init__(self, field: str, value: object):
        super().__init__(f"invalid value for {field}: {value!r}")
        self.field = field
        self.value = value
