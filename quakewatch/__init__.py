"""
quakewatch
Earthquake dashboard: fetches USGS event data, normalizes it and derives
filtered views for a map, a table and a magnitude chart.
"""

__version__ = "0.1.0"

from .filters import FilterCriteria, apply_filters
from .records import EarthquakeRecord, normalize
from .state import DashboardState

__all__ = ["DashboardState", "EarthquakeRecord", "FilterCriteria", "apply_filters", "normalize"]
