from __future__ import annotations
import logging
import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, Optional

from quakewatch.errors import ValidationError
from quakewatch.records import EarthquakeRecord, RecordSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCriteria:
    """
    Optional bounds for deriving a filtered view. Every bound is inclusive;
    an unset bound (None) imposes no constraint.
    """
    min_magnitude: Optional[float] = None
    max_magnitude: Optional[float] = None
    min_depth: Optional[float] = None
    max_depth: Optional[float] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "FilterCriteria":
        """
        Build criteria from raw user input. Blank or malformed values leave
        the bound unset instead of raising.
        """
        values: Dict[str, Any] = {}
        for name, coerce in _COERCERS.items():
            raw = form.get(name)
            try:
                values[name] = coerce(name, raw)
            except ValidationError as e:
                logger.debug("ignoring filter input: %s", e)
                values[name] = None
        return cls(**values)


def _blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _to_float(name: str, raw: Any) -> Optional[float]:
    if _blank(raw):
        return None
    try:
        val = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(name, raw)
    if math.isnan(val) or math.isinf(val):
        raise ValidationError(name, raw)
    return val


def _to_year(name: str, raw: Any) -> Optional[int]:
    val = _to_float(name, raw)
    if val is None:
        return None
    if not val.is_integer():
        raise ValidationError(name, raw)
    return int(val)


_COERCERS: Dict[str, Callable[[str, Any], Any]] = {
    "min_magnitude": _to_float,
    "max_magnitude": _to_float,
    "min_depth": _to_float,
    "max_depth": _to_float,
    "start_year": _to_year,
    "end_year": _to_year,
}

Predicate = Callable[[EarthquakeRecord], bool]


def _predicates(criteria: FilterCriteria) -> List[Predicate]:
    preds: List[Predicate] = []
    c = criteria
    # records without a magnitude fail every active magnitude bound
    if c.min_magnitude is not None:
        preds.append(lambda r: r.magnitude is not None and r.magnitude >= c.min_magnitude)
    if c.max_magnitude is not None:
        preds.append(lambda r: r.magnitude is not None and r.magnitude <= c.max_magnitude)
    if c.min_depth is not None:
        preds.append(lambda r: r.depth_km >= c.min_depth)
    if c.max_depth is not None:
        preds.append(lambda r: r.depth_km <= c.max_depth)
    if c.start_year is not None:
        preds.append(lambda r: r.year >= c.start_year)
    if c.end_year is not None:
        preds.append(lambda r: r.year <= c.end_year)
    return preds


def record_matches(record: EarthquakeRecord, criteria: FilterCriteria) -> bool:
    return all(p(record) for p in _predicates(criteria))


def apply_filters(full_set: RecordSet, criteria: FilterCriteria) -> RecordSet:
    """Derive a new filtered RecordSet; ``full_set`` is left untouched."""
    preds = _predicates(criteria)
    if not preds:
        return tuple(full_set)
    return tuple(r for r in full_set if all(p(r) for p in preds))
