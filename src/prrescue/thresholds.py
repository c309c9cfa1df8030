from __future__ import annotations

from datetime import datetime
from typing import NamedTuple

from .models import TimeUnit, Urgency


class Thresholds(NamedTuple):
    critical: int
    urgent: int
    warning: int


THRESHOLDS: dict[TimeUnit, Thresholds] = {
    TimeUnit.HOURS: Thresholds(critical=6, urgent=3, warning=1),
    TimeUnit.DAYS: Thresholds(critical=14, urgent=7, warning=3),
}


def thresholds_for(time_unit: TimeUnit | str) -> Thresholds:
    return THRESHOLDS[TimeUnit(time_unit)]


def age_between(start: datetime, end: datetime, time_unit: TimeUnit | str) -> float:
    """Elapsed time from ``start`` to ``end`` in fractional ``time_unit``."""
    return (end - start).total_seconds() / TimeUnit(time_unit).seconds


def tier_for_age(age: float, time_unit: TimeUnit | str) -> Urgency:
    """Classify an age by the unit's thresholds. Lower bounds are inclusive."""
    limits = thresholds_for(time_unit)
    if age >= limits.critical:
        return Urgency.CRITICAL
    if age >= limits.urgent:
        return Urgency.URGENT
    if age >= limits.warning:
        return Urgency.WARNING
    return Urgency.NORMAL
