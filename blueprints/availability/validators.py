# blueprints/availability/validators.py
"""Interval Validator: "HH:mm" wall-clock bounds for a day of week."""
from __future__ import annotations
import re
from datetime import time
from decimal import Decimal, ROUND_HALF_UP

from .errors import InvalidFormat, InvalidRange

HHMM_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")

# 0 = Sunday, matching the weekday numbering clients send
DAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)


def day_name(day_of_week: int) -> str:
    return DAY_NAMES[day_of_week]


def ensure_day_of_week(day_of_week: int) -> int:
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
        raise InvalidFormat("Day of week must be an integer 0-6", field="day_of_week")
    return day_of_week


def ensure_hhmm(value: str, field: str) -> str:
    if not isinstance(value, str) or not HHMM_RE.match(value):
        raise InvalidFormat("Invalid time format. Use HH:mm format", field=field)
    return value


def validate_interval(day_of_week: int, start_time: str, end_time: str) -> tuple[int, str, str]:
    """Check day, format and ordering; returns the normalized triple or raises."""
    ensure_day_of_week(day_of_week)
    ensure_hhmm(start_time, "start_time")
    ensure_hhmm(end_time, "end_time")
    # fixed-width "HH:mm" compares correctly as text
    if start_time >= end_time:
        raise InvalidRange("Start time must be before end time", field="end_time",
                           details={"start_time": start_time, "end_time": end_time})
    return day_of_week, start_time, end_time


def to_minutes(hhmm: str) -> int:
    h, m = hhmm.split(":")
    return int(h) * 60 + int(m)


def to_hours(hhmm: str) -> float:
    h, m = hhmm.split(":")
    return int(h) + int(m) / 60


def to_time(hhmm: str) -> time:
    h, m = hhmm.split(":")
    return time(int(h), int(m))


def fmt_hhmm(t: time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


def span_hours(start_time: str, end_time: str) -> float:
    return to_hours(end_time) - to_hours(start_time)


def round2(value: float) -> float:
    """Two decimals, half-up."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
