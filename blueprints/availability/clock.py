# blueprints/availability/clock.py
from __future__ import annotations
from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Naive UTC "now", the same representation bookings are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def weekday_index(d: date) -> int:
    # 0=Sun .. 6=Sat
    return d.isoweekday() % 7
