# blueprints/availability/slots.py
"""Slot Generator: recurring rules -> concrete dated slots minus bookings."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models import AvailabilityRule, AvailabilityType
from .bookings import BookingSource, OccupyingBooking, list_occupying_bookings
from .clock import weekday_index
from .validators import day_name, fmt_hhmm, to_time

REASON_SHORT_NOTICE = "insufficient advance notice"
REASON_HORIZON = "beyond booking horizon"
REASON_BLACKOUT = "blackout period"
REASON_BOOKED = "already booked"

Window = Tuple[datetime, datetime]


@dataclass
class TimeSlot:
    date: date
    day_name: str
    start_time: str
    end_time: str
    date_time: datetime
    is_available: bool
    unavailable_reason: Optional[str] = None
    booking_id: Optional[str] = None


def _window(day: date, start_time: str, end_time: str) -> Window:
    return datetime.combine(day, to_time(start_time)), datetime.combine(day, to_time(end_time))


def walk_window(day: date, start_time: str, end_time: str, *,
                duration: int, break_time: int,
                bookings: Sequence[OccupyingBooking] = (),
                cutoff: Optional[datetime] = None,
                horizon: Optional[datetime] = None,
                blackouts: Sequence[Window] = ()) -> List[TimeSlot]:
    """Step through one rule window in (duration + break_time) strides.

    A slot is emitted only while it fits entirely inside the window.
    cutoff=None disables the advance-notice check, horizon=None the max-advance one.
    """
    window_start, window_end = _window(day, start_time, end_time)
    length = timedelta(minutes=duration)
    step = timedelta(minutes=duration + break_time)
    name = day_name(weekday_index(day))

    slots: List[TimeSlot] = []
    slot_start = window_start
    while slot_start + length <= window_end:
        slot_end = slot_start + length
        reason: Optional[str] = None
        booking_id: Optional[str] = None

        if cutoff is not None and slot_start < cutoff:
            reason = REASON_SHORT_NOTICE
        elif horizon is not None and slot_start > horizon:
            reason = REASON_HORIZON
        elif any(slot_start < b_end and slot_end > b_start for b_start, b_end in blackouts):
            reason = REASON_BLACKOUT
        else:
            hit = next((b for b in bookings if b.intersects(slot_start, slot_end)), None)
            if hit is not None:
                reason = REASON_BOOKED
                booking_id = hit.id

        slots.append(TimeSlot(
            date=day,
            day_name=name,
            start_time=fmt_hhmm(slot_start.time()),
            end_time=fmt_hhmm(slot_end.time()),
            date_time=slot_start,
            is_available=reason is None,
            unavailable_reason=reason,
            booking_id=booking_id,
        ))
        slot_start += step
    return slots


def iter_days(start_date: date, end_date: date) -> Iterable[date]:
    cur = start_date
    while cur <= end_date:
        yield cur
        cur += timedelta(days=1)


def day_bounds(day: date) -> Window:
    start = datetime.combine(day, datetime.min.time())
    return start, start + timedelta(days=1)


def active_rules_by_day(teacher_id: str, rule_type: AvailabilityType) -> Dict[int, List[AvailabilityRule]]:
    rules = (AvailabilityRule.query
             .filter_by(teacher_id=teacher_id, is_active=True, type=rule_type)
             .order_by(AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_time.asc())
             .all())
    out: Dict[int, List[AvailabilityRule]] = {}
    for r in rules:
        out.setdefault(r.day_of_week, []).append(r)
    return out


def blackout_windows(day: date, blackout_rules: Dict[int, List[AvailabilityRule]]) -> List[Window]:
    return [_window(day, r.start_time, r.end_time) for r in blackout_rules.get(weekday_index(day), [])]


def generate_slots(teacher_id: str, start_date: date, end_date: date, *,
                   duration: int, break_time: int,
                   cutoff: Optional[datetime], horizon: Optional[datetime],
                   booking_source: BookingSource = list_occupying_bookings,
                   blackout_suppresses: bool = False) -> List[TimeSlot]:
    regular = active_rules_by_day(teacher_id, AvailabilityType.REGULAR)
    blackout = active_rules_by_day(teacher_id, AvailabilityType.BLACKOUT) if blackout_suppresses else {}

    slots: List[TimeSlot] = []
    for day in iter_days(start_date, end_date):
        day_rules = regular.get(weekday_index(day), [])
        if not day_rules:
            continue
        bookings = booking_source(teacher_id, *day_bounds(day))
        blackouts = blackout_windows(day, blackout)
        for rule in day_rules:
            slots.extend(walk_window(
                day, rule.start_time, rule.end_time,
                duration=duration, break_time=break_time,
                bookings=bookings, cutoff=cutoff, horizon=horizon, blackouts=blackouts,
            ))
    # stable sort keeps rule order for identical starts
    slots.sort(key=lambda s: s.date_time)
    return slots
