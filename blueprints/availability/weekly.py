# blueprints/availability/weekly.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

from models import AvailabilityRule, AvailabilityType
from .bookings import BookingSource, list_occupying_bookings
from .clock import weekday_index
from .slots import (
    TimeSlot, active_rules_by_day, blackout_windows, day_bounds, walk_window,
)
from .validators import day_name, round2, span_hours


@dataclass
class DailySchedule:
    date: date
    day_of_week: int
    day_name: str
    time_slots: List[TimeSlot]
    total_available_hours: float
    total_booked_hours: float
    has_availability: bool


@dataclass
class WeeklySchedule:
    week_start_date: date
    week_end_date: date
    days: List[DailySchedule] = field(default_factory=list)
    total_available_hours: float = 0.0
    total_booked_hours: float = 0.0
    total_available_slots: int = 0
    total_booked_slots: int = 0


def week_start_for(d: date) -> date:
    # weeks start on Sunday (day 0)
    return d - timedelta(days=weekday_index(d))


def _build_week(teacher_id: str, week_start: date, *,
                rules: Dict[int, List[AvailabilityRule]],
                blackout: Dict[int, List[AvailabilityRule]],
                slot_duration: int, break_time: int, include_bookings: bool,
                booking_source: BookingSource) -> WeeklySchedule:
    week = WeeklySchedule(week_start_date=week_start, week_end_date=week_start + timedelta(days=6))
    available_hours = 0.0
    booked_hours = 0.0

    for offset in range(7):
        day = week_start + timedelta(days=offset)
        dow = weekday_index(day)
        day_rules = rules.get(dow, [])
        bookings = booking_source(teacher_id, *day_bounds(day))

        # capacity comes from the rule windows alone, bookings do not reduce it
        day_available = sum(span_hours(r.start_time, r.end_time) for r in day_rules)
        day_booked = sum(b.duration_minutes for b in bookings) / 60

        slots: List[TimeSlot] = []
        if include_bookings:
            blackouts = blackout_windows(day, blackout)
            for r in day_rules:
                slots.extend(walk_window(
                    day, r.start_time, r.end_time,
                    duration=slot_duration, break_time=break_time,
                    bookings=bookings, blackouts=blackouts,
                ))
            slots.sort(key=lambda s: s.date_time)

        week.days.append(DailySchedule(
            date=day,
            day_of_week=dow,
            day_name=day_name(dow),
            time_slots=slots,
            total_available_hours=round2(day_available),
            total_booked_hours=round2(day_booked),
            has_availability=bool(day_rules),
        ))
        available_hours += day_available
        booked_hours += day_booked
        week.total_available_slots += sum(1 for s in slots if s.is_available)
        week.total_booked_slots += sum(1 for s in slots if s.booking_id is not None)

    week.total_available_hours = round2(available_hours)
    week.total_booked_hours = round2(booked_hours)
    return week


def weekly_schedule(teacher_id: str, *, week_start: date, weeks_count: int,
                    slot_duration: int, break_time: int, include_bookings: bool,
                    booking_source: Optional[BookingSource] = None,
                    blackout_suppresses: bool = False) -> List[WeeklySchedule]:
    source = booking_source or list_occupying_bookings
    rules = active_rules_by_day(teacher_id, AvailabilityType.REGULAR)
    blackout = active_rules_by_day(teacher_id, AvailabilityType.BLACKOUT) if blackout_suppresses else {}
    return [
        _build_week(teacher_id, week_start + timedelta(days=7 * i),
                    rules=rules, blackout=blackout,
                    slot_duration=slot_duration, break_time=break_time,
                    include_bookings=include_bookings, booking_source=source)
        for i in range(weeks_count)
    ]
