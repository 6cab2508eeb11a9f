# blueprints/availability/bookings.py
"""Read-only port onto the booking collaborator."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List

from models import Booking, OCCUPYING_STATUSES


@dataclass(frozen=True)
class OccupyingBooking:
    id: str
    scheduled_at: datetime
    duration_minutes: int

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)

    def intersects(self, start: datetime, end: datetime) -> bool:
        return start < self.ends_at and end > self.scheduled_at


# (teacher_id, range_start, range_end) -> bookings starting in [range_start, range_end)
BookingSource = Callable[[str, datetime, datetime], List[OccupyingBooking]]


def list_occupying_bookings(teacher_id: str, range_start: datetime, range_end: datetime) -> List[OccupyingBooking]:
    rows = (Booking.query
            .filter(Booking.teacher_id == teacher_id,
                    Booking.status.in_(OCCUPYING_STATUSES),
                    Booking.scheduled_at >= range_start,
                    Booking.scheduled_at < range_end)
            .order_by(Booking.scheduled_at.asc(), Booking.id.asc())
            .all())
    return [OccupyingBooking(id=b.id, scheduled_at=b.scheduled_at, duration_minutes=b.duration_minutes)
            for b in rows]
