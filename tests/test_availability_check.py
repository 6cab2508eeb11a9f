from __future__ import annotations
from datetime import datetime, timezone
import pytest

from app import create_app
from extensions import db
from models import AvailabilityRule, AvailabilityType, Teacher
from blueprints.availability import services as svc
from blueprints.availability.bookings import OccupyingBooking

def fake_source(*bookings):
    def _source(teacher_id, start, end):
        return [b for b in bookings if start <= b.scheduled_at < end]
    return _source

@pytest.fixture()
def app_ctx():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture()
def teacher_id(app_ctx):
    t = Teacher(full_name="Ada Tutor")
    db.session.add(t)
    db.session.flush()
    db.session.add_all([
        AvailabilityRule(teacher_id=t.id, day_of_week=1, start_time="09:00", end_time="12:00"),
        AvailabilityRule(teacher_id=t.id, day_of_week=2, start_time="00:00", end_time="02:00"),
        AvailabilityRule(teacher_id=t.id, day_of_week=3, start_time="09:00", end_time="12:00", is_active=False),
        AvailabilityRule(teacher_id=t.id, day_of_week=4, start_time="09:00", end_time="12:00",
                         type=AvailabilityType.ONE_TIME),
    ])
    db.session.commit()
    return t.id

def test_covered_window(teacher_id):
    res = svc.check_available_at(teacher_id, datetime(2025, 9, 1, 9, 0), 60, booking_source=fake_source())
    assert res.is_available and res.reason is None
    # window may end exactly on the rule end
    res = svc.check_available_at(teacher_id, datetime(2025, 9, 1, 11, 0), 60, booking_source=fake_source())
    assert res.is_available

def test_aware_datetime_is_read_as_utc(teacher_id):
    at = datetime(2025, 9, 1, 9, 0, tzinfo=timezone.utc)
    assert svc.check_available_at(teacher_id, at, 60, booking_source=fake_source()).is_available

@pytest.mark.parametrize("at", [
    datetime(2025, 9, 1, 11, 30),   # runs past rule end
    datetime(2025, 9, 1, 8, 30),    # starts before rule
    datetime(2025, 9, 3, 9, 0),     # inactive rule
    datetime(2025, 9, 4, 9, 0),     # ONE_TIME rule does not count
    datetime(2025, 9, 6, 9, 0),     # no rule at all
    datetime(2025, 9, 1, 23, 30),   # crosses midnight
])
def test_not_covered(teacher_id, at):
    res = svc.check_available_at(teacher_id, at, 60, booking_source=fake_source())
    assert not res.is_available
    assert res.reason == svc.REASON_NOT_AVAILABLE

def test_booked_and_excluded(teacher_id):
    src = fake_source(OccupyingBooking("b-1", datetime(2025, 9, 1, 10, 0), 60))
    res = svc.check_available_at(teacher_id, datetime(2025, 9, 1, 10, 30), 30, booking_source=src)
    assert not res.is_available and res.reason == svc.REASON_ALREADY_BOOKED
    res = svc.check_available_at(teacher_id, datetime(2025, 9, 1, 10, 30), 30, "b-1", booking_source=src)
    assert res.is_available
    # touching the booking end is fine
    res = svc.check_available_at(teacher_id, datetime(2025, 9, 1, 11, 0), 60, booking_source=src)
    assert res.is_available

def test_booking_running_since_previous_day(teacher_id):
    src = fake_source(OccupyingBooking("late", datetime(2025, 9, 1, 23, 30), 60))
    res = svc.check_available_at(teacher_id, datetime(2025, 9, 2, 0, 0), 30, booking_source=src)
    assert res.reason == svc.REASON_ALREADY_BOOKED
    res = svc.check_available_at(teacher_id, datetime(2025, 9, 2, 0, 30), 30, booking_source=src)
    assert res.is_available

def test_bulk_check(teacher_id):
    rows = svc.check_available_bulk(teacher_id, [
        {"date_time": datetime(2025, 9, 1, 9, 0), "duration": 60},
        {"date_time": datetime(2025, 9, 6, 9, 0), "duration": 60},
    ], booking_source=fake_source())
    assert [r["is_available"] for r in rows] == [True, False]
    assert rows[1]["reason"] == svc.REASON_NOT_AVAILABLE
    assert rows[0]["duration"] == 60
