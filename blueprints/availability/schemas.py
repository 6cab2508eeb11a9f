from __future__ import annotations
from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models import AvailabilityRule, AvailabilityType
from .validators import day_name, round2, span_hours

# ---------- Rules (in) ----------
# time strings are left unconstrained here so the interval validator
# reports INVALID_FORMAT / INVALID_RANGE with its own codes
class RuleIn(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    type: AvailabilityType = AvailabilityType.REGULAR
    is_active: bool = True

class RuleUpdateIn(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    type: Optional[AvailabilityType] = None
    is_active: Optional[bool] = None

class RuleQuery(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    type: Optional[AvailabilityType] = None
    is_active: Optional[bool] = None

class BulkRulesIn(BaseModel):
    # items stay raw: each one is validated on its own inside the batch
    availabilities: List[Any] = Field(min_length=1)

class ConflictCheckIn(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    exclude_id: Optional[str] = None
    type: AvailabilityType = AvailabilityType.REGULAR

class CopyIn(BaseModel):
    from_day_of_week: int = Field(ge=0, le=6)
    to_days_of_week: List[int] = Field(min_length=1)
    replace_existing: bool = False

    @model_validator(mode="after")
    def check_days(self):
        if any(d < 0 or d > 6 for d in self.to_days_of_week):
            raise ValueError("to_days_of_week items must be 0-6")
        return self

# ---------- Slots / schedule (in) ----------
class SlotsQuery(BaseModel):
    start_date: date
    end_date: date
    duration: int = Field(60, ge=15, le=180)
    break_time: int = Field(15, ge=0, le=60)
    include_short_notice: bool = False

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        return self

class AvailableAtIn(BaseModel):
    date_time: datetime
    duration: int = Field(ge=15, le=180)
    exclude_booking_id: Optional[str] = None

class BulkAvailableAtIn(BaseModel):
    slots: List[AvailableAtIn] = Field(min_length=1)

class WeeklyQuery(BaseModel):
    week_start_date: Optional[date] = None
    weeks_count: int = Field(1, ge=1, le=12)
    include_bookings: bool = True
    slot_duration: int = Field(60, ge=15, le=180)

# ---------- Out ----------
class RuleOut(BaseModel):
    id: str
    teacher_id: str
    day_of_week: int
    day_name: str
    start_time: str
    end_time: str
    type: AvailabilityType
    is_active: bool
    duration_hours: float
    created_at: Optional[datetime] = None

    @classmethod
    def from_rule(cls, rule: AvailabilityRule) -> "RuleOut":
        return cls(
            id=rule.id,
            teacher_id=rule.teacher_id,
            day_of_week=rule.day_of_week,
            day_name=day_name(rule.day_of_week),
            start_time=rule.start_time,
            end_time=rule.end_time,
            type=rule.type,
            is_active=rule.is_active,
            duration_hours=round2(span_hours(rule.start_time, rule.end_time)),
            created_at=rule.created_at,
        )

class ConflictOut(BaseModel):
    has_conflict: bool
    conflict_message: str
    conflicting_availabilities: List[RuleOut] = []

class BatchFailureOut(BaseModel):
    index: int
    error: str
    data: Any

class BatchResultOut(BaseModel):
    success_count: int
    failure_count: int
    successes: List[RuleOut]
    failures: List[BatchFailureOut]

class TimeSlotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    day_name: str
    start_time: str
    end_time: str
    date_time: datetime
    is_available: bool
    unavailable_reason: Optional[str] = None
    booking_id: Optional[str] = None

class DailyScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    day_of_week: int
    day_name: str
    time_slots: List[TimeSlotOut]
    total_available_hours: float
    total_booked_hours: float
    has_availability: bool

class WeeklyScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    week_start_date: date
    week_end_date: date
    days: List[DailyScheduleOut]
    total_available_hours: float
    total_booked_hours: float
    total_available_slots: int
    total_booked_slots: int

class StatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_rules: int
    active_rules: int
    available_days: List[int]
    total_hours_per_week: float
    earliest_start_time: str
    latest_end_time: str
    avg_hours_per_day: float

class AvailabilityCheckOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_available: bool
    reason: Optional[str] = None

class SummaryOut(BaseModel):
    schedule: List[RuleOut]
    stats: StatsOut
    upcoming_weeks: List[WeeklyScheduleOut]

class AvailableAtOut(BaseModel):
    date_time: datetime
    duration: int
    is_available: bool
    reason: Optional[str] = None
