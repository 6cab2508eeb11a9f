# blueprints/availability/services.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple

from flask import current_app

from extensions import db
from models import AvailabilityRule, AvailabilityType, Teacher
from .batch import BatchResult, apply_and_collect
from .bookings import BookingSource, list_occupying_bookings
from .clock import as_naive_utc, utcnow, weekday_index
from .conflicts import ConflictReport, conflict_report, ensure_no_conflict, overlaps
from .errors import InvalidFormat, InvalidRange, RuleNotFound, TeacherNotFound
from .schemas import RuleIn
from .slots import TimeSlot, generate_slots
from .stats import AvailabilityStats, compute_stats
from .validators import ensure_day_of_week, fmt_hhmm, validate_interval
from .weekly import WeeklySchedule, week_start_for, weekly_schedule

log = logging.getLogger(__name__)

REASON_NOT_AVAILABLE = "Teacher is not available at this time"
REASON_ALREADY_BOOKED = "Time slot is already booked"

SLOT_DURATION_BOUNDS = (15, 180)
BREAK_TIME_BOUNDS = (0, 60)
WEEKS_COUNT_BOUNDS = (1, 12)


@dataclass
class AvailabilityCheck:
    is_available: bool
    reason: Optional[str] = None


# ----------------------- Helpers -----------------------
def get_teacher(teacher_id: str) -> Teacher:
    teacher = db.session.get(Teacher, teacher_id)
    if teacher is None:
        raise TeacherNotFound("Teacher not found", details={"teacher_id": teacher_id})
    return teacher

def _get_rule(teacher_id: str, rule_id: str) -> AvailabilityRule:
    rule = AvailabilityRule.query.filter_by(id=rule_id, teacher_id=teacher_id).first()
    if rule is None:
        raise RuleNotFound("Availability not found", details={"rule_id": rule_id})
    return rule

def _coerce_type(value: Any) -> AvailabilityType:
    if value is None:
        return AvailabilityType.REGULAR
    try:
        return AvailabilityType(value)
    except ValueError:
        raise InvalidFormat(f"Unknown availability type: {value}", field="type") from None

def _ensure_bounds(value: int, bounds: Tuple[int, int], field: str) -> int:
    lo, hi = bounds
    if not lo <= value <= hi:
        raise InvalidRange(f"{field} must be between {lo} and {hi}", field=field,
                           details={"value": value})
    return value

def _policy(teacher: Teacher) -> Tuple[int, int]:
    cfg = current_app.config
    notice = teacher.advance_notice_hours
    horizon = teacher.max_advance_booking_hours
    if notice is None:
        notice = cfg["DEFAULT_ADVANCE_NOTICE_HOURS"]
    if horizon is None:
        horizon = cfg["DEFAULT_MAX_ADVANCE_BOOKING_HOURS"]
    return notice, horizon

def _insert_rule(teacher_id: str, day_of_week: int, start_time: str, end_time: str,
                 type_: Any = None, is_active: Optional[bool] = None) -> AvailabilityRule:
    validate_interval(day_of_week, start_time, end_time)
    kind = _coerce_type(type_)
    ensure_no_conflict(teacher_id, day_of_week, start_time, end_time, kind=kind)
    rule = AvailabilityRule(
        teacher_id=teacher_id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        type=kind,
        is_active=True if is_active is None else is_active,
    )
    db.session.add(rule)
    # flush so later conflict checks in the same transaction see this row
    db.session.flush()
    return rule

# ----------------------- Rules -----------------------
def create_rule(teacher_id: str, day_of_week: int, start_time: str, end_time: str,
                type: Any = None, is_active: Optional[bool] = None) -> AvailabilityRule:
    get_teacher(teacher_id)
    rule = _insert_rule(teacher_id, day_of_week, start_time, end_time, type, is_active)
    db.session.commit()
    log.info("availability rule %s created for teacher %s (%d %s-%s)",
             rule.id, teacher_id, day_of_week, start_time, end_time)
    return rule

def list_rules(teacher_id: str, day_of_week: Optional[int] = None,
               type: Any = None, is_active: Optional[bool] = None) -> List[AvailabilityRule]:
    get_teacher(teacher_id)
    q = AvailabilityRule.query.filter_by(teacher_id=teacher_id)
    if day_of_week is not None:
        q = q.filter(AvailabilityRule.day_of_week == day_of_week)
    if type is not None:
        q = q.filter(AvailabilityRule.type == _coerce_type(type))
    if is_active is not None:
        q = q.filter(AvailabilityRule.is_active == is_active)
    return q.order_by(AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_time.asc()).all()

def update_rule(teacher_id: str, rule_id: str, *, start_time: Optional[str] = None,
                end_time: Optional[str] = None, type: Any = None,
                is_active: Optional[bool] = None) -> AvailabilityRule:
    get_teacher(teacher_id)
    rule = _get_rule(teacher_id, rule_id)
    new_start = rule.start_time if start_time is None else start_time
    new_end = rule.end_time if end_time is None else end_time
    times_changed = (new_start, new_end) != (rule.start_time, rule.end_time)
    if times_changed:
        validate_interval(rule.day_of_week, new_start, new_end)
    new_kind = rule.type if type is None else _coerce_type(type)

    # re-activating or retyping must not break the no-overlap invariant either
    activating = is_active is True and not rule.is_active
    stays_active = rule.is_active if is_active is None else is_active
    if stays_active and (times_changed or activating or new_kind != rule.type):
        ensure_no_conflict(teacher_id, rule.day_of_week, new_start, new_end,
                           exclude_rule_id=rule.id, kind=new_kind)

    rule.start_time = new_start
    rule.end_time = new_end
    rule.type = new_kind
    if is_active is not None:
        rule.is_active = is_active
    db.session.commit()
    log.info("availability rule %s updated", rule.id)
    return rule

def delete_rule(teacher_id: str, rule_id: str) -> None:
    get_teacher(teacher_id)
    rule = _get_rule(teacher_id, rule_id)
    db.session.delete(rule)
    db.session.commit()
    log.info("availability rule %s deleted", rule_id)

def check_conflict(teacher_id: str, day_of_week: int, start_time: str, end_time: str,
                   exclude_rule_id: Optional[str] = None, type: Any = None) -> ConflictReport:
    get_teacher(teacher_id)
    validate_interval(day_of_week, start_time, end_time)
    return conflict_report(teacher_id, day_of_week, start_time, end_time, exclude_rule_id,
                           kind=_coerce_type(type))

# ----------------------- Bulk / copy -----------------------
def bulk_create_rules(teacher_id: str, items: List[Any]) -> BatchResult[AvailabilityRule]:
    get_teacher(teacher_id)

    def _one(index: int, item: Any) -> AvailabilityRule:
        data = RuleIn.model_validate(item)
        return _insert_rule(teacher_id, data.day_of_week, data.start_time, data.end_time,
                            data.type, data.is_active)

    result = apply_and_collect(enumerate(items), _one)
    db.session.commit()
    log.info("bulk create for teacher %s: %d ok, %d failed",
             teacher_id, result.success_count, result.failure_count)
    return result

def copy_rules(teacher_id: str, from_day: int, to_days: List[int],
               replace_existing: bool = False) -> BatchResult[AvailabilityRule]:
    get_teacher(teacher_id)
    ensure_day_of_week(from_day)
    for d in to_days:
        ensure_day_of_week(d)

    sources = (AvailabilityRule.query
               .filter_by(teacher_id=teacher_id, day_of_week=from_day, is_active=True)
               .order_by(AvailabilityRule.start_time.asc())
               .all())
    if not sources:
        log.info("copy for teacher %s: no active rules on day %d", teacher_id, from_day)
        return BatchResult()

    # first occurrence of each target wins, the source day itself is skipped
    targets: List[Tuple[int, int]] = []
    seen = {from_day}
    for index, day in enumerate(to_days):
        if day not in seen:
            seen.add(day)
            targets.append((index, day))

    def _work() -> Iterator[Tuple[int, Dict[str, Any]]]:
        # lazy: a target day is cleared right before its copies are inserted
        for index, day in targets:
            if replace_existing:
                AvailabilityRule.query.filter_by(teacher_id=teacher_id, day_of_week=day).delete()
                db.session.flush()
            for src in sources:
                yield index, {
                    "day_of_week": day,
                    "source_day_of_week": from_day,
                    "source_rule_id": src.id,
                    "start_time": src.start_time,
                    "end_time": src.end_time,
                    "type": src.type.value,
                    "is_active": src.is_active,
                }

    def _one(index: int, item: Dict[str, Any]) -> AvailabilityRule:
        return _insert_rule(teacher_id, item["day_of_week"], item["start_time"], item["end_time"],
                            item["type"], item["is_active"])

    result = apply_and_collect(_work(), _one)
    db.session.commit()
    log.info("copy day %d for teacher %s: %d ok, %d failed",
             from_day, teacher_id, result.success_count, result.failure_count)
    return result

# ----------------------- Slots -----------------------
def get_available_slots(teacher_id: str, start_date: date, end_date: date,
                        duration: Optional[int] = None, break_time: Optional[int] = None,
                        include_short_notice: bool = False, *,
                        now: Optional[datetime] = None,
                        booking_source: Optional[BookingSource] = None) -> List[TimeSlot]:
    teacher = get_teacher(teacher_id)
    cfg = current_app.config
    duration = _ensure_bounds(cfg["DEFAULT_SLOT_DURATION"] if duration is None else duration,
                              SLOT_DURATION_BOUNDS, "duration")
    break_time = _ensure_bounds(cfg["DEFAULT_BREAK_TIME"] if break_time is None else break_time,
                                BREAK_TIME_BOUNDS, "break_time")
    if end_date < start_date:
        raise InvalidRange("start_date must not be after end_date", field="end_date")

    now_dt = as_naive_utc(now) if now else utcnow()
    notice_hours, horizon_hours = _policy(teacher)
    cutoff = None if include_short_notice else now_dt + timedelta(hours=notice_hours)
    horizon = now_dt + timedelta(hours=horizon_hours)

    return generate_slots(
        teacher_id, start_date, end_date,
        duration=duration, break_time=break_time,
        cutoff=cutoff, horizon=horizon,
        booking_source=booking_source or list_occupying_bookings,
        blackout_suppresses=bool(cfg.get("BLACKOUT_SUPPRESSES_SLOTS", False)),
    )

def check_available_at(teacher_id: str, at: datetime, duration: int,
                       exclude_booking_id: Optional[str] = None, *,
                       booking_source: Optional[BookingSource] = None) -> AvailabilityCheck:
    get_teacher(teacher_id)
    _ensure_bounds(duration, SLOT_DURATION_BOUNDS, "duration")
    start = as_naive_utc(at)
    end = start + timedelta(minutes=duration)
    # rule bounds are same-day "HH:mm", a window past midnight never fits
    if end.date() != start.date():
        return AvailabilityCheck(False, REASON_NOT_AVAILABLE)

    dow = weekday_index(start.date())
    start_s, end_s = fmt_hhmm(start.time()), fmt_hhmm(end.time())
    rules = AvailabilityRule.query.filter_by(teacher_id=teacher_id, day_of_week=dow, is_active=True).all()
    covered = any(r.type == AvailabilityType.REGULAR and r.start_time <= start_s and r.end_time >= end_s
                  for r in rules)
    if not covered:
        return AvailabilityCheck(False, REASON_NOT_AVAILABLE)
    if current_app.config.get("BLACKOUT_SUPPRESSES_SLOTS", False) and any(
            r.type == AvailabilityType.BLACKOUT and overlaps(start_s, end_s, r.start_time, r.end_time)
            for r in rules):
        return AvailabilityCheck(False, REASON_NOT_AVAILABLE)

    source = booking_source or list_occupying_bookings
    # bookings are indexed by start; look back a day for ones already running
    for b in source(teacher_id, start - timedelta(days=1), end):
        if b.id != exclude_booking_id and b.intersects(start, end):
            return AvailabilityCheck(False, REASON_ALREADY_BOOKED)
    return AvailabilityCheck(True)

def check_available_bulk(teacher_id: str, checks: List[Dict[str, Any]], *,
                         booking_source: Optional[BookingSource] = None) -> List[Dict[str, Any]]:
    get_teacher(teacher_id)
    out = []
    for c in checks:
        res = check_available_at(teacher_id, c["date_time"], c["duration"], c.get("exclude_booking_id"),
                                 booking_source=booking_source)
        out.append({"date_time": c["date_time"], "duration": c["duration"],
                    "is_available": res.is_available, "reason": res.reason})
    return out

# ----------------------- Weekly / stats -----------------------
def get_weekly_schedule(teacher_id: str, week_start_date: Optional[date] = None,
                        weeks_count: int = 1, include_bookings: bool = True,
                        slot_duration: Optional[int] = None, *,
                        now: Optional[datetime] = None,
                        booking_source: Optional[BookingSource] = None) -> List[WeeklySchedule]:
    get_teacher(teacher_id)
    cfg = current_app.config
    _ensure_bounds(weeks_count, WEEKS_COUNT_BOUNDS, "weeks_count")
    slot_duration = _ensure_bounds(cfg["DEFAULT_SLOT_DURATION"] if slot_duration is None else slot_duration,
                                   SLOT_DURATION_BOUNDS, "slot_duration")
    if week_start_date is None:
        now_dt = as_naive_utc(now) if now else utcnow()
        week_start_date = week_start_for(now_dt.date())

    return weekly_schedule(
        teacher_id,
        week_start=week_start_date,
        weeks_count=weeks_count,
        slot_duration=slot_duration,
        break_time=cfg["WEEKLY_BREAK_TIME"],
        include_bookings=include_bookings,
        booking_source=booking_source,
        blackout_suppresses=bool(cfg.get("BLACKOUT_SUPPRESSES_SLOTS", False)),
    )

def get_stats(teacher_id: str) -> AvailabilityStats:
    get_teacher(teacher_id)
    return compute_stats(AvailabilityRule.query.filter_by(teacher_id=teacher_id).all())

def get_summary(teacher_id: str, *, now: Optional[datetime] = None,
                booking_source: Optional[BookingSource] = None) -> Dict[str, Any]:
    return {
        "schedule": list_rules(teacher_id),
        "stats": get_stats(teacher_id),
        "upcoming_weeks": get_weekly_schedule(
            teacher_id, weeks_count=current_app.config["SUMMARY_WEEKS"],
            now=now, booking_source=booking_source,
        ),
    }
