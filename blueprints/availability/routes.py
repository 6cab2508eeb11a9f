# blueprints/availability/routes.py
from __future__ import annotations
from typing import Any

from flask import jsonify, request
from pydantic import BaseModel, ValidationError

from . import api_bp
from . import services as svc
from .batch import BatchResult
from .errors import AvailabilityError
from .schemas import (
    AvailabilityCheckOut, AvailableAtIn, AvailableAtOut, BatchFailureOut, BatchResultOut,
    BulkAvailableAtIn, BulkRulesIn, ConflictCheckIn, ConflictOut, CopyIn,
    RuleIn, RuleOut, RuleQuery, RuleUpdateIn, SlotsQuery, StatsOut,
    SummaryOut, TimeSlotOut, WeeklyQuery, WeeklyScheduleOut,
)


# ----------------------- Helpers -----------------------
def ok(data: Any, status: int = 200):
    return jsonify(data), status

def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json")

def _pydantic_errors_safe(ve: ValidationError):
    errs = ve.errors(include_url=False)
    for e in errs:
        if "ctx" in e and isinstance(e["ctx"], dict):
            e["ctx"] = {k: str(v) for k, v in e["ctx"].items()}
    return errs

def _batch_out(result: BatchResult) -> dict:
    return _dump(BatchResultOut(
        success_count=result.success_count,
        failure_count=result.failure_count,
        successes=[RuleOut.from_rule(r) for r in result.successes],
        failures=[BatchFailureOut(index=f.index, error=f.error, data=f.data) for f in result.failures],
    ))

@api_bp.errorhandler(AvailabilityError)
def handle_availability_error(err: AvailabilityError):
    return jsonify(err.to_dict()), err.status

@api_bp.errorhandler(ValidationError)
def handle_validation_error(ve: ValidationError):
    return jsonify({"error": "validation_error", "detail": _pydantic_errors_safe(ve)}), 422

# ----------------------- Rules -----------------------
@api_bp.post("/teachers/<teacher_id>/availability")
def api_rule_create(teacher_id: str):
    data = RuleIn.model_validate(request.get_json(silent=True) or {})
    rule = svc.create_rule(teacher_id, data.day_of_week, data.start_time, data.end_time,
                           data.type, data.is_active)
    return ok(_dump(RuleOut.from_rule(rule)), 201)

@api_bp.get("/teachers/<teacher_id>/availability")
def api_rule_list(teacher_id: str):
    q = RuleQuery.model_validate(request.args.to_dict())
    rules = svc.list_rules(teacher_id, day_of_week=q.day_of_week, type=q.type, is_active=q.is_active)
    return ok([_dump(RuleOut.from_rule(r)) for r in rules])

@api_bp.put("/teachers/<teacher_id>/availability/<rule_id>")
def api_rule_update(teacher_id: str, rule_id: str):
    patch = RuleUpdateIn.model_validate(request.get_json(silent=True) or {})
    rule = svc.update_rule(teacher_id, rule_id, **patch.model_dump(exclude_unset=True))
    return ok(_dump(RuleOut.from_rule(rule)))

@api_bp.delete("/teachers/<teacher_id>/availability/<rule_id>")
def api_rule_delete(teacher_id: str, rule_id: str):
    svc.delete_rule(teacher_id, rule_id)
    return "", 204

@api_bp.post("/teachers/<teacher_id>/availability/bulk")
def api_rule_bulk(teacher_id: str):
    data = BulkRulesIn.model_validate(request.get_json(silent=True) or {})
    result = svc.bulk_create_rules(teacher_id, data.availabilities)
    return ok(_batch_out(result))

@api_bp.post("/teachers/<teacher_id>/availability/check-conflict")
def api_rule_check_conflict(teacher_id: str):
    data = ConflictCheckIn.model_validate(request.get_json(silent=True) or {})
    report = svc.check_conflict(teacher_id, data.day_of_week, data.start_time, data.end_time,
                                data.exclude_id, data.type)
    return ok(_dump(ConflictOut(
        has_conflict=report.has_conflict,
        conflict_message=report.message,
        conflicting_availabilities=[RuleOut.from_rule(r) for r in report.conflicting_rules],
    )))

@api_bp.post("/teachers/<teacher_id>/availability/copy")
def api_rule_copy(teacher_id: str):
    data = CopyIn.model_validate(request.get_json(silent=True) or {})
    result = svc.copy_rules(teacher_id, data.from_day_of_week, data.to_days_of_week, data.replace_existing)
    return ok(_batch_out(result))

# ----------------------- Slots / schedule -----------------------
@api_bp.get("/teachers/<teacher_id>/time-slots")
def api_time_slots(teacher_id: str):
    q = SlotsQuery.model_validate(request.args.to_dict())
    slots = svc.get_available_slots(teacher_id, q.start_date, q.end_date,
                                    q.duration, q.break_time, q.include_short_notice)
    return ok([_dump(TimeSlotOut.model_validate(s)) for s in slots])

@api_bp.post("/teachers/<teacher_id>/check-available")
def api_check_available(teacher_id: str):
    data = AvailableAtIn.model_validate(request.get_json(silent=True) or {})
    res = svc.check_available_at(teacher_id, data.date_time, data.duration, data.exclude_booking_id)
    return ok(_dump(AvailabilityCheckOut.model_validate(res)))

@api_bp.post("/teachers/<teacher_id>/check-available/bulk")
def api_check_available_bulk(teacher_id: str):
    data = BulkAvailableAtIn.model_validate(request.get_json(silent=True) or {})
    rows = svc.check_available_bulk(teacher_id, [s.model_dump() for s in data.slots])
    return ok([_dump(AvailableAtOut(**r)) for r in rows])

@api_bp.get("/teachers/<teacher_id>/weekly-schedule")
def api_weekly_schedule(teacher_id: str):
    q = WeeklyQuery.model_validate(request.args.to_dict())
    weeks = svc.get_weekly_schedule(teacher_id, q.week_start_date, q.weeks_count,
                                    q.include_bookings, q.slot_duration)
    return ok([_dump(WeeklyScheduleOut.model_validate(w)) for w in weeks])

@api_bp.get("/teachers/<teacher_id>/stats")
def api_stats(teacher_id: str):
    return ok(_dump(StatsOut.model_validate(svc.get_stats(teacher_id))))

@api_bp.get("/teachers/<teacher_id>/summary")
def api_summary(teacher_id: str):
    summary = svc.get_summary(teacher_id)
    return ok(_dump(SummaryOut(
        schedule=[RuleOut.from_rule(r) for r in summary["schedule"]],
        stats=StatsOut.model_validate(summary["stats"]),
        upcoming_weeks=[WeeklyScheduleOut.model_validate(w) for w in summary["upcoming_weeks"]],
    )))
