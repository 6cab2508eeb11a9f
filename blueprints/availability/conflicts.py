# blueprints/availability/conflicts.py
"""Conflict Detector for a teacher's active rules on one day of week."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from models import AvailabilityRule, AvailabilityType
from .errors import RuleConflict


def starts_inside(start: str, end: str, ex_start: str, ex_end: str) -> bool:
    return ex_start <= start < ex_end


def ends_inside(start: str, end: str, ex_start: str, ex_end: str) -> bool:
    return ex_start < end <= ex_end


def encompasses(start: str, end: str, ex_start: str, ex_end: str) -> bool:
    return start <= ex_start and ex_end <= end


def overlaps(start: str, end: str, ex_start: str, ex_end: str) -> bool:
    """[start,end) against existing [ex_start,ex_end); shared endpoints do not overlap."""
    return (starts_inside(start, end, ex_start, ex_end)
            or ends_inside(start, end, ex_start, ex_end)
            or encompasses(start, end, ex_start, ex_end))


# availability windows collide with each other, blackouts only with blackouts
AVAILABLE_KINDS = (AvailabilityType.REGULAR, AvailabilityType.ONE_TIME)
BLACKOUT_KINDS = (AvailabilityType.BLACKOUT,)


def overlapping_kinds(kind: AvailabilityType) -> Tuple[AvailabilityType, ...]:
    return BLACKOUT_KINDS if kind == AvailabilityType.BLACKOUT else AVAILABLE_KINDS


@dataclass
class ConflictReport:
    has_conflict: bool
    message: str
    conflicting_rules: List[AvailabilityRule] = field(default_factory=list)


def find_conflicts(teacher_id: str, day_of_week: int, start_time: str, end_time: str,
                   exclude_rule_id: Optional[str] = None,
                   kind: AvailabilityType = AvailabilityType.REGULAR) -> List[AvailabilityRule]:
    q = (AvailabilityRule.query
         .filter_by(teacher_id=teacher_id, day_of_week=day_of_week, is_active=True)
         .filter(AvailabilityRule.type.in_(overlapping_kinds(kind))))
    if exclude_rule_id:
        q = q.filter(AvailabilityRule.id != exclude_rule_id)
    rules = q.order_by(AvailabilityRule.start_time.asc()).all()
    return [r for r in rules if overlaps(start_time, end_time, r.start_time, r.end_time)]


def conflict_report(teacher_id: str, day_of_week: int, start_time: str, end_time: str,
                    exclude_rule_id: Optional[str] = None,
                    kind: AvailabilityType = AvailabilityType.REGULAR) -> ConflictReport:
    rules = find_conflicts(teacher_id, day_of_week, start_time, end_time, exclude_rule_id, kind)
    if not rules:
        return ConflictReport(has_conflict=False, message="No conflicts found")
    return ConflictReport(
        has_conflict=True,
        message=f"Time slot conflicts with {len(rules)} existing availability slot(s)",
        conflicting_rules=rules,
    )


def ensure_no_conflict(teacher_id: str, day_of_week: int, start_time: str, end_time: str,
                       exclude_rule_id: Optional[str] = None,
                       kind: AvailabilityType = AvailabilityType.REGULAR) -> None:
    report = conflict_report(teacher_id, day_of_week, start_time, end_time, exclude_rule_id, kind)
    if report.has_conflict:
        raise RuleConflict(report.message, details={
            "day_of_week": day_of_week,
            "conflicting_rule_ids": [r.id for r in report.conflicting_rules],
        })
