from __future__ import annotations
import pytest

from app import create_app
from extensions import db
from models import AvailabilityRule, AvailabilityType, Teacher
from blueprints.availability import services as svc
from blueprints.availability.errors import (
    InvalidFormat, InvalidRange, RuleConflict, RuleNotFound, TeacherNotFound,
)

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
    db.session.commit()
    return t.id

def test_create_and_list(teacher_id):
    svc.create_rule(teacher_id, 3, "14:00", "18:00")
    rule = svc.create_rule(teacher_id, 1, "09:00", "12:00")
    assert rule.type == AvailabilityType.REGULAR and rule.is_active
    rules = svc.list_rules(teacher_id)
    assert [(r.day_of_week, r.start_time) for r in rules] == [(1, "09:00"), (3, "14:00")]
    assert [r.day_of_week for r in svc.list_rules(teacher_id, day_of_week=3)] == [3]

def test_create_rejects_overlap_but_allows_touching(teacher_id):
    svc.create_rule(teacher_id, 1, "09:00", "12:00")
    with pytest.raises(RuleConflict) as ei:
        svc.create_rule(teacher_id, 1, "11:00", "13:00")
    assert len(ei.value.details["conflicting_rule_ids"]) == 1
    svc.create_rule(teacher_id, 1, "12:00", "13:00")
    # other weekday is independent
    svc.create_rule(teacher_id, 2, "11:00", "13:00")
    assert AvailabilityRule.query.count() == 3

def test_create_validation_errors(teacher_id):
    with pytest.raises(InvalidFormat):
        svc.create_rule(teacher_id, 1, "9:00", "12:00")
    with pytest.raises(InvalidRange):
        svc.create_rule(teacher_id, 1, "12:00", "09:00")
    with pytest.raises(InvalidFormat):
        svc.create_rule(teacher_id, 1, "09:00", "12:00", type="WEEKLY")
    assert AvailabilityRule.query.count() == 0

def test_unknown_teacher(app_ctx):
    with pytest.raises(TeacherNotFound):
        svc.create_rule("missing", 1, "09:00", "12:00")
    with pytest.raises(TeacherNotFound):
        svc.list_rules("missing")

def test_inactive_rules_do_not_block(teacher_id):
    svc.create_rule(teacher_id, 1, "09:00", "12:00", is_active=False)
    svc.create_rule(teacher_id, 1, "10:00", "11:00")

def test_update_times_checks_conflicts(teacher_id):
    a = svc.create_rule(teacher_id, 1, "09:00", "10:00")
    svc.create_rule(teacher_id, 1, "11:00", "12:00")
    # growing into itself is fine
    a = svc.update_rule(teacher_id, a.id, end_time="11:00")
    assert a.end_time == "11:00"
    with pytest.raises(RuleConflict):
        svc.update_rule(teacher_id, a.id, end_time="11:30")
    with pytest.raises(InvalidRange):
        svc.update_rule(teacher_id, a.id, start_time="11:00")
    db.session.refresh(a)
    assert (a.start_time, a.end_time) == ("09:00", "11:00")

def test_reactivating_overlapping_rule_conflicts(teacher_id):
    old = svc.create_rule(teacher_id, 1, "09:00", "12:00", is_active=False)
    svc.create_rule(teacher_id, 1, "10:00", "11:00")
    with pytest.raises(RuleConflict):
        svc.update_rule(teacher_id, old.id, is_active=True)
    # deactivating or retyping never conflicts
    svc.update_rule(teacher_id, old.id, type=AvailabilityType.BLACKOUT)

def test_update_and_delete_missing_rule(teacher_id):
    with pytest.raises(RuleNotFound):
        svc.update_rule(teacher_id, "nope", start_time="09:00")
    with pytest.raises(RuleNotFound):
        svc.delete_rule(teacher_id, "nope")

def test_delete(teacher_id):
    rule = svc.create_rule(teacher_id, 1, "09:00", "12:00")
    svc.delete_rule(teacher_id, rule.id)
    assert svc.list_rules(teacher_id) == []

def test_check_conflict_report(teacher_id):
    rule = svc.create_rule(teacher_id, 1, "09:00", "12:00")
    rep = svc.check_conflict(teacher_id, 1, "11:00", "13:00")
    assert rep.has_conflict and [r.id for r in rep.conflicting_rules] == [rule.id]
    rep = svc.check_conflict(teacher_id, 1, "11:00", "13:00", exclude_rule_id=rule.id)
    assert not rep.has_conflict

def test_conflicts_are_checked_within_kind(teacher_id):
    svc.create_rule(teacher_id, 1, "09:00", "12:00")
    blackout = svc.create_rule(teacher_id, 1, "10:00", "10:30", type="BLACKOUT")
    assert blackout.type == AvailabilityType.BLACKOUT
    with pytest.raises(RuleConflict):
        svc.create_rule(teacher_id, 1, "10:15", "11:00", type="BLACKOUT")
    # ONE_TIME windows still collide with REGULAR ones
    with pytest.raises(RuleConflict):
        svc.create_rule(teacher_id, 1, "11:00", "13:00", type="ONE_TIME")
    report = svc.check_conflict(teacher_id, 1, "10:15", "11:00", type="BLACKOUT")
    assert [r.id for r in report.conflicting_rules] == [blackout.id]

def test_retyping_checks_target_kind(teacher_id):
    svc.create_rule(teacher_id, 1, "09:00", "12:00")
    blackout = svc.create_rule(teacher_id, 1, "10:00", "10:30", type="BLACKOUT")
    with pytest.raises(RuleConflict):
        svc.update_rule(teacher_id, blackout.id, type=AvailabilityType.REGULAR)

def test_update_with_empty_time_is_rejected(teacher_id):
    rule = svc.create_rule(teacher_id, 1, "09:00", "12:00")
    with pytest.raises(InvalidFormat):
        svc.update_rule(teacher_id, rule.id, start_time="")
    with pytest.raises(InvalidFormat):
        svc.update_rule(teacher_id, rule.id, end_time="")

def test_update_and_delete_unknown_teacher(teacher_id):
    rule = svc.create_rule(teacher_id, 1, "09:00", "12:00")
    with pytest.raises(TeacherNotFound):
        svc.update_rule("missing", rule.id, end_time="13:00")
    with pytest.raises(TeacherNotFound):
        svc.delete_rule("missing", rule.id)
