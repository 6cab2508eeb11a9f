# blueprints/availability/stats.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List

from models import AvailabilityRule
from .validators import round2, span_hours

EMPTY_BOUND = "00:00"


@dataclass
class AvailabilityStats:
    total_rules: int
    active_rules: int
    available_days: List[int]
    total_hours_per_week: float
    earliest_start_time: str
    latest_end_time: str
    avg_hours_per_day: float


def compute_stats(rules: Iterable[AvailabilityRule]) -> AvailabilityStats:
    rules = list(rules)
    active = [r for r in rules if r.is_active]
    days = sorted({r.day_of_week for r in active})
    total = sum(span_hours(r.start_time, r.end_time) for r in active)

    if active:
        earliest = min(r.start_time for r in active)
        latest = max(r.end_time for r in active)
    else:
        earliest = latest = EMPTY_BOUND

    return AvailabilityStats(
        total_rules=len(rules),
        active_rules=len(active),
        available_days=days,
        total_hours_per_week=total,
        earliest_start_time=earliest,
        latest_end_time=latest,
        avg_hours_per_day=round2(total / len(days)) if days else 0.0,
    )
