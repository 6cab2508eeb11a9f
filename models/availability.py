from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db
from .teacher import new_id


class AvailabilityType(str, PyEnum):
    REGULAR = "REGULAR"      # weekly recurring
    ONE_TIME = "ONE_TIME"    # specific date
    BLACKOUT = "BLACKOUT"    # explicit unavailability


class AvailabilityRule(db.Model):
    __tablename__ = "availability_rules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=Sun .. 6=Sat
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # "HH:mm"
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    type: Mapped[AvailabilityType] = mapped_column(
        Enum(AvailabilityType, name="availability_type"), nullable=False, default=AvailabilityType.REGULAR
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    teacher = relationship("Teacher", back_populates="availability_rules")

    __table_args__ = (
        Index("ix_availability_rules_teacher_day", "teacher_id", "day_of_week"),
    )

    def __repr__(self):
        return f"<AvailabilityRule {self.day_of_week} {self.start_time}-{self.end_time}>"
