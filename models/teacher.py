from __future__ import annotations
import uuid

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db


def new_id() -> str:
    return str(uuid.uuid4())


class Teacher(db.Model):
    """Teacher profile subset the scheduling engine reads (identity + booking policy)."""
    __tablename__ = "teachers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # declared zone is stored and echoed, never used for conversion
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    advance_notice_hours: Mapped[int | None] = mapped_column(Integer, default=24)
    max_advance_booking_hours: Mapped[int | None] = mapped_column(Integer, default=720)

    availability_rules = relationship("AvailabilityRule", back_populates="teacher", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Teacher {self.full_name}>"
