# blueprints/availability/errors.py
from __future__ import annotations
from typing import Any, Optional


class AvailabilityError(Exception):
    """Base for every scheduling-engine failure the HTTP layer turns into JSON."""

    code = "AVAILABILITY_ERROR"
    status = 400

    def __init__(self, message: str, *, field: Optional[str] = None,
                 details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.field:
            payload["field"] = self.field
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidFormat(AvailabilityError):
    code = "INVALID_FORMAT"


class InvalidRange(AvailabilityError):
    code = "INVALID_RANGE"


class RuleConflict(AvailabilityError):
    code = "CONFLICT"
    status = 409


class RuleNotFound(AvailabilityError):
    code = "NOT_FOUND"
    status = 404


class TeacherNotFound(AvailabilityError):
    code = "TEACHER_NOT_FOUND"
    status = 404
