from .teacher import Teacher, new_id
from .availability import AvailabilityRule, AvailabilityType
from .booking import Booking, BookingStatus, OCCUPYING_STATUSES

__all__ = [
    "Teacher", "new_id",
    "AvailabilityRule", "AvailabilityType",
    "Booking", "BookingStatus", "OCCUPYING_STATUSES",
]
