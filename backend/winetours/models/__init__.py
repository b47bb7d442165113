"""ORM models package export."""

from winetours.models.availability_rule import AvailabilityRule, AvailabilityRuleType
from winetours.models.booking import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingDayLock,
    BookingStatus,
)
from winetours.models.pricing import PricingRule
from winetours.models.vehicle import Vehicle

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "AvailabilityRule",
    "AvailabilityRuleType",
    "Booking",
    "BookingDayLock",
    "BookingStatus",
    "PricingRule",
    "Vehicle",
]
