"""Schema exports."""

from winetours.schemas.availability import (
    AvailabilityAvailableRead,
    AvailabilityCheckRequest,
    AvailabilityUnavailableRead,
    AvailableDatesRead,
    PricingBreakdownRead,
    SuggestedVehicleRead,
    TimeSlotRead,
    TourRequestBase,
)
from winetours.schemas.booking import (
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    SlotUnavailableRead,
)
from winetours.schemas.pricing import PricingQuoteRead, PricingQuoteRequest

__all__ = [
    "AvailabilityAvailableRead",
    "AvailabilityCheckRequest",
    "AvailabilityUnavailableRead",
    "AvailableDatesRead",
    "BookingCreate",
    "BookingRead",
    "BookingStatusUpdate",
    "PricingBreakdownRead",
    "PricingQuoteRead",
    "PricingQuoteRequest",
    "SlotUnavailableRead",
    "SuggestedVehicleRead",
    "TimeSlotRead",
    "TourRequestBase",
]
