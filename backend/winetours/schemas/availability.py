"""Schemas for availability checks and the booking calendar."""
from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from winetours.core.config import get_settings
from winetours.services.pricing_service import TOUR_DURATIONS_HOURS


class TourRequestBase(BaseModel):
    """Fields shared by availability checks and booking requests."""

    date: datetime.date
    duration_hours: int
    party_size: int = Field(ge=1)
    start_time: datetime.time | None = None
    vehicle_type: str | None = Field(default=None, max_length=50)

    @field_validator("duration_hours")
    @classmethod
    def _check_duration(cls, value: int) -> int:
        if value not in TOUR_DURATIONS_HOURS:
            allowed = ", ".join(str(hours) for hours in TOUR_DURATIONS_HOURS)
            raise ValueError(f"duration_hours must be one of {allowed}")
        return value

    @field_validator("party_size")
    @classmethod
    def _check_party_size(cls, value: int) -> int:
        limit = get_settings().max_party_size
        if value > limit:
            raise ValueError(f"party_size must be at most {limit}")
        return value

    @field_validator("vehicle_type")
    @classmethod
    def _normalize_vehicle_type(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None


class AvailabilityCheckRequest(TourRequestBase):
    """Input payload for checking a specific tour request."""


class TimeSlotRead(BaseModel):
    start: str
    end: str


class SuggestedVehicleRead(BaseModel):
    id: str
    name: str
    type: str
    capacity: int


class PricingBreakdownRead(BaseModel):
    base_price: Decimal
    estimated_gratuity: Decimal
    taxes: Decimal
    total: Decimal
    deposit_required: Decimal
    final_payment: Decimal


class AvailabilityAvailableRead(BaseModel):
    """Positive availability decision."""

    available: Literal[True]
    available_times: list[TimeSlotRead]
    suggested_vehicle: SuggestedVehicleRead
    pricing: PricingBreakdownRead


class AvailabilityUnavailableRead(BaseModel):
    """Negative availability decision; not an error."""

    available: Literal[False]
    reason: Literal[
        "blocked_date", "daily_cap_reached", "no_open_slots", "no_suitable_vehicle"
    ]
    message: str
    conflicts: list[str] = Field(default_factory=list)


class AvailableDatesRead(BaseModel):
    year: int
    month: int
    available_dates: list[datetime.date]
    count: int
