"""Pricing schema definitions."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from winetours.services.pricing_service import PricingSource, TOUR_DURATIONS_HOURS


class PricingQuoteRequest(BaseModel):
    """Input payload for quoting a tour without checking availability."""

    date: datetime.date
    duration_hours: int
    vehicle_type: str | None = Field(default=None, max_length=50)

    @field_validator("duration_hours")
    @classmethod
    def _check_duration(cls, value: int) -> int:
        if value not in TOUR_DURATIONS_HOURS:
            allowed = ", ".join(str(hours) for hours in TOUR_DURATIONS_HOURS)
            raise ValueError(f"duration_hours must be one of {allowed}")
        return value


class PricingQuoteRead(BaseModel):
    """Aggregated pricing response."""

    base_price: Decimal
    estimated_gratuity: Decimal
    taxes: Decimal
    total: Decimal
    deposit_required: Decimal
    final_payment: Decimal
    is_weekend: bool
    source: PricingSource
    rule_id: uuid.UUID | None = None
    vehicle_type: str
