"""Booking schemas."""
from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from winetours.models.booking import BookingStatus
from winetours.schemas.availability import TourRequestBase


class BookingCreate(TourRequestBase):
    """Payload to book a tour; ``start_time`` is mandatory here."""

    start_time: datetime.time
    customer_name: str | None = Field(default=None, max_length=255)
    customer_email: EmailStr | None = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingRead(BaseModel):
    """Serialized booking."""

    id: uuid.UUID
    date: datetime.date = Field(validation_alias="tour_date")
    start_time: datetime.time
    end_time: datetime.time
    duration_hours: int
    party_size: int
    vehicle_type: str | None
    vehicle_id: uuid.UUID | None
    status: BookingStatus
    customer_name: str | None
    customer_email: str | None
    total_price: Decimal | None
    deposit_amount: Decimal | None
    final_payment_amount: Decimal | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class SlotUnavailableRead(BaseModel):
    reason: str
    message: str
    cause: str | None = None
