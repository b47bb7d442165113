"""Tour booking models."""
from __future__ import annotations

import enum
import uuid
from datetime import date, time
from decimal import Decimal

from sqlalchemy import Date, Enum, ForeignKey, Integer, Numeric, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from winetours.db.base import Base
from winetours.models.mixins import TimestampMixin
from winetours.models.vehicle import Vehicle


class BookingStatus(str, enum.Enum):
    """Lifecycle states for tour bookings."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_BOOKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)


class Booking(TimestampMixin, Base):
    """A reserved tour occupying fleet capacity on one date."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    tour_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[time] = mapped_column(Time(), nullable=False)
    duration_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    vehicle_type: Mapped[str | None] = mapped_column(String(50))
    vehicle_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False
    )
    customer_name: Mapped[str | None] = mapped_column(String(255))
    customer_email: Mapped[str | None] = mapped_column(String(320))
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    deposit_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    final_payment_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    vehicle: Mapped[Vehicle | None] = relationship("Vehicle", lazy="raise")


class BookingDayLock(Base):
    """One row per tour date; locked while a booking for that date is written."""

    __tablename__ = "booking_day_locks"

    tour_date: Mapped[date] = mapped_column(Date, primary_key=True)
