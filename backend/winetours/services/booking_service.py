"""Booking creation and lifecycle.

Creation is the only write path that consumes availability decisions. It
locks the per-date :class:`BookingDayLock` row, re-evaluates the requested
slot against the latest committed bookings and inserts only if the slot is
still available, so concurrent requests for one date are serialized even
across service instances. On SQLite, which has no row locks, the
transaction is opened with ``BEGIN IMMEDIATE`` instead.
"""
from __future__ import annotations

import datetime
import logging
import uuid

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.core.config import get_settings
from winetours.models import Booking, BookingDayLock, BookingStatus
from winetours.services import availability_service
from winetours.services.availability_service import (
    AvailabilityRequest,
    AvailabilityValidationError,
)

logger = logging.getLogger(__name__)

SLOT_NO_LONGER_AVAILABLE = "slot_no_longer_available"

_ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


class SlotUnavailableError(Exception):
    """The requested slot failed the re-check at write time; the caller may retry."""

    def __init__(self, cause: str | None, message: str | None) -> None:
        super().__init__(message or "Slot is no longer available")
        self.reason = SLOT_NO_LONGER_AVAILABLE
        self.cause = cause
        self.message = message or "Slot is no longer available"


def _is_sqlite(session: AsyncSession) -> bool:
    bind = session.get_bind()
    return getattr(getattr(bind, "dialect", None), "name", "") == "sqlite"


async def _acquire_sqlite_write_lock(session: AsyncSession) -> None:
    # SQLite ignores FOR UPDATE; take the database write lock before reading.
    if not _is_sqlite(session):
        return
    if session.in_transaction():
        await session.commit()
    await session.execute(text("BEGIN IMMEDIATE"))


async def _lock_booking_day(
    session: AsyncSession, tour_date: datetime.date
) -> BookingDayLock:
    await _acquire_sqlite_write_lock(session)
    stmt = (
        select(BookingDayLock)
        .where(BookingDayLock.tour_date == tour_date)
        .with_for_update()
    )
    lock = (await session.execute(stmt)).scalar_one_or_none()
    if lock is not None:
        return lock

    lock = BookingDayLock(tour_date=tour_date)
    try:
        async with session.begin_nested():
            session.add(lock)
    except IntegrityError:
        # Another writer created the row first; wait on its lock instead.
        lock = (await session.execute(stmt)).scalar_one()
    return lock


async def create_booking(
    session: AsyncSession,
    *,
    request: AvailabilityRequest,
    customer_name: str | None = None,
    customer_email: str | None = None,
    today: datetime.date | None = None,
    now: datetime.datetime | None = None,
) -> Booking:
    """Re-check availability under the day lock and insert the booking."""
    settings = get_settings()
    if request.start_time is None:
        raise AvailabilityValidationError("start_time", "is required to create a booking")
    now = availability_service.reference_now(today, now)
    availability_service.validate_request(
        request,
        now=now,
        max_party_size=settings.max_party_size,
    )

    await _lock_booking_day(session, request.tour_date)
    snapshot = await availability_service.load_snapshot(
        session, start_date=request.tour_date, end_date=request.tour_date
    )
    result = availability_service.evaluate(
        snapshot,
        request,
        default_vehicle_type=settings.default_vehicle_type,
        not_before=now,
    )
    if not result.available or result.suggested_vehicle is None:
        await session.rollback()
        cause = result.reason.value if result.reason else None
        logger.warning(
            "Booking rejected on re-check for %s %s: %s",
            request.tour_date,
            request.start_time,
            cause,
        )
        raise SlotUnavailableError(cause, result.message)

    slot = result.available_times[0]
    vehicle = result.suggested_vehicle
    booking = Booking(
        tour_date=request.tour_date,
        start_time=slot.start,
        end_time=slot.end,
        duration_hours=request.duration_hours,
        party_size=request.party_size,
        vehicle_type=vehicle.vehicle_type,
        vehicle_id=vehicle.id,
        status=BookingStatus.PENDING,
        customer_name=customer_name,
        customer_email=customer_email,
        total_price=result.pricing.total if result.pricing else None,
        deposit_amount=result.pricing.deposit_required if result.pricing else None,
        final_payment_amount=(
            result.pricing.final_payment if result.pricing else None
        ),
    )
    session.add(booking)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(booking)
    logger.info(
        "Booking %s created for %s %s on vehicle %s",
        booking.id,
        booking.tour_date,
        slot.to_dict()["start"],
        vehicle.id,
    )
    return booking


async def get_booking(
    session: AsyncSession, *, booking_id: uuid.UUID
) -> Booking | None:
    return await session.get(Booking, booking_id)


def _validate_status_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target == current:
        return
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValueError(
            f"Invalid status transition from {current.value} to {target.value}"
        )


async def update_booking_status(
    session: AsyncSession,
    *,
    booking: Booking,
    status: BookingStatus,
) -> Booking:
    """Move a booking through its lifecycle; cancelling frees its capacity."""
    _validate_status_transition(booking.status, status)
    booking.status = status
    session.add(booking)
    await session.commit()
    await session.refresh(booking)
    logger.info("Booking %s is now %s", booking.id, status.value)
    return booking
