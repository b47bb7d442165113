"""Buffered overlap detection against existing bookings."""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.models import ACTIVE_BOOKING_STATUSES, Booking
from winetours.services.rule_service import CapacityPolicy
from winetours.services.slot_service import TimeSlot, to_minutes


@dataclass(slots=True, frozen=True)
class BookedWindow:
    """An active booking reduced to what overlap checks need.

    Minutes are counted from midnight of the tour date.
    """

    booking_id: uuid.UUID
    start_minute: int
    end_minute: int
    vehicle_id: uuid.UUID | None = None

    def buffered(self, buffer_minutes: int) -> tuple[int, int]:
        return self.start_minute - buffer_minutes, self.end_minute + buffer_minutes


@dataclass(slots=True, frozen=True)
class SlotConflict:
    """A rejected candidate slot and how many buffered bookings it overlapped."""

    slot: TimeSlot
    overlapping: int

    def describe(self) -> str:
        window = self.slot.to_dict()
        return (
            f"{window['start']}-{window['end']} overlaps {self.overlapping} "
            "existing booking(s)"
        )


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Half-open interval overlap test."""
    return start < other_end and end > other_start


def count_overlaps(
    slot: TimeSlot,
    windows: Iterable[BookedWindow],
    *,
    buffer_minutes: int,
) -> int:
    """Count buffered bookings that overlap ``slot``."""
    count = 0
    for window in windows:
        buffered_start, buffered_end = window.buffered(buffer_minutes)
        if overlaps(slot.start_minute, slot.end_minute, buffered_start, buffered_end):
            count += 1
    return count


def daily_cap_reached(windows: Sequence[BookedWindow], policy: CapacityPolicy) -> bool:
    return len(windows) >= policy.max_daily_bookings


def detect_conflicts(
    slots: Iterable[TimeSlot],
    windows: Sequence[BookedWindow],
    *,
    buffer_minutes: int,
    max_concurrent_bookings: int,
) -> tuple[list[TimeSlot], list[SlotConflict]]:
    """Split candidate slots into open slots and rejected ones."""
    open_slots: list[TimeSlot] = []
    conflicts: list[SlotConflict] = []
    for slot in slots:
        overlapping = count_overlaps(slot, windows, buffer_minutes=buffer_minutes)
        if overlapping >= max_concurrent_bookings:
            conflicts.append(SlotConflict(slot=slot, overlapping=overlapping))
        else:
            open_slots.append(slot)
    return open_slots, conflicts


def to_booked_window(booking: Booking) -> BookedWindow:
    return BookedWindow(
        booking_id=booking.id,
        start_minute=to_minutes(booking.start_time),
        end_minute=to_minutes(booking.end_time),
        vehicle_id=booking.vehicle_id,
    )


async def load_booked_windows(
    session: AsyncSession,
    *,
    start_date: datetime.date,
    end_date: datetime.date,
) -> dict[datetime.date, list[BookedWindow]]:
    """Return active bookings between the dates (inclusive) grouped by date."""
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")
    stmt = (
        select(Booking)
        .where(
            Booking.tour_date >= start_date,
            Booking.tour_date <= end_date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        .order_by(Booking.tour_date, Booking.start_time, Booking.id)
    )
    result = await session.execute(stmt)
    grouped: dict[datetime.date, list[BookedWindow]] = {}
    for booking in result.scalars().all():
        grouped.setdefault(booking.tour_date, []).append(to_booked_window(booking))
    return grouped
