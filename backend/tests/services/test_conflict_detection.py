"""Buffered overlap detection."""

from __future__ import annotations

import uuid
from datetime import time

from winetours.services import conflict_service
from winetours.services.conflict_service import BookedWindow
from winetours.services.rule_service import CapacityPolicy
from winetours.services.slot_service import TimeSlot


def _window(start_hour: int, end_hour: int, vehicle_id: uuid.UUID | None = None) -> BookedWindow:
    return BookedWindow(
        booking_id=uuid.uuid4(),
        start_minute=start_hour * 60,
        end_minute=end_hour * 60,
        vehicle_id=vehicle_id,
    )


def test_adjacent_intervals_do_not_overlap() -> None:
    assert not conflict_service.overlaps(540, 780, 780, 1020)
    assert conflict_service.overlaps(540, 781, 780, 1020)


def test_buffer_extends_both_sides_of_a_booking() -> None:
    windows = [_window(9, 13)]
    late_slot = TimeSlot(start=time(14, 0), end=time(18, 0))

    assert conflict_service.count_overlaps(late_slot, windows, buffer_minutes=120) == 1
    assert conflict_service.count_overlaps(late_slot, windows, buffer_minutes=0) == 0


def test_slot_below_ceiling_is_open_until_it_reaches_it() -> None:
    windows = [_window(10, 16), _window(11, 17)]
    slot = TimeSlot(start=time(9, 0), end=time(15, 0))

    open_slots, conflicts = conflict_service.detect_conflicts(
        [slot], windows, buffer_minutes=120, max_concurrent_bookings=3
    )
    assert open_slots == [slot]
    assert conflicts == []

    windows.append(_window(9, 15))
    open_slots, conflicts = conflict_service.detect_conflicts(
        [slot], windows, buffer_minutes=120, max_concurrent_bookings=3
    )
    assert open_slots == []
    assert conflicts[0].overlapping == 3
    assert conflicts[0].describe() == "09:00-15:00 overlaps 3 existing booking(s)"


def test_open_slots_keep_grid_order() -> None:
    slots = [
        TimeSlot(start=time(9, 0), end=time(13, 0)),
        TimeSlot(start=time(14, 0), end=time(18, 0)),
    ]
    windows = [_window(9, 11)]
    open_slots, rejected = conflict_service.detect_conflicts(
        slots, windows, buffer_minutes=60, max_concurrent_bookings=1
    )
    assert open_slots == [slots[1]]
    assert [conflict.slot for conflict in rejected] == [slots[0]]


def test_daily_cap_counts_every_active_booking() -> None:
    policy = CapacityPolicy(max_concurrent_bookings=3, max_daily_bookings=2)
    assert not conflict_service.daily_cap_reached([_window(9, 13)], policy)
    assert conflict_service.daily_cap_reached([_window(9, 13), _window(14, 18)], policy)
