"""Candidate time-slot generation within business hours."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time

BUSINESS_OPEN = time(9, 0)
BUSINESS_CLOSE = time(18, 0)
SLOT_INTERVAL_MINUTES = 60


def to_minutes(moment: time) -> int:
    return moment.hour * 60 + moment.minute


def from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


@dataclass(slots=True, frozen=True, order=True)
class TimeSlot:
    """Contiguous tour window on a single day."""

    start: time
    end: time

    @property
    def start_minute(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minute(self) -> int:
        return to_minutes(self.end)

    def to_dict(self) -> dict[str, str]:
        return {
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
        }


def generate_time_slots(duration_hours: int) -> list[TimeSlot]:
    """Return hourly slots from opening until the latest start that still ends by close.

    Never consults bookings. A duration that does not fit the business day
    yields an empty list.
    """
    if duration_hours <= 0:
        return []
    duration = duration_hours * 60
    open_minute = to_minutes(BUSINESS_OPEN)
    latest_start = to_minutes(BUSINESS_CLOSE) - duration
    return [
        TimeSlot(start=from_minutes(start), end=from_minutes(start + duration))
        for start in range(open_minute, latest_start + 1, SLOT_INTERVAL_MINUTES)
    ]


def slot_for_start(start: time, duration_hours: int) -> TimeSlot | None:
    """Return the generated slot beginning at ``start``, if there is one."""
    for slot in generate_time_slots(duration_hours):
        if slot.start == start:
            return slot
    return None
