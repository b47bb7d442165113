"""Tightest-fit vehicle selection."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from winetours.services.conflict_service import BookedWindow, overlaps
from winetours.services.fleet_service import FleetVehicle
from winetours.services.slot_service import TimeSlot


def resolve_vehicle_type(requested: str | None, default: str) -> str:
    """Return the requested type, or the configured default when none is given.

    Party size never influences the default.
    """
    if requested is None or not requested.strip():
        return default.strip().lower()
    return requested.strip().lower()


def suitable_vehicles(
    fleet: Iterable[FleetVehicle],
    *,
    vehicle_type: str,
    party_size: int,
) -> list[FleetVehicle]:
    """Vehicles of the type that seat the party, smallest capacity first."""
    candidates = [
        vehicle
        for vehicle in fleet
        if vehicle.vehicle_type == vehicle_type and vehicle.capacity >= party_size
    ]
    candidates.sort(key=lambda vehicle: (vehicle.capacity, vehicle.id))
    return candidates


def is_vehicle_free(
    vehicle: FleetVehicle,
    slot: TimeSlot,
    windows: Sequence[BookedWindow],
    *,
    buffer_minutes: int,
) -> bool:
    for window in windows:
        if window.vehicle_id != vehicle.id:
            continue
        buffered_start, buffered_end = window.buffered(buffer_minutes)
        if overlaps(slot.start_minute, slot.end_minute, buffered_start, buffered_end):
            return False
    return True


def select_vehicle(
    candidates: Sequence[FleetVehicle],
    slot: TimeSlot,
    windows: Sequence[BookedWindow],
    *,
    buffer_minutes: int,
) -> FleetVehicle | None:
    """Return the smallest candidate not already assigned around ``slot``.

    ``candidates`` must already be ordered by :func:`suitable_vehicles`.
    """
    for vehicle in candidates:
        if is_vehicle_free(vehicle, slot, windows, buffer_minutes=buffer_minutes):
            return vehicle
    return None
