"""Vehicle type resolution and tightest-fit selection."""

from __future__ import annotations

import uuid
from datetime import time

from winetours.services import vehicle_selection_service
from winetours.services.conflict_service import BookedWindow
from winetours.services.fleet_service import FleetVehicle
from winetours.services.slot_service import TimeSlot

SMALL = FleetVehicle(id=uuid.uuid4(), name="Sprinter A", vehicle_type="sprinter", capacity=10)
MEDIUM = FleetVehicle(id=uuid.uuid4(), name="Sprinter B", vehicle_type="sprinter", capacity=12)
LARGE = FleetVehicle(id=uuid.uuid4(), name="Sprinter C", vehicle_type="sprinter", capacity=14)
LIMO = FleetVehicle(id=uuid.uuid4(), name="Limo", vehicle_type="limo", capacity=8)


def test_default_type_applies_only_without_request() -> None:
    resolve = vehicle_selection_service.resolve_vehicle_type
    assert resolve(None, "sprinter") == "sprinter"
    assert resolve("  ", "sprinter") == "sprinter"
    assert resolve(" Limo ", "sprinter") == "limo"


def test_suitable_vehicles_smallest_fit_first() -> None:
    fleet = [LARGE, LIMO, SMALL, MEDIUM]
    fitting = vehicle_selection_service.suitable_vehicles(
        fleet, vehicle_type="sprinter", party_size=11
    )
    assert fitting == [MEDIUM, LARGE]


def test_party_larger_than_fleet_has_no_fit() -> None:
    assert (
        vehicle_selection_service.suitable_vehicles(
            [SMALL, MEDIUM], vehicle_type="sprinter", party_size=14
        )
        == []
    )


def test_select_vehicle_skips_assigned_vehicle() -> None:
    slot = TimeSlot(start=time(9, 0), end=time(13, 0))
    windows = [
        BookedWindow(
            booking_id=uuid.uuid4(), start_minute=13 * 60, end_minute=17 * 60, vehicle_id=MEDIUM.id
        )
    ]
    candidates = [MEDIUM, LARGE]

    assert (
        vehicle_selection_service.select_vehicle(candidates, slot, windows, buffer_minutes=60)
        == LARGE
    )
    assert (
        vehicle_selection_service.select_vehicle(candidates, slot, windows, buffer_minutes=0)
        == MEDIUM
    )


def test_select_vehicle_returns_none_when_all_assigned() -> None:
    slot = TimeSlot(start=time(10, 0), end=time(14, 0))
    windows = [
        BookedWindow(booking_id=uuid.uuid4(), start_minute=600, end_minute=840, vehicle_id=LARGE.id)
    ]
    assert (
        vehicle_selection_service.select_vehicle([LARGE], slot, windows, buffer_minutes=0)
        is None
    )


def test_suggested_vehicle_serialization() -> None:
    assert LARGE.to_dict() == {
        "id": str(LARGE.id),
        "name": "Sprinter C",
        "type": "sprinter",
        "capacity": 14,
    }
