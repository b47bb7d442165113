"""Service layer exports."""
from winetours.services import (
    availability_service,
    blackout_service,
    booking_service,
    conflict_service,
    fleet_service,
    pricing_service,
    rule_service,
    slot_service,
    vehicle_selection_service,
)

__all__ = [
    "availability_service",
    "blackout_service",
    "booking_service",
    "conflict_service",
    "fleet_service",
    "pricing_service",
    "rule_service",
    "slot_service",
    "vehicle_selection_service",
]
