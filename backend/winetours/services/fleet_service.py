"""Fleet catalog queries."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.models import Vehicle


@dataclass(slots=True, frozen=True)
class FleetVehicle:
    """Bookable vehicle as seen by the availability engine."""

    id: uuid.UUID
    name: str
    vehicle_type: str
    capacity: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "type": self.vehicle_type,
            "capacity": self.capacity,
        }


async def list_operational_vehicles(
    session: AsyncSession,
    *,
    vehicle_type: str | None = None,
) -> list[FleetVehicle]:
    """Return active, operational vehicles ordered by capacity then id.

    Vehicle types are matched and reported in lower case.
    """
    stmt = select(Vehicle).where(
        Vehicle.is_active.is_(True),
        Vehicle.is_operational.is_(True),
    )
    if vehicle_type is not None:
        stmt = stmt.where(
            func.lower(func.trim(Vehicle.vehicle_type)) == vehicle_type.strip().lower()
        )
    result = await session.execute(stmt)
    vehicles = [
        FleetVehicle(
            id=vehicle.id,
            name=vehicle.name,
            vehicle_type=vehicle.vehicle_type.strip().lower(),
            capacity=vehicle.capacity,
        )
        for vehicle in result.scalars().all()
    ]
    vehicles.sort(key=lambda vehicle: (vehicle.capacity, vehicle.id))
    return vehicles
