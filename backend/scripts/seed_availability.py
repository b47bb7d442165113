"""Seed default availability rules, sprinter pricing and a starter fleet."""

from __future__ import annotations

import asyncio
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from winetours.db.session import get_sessionmaker
from winetours.models import (
    AvailabilityRule,
    AvailabilityRuleType,
    PricingRule,
    Vehicle,
)

BUFFER_RULE = "Default buffer time"
CAPACITY_RULE = "Default capacity limit"
WEEKEND_MULTIPLIER = Decimal("1.20")

SPRINTER_PRICES: dict[int, Decimal] = {
    4: Decimal("600.00"),
    6: Decimal("800.00"),
    8: Decimal("1000.00"),
}

STARTER_FLEET: tuple[tuple[str, str, int], ...] = (
    ("Sprinter 1", "sprinter", 14),
    ("Sprinter 2", "sprinter", 14),
    ("Sprinter 3", "sprinter", 12),
)


async def _rule_names(session: AsyncSession) -> set[str]:
    result = await session.execute(select(AvailabilityRule.name))
    return set(result.scalars().all())


async def _pricing_names(session: AsyncSession) -> set[str]:
    result = await session.execute(select(PricingRule.name))
    return set(result.scalars().all())


async def _vehicle_names(session: AsyncSession) -> set[str]:
    result = await session.execute(select(Vehicle.name))
    return set(result.scalars().all())


async def seed_availability(
    sessionmaker: async_sessionmaker[AsyncSession] | None = None,
) -> dict[str, int]:
    """Insert any missing seed rows; returns how many of each kind were added."""
    sessionmaker = sessionmaker or get_sessionmaker()
    created = {"rules": 0, "pricing": 0, "vehicles": 0}
    async with sessionmaker() as session:
        rule_names = await _rule_names(session)
        if BUFFER_RULE not in rule_names:
            session.add(
                AvailabilityRule(
                    name=BUFFER_RULE,
                    rule_type=AvailabilityRuleType.BUFFER_TIME,
                    buffer_minutes=120,
                )
            )
            created["rules"] += 1
        if CAPACITY_RULE not in rule_names:
            session.add(
                AvailabilityRule(
                    name=CAPACITY_RULE,
                    rule_type=AvailabilityRuleType.CAPACITY_LIMIT,
                    max_concurrent_bookings=3,
                    max_daily_bookings=5,
                )
            )
            created["rules"] += 1

        pricing_names = await _pricing_names(session)
        for hours, price in SPRINTER_PRICES.items():
            name = f"Sprinter {hours}-hour tour"
            if name in pricing_names:
                continue
            session.add(
                PricingRule(
                    name=name,
                    vehicle_type="sprinter",
                    duration_hours=hours,
                    base_price=price,
                    weekend_multiplier=WEEKEND_MULTIPLIER,
                )
            )
            created["pricing"] += 1

        vehicle_names = await _vehicle_names(session)
        for name, vehicle_type, capacity in STARTER_FLEET:
            if name in vehicle_names:
                continue
            session.add(Vehicle(name=name, vehicle_type=vehicle_type, capacity=capacity))
            created["vehicles"] += 1

        await session.commit()
    return created


async def main() -> None:
    created = await seed_availability()
    print(
        "Seeded {rules} availability rules, {pricing} pricing rules and "
        "{vehicles} vehicles.".format(**created)
    )


if __name__ == "__main__":
    asyncio.run(main())
