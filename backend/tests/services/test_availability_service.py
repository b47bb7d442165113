"""Service-level tests for availability decisions."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

import pytest

from winetours.db.session import get_sessionmaker
from winetours.models import (
    AvailabilityRule,
    AvailabilityRuleType,
    Booking,
    BookingStatus,
    PricingRule,
    Vehicle,
)
from winetours.services import availability_service
from winetours.services.availability_service import (
    AvailabilityRequest,
    AvailabilityStage,
    AvailabilityValidationError,
    UnavailableReason,
)

pytestmark = pytest.mark.asyncio

TODAY = datetime.date(2030, 6, 1)
TUESDAY = datetime.date(2030, 6, 4)


async def _seed_fleet(session, *capacities: int) -> list[Vehicle]:
    vehicles = [
        Vehicle(name=f"Sprinter {index}", vehicle_type="sprinter", capacity=capacity)
        for index, capacity in enumerate(capacities, start=1)
    ]
    session.add_all(vehicles)
    await session.flush()
    return vehicles


async def _seed_capacity(session, *, concurrent: int = 3, daily: int = 5, buffer: int = 120) -> None:
    session.add_all(
        [
            AvailabilityRule(
                name="Capacity",
                rule_type=AvailabilityRuleType.CAPACITY_LIMIT,
                max_concurrent_bookings=concurrent,
                max_daily_bookings=daily,
            ),
            AvailabilityRule(
                name="Buffer",
                rule_type=AvailabilityRuleType.BUFFER_TIME,
                buffer_minutes=buffer,
            ),
        ]
    )
    await session.flush()


def _booking(
    day: datetime.date,
    start_hour: int,
    end_hour: int,
    *,
    vehicle_id: uuid.UUID | None = None,
    status: BookingStatus = BookingStatus.CONFIRMED,
) -> Booking:
    return Booking(
        tour_date=day,
        start_time=datetime.time(start_hour, 0),
        end_time=datetime.time(end_hour, 0),
        duration_hours=end_hour - start_hour,
        party_size=6,
        vehicle_type="sprinter",
        vehicle_id=vehicle_id,
        status=status,
    )


def _request(**overrides) -> AvailabilityRequest:
    values = {"tour_date": TUESDAY, "duration_hours": 4, "party_size": 6}
    values.update(overrides)
    return AvailabilityRequest(**values)


async def test_available_date_returns_slots_vehicle_and_pricing(
    reset_database, db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        small, _large = await _seed_fleet(session, 12, 14)
        await _seed_capacity(session)
        session.add(
            PricingRule(
                name="Sprinter 4h",
                vehicle_type="sprinter",
                duration_hours=4,
                base_price=Decimal("600.00"),
                weekend_multiplier=Decimal("1.20"),
            )
        )
        await session.commit()

        result = await availability_service.check_availability(
            session, _request(), today=TODAY
        )

    assert result.available
    assert result.stage is AvailabilityStage.RESULT
    assert len(result.available_times) == 6
    assert result.suggested_vehicle is not None
    assert result.suggested_vehicle.id == small.id
    payload = result.to_dict()
    assert payload["available_times"][0] == {"start": "09:00", "end": "13:00"}
    assert payload["suggested_vehicle"]["capacity"] == 12
    assert payload["pricing"]["total"] == "744.00"


async def test_daily_cap_reached(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        await _seed_capacity(session, concurrent=10, daily=5)
        for hour in (9, 10, 11, 12, 13):
            session.add(_booking(TUESDAY, hour, hour + 4))
        await session.commit()

        result = await availability_service.check_availability(
            session, _request(), today=TODAY
        )

    assert not result.available
    assert result.reason is UnavailableReason.DAILY_CAP_REACHED
    assert result.stage is AvailabilityStage.CHECKING_DAILY_CAP


async def test_party_larger_than_fleet(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 12)
        await session.commit()

        result = await availability_service.check_availability(
            session, _request(party_size=14), today=TODAY
        )

    assert not result.available
    assert result.reason is UnavailableReason.NO_SUITABLE_VEHICLE
    assert result.to_dict()["available"] is False


async def test_buffered_overlap_ceiling(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14, 14, 14, 14)
        await _seed_capacity(session, concurrent=3)
        session.add_all([_booking(TUESDAY, 10, 16), _booking(TUESDAY, 11, 17)])
        await session.commit()

        request = _request(duration_hours=6, start_time=datetime.time(9, 0))
        first = await availability_service.check_availability(session, request, today=TODAY)
        assert first.available
        assert [slot.to_dict() for slot in first.available_times] == [
            {"start": "09:00", "end": "15:00"}
        ]

        session.add(_booking(TUESDAY, 9, 15))
        await session.commit()
        second = await availability_service.check_availability(session, request, today=TODAY)

    assert not second.available
    assert second.reason is UnavailableReason.NO_OPEN_SLOTS
    assert second.conflicts == ["09:00-15:00 overlaps 3 existing booking(s)"]


async def test_cancelled_bookings_free_capacity(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        await _seed_capacity(session, concurrent=1, daily=1)
        session.add(_booking(TUESDAY, 9, 13, status=BookingStatus.CANCELLED))
        await session.commit()

        result = await availability_service.check_availability(
            session, _request(), today=TODAY
        )

    assert result.available


async def test_every_suitable_vehicle_assigned(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        (vehicle,) = await _seed_fleet(session, 14)
        await _seed_capacity(session)
        session.add(_booking(TUESDAY, 9, 13, vehicle_id=vehicle.id))
        await session.commit()

        result = await availability_service.check_availability(
            session, _request(), today=TODAY
        )

    assert not result.available
    assert result.reason is UnavailableReason.NO_SUITABLE_VEHICLE
    assert result.stage is AvailabilityStage.SELECTING_VEHICLE


async def test_blackout_range_blocks_every_day(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        session.add(
            AvailabilityRule(
                name="Harvest",
                rule_type=AvailabilityRuleType.BLACKOUT_RANGE,
                blackout_start_date=datetime.date(2030, 6, 10),
                blackout_end_date=datetime.date(2030, 6, 12),
                reason="Harvest festival",
            )
        )
        await session.commit()

        for day in (10, 11, 12):
            result = await availability_service.check_availability(
                session,
                _request(tour_date=datetime.date(2030, 6, day)),
                today=TODAY,
            )
            assert result.reason is UnavailableReason.BLOCKED_DATE
            assert result.conflicts == ["Harvest festival"]

        dates = await availability_service.list_available_dates(
            session, year=2030, month=6, today=TODAY
        )

    assert len(dates) == 27
    assert datetime.date(2030, 6, 11) not in dates
    assert datetime.date(2030, 6, 13) in dates


async def test_identical_checks_are_idempotent(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 12, 14)
        await _seed_capacity(session)
        session.add(_booking(TUESDAY, 12, 16))
        await session.commit()

        first = await availability_service.check_availability(session, _request(), today=TODAY)
        second = await availability_service.check_availability(session, _request(), today=TODAY)

    assert first.to_dict() == second.to_dict()


async def test_month_listing_skips_past_dates(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        await session.commit()

        dates = await availability_service.list_available_dates(
            session, year=2030, month=6, today=datetime.date(2030, 6, 20)
        )
        past = await availability_service.list_available_dates(
            session, year=2030, month=5, today=datetime.date(2030, 6, 20)
        )

    assert dates[0] == datetime.date(2030, 6, 20)
    assert len(dates) == 11
    assert past == []


async def test_month_listing_without_fleet_is_empty(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        dates = await availability_service.list_available_dates(
            session, year=2030, month=6, today=TODAY
        )
    assert dates == []


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"tour_date": datetime.date(2030, 5, 31)}, "date"),
        ({"duration_hours": 5}, "duration_hours"),
        ({"party_size": 0}, "party_size"),
        ({"party_size": 15}, "party_size"),
        ({"start_time": datetime.time(9, 30)}, "start_time"),
        ({"start_time": datetime.time(15, 0)}, "start_time"),
    ],
)
async def test_invalid_requests_fail_validation(
    reset_database, db_url: str, overrides: dict, field: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        with pytest.raises(AvailabilityValidationError) as excinfo:
            await availability_service.check_availability(
                session, _request(**overrides), today=TODAY
            )
    assert excinfo.value.field == field


async def test_invalid_month_fails_validation(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        with pytest.raises(AvailabilityValidationError):
            await availability_service.list_available_dates(
                session, year=2030, month=13, today=TODAY
            )


async def test_inactive_blackouts_are_ignored(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        session.add_all(
            [
                AvailabilityRule(
                    name="Old closure",
                    rule_type=AvailabilityRuleType.BLACKOUT_DATE,
                    blackout_date=TUESDAY,
                    is_active=False,
                ),
                AvailabilityRule(
                    name="Winter maintenance",
                    rule_type=AvailabilityRuleType.BLACKOUT_DATE,
                    blackout_date=TUESDAY + datetime.timedelta(days=1),
                    reason="Fleet maintenance",
                ),
            ]
        )
        await session.commit()

        open_day = await availability_service.check_availability(
            session, _request(), today=TODAY
        )
        closed_day = await availability_service.check_availability(
            session, _request(tour_date=TUESDAY + datetime.timedelta(days=1)), today=TODAY
        )

    assert open_day.available
    assert not closed_day.available
    assert closed_day.reason is UnavailableReason.BLOCKED_DATE
    assert closed_day.conflicts == ["Fleet maintenance"]


async def test_started_slots_are_not_offered_today(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    now = datetime.datetime(2030, 6, 4, 11, 30)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        await session.commit()

        result = await availability_service.check_availability(session, _request(), now=now)
        later = await availability_service.check_availability(
            session, _request(start_time=datetime.time(12, 0)), now=now
        )
        with pytest.raises(AvailabilityValidationError) as excinfo:
            await availability_service.check_availability(
                session, _request(start_time=datetime.time(10, 0)), now=now
            )

    assert [slot.start for slot in result.available_times] == [
        datetime.time(12, 0),
        datetime.time(13, 0),
        datetime.time(14, 0),
    ]
    assert later.available
    assert excinfo.value.field == "start_time"


async def test_no_slots_left_today_is_a_negative_result(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        await session.commit()

        result = await availability_service.check_availability(
            session, _request(), now=datetime.datetime(2030, 6, 4, 16, 0)
        )

    assert not result.available
    assert result.reason is UnavailableReason.NO_OPEN_SLOTS


async def test_month_listing_drops_today_after_last_start(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await _seed_fleet(session, 14)
        await session.commit()

        evening = await availability_service.list_available_dates(
            session, year=2030, month=6, now=datetime.datetime(2030, 6, 30, 17, 0)
        )
        morning = await availability_service.list_available_dates(
            session, year=2030, month=6, now=datetime.datetime(2030, 6, 30, 8, 0)
        )

    assert evening == []
    assert morning == [datetime.date(2030, 6, 30)]


async def test_stored_vehicle_and_rule_types_match_any_case(
    reset_database, db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        vehicle = Vehicle(name="Sprinter A", vehicle_type="Sprinter", capacity=14)
        rule = PricingRule(
            name="Sprinter 4h",
            vehicle_type="SPRINTER",
            duration_hours=4,
            base_price=Decimal("650.00"),
        )
        session.add_all([vehicle, rule])
        await session.commit()

        result = await availability_service.check_availability(
            session, _request(vehicle_type="sprinter"), today=TODAY
        )

    assert result.available
    assert result.suggested_vehicle is not None
    assert result.suggested_vehicle.id == vehicle.id
    assert result.suggested_vehicle.vehicle_type == "sprinter"
    assert result.pricing is not None
    assert result.pricing.rule_id == rule.id
    assert result.pricing.base_price == Decimal("650.00")
