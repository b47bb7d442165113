"""Availability decisions for tour requests.

The decision is made by :func:`evaluate`, a pure function over an
:class:`AvailabilitySnapshot` of rules, fleet, bookings and pricing rules.
The same evaluator answers single-date checks, the monthly calendar and the
re-check performed by the booking write path. Stages run cheapest first and
any of them may end the evaluation with an unavailable result.
"""

from __future__ import annotations

import calendar
import datetime
import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from winetours.core.config import get_settings
from winetours.models import PricingRule
from winetours.services import (
    blackout_service,
    conflict_service,
    fleet_service,
    pricing_service,
    rule_service,
    slot_service,
    vehicle_selection_service,
)
from winetours.services.conflict_service import BookedWindow
from winetours.services.fleet_service import FleetVehicle
from winetours.services.pricing_service import PricingQuote
from winetours.services.rule_service import RuleValue
from winetours.services.slot_service import TimeSlot

logger = logging.getLogger(__name__)


class AvailabilityStage(str, enum.Enum):
    """Evaluation stages in execution order."""

    CHECKING_BLACKOUT = "checking_blackout"
    CHECKING_DAILY_CAP = "checking_daily_cap"
    GENERATING_SLOTS = "generating_slots"
    DETECTING_CONFLICTS = "detecting_conflicts"
    SELECTING_VEHICLE = "selecting_vehicle"
    PRICING = "pricing"
    RESULT = "result"


class UnavailableReason(str, enum.Enum):
    """Machine-readable reasons for a negative decision."""

    BLOCKED_DATE = "blocked_date"
    DAILY_CAP_REACHED = "daily_cap_reached"
    NO_OPEN_SLOTS = "no_open_slots"
    NO_SUITABLE_VEHICLE = "no_suitable_vehicle"


_REASON_MESSAGES: dict[UnavailableReason, str] = {
    UnavailableReason.BLOCKED_DATE: "This date is not available for tours",
    UnavailableReason.DAILY_CAP_REACHED: "This date is fully booked",
    UnavailableReason.NO_OPEN_SLOTS: "No time slots are open for the requested tour",
    UnavailableReason.NO_SUITABLE_VEHICLE: "No suitable vehicle is available for this party",
}


class AvailabilityValidationError(ValueError):
    """Request input that fails a constraint before any rule is evaluated."""

    def __init__(self, field_name: str, constraint: str) -> None:
        super().__init__(f"{field_name}: {constraint}")
        self.field = field_name
        self.constraint = constraint


@dataclass(slots=True, frozen=True)
class AvailabilityRequest:
    tour_date: datetime.date
    duration_hours: int
    party_size: int
    start_time: datetime.time | None = None
    vehicle_type: str | None = None


@dataclass(slots=True)
class AvailabilitySnapshot:
    """Everything the evaluator reads, loaded once per request."""

    rules: list[RuleValue]
    vehicles: list[FleetVehicle]
    bookings: dict[datetime.date, list[BookedWindow]]
    pricing_rules: list[PricingRule]

    def bookings_on(self, day: datetime.date) -> list[BookedWindow]:
        return self.bookings.get(day, [])


@dataclass(slots=True)
class AvailabilityResult:
    """Outcome of an availability evaluation."""

    available: bool
    stage: AvailabilityStage
    reason: UnavailableReason | None = None
    message: str | None = None
    available_times: list[TimeSlot] = field(default_factory=list)
    suggested_vehicle: FleetVehicle | None = None
    conflicts: list[str] = field(default_factory=list)
    pricing: PricingQuote | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the public response shape."""
        if not self.available:
            return {
                "available": False,
                "reason": self.reason.value if self.reason else None,
                "message": self.message,
                "conflicts": list(self.conflicts),
            }
        return {
            "available": True,
            "available_times": [slot.to_dict() for slot in self.available_times],
            "suggested_vehicle": (
                self.suggested_vehicle.to_dict() if self.suggested_vehicle else None
            ),
            "pricing": self.pricing.to_dict() if self.pricing else None,
        }


def _unavailable(
    stage: AvailabilityStage,
    reason: UnavailableReason,
    *,
    message: str | None = None,
    conflicts: Sequence[str] = (),
) -> AvailabilityResult:
    return AvailabilityResult(
        available=False,
        stage=stage,
        reason=reason,
        message=message or _REASON_MESSAGES[reason],
        conflicts=list(conflicts),
    )


def business_now() -> datetime.datetime:
    settings = get_settings()
    return datetime.datetime.now(ZoneInfo(settings.business_timezone))


def reference_now(
    today: datetime.date | None = None,
    now: datetime.datetime | None = None,
) -> datetime.datetime:
    """Resolve the moment requests are judged against.

    An explicit ``now`` wins; a bare ``today`` means the start of that day;
    otherwise the current time in the business timezone.
    """
    if now is not None:
        return now
    if today is not None:
        return datetime.datetime.combine(today, datetime.time.min)
    return business_now()


def validate_request(
    request: AvailabilityRequest,
    *,
    now: datetime.datetime,
    max_party_size: int,
) -> None:
    """Reject malformed requests before any rule evaluation.

    ``now`` is business-local wall time; on its date a ``start_time`` that
    has already begun is rejected.
    """
    today = now.date()
    if request.duration_hours not in pricing_service.TOUR_DURATIONS_HOURS:
        allowed = ", ".join(str(hours) for hours in pricing_service.TOUR_DURATIONS_HOURS)
        raise AvailabilityValidationError("duration_hours", f"must be one of {allowed}")
    if not 1 <= request.party_size <= max_party_size:
        raise AvailabilityValidationError(
            "party_size", f"must be between 1 and {max_party_size}"
        )
    if request.tour_date < today:
        raise AvailabilityValidationError("date", "must not be in the past")
    if request.start_time is not None:
        if slot_service.slot_for_start(request.start_time, request.duration_hours) is None:
            raise AvailabilityValidationError(
                "start_time",
                "must be on the hour and let the tour finish by "
                f"{slot_service.BUSINESS_CLOSE.strftime('%H:%M')}",
            )
        if request.tour_date == today and request.start_time <= now.time():
            raise AvailabilityValidationError(
                "start_time", "must be later than the current time"
            )


def evaluate(
    snapshot: AvailabilitySnapshot,
    request: AvailabilityRequest,
    *,
    default_vehicle_type: str,
    include_pricing: bool = True,
    not_before: datetime.datetime | None = None,
) -> AvailabilityResult:
    """Decide availability for ``request`` against ``snapshot``.

    When ``not_before`` falls on the tour date, slots starting at or before
    it are not offered.
    """
    day = request.tour_date

    blackout = blackout_service.check_blackout(snapshot.rules, day)
    if blackout.blocked:
        return _unavailable(
            AvailabilityStage.CHECKING_BLACKOUT,
            UnavailableReason.BLOCKED_DATE,
            conflicts=[blackout.reason] if blackout.reason else (),
        )

    policy = rule_service.resolve_capacity_policy(snapshot.rules)
    buffer_minutes = rule_service.resolve_buffer_minutes(snapshot.rules)
    windows = snapshot.bookings_on(day)
    if conflict_service.daily_cap_reached(windows, policy):
        return _unavailable(
            AvailabilityStage.CHECKING_DAILY_CAP,
            UnavailableReason.DAILY_CAP_REACHED,
            conflicts=[
                f"{len(windows)} of {policy.max_daily_bookings} daily bookings taken"
            ],
        )

    candidates = slot_service.generate_time_slots(request.duration_hours)
    if request.start_time is not None:
        candidates = [slot for slot in candidates if slot.start == request.start_time]
    if not_before is not None and not_before.date() == day:
        cutoff = not_before.time()
        candidates = [slot for slot in candidates if slot.start > cutoff]
    if not candidates:
        return _unavailable(
            AvailabilityStage.GENERATING_SLOTS, UnavailableReason.NO_OPEN_SLOTS
        )

    open_slots, rejected = conflict_service.detect_conflicts(
        candidates,
        windows,
        buffer_minutes=buffer_minutes,
        max_concurrent_bookings=policy.max_concurrent_bookings,
    )
    conflicts = [conflict.describe() for conflict in rejected]
    if not open_slots:
        return _unavailable(
            AvailabilityStage.DETECTING_CONFLICTS,
            UnavailableReason.NO_OPEN_SLOTS,
            conflicts=conflicts,
        )

    vehicle_type = vehicle_selection_service.resolve_vehicle_type(
        request.vehicle_type, default_vehicle_type
    )
    fitting = vehicle_selection_service.suitable_vehicles(
        snapshot.vehicles, vehicle_type=vehicle_type, party_size=request.party_size
    )
    if not fitting:
        return _unavailable(
            AvailabilityStage.SELECTING_VEHICLE,
            UnavailableReason.NO_SUITABLE_VEHICLE,
            conflicts=[
                f"No {vehicle_type} vehicle seats a party of {request.party_size}"
            ],
        )

    bookable: list[TimeSlot] = []
    suggested: FleetVehicle | None = None
    for slot in open_slots:
        vehicle = vehicle_selection_service.select_vehicle(
            fitting, slot, windows, buffer_minutes=buffer_minutes
        )
        if vehicle is None:
            conflicts.append(f"{slot.to_dict()['start']}: all suitable vehicles assigned")
            continue
        bookable.append(slot)
        if suggested is None:
            suggested = vehicle
    if suggested is None:
        return _unavailable(
            AvailabilityStage.SELECTING_VEHICLE,
            UnavailableReason.NO_SUITABLE_VEHICLE,
            conflicts=conflicts,
        )

    pricing: PricingQuote | None = None
    if include_pricing:
        pricing = pricing_service.calculate_pricing(
            snapshot.pricing_rules,
            tour_date=day,
            duration_hours=request.duration_hours,
            vehicle_type=vehicle_type,
        )

    return AvailabilityResult(
        available=True,
        stage=AvailabilityStage.RESULT,
        available_times=bookable,
        suggested_vehicle=suggested,
        conflicts=conflicts,
        pricing=pricing,
    )


async def load_snapshot(
    session: AsyncSession,
    *,
    start_date: datetime.date,
    end_date: datetime.date,
    include_pricing: bool = True,
) -> AvailabilitySnapshot:
    """Read rules, fleet, bookings and pricing rules for a date range."""
    rules = await rule_service.load_active_rules(session)
    vehicles = await fleet_service.list_operational_vehicles(session)
    bookings = await conflict_service.load_booked_windows(
        session, start_date=start_date, end_date=end_date
    )
    pricing_rules: list[PricingRule] = []
    if include_pricing:
        pricing_rules = await pricing_service.load_pricing_rules(session)
    return AvailabilitySnapshot(
        rules=rules,
        vehicles=vehicles,
        bookings=bookings,
        pricing_rules=pricing_rules,
    )


async def check_availability(
    session: AsyncSession,
    request: AvailabilityRequest,
    *,
    today: datetime.date | None = None,
    now: datetime.datetime | None = None,
) -> AvailabilityResult:
    """Validate and evaluate a single availability request.

    Advisory only: nothing is locked, so the answer may be stale by the time
    a booking is written. Start times that have already passed today are
    not offered.
    """
    settings = get_settings()
    now = reference_now(today, now)
    validate_request(
        request,
        now=now,
        max_party_size=settings.max_party_size,
    )
    snapshot = await load_snapshot(
        session, start_date=request.tour_date, end_date=request.tour_date
    )
    result = evaluate(
        snapshot,
        request,
        default_vehicle_type=settings.default_vehicle_type,
        not_before=now,
    )
    logger.debug(
        "Availability for %s (%sh, party %s): %s",
        request.tour_date,
        request.duration_hours,
        request.party_size,
        result.reason.value if result.reason else "available",
    )
    return result


async def list_available_dates(
    session: AsyncSession,
    *,
    year: int,
    month: int,
    today: datetime.date | None = None,
    now: datetime.datetime | None = None,
) -> list[datetime.date]:
    """Return dates in the month with at least one bookable slot and vehicle.

    Uses the configured default duration, party size and vehicle type. Dates
    before today are skipped, and so is today once its last slot has started.
    """
    if not 1 <= month <= 12:
        raise AvailabilityValidationError("month", "must be between 1 and 12")
    settings = get_settings()
    now = reference_now(today, now)
    today = now.date()
    first = datetime.date(year, month, 1)
    last = datetime.date(year, month, calendar.monthrange(year, month)[1])
    if last < today:
        return []
    start = max(first, today)

    snapshot = await load_snapshot(
        session, start_date=start, end_date=last, include_pricing=False
    )
    dates: list[datetime.date] = []
    day = start
    while day <= last:
        request = AvailabilityRequest(
            tour_date=day,
            duration_hours=settings.default_duration_hours,
            party_size=settings.default_party_size,
        )
        result = evaluate(
            snapshot,
            request,
            default_vehicle_type=settings.default_vehicle_type,
            include_pricing=False,
            not_before=now,
        )
        if result.available:
            dates.append(day)
        day += datetime.timedelta(days=1)
    return dates
