"""Read-only access to active availability rules and their resolution."""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.models import AvailabilityRule, AvailabilityRuleType

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT_BOOKINGS = 3
DEFAULT_MAX_DAILY_BOOKINGS = 5
DEFAULT_BUFFER_MINUTES = 120


@dataclass(slots=True, frozen=True)
class BlackoutDate:
    """A single blocked date."""

    rule_id: uuid.UUID
    priority: int
    day: datetime.date
    reason: str | None = None


@dataclass(slots=True, frozen=True)
class BlackoutRange:
    """An inclusive range of blocked dates."""

    rule_id: uuid.UUID
    priority: int
    start_date: datetime.date
    end_date: datetime.date
    reason: str | None = None


@dataclass(slots=True, frozen=True)
class CapacityLimit:
    """Concurrency ceiling and day cap; either bound may be left unset."""

    rule_id: uuid.UUID
    priority: int
    max_concurrent_bookings: int | None
    max_daily_bookings: int | None


@dataclass(slots=True, frozen=True)
class BufferTime:
    """Turnaround minutes applied before and after every booking."""

    rule_id: uuid.UUID
    priority: int
    buffer_minutes: int


RuleValue = BlackoutDate | BlackoutRange | CapacityLimit | BufferTime


@dataclass(slots=True, frozen=True)
class CapacityPolicy:
    """Resolved capacity bounds for a date."""

    max_concurrent_bookings: int = DEFAULT_MAX_CONCURRENT_BOOKINGS
    max_daily_bookings: int = DEFAULT_MAX_DAILY_BOOKINGS


def _build_blackout_date(rule: AvailabilityRule) -> BlackoutDate | None:
    if rule.blackout_date is None:
        return None
    return BlackoutDate(
        rule_id=rule.id,
        priority=rule.priority,
        day=rule.blackout_date,
        reason=rule.reason,
    )


def _build_blackout_range(rule: AvailabilityRule) -> BlackoutRange | None:
    if rule.blackout_start_date is None or rule.blackout_end_date is None:
        return None
    return BlackoutRange(
        rule_id=rule.id,
        priority=rule.priority,
        start_date=rule.blackout_start_date,
        end_date=rule.blackout_end_date,
        reason=rule.reason,
    )


def _build_capacity_limit(rule: AvailabilityRule) -> CapacityLimit | None:
    if rule.max_concurrent_bookings is None and rule.max_daily_bookings is None:
        return None
    return CapacityLimit(
        rule_id=rule.id,
        priority=rule.priority,
        max_concurrent_bookings=rule.max_concurrent_bookings,
        max_daily_bookings=rule.max_daily_bookings,
    )


def _build_buffer_time(rule: AvailabilityRule) -> BufferTime | None:
    if rule.buffer_minutes is None or rule.buffer_minutes < 0:
        return None
    return BufferTime(
        rule_id=rule.id,
        priority=rule.priority,
        buffer_minutes=rule.buffer_minutes,
    )


RULE_BUILDERS: dict[
    AvailabilityRuleType, Callable[[AvailabilityRule], RuleValue | None]
] = {
    AvailabilityRuleType.BLACKOUT_DATE: _build_blackout_date,
    AvailabilityRuleType.BLACKOUT_RANGE: _build_blackout_range,
    AvailabilityRuleType.CAPACITY_LIMIT: _build_capacity_limit,
    AvailabilityRuleType.BUFFER_TIME: _build_buffer_time,
}


def to_rule_value(rule: AvailabilityRule) -> RuleValue | None:
    """Convert a stored row into its typed rule, or ``None`` if it is malformed."""
    builder = RULE_BUILDERS[rule.rule_type]
    value = builder(rule)
    if value is None:
        logger.warning(
            "Ignoring %s rule %s (%s): required fields are missing",
            rule.rule_type.value,
            rule.id,
            rule.name,
        )
    return value


async def load_active_rules(session: AsyncSession) -> list[RuleValue]:
    """Return every active rule as a value object.

    Rules are read on every call; nothing is cached between requests.
    """
    stmt = select(AvailabilityRule).where(AvailabilityRule.is_active.is_(True))
    stmt = stmt.order_by(AvailabilityRule.priority.desc(), AvailabilityRule.id)
    result = await session.execute(stmt)
    values: list[RuleValue] = []
    for rule in result.scalars().all():
        value = to_rule_value(rule)
        if value is not None:
            values.append(value)
    return values


_R = TypeVar("_R", BlackoutDate, BlackoutRange, CapacityLimit, BufferTime)


def rank_rules(rules: Iterable[_R]) -> list[_R]:
    """Order rules by precedence: highest priority first, then lowest id."""
    return sorted(rules, key=lambda rule: (-rule.priority, rule.rule_id))


def _of_type(rules: Iterable[RuleValue], kind: type[_R]) -> list[_R]:
    return [rule for rule in rules if isinstance(rule, kind)]


def resolve_capacity_policy(rules: Sequence[RuleValue]) -> CapacityPolicy:
    """Pick the winning capacity rule, filling unset bounds with defaults."""
    ranked = rank_rules(_of_type(rules, CapacityLimit))
    if not ranked:
        logger.debug("No active capacity_limit rule; using defaults")
        return CapacityPolicy()
    winner = ranked[0]
    return CapacityPolicy(
        max_concurrent_bookings=(
            winner.max_concurrent_bookings
            if winner.max_concurrent_bookings is not None
            else DEFAULT_MAX_CONCURRENT_BOOKINGS
        ),
        max_daily_bookings=(
            winner.max_daily_bookings
            if winner.max_daily_bookings is not None
            else DEFAULT_MAX_DAILY_BOOKINGS
        ),
    )


def resolve_buffer_minutes(rules: Sequence[RuleValue]) -> int:
    """Return the buffer of the winning buffer_time rule or the default."""
    ranked = rank_rules(_of_type(rules, BufferTime))
    if not ranked:
        logger.debug("No active buffer_time rule; using %s minutes", DEFAULT_BUFFER_MINUTES)
        return DEFAULT_BUFFER_MINUTES
    return ranked[0].buffer_minutes


def blackout_rules(rules: Sequence[RuleValue]) -> list[BlackoutDate | BlackoutRange]:
    """Return blackout rules in precedence order."""
    blackouts: list[BlackoutDate | BlackoutRange] = [
        rule for rule in rules if isinstance(rule, (BlackoutDate, BlackoutRange))
    ]
    return sorted(blackouts, key=lambda rule: (-rule.priority, rule.rule_id))
