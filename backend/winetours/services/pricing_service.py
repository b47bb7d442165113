"""Pricing engine for tour quotes."""

from __future__ import annotations

import datetime
import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from winetours.models import PricingRule

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("0.01")
GRATUITY_RATE = Decimal("0.15")
TAX_RATE = Decimal("0.09")
DEPOSIT_RATE = Decimal("0.50")

TOUR_DURATIONS_HOURS: tuple[int, ...] = (4, 6, 8)

# Used only when no pricing rule matches; keyed by whole tour hours.
FALLBACK_BASE_PRICES: dict[bool, dict[int, Decimal]] = {
    False: {4: Decimal("600.00"), 6: Decimal("800.00"), 8: Decimal("1000.00")},
    True: {4: Decimal("720.00"), 6: Decimal("960.00"), 8: Decimal("1200.00")},
}


class PricingSource(str, enum.Enum):
    """Where a quote's base price came from."""

    RULE = "rule"
    FALLBACK = "fallback"


@dataclass(slots=True)
class PricingQuote:
    """Price breakdown for a single tour."""

    base_price: Decimal
    estimated_gratuity: Decimal
    taxes: Decimal
    total: Decimal
    deposit_required: Decimal
    final_payment: Decimal
    is_weekend: bool
    source: PricingSource
    rule_id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the monetary fields to two-decimal strings."""
        return {
            "base_price": _to_str(self.base_price),
            "estimated_gratuity": _to_str(self.estimated_gratuity),
            "taxes": _to_str(self.taxes),
            "total": _to_str(self.total),
            "deposit_required": _to_str(self.deposit_required),
            "final_payment": _to_str(self.final_payment),
        }


def _to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def _to_str(value: Decimal) -> str:
    return f"{value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP):.2f}"


def is_weekend(day: datetime.date) -> bool:
    """Saturday and Sunday are weekend days."""
    return day.weekday() >= 5


def _in_validity_window(rule: PricingRule, day: datetime.date) -> bool:
    if rule.valid_from is not None and day < rule.valid_from:
        return False
    if rule.valid_until is not None and day > rule.valid_until:
        return False
    return True


def resolve_pricing_rule(
    rules: Iterable[PricingRule],
    *,
    vehicle_type: str,
    duration_hours: int,
    tour_date: datetime.date,
) -> PricingRule | None:
    """Pick the rule for a vehicle type and duration on ``tour_date``.

    Only rules whose inclusive ``valid_from``/``valid_until`` window covers
    the date count; an open end is unbounded. A rule naming the requested
    day type beats a wildcard (``is_weekend`` of ``None``); then higher
    priority wins; then the lowest id.
    """
    weekend = is_weekend(tour_date)
    vehicle_type = vehicle_type.strip().lower()
    candidates = [
        rule
        for rule in rules
        if rule.is_active
        and rule.vehicle_type.strip().lower() == vehicle_type
        and rule.duration_hours == duration_hours
        and (rule.is_weekend is None or rule.is_weekend == weekend)
        and _in_validity_window(rule, tour_date)
    ]
    if not candidates:
        return None
    candidates.sort(
        key=lambda rule: (
            0 if rule.is_weekend is not None else 1,
            -rule.priority,
            rule.id,
        )
    )
    return candidates[0]


def _fallback_base_price(duration_hours: int, weekend: bool) -> Decimal:
    try:
        return FALLBACK_BASE_PRICES[weekend][duration_hours]
    except KeyError as exc:
        raise ValueError(
            f"No fallback price for a {duration_hours}-hour tour"
        ) from exc


def build_quote(
    base_price: Decimal,
    *,
    weekend: bool,
    source: PricingSource,
    rule_id: UUID | None = None,
) -> PricingQuote:
    """Derive gratuity, tax, total and deposit, rounding each step to cents.

    The final payment is the remainder, so deposit and final payment always
    add up to the total.
    """
    base = _to_money(base_price)
    gratuity = _to_money(base * GRATUITY_RATE)
    taxes = _to_money(base * TAX_RATE)
    total = _to_money(base + gratuity + taxes)
    deposit = _to_money(total * DEPOSIT_RATE)
    return PricingQuote(
        base_price=base,
        estimated_gratuity=gratuity,
        taxes=taxes,
        total=total,
        deposit_required=deposit,
        final_payment=total - deposit,
        is_weekend=weekend,
        source=source,
        rule_id=rule_id,
    )


def calculate_pricing(
    rules: Iterable[PricingRule],
    *,
    tour_date: datetime.date,
    duration_hours: int,
    vehicle_type: str,
) -> PricingQuote:
    """Quote a tour from the given rules, degrading to the fallback table."""
    weekend = is_weekend(tour_date)
    rule = resolve_pricing_rule(
        rules,
        vehicle_type=vehicle_type,
        duration_hours=duration_hours,
        tour_date=tour_date,
    )
    if rule is None:
        logger.debug(
            "No pricing rule for %s/%sh; using fallback table", vehicle_type, duration_hours
        )
        return build_quote(
            _fallback_base_price(duration_hours, weekend),
            weekend=weekend,
            source=PricingSource.FALLBACK,
        )

    base_price = _to_money(rule.base_price)
    if weekend and rule.weekend_multiplier is not None:
        base_price = _to_money(base_price * Decimal(rule.weekend_multiplier))
    return build_quote(
        base_price, weekend=weekend, source=PricingSource.RULE, rule_id=rule.id
    )


async def load_pricing_rules(
    session: AsyncSession,
    *,
    vehicle_type: str | None = None,
) -> list[PricingRule]:
    """Return active pricing rules, optionally for one vehicle type."""
    stmt = select(PricingRule).where(PricingRule.is_active.is_(True))
    if vehicle_type is not None:
        stmt = stmt.where(
            func.lower(func.trim(PricingRule.vehicle_type)) == vehicle_type.strip().lower()
        )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def quote_tour(
    session: AsyncSession,
    *,
    tour_date: datetime.date,
    duration_hours: int,
    vehicle_type: str,
) -> PricingQuote:
    """Load the active rules for ``vehicle_type`` and quote the tour."""
    rules = await load_pricing_rules(session, vehicle_type=vehicle_type)
    return calculate_pricing(
        rules,
        tour_date=tour_date,
        duration_hours=duration_hours,
        vehicle_type=vehicle_type,
    )
