"""Blackout date checks."""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from dataclasses import dataclass

from winetours.services import rule_service
from winetours.services.rule_service import BlackoutDate, BlackoutRange, RuleValue

DEFAULT_BLACKOUT_REASON = "Date unavailable"


@dataclass(slots=True, frozen=True)
class BlackoutCheck:
    blocked: bool
    reason: str | None = None


def _matches(rule: BlackoutDate | BlackoutRange, day: datetime.date) -> bool:
    if isinstance(rule, BlackoutDate):
        return rule.day == day
    return rule.start_date <= day <= rule.end_date


def check_blackout(rules: Sequence[RuleValue], day: datetime.date) -> BlackoutCheck:
    """Return whether ``day`` is blocked and the reason of the winning rule."""
    for rule in rule_service.blackout_rules(rules):
        if _matches(rule, day):
            return BlackoutCheck(blocked=True, reason=rule.reason or DEFAULT_BLACKOUT_REASON)
    return BlackoutCheck(blocked=False)

