"""Business rules that constrain tour availability."""

from __future__ import annotations

import datetime
import enum
import uuid

from sqlalchemy import Boolean, Date, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from winetours.db.base import Base
from winetours.models.mixins import TimestampMixin


class AvailabilityRuleType(str, enum.Enum):
    """Kinds of availability rules; each uses its own subset of columns."""

    BLACKOUT_DATE = "blackout_date"
    BLACKOUT_RANGE = "blackout_range"
    CAPACITY_LIMIT = "capacity_limit"
    BUFFER_TIME = "buffer_time"


class AvailabilityRule(TimestampMixin, Base):
    """Stored availability rule row.

    Only the columns belonging to ``rule_type`` are meaningful; the rule store
    converts rows into typed values and ignores rows missing their fields.
    """

    __tablename__ = "availability_rules"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    rule_type: Mapped[AvailabilityRuleType] = mapped_column(
        Enum(AvailabilityRuleType), nullable=False, index=True
    )
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    blackout_date: Mapped[datetime.date | None] = mapped_column(Date)
    blackout_start_date: Mapped[datetime.date | None] = mapped_column(Date)
    blackout_end_date: Mapped[datetime.date | None] = mapped_column(Date)
    reason: Mapped[str | None] = mapped_column(Text)

    max_concurrent_bookings: Mapped[int | None] = mapped_column(Integer)
    max_daily_bookings: Mapped[int | None] = mapped_column(Integer)

    buffer_minutes: Mapped[int | None] = mapped_column(Integer)
