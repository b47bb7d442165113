"""Tour pricing rule model."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from winetours.db.base import Base
from winetours.models.mixins import TimestampMixin


class PricingRule(TimestampMixin, Base):
    """Base price for a vehicle type and tour length.

    ``is_weekend`` of ``None`` applies to every day; a rule that names the
    requested day type wins over such a wildcard. ``valid_from`` and
    ``valid_until`` bound the tour dates the rule prices, inclusively.
    """

    __tablename__ = "pricing_rules"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    vehicle_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    duration_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    is_weekend: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    weekend_multiplier: Mapped[Decimal | None] = mapped_column(Numeric(4, 2))
    valid_from: Mapped[datetime.date | None] = mapped_column(Date)
    valid_until: Mapped[datetime.date | None] = mapped_column(Date)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
