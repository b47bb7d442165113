"""Initial tour availability schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    rule_type_enum = sa.Enum(
        "BLACKOUT_DATE",
        "BLACKOUT_RANGE",
        "CAPACITY_LIMIT",
        "BUFFER_TIME",
        name="availabilityruletype",
    )
    booking_status_enum = sa.Enum(
        "PENDING",
        "CONFIRMED",
        "COMPLETED",
        "CANCELLED",
        name="bookingstatus",
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("vehicle_type", sa.String(length=50), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("license_plate", sa.String(length=32)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "is_operational", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        *_timestamps(),
    )
    op.create_index("ix_vehicles_vehicle_type", "vehicles", ["vehicle_type"])

    op.create_table(
        "availability_rules",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("rule_type", rule_type_enum, nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("blackout_date", sa.Date()),
        sa.Column("blackout_start_date", sa.Date()),
        sa.Column("blackout_end_date", sa.Date()),
        sa.Column("reason", sa.Text()),
        sa.Column("max_concurrent_bookings", sa.Integer()),
        sa.Column("max_daily_bookings", sa.Integer()),
        sa.Column("buffer_minutes", sa.Integer()),
        *_timestamps(),
    )
    op.create_index(
        "ix_availability_rules_rule_type", "availability_rules", ["rule_type"]
    )

    op.create_table(
        "pricing_rules",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("vehicle_type", sa.String(length=50), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=False),
        sa.Column("is_weekend", sa.Boolean()),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("weekend_multiplier", sa.Numeric(4, 2)),
        sa.Column("valid_from", sa.Date()),
        sa.Column("valid_until", sa.Date()),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_pricing_rules_vehicle_type", "pricing_rules", ["vehicle_type"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("tour_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=False),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("vehicle_type", sa.String(length=50)),
        sa.Column(
            "vehicle_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey(
                "vehicles.id",
                ondelete="SET NULL",
                name="fk_bookings_vehicle_id_vehicles",
            ),
        ),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("customer_name", sa.String(length=255)),
        sa.Column("customer_email", sa.String(length=320)),
        sa.Column("total_price", sa.Numeric(10, 2)),
        sa.Column("deposit_amount", sa.Numeric(10, 2)),
        sa.Column("final_payment_amount", sa.Numeric(10, 2)),
        *_timestamps(),
    )
    op.create_index("ix_bookings_tour_date", "bookings", ["tour_date"])

    op.create_table(
        "booking_day_locks",
        sa.Column("tour_date", sa.Date(), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("booking_day_locks")
    op.drop_index("ix_bookings_tour_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_pricing_rules_vehicle_type", table_name="pricing_rules")
    op.drop_table("pricing_rules")
    op.drop_index("ix_availability_rules_rule_type", table_name="availability_rules")
    op.drop_table("availability_rules")
    op.drop_index("ix_vehicles_vehicle_type", table_name="vehicles")
    op.drop_table("vehicles")
    sa.Enum(name="bookingstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="availabilityruletype").drop(op.get_bind(), checkfirst=True)
