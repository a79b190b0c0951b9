"""initial_schema

Revision ID: 3f9c2a7d1b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # gist index over (uuid =, daterange &&) needs btree_gist
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    op.create_table(
        "room_types",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
    )

    op.create_table(
        "rooms",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("room_number", sa.String(50), nullable=False),
        sa.Column("room_type_id", sa.UUID(), sa.ForeignKey("room_types.id", ondelete="SET NULL")),
        sa.Column("status", sa.String(50), nullable=False, server_default="available"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("room_number", name="uq_rooms_room_number"),
    )
    op.create_index("ix_rooms_room_type_id", "rooms", ["room_type_id"])

    op.create_table(
        "properties",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("room_number", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("property_type_id", sa.UUID(), sa.ForeignKey("room_types.id", ondelete="SET NULL")),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(50), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_properties_room_number", "properties", ["room_number"])

    op.create_table(
        "guests",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False, server_default=""),
        sa.Column("address", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_placeholder", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("total_revenue", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_stays", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_booking_at", sa.DateTime(timezone=True)),
        sa.Column("last_room_number", sa.String(50)),
        sa.Column("last_check_in", sa.Date()),
        sa.Column("last_check_out", sa.Date()),
        sa.Column("last_source", sa.String(50)),
        sa.Column("last_created_by", sa.String(255)),
        sa.Column("last_created_by_name", sa.String(255)),
        sa.Column("last_check_in_by_name", sa.String(255)),
        sa.Column("last_check_out_by_name", sa.String(255)),
        sa.Column("last_stay_revenue", sa.Numeric(12, 2)),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_guests_email"),
        sa.UniqueConstraint("slug", name="uq_guests_slug"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("guest_id", sa.UUID(), sa.ForeignKey("guests.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("room_id", sa.UUID(), sa.ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="reserved"),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("num_guests", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("source", sa.String(50), nullable=False, server_default="reception"),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_by", sa.String(255)),
        sa.Column("created_by_name", sa.String(255)),
        sa.Column("check_in_by", sa.String(255)),
        sa.Column("check_in_by_name", sa.String(255)),
        sa.Column("actual_check_in", sa.DateTime(timezone=True)),
        sa.Column("check_out_by", sa.String(255)),
        sa.Column("check_out_by_name", sa.String(255)),
        sa.Column("actual_check_out", sa.DateTime(timezone=True)),
        sa.Column("group_id", sa.UUID()),
        sa.Column("group_reference", sa.String(50)),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("billing_contact", sa.JSON()),
        sa.Column("additional_charges", sa.JSON()),
        sa.Column("discount", sa.JSON()),
        sa.Column("amount_paid", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_method", sa.String(20)),
        *_timestamps(),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
        postgresql.ExcludeConstraint(
            (sa.column("room_id"), "="),
            (sa.text("daterange(check_in, check_out)"), "&&"),
            name="ex_bookings_room_dates",
            using="gist",
            where=sa.text("status IN ('checked-in', 'confirmed', 'reserved')"),
        ),
    )
    op.create_index("ix_bookings_guest_id", "bookings", ["guest_id"])
    op.create_index("ix_bookings_room_id", "bookings", ["room_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_group_id", "bookings", ["group_id"])
    op.create_index("ix_bookings_check_in", "bookings", ["check_in"])

    op.create_table(
        "housekeeping_tasks",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("room_id", sa.UUID(), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("room_number", sa.String(50), nullable=False),
        sa.Column("booking_id", sa.UUID()),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_by", sa.String(255)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_housekeeping_tasks_room_id", "housekeeping_tasks", ["room_id"])
    op.create_index("ix_housekeeping_tasks_booking_id", "housekeeping_tasks", ["booking_id"])
    op.create_index("ix_housekeeping_tasks_status", "housekeeping_tasks", ["status"])


def downgrade() -> None:
    op.drop_table("housekeeping_tasks")
    op.drop_table("bookings")
    op.drop_table("guests")
    op.drop_table("properties")
    op.drop_table("rooms")
    op.drop_table("room_types")
