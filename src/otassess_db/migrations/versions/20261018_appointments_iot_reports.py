"""Add appointments, the IoT device library, device placements and reports.

Rooms and areas also gain practitioner notes and a photo; areas gain a
3D position like rooms.

Revision ID: 20261018_calendar
Revises: 20261001_initial
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261018_calendar"
down_revision = "20261001_initial"
branch_labels = None
depends_on = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
    ]


def _flag(name: str, default: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.Boolean,
        nullable=False,
        server_default=sa.text("true" if default else "false"),
    )


def upgrade() -> None:
    # --- Appointments ---
    op.create_table(
        "appointments",
        *_base_columns(),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column(
            "client_id",
            UUID(as_uuid=True),
            sa.ForeignKey("clients.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("appointment_type", sa.String(20), nullable=False),
        sa.Column("start_time", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_time", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("location", sa.Text, nullable=True),
        _flag("is_all_day"),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("guidelines", sa.Text, nullable=True),
        sa.Column("reminder_date", TIMESTAMP(timezone=True), nullable=True),
        _flag("reminder_sent"),
        _flag("consent_required", default=True),
        _flag("consent_given"),
        sa.Column("consent_given_at", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("consent_given_by", sa.Text, nullable=True),
        sa.Column("consent_method", sa.String(30), nullable=True),
    )
    op.create_index("ix_appointments_user_id", "appointments", ["user_id"])
    op.create_index("ix_appointments_client_id", "appointments", ["client_id"])
    op.create_index("ix_appointments_user_start", "appointments", ["user_id", "start_time"])
    op.create_index(
        "ix_appointments_due_reminders",
        "appointments",
        ["reminder_date"],
        postgresql_where=sa.text("reminder_sent = false"),
    )

    # --- IoT device library ---
    op.create_table(
        "iot_devices",
        *_base_columns(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("manufacturer", sa.Text, nullable=True),
        sa.Column("model", sa.Text, nullable=True),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("device_type", sa.String(40), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("technical_specs", JSONB, nullable=False),
        sa.Column("placement_rules", JSONB, nullable=True),
        sa.Column("coverage_area", sa.Numeric(8, 2), nullable=True),
        sa.Column("power_requirements", sa.String(30), nullable=True),
        sa.Column("connectivity", sa.String(30), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("installation_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("subscription_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("subscription_type", sa.String(20), nullable=True),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("documentation_url", sa.Text, nullable=True),
        sa.Column("approved_for", JSONB, nullable=True),
    )
    op.create_index("ix_iot_devices_category", "iot_devices", ["category"])

    op.create_table(
        "device_placements",
        *_base_columns(),
        sa.Column(
            "house_map_id",
            UUID(as_uuid=True),
            sa.ForeignKey("house_maps.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "device_id",
            UUID(as_uuid=True),
            sa.ForeignKey("iot_devices.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "room_id",
            UUID(as_uuid=True),
            sa.ForeignKey("rooms.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "area_id",
            UUID(as_uuid=True),
            sa.ForeignKey("areas.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("position_3d", JSONB, nullable=False),
        sa.Column("placement_reason", sa.Text, nullable=True),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("installation_notes", sa.Text, nullable=True),
        _flag("ai_recommended"),
    )
    op.create_index(
        "ix_device_placements_house_map_id", "device_placements", ["house_map_id"],
    )

    # --- Reports ---
    op.create_table(
        "reports",
        *_base_columns(),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("report_type", sa.String(20), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("start_date", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_date", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("data", JSONB, nullable=False),
        sa.Column("filters", JSONB, nullable=True),
        sa.Column("columns", JSONB, nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_reports_user_id", "reports", ["user_id"])

    # --- Room and area details ---
    for table in ("rooms", "areas"):
        op.add_column(table, sa.Column("notes", sa.Text, nullable=True))
        op.add_column(table, sa.Column("photo_url", sa.Text, nullable=True))
    op.add_column("areas", sa.Column("position_3d", JSONB, nullable=True))


def downgrade() -> None:
    op.drop_column("areas", "position_3d")
    for table in ("areas", "rooms"):
        op.drop_column(table, "photo_url")
        op.drop_column(table, "notes")
    for table in ("reports", "device_placements", "iot_devices", "appointments"):
        op.drop_table(table)
