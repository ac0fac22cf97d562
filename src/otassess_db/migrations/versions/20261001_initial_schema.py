"""Create the initial otassess schema.

Clients, assessments and their children (responses, media, equipment
recommendations, house maps with rooms and areas, quotes, invoices), the
shared equipment catalog, business documents and the document-number
counter table.

Revision ID: 20261001_initial
Revises:
Create Date: 2026-10-01
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
    ]


def _archival_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "is_archived", sa.Boolean, nullable=False, server_default=sa.text("false"),
        ),
        sa.Column("archived_at", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("deletion_reason", sa.Text, nullable=True),
        sa.Column("can_delete_after", TIMESTAMP(timezone=True), nullable=True),
    ]


def _assessment_fk() -> sa.Column:
    return sa.Column(
        "assessment_id",
        UUID(as_uuid=True),
        sa.ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    # --- Clients ---
    op.create_table(
        "clients",
        *_base_columns(),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=True),
        sa.Column("phone", sa.Text, nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        *_archival_columns(),
    )
    op.create_index("ix_clients_user_id", "clients", ["user_id"])
    op.create_index(
        "ix_clients_live_user",
        "clients",
        ["user_id", "created_at"],
        postgresql_where=sa.text("is_archived = false"),
    )

    # --- Assessments ---
    op.create_table(
        "assessments",
        *_base_columns(),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column(
            "client_id",
            UUID(as_uuid=True),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("assessment_type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("location", sa.Text, nullable=True),
        sa.Column("assessment_date", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("ai_summary", sa.Text, nullable=True),
        sa.Column(
            "report_generated", sa.Boolean, nullable=False, server_default=sa.text("false"),
        ),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        *_archival_columns(),
    )
    op.create_index("ix_assessments_user_id", "assessments", ["user_id"])
    op.create_index("ix_assessments_client_id", "assessments", ["client_id"])
    op.create_index("ix_assessments_status", "assessments", ["status"])
    op.create_index(
        "ix_assessments_live_user",
        "assessments",
        ["user_id", "created_at"],
        postgresql_where=sa.text("is_archived = false"),
    )
    op.create_index(
        "ix_assessments_retention",
        "assessments",
        ["can_delete_after"],
        postgresql_where=sa.text("is_archived = true"),
    )

    # --- Responses ---
    op.create_table(
        "assessment_responses",
        *_base_columns(),
        _assessment_fk(),
        sa.Column("question_id", sa.Text, nullable=False),
        sa.Column("section_id", sa.Text, nullable=False),
        sa.Column("answer", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("media_url", sa.Text, nullable=True),
        sa.Column("media_type", sa.String(20), nullable=True),
        sa.Column("ai_analysis", sa.Text, nullable=True),
        sa.Column(
            "needs_follow_up", sa.Boolean, nullable=False, server_default=sa.text("false"),
        ),
        sa.UniqueConstraint(
            "assessment_id", "question_id", name="uq_response_assessment_question",
        ),
    )
    op.create_index("ix_responses_question", "assessment_responses", ["question_id"])

    # --- Media ---
    op.create_table(
        "assessment_media",
        *_base_columns(),
        _assessment_fk(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("url", sa.Text, nullable=False),
        sa.Column("caption", sa.Text, nullable=True),
        sa.Column("ai_analysis", sa.Text, nullable=True),
    )
    op.create_index(
        "ix_assessment_media_assessment_id", "assessment_media", ["assessment_id"],
    )

    # --- Equipment catalog ---
    op.create_table(
        "equipment_items",
        *_base_columns(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("supplier_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("margin", sa.Numeric(6, 2), nullable=True),
        sa.Column("brand", sa.Text, nullable=True),
        sa.Column("model", sa.Text, nullable=True),
        sa.Column("specifications", sa.Text, nullable=True),
        sa.Column(
            "government_approved", sa.Boolean, nullable=False, server_default=sa.text("false"),
        ),
        sa.Column("approval_reference", sa.Text, nullable=True),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("source_catalog", sa.Text, nullable=True),
    )
    op.create_index("ix_equipment_items_category", "equipment_items", ["category"])

    op.create_table(
        "equipment_recommendations",
        *_base_columns(),
        _assessment_fk(),
        sa.Column(
            "equipment_id",
            UUID(as_uuid=True),
            sa.ForeignKey("equipment_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("priority", sa.String(10), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("justification", sa.Text, nullable=True),
    )
    op.create_index(
        "ix_equipment_recommendations_assessment_id",
        "equipment_recommendations",
        ["assessment_id"],
    )

    # --- House maps ---
    op.create_table(
        "house_maps",
        *_base_columns(),
        sa.Column(
            "assessment_id",
            UUID(as_uuid=True),
            sa.ForeignKey("assessments.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("property_type", sa.String(30), nullable=False),
        sa.Column("total_area", sa.Numeric(10, 2), nullable=True),
        sa.Column("floors", sa.Integer, nullable=False),
        sa.Column(
            "ai_generated", sa.Boolean, nullable=False, server_default=sa.text("false"),
        ),
    )
    for table, type_column in (("rooms", "room_type"), ("areas", "area_type")):
        extra = (
            [
                sa.Column("floor", sa.Integer, nullable=False),
                sa.Column("height", sa.Numeric(6, 2), nullable=True),
                sa.Column("position_3d", JSONB, nullable=True),
            ]
            if table == "rooms"
            else []
        )
        op.create_table(
            table,
            *_base_columns(),
            sa.Column(
                "house_map_id",
                UUID(as_uuid=True),
                sa.ForeignKey("house_maps.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("name", sa.Text, nullable=False),
            sa.Column(type_column, sa.String(30), nullable=False),
            sa.Column("length", sa.Numeric(6, 2), nullable=True),
            sa.Column("width", sa.Numeric(6, 2), nullable=True),
            sa.Column("features", JSONB, nullable=True),
            *extra,
        )
        op.create_index(f"ix_{table}_house_map_id", table, ["house_map_id"])

    # --- Billing ---
    op.create_table(
        "quotes",
        *_base_columns(),
        _assessment_fk(),
        sa.Column("quote_number", sa.String(20), nullable=False, unique=True),
        sa.Column("option_name", sa.Text, nullable=False),
        sa.Column("items", JSONB, nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("valid_until", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_quotes_assessment_id", "quotes", ["assessment_id"])

    op.create_table(
        "invoices",
        *_base_columns(),
        _assessment_fk(),
        sa.Column("invoice_number", sa.String(20), nullable=False, unique=True),
        sa.Column("items", JSONB, nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("hourly_rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("hours_worked", sa.Numeric(8, 2), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("due_date", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("paid_date", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_index("ix_invoices_assessment_id", "invoices", ["assessment_id"])
    op.create_index("ix_invoices_status", "invoices", ["status"])

    op.create_table(
        "document_counters",
        sa.Column("kind", sa.String(20), primary_key=True),
        sa.Column("last_value", sa.BigInteger, nullable=False),
    )

    # --- Business documents ---
    op.create_table(
        "business_documents",
        *_base_columns(),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("document_type", sa.String(40), nullable=False),
        sa.Column("file_url", sa.Text, nullable=True),
        sa.Column("expiry_date", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_index("ix_business_documents_user_id", "business_documents", ["user_id"])


def downgrade() -> None:
    for table in (
        "business_documents",
        "document_counters",
        "invoices",
        "quotes",
        "areas",
        "rooms",
        "house_maps",
        "equipment_recommendations",
        "equipment_items",
        "assessment_media",
        "assessment_responses",
        "assessments",
        "clients",
    ):
        op.drop_table(table)
